"""EventScape: Singapore events discovery service."""

__version__ = "0.1.0"
