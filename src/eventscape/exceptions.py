"""Domain exceptions shared across services and routes."""


class EventScapeError(Exception):
    """Base class for all EventScape errors."""


class ExtractionError(EventScapeError):
    """The LLM extraction call failed or returned an unusable payload."""


class EventValidationError(EventScapeError, ValueError):
    """An extracted field is malformed or out of range."""


class InvalidTransitionError(EventScapeError):
    """A listing status change is not allowed by the listing lifecycle."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move listing from {current!r} to {target!r}")


class PageReadError(EventScapeError):
    """A listing page could not be fetched or had no readable content."""
