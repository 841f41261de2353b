"""Text helpers for locations and scraped markdown."""

import re
from urllib.parse import urlparse

# Vague area names geocode to an arbitrary point somewhere in the area, so they are
# replaced by a well-known landmark inside it. Keys are lower-case area names.
AREA_LANDMARKS: dict[str, str] = {
    "marina bay": "Marina Bay Sands, Singapore",
    "orchard road": "ION Orchard, Singapore",
    "sentosa island": "Resorts World Sentosa, Singapore",
    "jurong east": "JEM Shopping Mall, Singapore",
    "bugis": "Bugis Junction, Singapore",
    "clarke quay": "Clarke Quay Central, Singapore",
    "chinatown": "Chinatown Point, Singapore",
    "little india": "Mustafa Centre, Singapore",
    "holland village": "Holland Village Shopping Mall, Singapore",
    "dhoby ghaut": "Dhoby Ghaut MRT Station, Singapore",
    "city hall": "City Hall MRT Station, Singapore",
    "raffles place": "Raffles Place MRT Station, Singapore",
}

_COUNTRY_SUFFIX = re.compile(r",?\s*singapore\s*$", re.IGNORECASE)
_UNIT_NOISE = re.compile(r"(?:\bLevel \d+\b|#\d+-\d+|\bUnit \d+\b)", re.IGNORECASE)
_POSTAL_WITH_COUNTRY = re.compile(r"\bSingapore\s+(\d{6})\b", re.IGNORECASE)
_POSTAL = re.compile(r"\b(\d{6})\b")
_MARKDOWN_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_MARKDOWN_IMAGE = re.compile(r"!\[[^\]]*\]\(([^)\s]+)(?:\s+\"[^\"]*\")?\)")


def normalise_landmark(location: str) -> str:
    """
    Replace a vague area name with a specific landmark.

    Only an exact area match (ignoring case and a trailing ", Singapore")
    is replaced; any other location is returned unchanged.

    Examples:
        "Marina Bay, Singapore" → "Marina Bay Sands, Singapore"
        "Marina Bay Sands, 10 Bayfront Avenue" → unchanged
    """
    area = _COUNTRY_SUFFIX.sub("", location.strip()).strip().lower()
    return AREA_LANDMARKS.get(area, location)


def clean_location_for_geocoding(location: str) -> str:
    """
    Prepare a location string for a free-text geocoder.

    Appends ", Singapore" when missing and strips unit/level noise that
    confuses geocoders.
    """
    cleaned = location.strip()

    if "singapore" not in cleaned.lower():
        cleaned += ", Singapore"

    cleaned = _UNIT_NOISE.sub("", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    cleaned = re.sub(r",\s*,", ",", cleaned)
    cleaned = re.sub(r"\s+,", ",", cleaned)
    return cleaned.strip(" ,")


def extract_postal_code(location: str) -> str | None:
    """Return the 6-digit Singapore postal code in ``location``, if any."""
    match = _POSTAL_WITH_COUNTRY.search(location) or _POSTAL.search(location)
    return match.group(1) if match else None


def extract_markdown_title(markdown: str) -> str | None:
    """Return the first level-one heading of a markdown document."""
    match = _MARKDOWN_HEADING.search(markdown)
    return match.group(1).strip() if match else None


def extract_markdown_images(markdown: str) -> list[str]:
    """Return image URLs in document order, without duplicates."""
    seen: set[str] = set()
    images: list[str] = []
    for url in _MARKDOWN_IMAGE.findall(markdown):
        if url not in seen:
            seen.add(url)
            images.append(url)
    return images


def truncate(text: str, max_length: int = 100) -> str:
    """Shorten ``text`` to ``max_length`` characters with a trailing ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
