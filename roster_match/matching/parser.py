from typing import Optional
from uuid import UUID

# Models sometimes wrap the answer in quotes or a code span
WRAPPING_CHARS = "\"'` \n\t"


def _is_canonical_uuid(value: str) -> bool:
    """True only for the 8-4-4-4-12 hyphenated form, in either case."""
    try:
        return str(UUID(value)) == value.lower()
    except ValueError:
        return False


def parse_identifiers(text: Optional[str]) -> Optional[str]:
    """Validates the model's answer as one or more comma-separated UUIDs.

    Returns the identifiers joined with commas, or None when the answer is
    empty or any part is not a hyphenated UUID (braces, urn prefixes and
    bare hex are rejected).
    """
    if not text:
        return None
    cleaned = text.strip(WRAPPING_CHARS)
    if not cleaned:
        return None

    parts = [part.strip() for part in cleaned.split(",")]
    if not all(_is_canonical_uuid(part) for part in parts):
        return None
    return ",".join(parts)
