"""
Input validation utilities for pubglookup.

Covers the values that end up on the wire: request addresses, the bearer
credential, and the player names and match ids interpolated into URLs.
"""

from urllib.parse import quote, urlsplit

from pubglookup.core.exceptions import ValidationError

# PUBG account names are 4-16 characters; leave headroom for other shards
MAX_PLAYER_NAME_LENGTH = 64

MAX_MATCH_ID_LENGTH = 128


def sanitize_credential(credential: str | None) -> str:
    """Normalize a bearer credential before it goes into a header.

    Trims surrounding whitespace and drops any CR/LF characters, which would
    otherwise corrupt the ``Authorization`` header on the wire.

    Args:
        credential: Raw credential as read from config or the environment.

    Returns:
        The cleaned credential.

    Raises:
        ValidationError: If nothing usable is left.
    """
    cleaned = (credential or "").strip().replace("\r", "").replace("\n", "")
    if not cleaned:
        # Never echo the credential back
        raise ValidationError("credential", "", "API key cannot be empty")
    return cleaned


def validate_address(address: str | None) -> str:
    """Validate that an address is an absolute http(s) URL.

    Raises:
        ValidationError: If the address is empty or not absolute.
    """
    if not address or not address.strip():
        raise ValidationError("address", address or "", "Address cannot be empty")

    parts = urlsplit(address)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValidationError("address", address, "Address must be an absolute http(s) URL")
    return address


def validate_player_name(name: str | None) -> str:
    """Validate a player name typed by the user.

    Returns:
        The trimmed name.

    Raises:
        ValidationError: If the name is empty, too long, or has control characters.
    """
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("player_name", name or "", "Enter a player name")

    if len(cleaned) > MAX_PLAYER_NAME_LENGTH:
        raise ValidationError(
            "player_name",
            cleaned[:20] + "...",
            f"Player name exceeds {MAX_PLAYER_NAME_LENGTH} character limit",
        )

    if any(ord(c) < 32 or ord(c) == 127 for c in cleaned):
        raise ValidationError(
            "player_name", repr(cleaned), "Player name contains invalid control characters"
        )

    return cleaned


def validate_match_id(match_id: str | None) -> str:
    """Validate a match id.

    Raises:
        ValidationError: If the id is empty or too long.
    """
    cleaned = (match_id or "").strip()
    if not cleaned:
        raise ValidationError("match_id", match_id or "", "Invalid match id")
    if len(cleaned) > MAX_MATCH_ID_LENGTH:
        raise ValidationError(
            "match_id", cleaned[:20] + "...", f"Match id exceeds {MAX_MATCH_ID_LENGTH} characters"
        )
    return cleaned


def encode_for_url(value: str) -> str:
    """Percent-encode a value for a URL path segment or query value."""
    return quote(value, safe="")
