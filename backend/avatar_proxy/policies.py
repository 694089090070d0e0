"""
Avatar URL Policies

Pure functions that decide sizes, extensions and CDN URLs.
Kept free of I/O so the rules can be changed in one place.
"""

import re
from typing import Any, Optional

from .errors import ClientInputError

CDN_BASE = "https://cdn.discordapp.com"
PROFILE_BASE = "https://discord.com/users"

ALLOWED_SIZES = (16, 32, 64, 128, 256, 512, 1024, 2048, 4096)
DEFAULT_SIZE = 512

ALLOWED_FORMATS = {"png", "jpg", "jpeg", "webp", "gif"}

# Number of built-in default avatars served by the CDN
DEFAULT_AVATAR_COUNT = 5

ANIMATED_PREFIX = "a_"

_USER_ID_RE = re.compile(r"[0-9]{17,20}")

# Leading integer of a path or query value: "128px" -> 128
_LEADING_INT_RE = re.compile(r"\s*([+-]?[0-9]+)")


def is_valid_user_id(user_id: Any) -> bool:
    """Snowflake ids are 17-20 digit numeric strings."""
    return isinstance(user_id, str) and _USER_ID_RE.fullmatch(user_id) is not None


def require_user_id(user_id: Any) -> str:
    if not is_valid_user_id(user_id):
        raise ClientInputError("Invalid user ID")
    return user_id


def sanitize_size(size: Any) -> int:
    """
    Clamp a requested size to the CDN's allowed set.

    Strings are read up to their first non-digit ("128px" is 128).
    Anything that is not one of ALLOWED_SIZES (including values with
    no leading integer) falls back to DEFAULT_SIZE.
    """
    if isinstance(size, bool):
        return DEFAULT_SIZE
    if isinstance(size, str):
        match = _LEADING_INT_RE.match(size)
        if match is None:
            return DEFAULT_SIZE
        size = match.group(1)
    try:
        numeric = int(size)
    except (TypeError, ValueError):
        return DEFAULT_SIZE
    if isinstance(size, float) and size != numeric:
        return DEFAULT_SIZE
    return numeric if numeric in ALLOWED_SIZES else DEFAULT_SIZE


def normalize_format(image_format: Optional[str]) -> Optional[str]:
    """Lower-case an explicit format, rejecting unknown ones."""
    if image_format is None or image_format == "":
        return None
    normalized = image_format.strip().lower()
    if normalized not in ALLOWED_FORMATS:
        raise ClientInputError(f"Invalid format: {image_format}")
    return normalized


def image_extension(image_hash: str, image_format: Optional[str] = None) -> str:
    """Animated hashes default to gif, everything else to png; explicit format wins."""
    if image_format:
        return image_format
    return "gif" if image_hash.startswith(ANIMATED_PREFIX) else "png"


def default_avatar_index(discriminator: Any) -> int:
    """
    Pick the built-in avatar for a user without a custom one.

    Legacy rule: discriminator mod 5. Migrated accounts report "0",
    which lands on index 0 like a missing discriminator.
    """
    if not discriminator:
        return 0
    try:
        return int(discriminator) % DEFAULT_AVATAR_COUNT
    except (TypeError, ValueError):
        return 0


def avatar_url(user_id: str, avatar_hash: str, ext: str, size: int) -> str:
    return f"{CDN_BASE}/avatars/{user_id}/{avatar_hash}.{ext}?size={size}"


def default_avatar_url(index: int) -> str:
    return f"{CDN_BASE}/embed/avatars/{index}.png"


def banner_url(user_id: str, banner_hash: str, ext: str, size: int) -> str:
    return f"{CDN_BASE}/banners/{user_id}/{banner_hash}.{ext}?size={size}"


def profile_url(user_id: str) -> str:
    return f"{PROFILE_BASE}/{user_id}"
