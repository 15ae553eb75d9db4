"""steam://rungameid/ URL helpers and path comparison for duplicate detection."""

import logging
import os
from typing import Optional

from .checksum import normalize_path, to_launch_game_id

logger = logging.getLogger(__name__)

RUNGAMEID_URL_PREFIX = "steam://rungameid/"


def expected_rungame_url(app_id: int) -> str:
    """Launch URL Steam uses for a shortcut, or '' for app id 0."""
    if not app_id:
        return ""
    return f"{RUNGAMEID_URL_PREFIX}{to_launch_game_id(app_id)}"


def parse_app_id_from_rungame_url(url: Optional[str]) -> int:
    """Extract the shortcut app id (upper 32 bits of the game id) from a launch URL.

    Returns:
        The unsigned app id, or 0 if the URL is not a rungameid URL
    """
    if not url or not url.strip():
        return 0
    val = url.strip()
    if not val.lower().startswith(RUNGAMEID_URL_PREFIX):
        return 0
    id_str = val[len(RUNGAMEID_URL_PREFIX):]
    if not id_str.isdigit():
        logger.debug(f"[SteamUrls] Not a numeric game id: {id_str}")
        return 0
    game_id = int(id_str)
    if game_id >= 2**64:
        return 0
    return game_id >> 32


def normalize_full_path(path: Optional[str]) -> str:
    """Unquote and make absolute, for comparing executable paths."""
    unquoted = normalize_path(path)
    if not unquoted:
        return ""
    try:
        return os.path.abspath(unquoted)
    except (OSError, ValueError):
        return unquoted


def paths_equal(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive comparison of two (possibly quoted) executable paths."""
    return normalize_full_path(a).lower() == normalize_full_path(b).lower()
