"""
Steam User Detection Utilities

Enumerates Steam users from the userdata folder and reads account names from
Steam's loginusers.vdf, so a caller can pick whose shortcuts.vdf (and whose
backups) to work with.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import vdf

from .paths import (
    CONFIG_DIR,
    LOGINUSERS_FILENAME,
    SHORTCUTS_FILENAME,
    USERDATA_DIR,
)

logger = logging.getLogger(__name__)

STEAM_USER_FALLBACK_FORMAT = "Steam User {}"

# Account id is the lower 32 bits of a SteamID64
_ACCOUNT_ID_MASK = 0xFFFFFFFF


@dataclass
class SteamUserAccount:
    """A Steam account that has (or had) a userdata folder"""
    user_id: str
    account_name: str = ""
    persona_name: str = ""
    most_recent: bool = False

    @property
    def display_name(self) -> str:
        """Persona name, else login name, else 'Steam User <id>'."""
        if self.persona_name:
            return self.persona_name
        if self.account_name:
            return self.account_name
        return STEAM_USER_FALLBACK_FORMAT.format(self.user_id)


def find_steam_path() -> Optional[str]:
    """Find Steam installation directory"""
    possible_paths = [
        os.path.expanduser("~/.steam/steam"),
        os.path.expanduser("~/.local/share/Steam"),
    ]

    for path in possible_paths:
        if os.path.exists(os.path.join(path, USERDATA_DIR)):
            return path

    return None


def get_steam_user_ids(steam_path: Optional[str]) -> List[str]:
    """
    List user ids that have a folder under userdata/.

    Non-numeric folders (e.g. "ac" for anonymous) are skipped, as is the
    user 0 meta-directory.
    """
    if not steam_path or not steam_path.strip():
        return []

    userdata_path = os.path.join(steam_path, USERDATA_DIR)
    if not os.path.isdir(userdata_path):
        return []

    result = []
    try:
        for d in sorted(os.listdir(userdata_path)):
            if not d.isdigit() or d == '0':
                continue
            if os.path.isdir(os.path.join(userdata_path, d)):
                result.append(d)
    except OSError as e:
        logger.warning(f"[SteamUser] Failed to enumerate Steam user IDs: {e}")
    return result


def read_login_users(steam_path: Optional[str]) -> Dict[str, SteamUserAccount]:
    """
    Read config/loginusers.vdf.

    The file is keyed by SteamID64; we convert to account ids, which are the
    userdata folder names.

    Returns:
        {account_id: SteamUserAccount}, empty if the file is missing or bad
    """
    result: Dict[str, SteamUserAccount] = {}
    if not steam_path or not steam_path.strip():
        return result

    loginusers_path = os.path.join(steam_path, CONFIG_DIR, LOGINUSERS_FILENAME)
    if not os.path.exists(loginusers_path):
        logger.debug(f"[SteamUser] loginusers.vdf not found at {loginusers_path}")
        return result

    try:
        with open(loginusers_path, 'r', encoding='utf-8-sig', errors='ignore') as f:
            data = vdf.load(f)
    except Exception as e:
        logger.error(f"[SteamUser] Failed to read loginusers.vdf at {loginusers_path}: {e}")
        return result

    users = {}
    for key, value in data.items():
        if key.lower() == 'users' and isinstance(value, dict):
            users = value
            break

    for steam64_id_str, user_info in users.items():
        if not isinstance(user_info, dict):
            continue
        try:
            account_id = str(int(steam64_id_str) & _ACCOUNT_ID_MASK)
        except ValueError:
            logger.warning(f"[SteamUser] Invalid Steam64ID: {steam64_id_str}")
            continue

        info = {k.lower(): v for k, v in user_info.items()}
        result[account_id] = SteamUserAccount(
            user_id=account_id,
            account_name=str(info.get('accountname', '')),
            persona_name=str(info.get('personaname', '')),
            most_recent=str(info.get('mostrecent', '0')) == '1',
        )

    logger.info(f"[SteamUser] Read {len(result)} user(s) from loginusers.vdf")
    return result


def get_valid_users(steam_path: Optional[str], valid_user_ids: Iterable[str]) -> List[SteamUserAccount]:
    """
    Accounts for the given userdata ids, with names from loginusers.vdf.

    Ids missing from loginusers.vdf still get an entry (with the fallback
    display name).
    """
    users = read_login_users(steam_path)
    result = []
    seen = set()
    for user_id in valid_user_ids:
        if user_id in seen:
            continue
        seen.add(user_id)
        result.append(users.get(user_id) or SteamUserAccount(user_id=user_id))
    return result


def get_logged_in_steam_user(steam_path: Optional[str] = None) -> Optional[str]:
    """
    Get the most recently logged-in user's account id.

    Uses the MostRecent flag in loginusers.vdf, falling back to the first
    userdata folder when there is no flag.
    """
    if steam_path is None:
        steam_path = find_steam_path()

    if not steam_path:
        logger.warning("[SteamUser] Could not find Steam installation path")
        return None

    user_ids = get_steam_user_ids(steam_path)
    for account in read_login_users(steam_path).values():
        if account.most_recent and account.user_id in user_ids:
            logger.info(f"[SteamUser] Found logged-in user from loginusers.vdf: {account.user_id}")
            return account.user_id

    if user_ids:
        logger.info(f"[SteamUser] Fallback: using first userdata folder: {user_ids[0]}")
        return user_ids[0]

    logger.error("[SteamUser] Could not detect logged-in Steam user")
    return None


def resolve_shortcuts_vdf_path(steam_path: Optional[str]) -> Optional[Path]:
    """First shortcuts.vdf found under userdata/<id>/config/, or None."""
    for user_id in get_steam_user_ids(steam_path):
        candidate = Path(steam_path) / USERDATA_DIR / user_id / CONFIG_DIR / SHORTCUTS_FILENAME
        if candidate.is_file():
            return candidate
    return None
