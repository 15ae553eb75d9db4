"""Steam shortcuts file path constants and utilities."""

import os
from pathlib import Path
from typing import Optional, Union


# steamshortcuts data directory (settings, backups)
DATA_DIR = os.environ.get(
    "STEAMSHORTCUTS_DATA_DIR",
    os.path.expanduser("~/.local/share/steamshortcuts"),
)

SETTINGS_PATH = os.path.join(DATA_DIR, "settings.json")
BACKUPS_DIR = os.path.join(DATA_DIR, "backups")

# Steam installation layout
USERDATA_DIR = "userdata"
CONFIG_DIR = "config"
GRID_DIR = "grid"
SHORTCUTS_FILENAME = "shortcuts.vdf"
LOGINUSERS_FILENAME = "loginusers.vdf"

# Backup naming
BACKUP_FILE_EXTENSION = ".bak.vdf"
BACKUP_FILE_PATTERN = "*" + BACKUP_FILE_EXTENSION
BACKUP_FILENAME_FORMAT = "shortcuts-{}" + BACKUP_FILE_EXTENSION
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
# Flat layout used by older releases: backups/shortcuts/shortcuts-<user>-<name>-<ts>.bak.vdf
LEGACY_BACKUP_KIND = "shortcuts"

# Identity key used when a path has no userdata/<id> segment
DEFAULT_IDENTITY_KEY = "user"


def derive_identity_key_from_path(path: Union[str, Path, None]) -> Optional[str]:
    """Extract the Steam user id from a path like ``.../userdata/<id>/config/...``.

    Both ``/`` and ``\\`` separate segments, whatever the host OS, and the
    ``userdata`` marker is matched case-insensitively.

    Returns:
        The segment following ``userdata``, or None if there is none
    """
    if not path:
        return None
    parts = [p for p in str(path).replace("\\", "/").split("/") if p]
    for idx, part in enumerate(parts):
        if part.lower() == USERDATA_DIR and idx + 1 < len(parts):
            return parts[idx + 1]
    return None


def get_shortcuts_vdf_path(steam_root: Union[str, Path], user_id: str) -> Path:
    """Canonical shortcuts.vdf location for a Steam user."""
    return Path(steam_root) / USERDATA_DIR / user_id / CONFIG_DIR / SHORTCUTS_FILENAME


def get_grid_dir_from_vdf(vdf_path: Union[str, Path, None]) -> Optional[Path]:
    """Steam's grid artwork folder sits next to shortcuts.vdf in config/."""
    if not vdf_path:
        return None
    return Path(vdf_path).parent / GRID_DIR


def get_user_backup_dir(backups_root: Union[str, Path], user_id: str) -> Path:
    """Backup folder for one Steam user: ``<backups root>/<user id>``."""
    return Path(backups_root) / user_id


def is_backup_file(path: Union[str, Path]) -> bool:
    """Check the file name carries the managed backup extension."""
    return str(path).lower().endswith(BACKUP_FILE_EXTENSION)
