"""Persisted settings (JSON in the steamshortcuts data directory)."""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from .utils.paths import CONFIG_DIR, SETTINGS_PATH, SHORTCUTS_FILENAME, USERDATA_DIR

logger = logging.getLogger(__name__)

DEFAULT_STEAM_PATH_X86 = r"C:\Program Files (x86)\Steam"
DEFAULT_STEAM_PATH = r"C:\Program Files\Steam"

# validate_steam_path() results
PATH_VALID = "Valid Steam path"
PATH_INVALID = "Path not found"
PATH_NO_USERDATA = "userdata folder not found - verify this is your Steam installation"
PATH_NO_VDF = "No shortcuts.vdf found yet - add a non-Steam game in Steam first"


@dataclass
class Settings:
    steam_root_path: str = ""
    launch_via_steam: bool = True
    export_map: Dict[str, str] = field(default_factory=dict)  # appid -> external game id

    def verify(self) -> List[str]:
        """Return a list of problems; empty means the settings are usable."""
        errors = []
        if not self.steam_root_path or not self.steam_root_path.strip():
            errors.append("Steam library path is required.")
        return errors

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> "Settings":
        export_map = data.get('export_map') or {}
        return cls(
            steam_root_path=str(data.get('steam_root_path') or ""),
            launch_via_steam=bool(data.get('launch_via_steam', True)),
            export_map={str(k): str(v) for k, v in export_map.items()},
        )


def guess_steam_root_path() -> Optional[str]:
    """Look for a Steam install in the usual places (no registry lookup)."""
    candidates = [
        os.path.expanduser("~/.steam/steam"),
        os.path.expanduser("~/.local/share/Steam"),
    ]
    for env_var in ("ProgramFiles(x86)", "ProgramFiles", "LocalAppData"):
        base = os.environ.get(env_var)
        if base:
            candidates.append(os.path.join(base, "Steam"))
    candidates += [DEFAULT_STEAM_PATH_X86, DEFAULT_STEAM_PATH]

    for path in candidates:
        if os.path.isdir(path):
            return path
    return None


def validate_steam_path(path: Optional[str]) -> str:
    """Describe whether ``path`` looks like a usable Steam installation."""
    if not path or not os.path.isdir(path):
        return PATH_INVALID
    userdata = os.path.join(path, USERDATA_DIR)
    if not os.path.isdir(userdata):
        return PATH_NO_USERDATA
    for user_id in os.listdir(userdata):
        if os.path.isfile(os.path.join(userdata, user_id, CONFIG_DIR, SHORTCUTS_FILENAME)):
            return PATH_VALID
    return PATH_NO_VDF


def _default_settings() -> Settings:
    return Settings(steam_root_path=guess_steam_root_path() or "")


def load_settings(path: str = SETTINGS_PATH) -> Settings:
    """Load settings, falling back to defaults if missing or unreadable."""
    try:
        if os.path.exists(path):
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if isinstance(data, dict):
                return Settings.from_dict(data)
            logger.warning(f"[Settings] Ignoring malformed settings file {path}")
    except Exception as e:
        logger.error(f"[Settings] Failed to load saved settings, falling back to defaults: {e}")
    return _default_settings()


def save_settings(settings: Settings, path: str = SETTINGS_PATH) -> bool:
    """Save settings to file."""
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(settings.to_dict(), f, indent=2)
        return True
    except Exception as e:
        logger.error(f"[Settings] Error saving settings: {e}")
        return False
