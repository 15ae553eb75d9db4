"""Shortcut record model and its mapping to/from the KeyValues tree."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..utils.checksum import (
    derive_shortcut_id,
    fingerprint,
    normalize_path,
    to_launch_game_id,
    to_signed_app_id,
    to_unsigned_app_id,
)

SHORTCUTS_KEY = "shortcuts"
TAGS_KEY = "tags"

# Field name -> key as written in shortcuts.vdf (order is the order Steam writes)
_STRING_FIELDS = {
    'app_name': 'AppName',
    'exe': 'Exe',
    'start_dir': 'StartDir',
    'icon': 'icon',
    'shortcut_path': 'ShortcutPath',
    'launch_options': 'LaunchOptions',
}
_INT_FIELDS = {
    'is_hidden': 'IsHidden',
    'allow_desktop_config': 'AllowDesktopConfig',
    'allow_overlay': 'AllowOverlay',
    'open_vr': 'OpenVR',
    'devkit': 'Devkit',
}
_TRAILING_FIELDS = {
    'devkit_game_id': 'DevkitGameID',
    'devkit_override_app_id': 'DevkitOverrideAppID',
    'last_play_time': 'LastPlayTime',
    'flatpak_app_id': 'FlatpakAppID',
}
_APPID_KEY = 'appid'

_KNOWN_KEYS = {
    k.lower()
    for k in [
        _APPID_KEY, TAGS_KEY,
        *_STRING_FIELDS.values(),
        *_INT_FIELDS.values(),
        *_TRAILING_FIELDS.values(),
    ]
}


@dataclass
class SteamShortcut:
    """One non-Steam game entry in shortcuts.vdf"""
    app_name: str = ""
    exe: str = ""
    start_dir: str = ""
    icon: str = ""
    shortcut_path: str = ""
    launch_options: str = ""
    app_id: int = 0  # unsigned; 0 means "derive from exe + name on write"
    is_hidden: int = 0
    allow_desktop_config: int = 1
    allow_overlay: int = 1
    open_vr: int = 0
    devkit: int = 0
    devkit_game_id: str = ""
    devkit_override_app_id: int = 0
    last_play_time: int = 0  # unix timestamp
    flatpak_app_id: str = ""
    tags: List[str] = field(default_factory=list)
    extra: Dict[str, Any] = field(default_factory=dict)  # unknown keys, kept verbatim

    @property
    def stable_id(self) -> str:
        """Opaque id from exe + name; quoting and surrounding spaces don't matter."""
        return fingerprint(f"{normalize_path(self.exe)}|{(self.app_name or '').strip()}")

    @property
    def effective_app_id(self) -> int:
        return self.app_id or derive_shortcut_id(self.exe, self.app_name)

    @property
    def launch_game_id(self) -> int:
        return to_launch_game_id(self.effective_app_id)

    @property
    def launch_url(self) -> str:
        return f"steam://rungameid/{self.launch_game_id}"

    def to_node(self) -> Dict[str, Any]:
        """Build the KeyValues node Steam expects for this shortcut."""
        node: Dict[str, Any] = {_APPID_KEY: to_signed_app_id(self.effective_app_id)}
        for attr, key in _STRING_FIELDS.items():
            node[key] = getattr(self, attr) or ""
        for attr, key in _INT_FIELDS.items():
            node[key] = int(getattr(self, attr) or 0)
        node['DevkitGameID'] = self.devkit_game_id or ""
        node['DevkitOverrideAppID'] = int(self.devkit_override_app_id or 0)
        node['LastPlayTime'] = int(self.last_play_time or 0)
        node['FlatpakAppID'] = self.flatpak_app_id or ""
        node[TAGS_KEY] = {str(i): tag for i, tag in enumerate(self.tags)}
        for key, value in self.extra.items():
            if key.lower() not in _KNOWN_KEYS:
                node[key] = value
        return node

    @classmethod
    def from_node(cls, node: Dict[str, Any]) -> "SteamShortcut":
        """Parse a shortcut node. Key lookup ignores case (``appname`` == ``AppName``)."""
        by_lower = {k.lower(): v for k, v in node.items()}

        def get_str(key: str) -> str:
            value = by_lower.get(key.lower())
            if value is None or isinstance(value, dict):
                return ""
            return str(value)

        def get_int(key: str, default: int = 0) -> int:
            value = by_lower.get(key.lower())
            if isinstance(value, int):
                return value
            if isinstance(value, str):
                try:
                    return int(value)
                except ValueError:
                    return default
            return default

        shortcut = cls(
            app_id=to_unsigned_app_id(get_int(_APPID_KEY)),
            is_hidden=get_int('IsHidden'),
            allow_desktop_config=get_int('AllowDesktopConfig', 1),
            allow_overlay=get_int('AllowOverlay', 1),
            open_vr=get_int('OpenVR'),
            devkit=get_int('Devkit'),
            devkit_game_id=get_str('DevkitGameID'),
            devkit_override_app_id=get_int('DevkitOverrideAppID'),
            last_play_time=get_int('LastPlayTime'),
            flatpak_app_id=get_str('FlatpakAppID'),
        )
        for attr, key in _STRING_FIELDS.items():
            setattr(shortcut, attr, get_str(key))

        tags = by_lower.get(TAGS_KEY)
        if isinstance(tags, dict):
            shortcut.tags = [
                str(v) for _, v in sorted(tags.items(), key=lambda kv: _index_key(kv[0]))
                if v is not None and not isinstance(v, dict) and str(v).strip()
            ]

        shortcut.extra = {k: v for k, v in node.items() if k.lower() not in _KNOWN_KEYS}
        return shortcut


def _index_key(key: str):
    """Sort numbered keys numerically, anything else after them by name."""
    return (0, int(key), "") if key.isdecimal() else (1, 0, key)


def shortcuts_to_tree(shortcuts: List[SteamShortcut]) -> Dict[str, Any]:
    """Wrap shortcuts as ``{"shortcuts": {"0": {...}, "1": {...}}}``."""
    return {SHORTCUTS_KEY: {str(idx): sc.to_node() for idx, sc in enumerate(shortcuts)}}


def tree_to_shortcuts(tree: Dict[str, Any]) -> List[SteamShortcut]:
    """Flatten a shortcuts tree back into records, ordered by index.

    Entries that are not nested nodes are skipped. A missing ``shortcuts``
    node yields an empty list.
    """
    entries = None
    for key, value in tree.items():
        if key.lower() == SHORTCUTS_KEY:
            entries = value
            break
    if not isinstance(entries, dict):
        return []
    return [
        SteamShortcut.from_node(node)
        for _, node in sorted(entries.items(), key=lambda kv: _index_key(kv[0]))
        if isinstance(node, dict)
    ]
