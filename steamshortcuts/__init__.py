# steamshortcuts
# Binary/text KeyValues codecs for Steam's shortcuts.vdf and a managed backup/restore layer.

from .errors import FormatError, IdentityResolutionError
from .shortcuts import (
    SteamShortcut,
    read_shortcuts,
    write_shortcuts,
    read_shortcuts_text,
    write_shortcuts_text,
)
from .controllers import BackupManager
from .utils import derive_shortcut_id, derive_identity_key_from_path

__version__ = "0.4.0"
