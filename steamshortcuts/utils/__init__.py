# Utils package
from .checksum import (
    crc32,
    fingerprint,
    normalize_path,
    derive_shortcut_id,
    to_launch_game_id,
    to_signed_app_id,
    to_unsigned_app_id,
)
from .paths import (
    derive_identity_key_from_path,
    get_shortcuts_vdf_path,
    get_grid_dir_from_vdf,
    is_backup_file,
    DATA_DIR,
    SETTINGS_PATH,
    BACKUPS_DIR,
    DEFAULT_IDENTITY_KEY,
)
from .steam_urls import expected_rungame_url, parse_app_id_from_rungame_url, paths_equal
from .artwork import (
    ARTWORK_TYPES,
    find_artwork,
    pick_grid_preview,
    get_grid_icon_path,
    get_missing_artwork_types,
    export_artwork_to_grid,
    delete_game_artwork,
)

__all__ = [
    'crc32',
    'fingerprint',
    'normalize_path',
    'derive_shortcut_id',
    'to_launch_game_id',
    'to_signed_app_id',
    'to_unsigned_app_id',
    'derive_identity_key_from_path',
    'get_shortcuts_vdf_path',
    'get_grid_dir_from_vdf',
    'is_backup_file',
    'DATA_DIR',
    'SETTINGS_PATH',
    'BACKUPS_DIR',
    'DEFAULT_IDENTITY_KEY',
    'expected_rungame_url',
    'parse_app_id_from_rungame_url',
    'paths_equal',
    'ARTWORK_TYPES',
    'find_artwork',
    'pick_grid_preview',
    'get_grid_icon_path',
    'get_missing_artwork_types',
    'export_artwork_to_grid',
    'delete_game_artwork',
]
