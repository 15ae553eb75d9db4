"""Artwork utilities for reading and populating Steam's grid folder.

Steam looks for custom artwork in ``userdata/<id>/config/grid`` using the
unsigned shortcut app id as the file stem:

    <appid>.<ext>        horizontal cover
    <appid>p.<ext>       vertical poster
    <appid>_hero.<ext>   hero/background
    <appid>_icon.<ext>   icon
"""

import logging
import shutil
from pathlib import Path
from typing import Dict, Optional, Set

from .checksum import to_unsigned_app_id

logger = logging.getLogger(__name__)

ARTWORK_TYPES = ('hero', 'poster', 'cover', 'icon')

_SUFFIXES = {
    'cover': '',
    'poster': 'p',
    'hero': '_hero',
    'icon': '_icon',
}


def find_artwork(grid_path: Optional[Path], app_id: int) -> Dict[str, Optional[Path]]:
    """Locate existing artwork files for an app id, whatever their extension.

    Args:
        grid_path: Path to Steam grid directory (None if not available)
        app_id: App ID, signed or unsigned

    Returns:
        Dict mapping artwork type to the first matching file, or None
    """
    found: Dict[str, Optional[Path]] = {art_type: None for art_type in ARTWORK_TYPES}
    if not app_id or not grid_path:
        return found
    grid_path = Path(grid_path)
    if not grid_path.is_dir():
        return found

    unsigned_id = to_unsigned_app_id(app_id)
    try:
        for art_type in ARTWORK_TYPES:
            matches = sorted(p for p in grid_path.glob(f"{unsigned_id}{_SUFFIXES[art_type]}.*") if p.is_file())
            found[art_type] = matches[0] if matches else None
    except OSError as e:
        logger.warning(f"[Artwork] Failed to scan grid folder {grid_path}: {e}")
    return found


def pick_grid_preview(grid_path: Optional[Path], app_id: int) -> Optional[Path]:
    """Best preview image: hero, then poster, then cover, then icon."""
    found = find_artwork(grid_path, app_id)
    for art_type in ('hero', 'poster', 'cover', 'icon'):
        if found[art_type]:
            return found[art_type]
    return None


def get_grid_icon_path(grid_path: Optional[Path], app_id: int) -> Optional[Path]:
    return find_artwork(grid_path, app_id)['icon']


def get_missing_artwork_types(grid_path: Optional[Path], app_id: int) -> Set[str]:
    """Artwork types with no file in the grid folder."""
    found = find_artwork(grid_path, app_id)
    return {art_type for art_type, path in found.items() if path is None}


def export_artwork_to_grid(
    grid_path: Optional[Path],
    app_id: int,
    cover: Optional[str] = None,
    icon: Optional[str] = None,
    background: Optional[str] = None,
) -> Dict[str, bool]:
    """Copy local image files into the grid folder under Steam's names.

    The cover is used both as horizontal cover and vertical poster. Missing
    source files are skipped; copy errors are logged and reported as False.

    Returns:
        Dict mapping artwork type to copy success, for types that had a source
    """
    if not app_id or not grid_path:
        return {}

    unsigned_id = to_unsigned_app_id(app_id)
    sources = {
        'cover': cover,
        'poster': cover,
        'icon': icon,
        'hero': background,
    }

    results: Dict[str, bool] = {}
    try:
        Path(grid_path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"[Artwork] Failed to create grid folder {grid_path}: {e}")
        return {art_type: False for art_type, src in sources.items() if src}

    for art_type, src in sources.items():
        if not src:
            continue
        src_path = Path(src)
        if not src_path.is_file():
            logger.debug(f"[Artwork] Source image not found, skipping {art_type}: {src}")
            continue
        dst = Path(grid_path) / f"{unsigned_id}{_SUFFIXES[art_type]}{src_path.suffix}"
        try:
            shutil.copyfile(src_path, dst)
            results[art_type] = True
        except OSError as e:
            logger.warning(f"[Artwork] Failed exporting {art_type} to grid for appid={unsigned_id}: {e}")
            results[art_type] = False
    return results


def delete_game_artwork(grid_path: Optional[Path], app_id: int) -> Dict[str, bool]:
    """Delete artwork files for a single game.

    Returns:
        Dict mapping artwork type to deletion success status
    """
    deleted = {}
    for art_type, filepath in find_artwork(grid_path, app_id).items():
        if filepath is None:
            continue
        try:
            filepath.unlink()
            deleted[art_type] = True
            logger.debug(f"[Artwork] Deleted {filepath.name}")
        except OSError as e:
            logger.error(f"[Artwork] Error deleting {filepath.name}: {e}")
            deleted[art_type] = False
    return deleted
