"""Read and write shortcuts.vdf in the binary or text KeyValues encoding."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from ..keyvalues import binary as binary_kv
from ..keyvalues import text as text_kv
from .models import SteamShortcut, shortcuts_to_tree, tree_to_shortcuts

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_binary_tree(path: PathLike) -> Dict[str, Any]:
    """Parse a binary VDF file into a KeyValues tree.

    Raises:
        FileNotFoundError: if the file does not exist
        FormatError: if the content is malformed or truncated
    """
    with open(path, 'rb') as f:
        return binary_kv.load(f)


def load_text_tree(path: PathLike) -> Dict[str, Any]:
    """Parse a text VDF file (UTF-8, BOM tolerated) into a KeyValues tree."""
    with open(path, 'r', encoding='utf-8-sig', newline='') as f:
        return text_kv.load(f)


def save_binary_tree(path: PathLike, tree: Dict[str, Any]) -> None:
    _write_replacing(path, binary_kv.dumps(tree))


def save_text_tree(path: PathLike, tree: Dict[str, Any]) -> None:
    # No BOM; Steam's own reader doesn't expect one
    _write_replacing(path, text_kv.dumps(tree).encode('utf-8'))


def _write_replacing(path: PathLike, payload: bytes) -> None:
    """Write to a sibling temp file, fsync, then move it over ``path``.

    A crash mid-write leaves the previous file in place rather than a
    truncated one.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + '.tmp')
    try:
        with open(tmp_path, 'wb') as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())  # Force write to disk
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def read_shortcuts(path: PathLike) -> List[SteamShortcut]:
    """Read shortcuts from a binary shortcuts.vdf."""
    shortcuts = tree_to_shortcuts(load_binary_tree(path))
    logger.debug(f"[ShortcutsFile] Loaded {len(shortcuts)} shortcuts from {path}")
    return shortcuts


def write_shortcuts(path: PathLike, shortcuts: Iterable[SteamShortcut]) -> None:
    """Write shortcuts as a binary shortcuts.vdf, re-indexed from 0."""
    shortcuts = list(shortcuts)
    save_binary_tree(path, shortcuts_to_tree(shortcuts))
    logger.info(f"[ShortcutsFile] Wrote {len(shortcuts)} shortcuts to {path}")


def read_shortcuts_text(path: PathLike) -> List[SteamShortcut]:
    """Read shortcuts from the text encoding."""
    shortcuts = tree_to_shortcuts(load_text_tree(path))
    logger.debug(f"[ShortcutsFile] Loaded {len(shortcuts)} shortcuts from text file {path}")
    return shortcuts


def write_shortcuts_text(path: PathLike, shortcuts: Iterable[SteamShortcut]) -> None:
    """Write shortcuts in the text encoding."""
    shortcuts = list(shortcuts)
    save_text_tree(path, shortcuts_to_tree(shortcuts))
    logger.info(f"[ShortcutsFile] Wrote {len(shortcuts)} shortcuts to text file {path}")
