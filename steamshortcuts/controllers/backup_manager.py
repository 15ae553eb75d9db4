"""Managed backups of shortcuts.vdf.

Every overwrite of a user's shortcuts.vdf (including a restore) is preceded
by a snapshot into ``<backups root>/<user id>/shortcuts-<timestamp>.bak.vdf``.
Only the newest few snapshots per user are kept.

The manager keeps no state between calls; the backup directory on disk is
the source of truth. Callers hold a BackupManager instance explicitly.
"""

import logging
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple, Union

from ..errors import IdentityResolutionError
from ..shortcuts.file import write_shortcuts, write_shortcuts_text
from ..shortcuts.models import SteamShortcut
from ..utils.paths import (
    BACKUP_FILE_EXTENSION,
    BACKUP_FILE_PATTERN,
    BACKUP_FILENAME_FORMAT,
    BACKUPS_DIR,
    DEFAULT_IDENTITY_KEY,
    LEGACY_BACKUP_KIND,
    TIMESTAMP_FORMAT,
    derive_identity_key_from_path,
    get_shortcuts_vdf_path,
    get_user_backup_dir,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

MAX_BACKUPS = 5

_SNAPSHOT_NAME_RE = re.compile(
    r"(\d{8}_\d{6})(?:_(\d+))?" + re.escape(BACKUP_FILE_EXTENSION) + "$",
    re.IGNORECASE,
)


def _name_order(name: str) -> Tuple[str, int]:
    """(timestamp, same-second counter) from a snapshot file name; ("", 0) if it has neither."""
    match = _SNAPSHOT_NAME_RE.search(name)
    if not match:
        return ("", 0)
    return (match.group(1), int(match.group(2) or 0))


class BackupManager:
    """Creates, prunes, lists and restores shortcuts.vdf snapshots"""

    def __init__(
        self,
        steam_root_path: Optional[PathLike] = None,
        backups_root: PathLike = BACKUPS_DIR,
        max_backups: int = MAX_BACKUPS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.steam_root_path = str(steam_root_path) if steam_root_path else None
        self.backups_root = Path(backups_root)
        self.max_backups = max_backups
        self._clock = clock

    def get_backup_folder_for_user(self, identity_key: str) -> Path:
        return get_user_backup_dir(self.backups_root, identity_key)

    def resolve_target(self, identity_key: str) -> Path:
        """Canonical shortcuts.vdf path for a Steam user.

        Raises:
            IdentityResolutionError: if no Steam root is configured or the
                identity key is empty
        """
        if not self.steam_root_path or not self.steam_root_path.strip():
            raise IdentityResolutionError("No Steam root path configured")
        if not identity_key:
            raise IdentityResolutionError("Empty Steam user id")
        return get_shortcuts_vdf_path(self.steam_root_path, identity_key)

    def snapshot(
        self,
        source_path: Optional[PathLike],
        identity_key: str,
        keep: Optional[PathLike] = None,
    ) -> Optional[Path]:
        """Copy ``source_path`` into the user's backup folder and prune old copies.

        Does nothing if the source path is empty or the file does not exist.
        Failures are logged, never raised.

        Args:
            source_path: File to back up
            identity_key: Steam user id the backup belongs to
            keep: Existing backup that pruning must not delete

        Returns:
            Path of the new snapshot, or None if none was taken
        """
        if not source_path or not Path(source_path).is_file():
            return None

        try:
            backup_dir = self.get_backup_folder_for_user(identity_key)
            backup_dir.mkdir(parents=True, exist_ok=True)

            dst = self._next_snapshot_path(backup_dir, self._clock().strftime(TIMESTAMP_FORMAT))
            # copyfile, not copy2: the snapshot's mtime must be the time it was taken
            shutil.copyfile(source_path, dst)
            logger.info(f"[BackupManager] Backed up {source_path} -> {dst}")
        except Exception as e:
            logger.warning(f"[BackupManager] Failed to create managed backup for '{source_path}': {e}")
            return None

        self._prune(backup_dir, keep=keep)
        return dst

    @staticmethod
    def _next_snapshot_path(backup_dir: Path, ts: str) -> Path:
        """``shortcuts-<ts>.bak.vdf``, or ``shortcuts-<ts>_<n>.bak.vdf`` with n above any taken."""
        counters = [
            _name_order(p.name)[1]
            for p in backup_dir.glob(BACKUP_FILENAME_FORMAT.format(f"{ts}*"))
        ]
        if not counters:
            return backup_dir / BACKUP_FILENAME_FORMAT.format(ts)
        # Same second as an earlier snapshot
        return backup_dir / BACKUP_FILENAME_FORMAT.format(f"{ts}_{max(counters) + 1}")

    def _prune(self, backup_dir: Path, keep: Optional[PathLike] = None) -> None:
        """Delete all but the newest ``max_backups`` snapshots in ``backup_dir``.

        ``keep`` always survives and counts towards the limit.
        """
        try:
            files = self._sorted_backups(backup_dir.glob(BACKUP_FILE_PATTERN))
        except OSError as e:
            logger.warning(f"[BackupManager] Could not list backups in {backup_dir}: {e}")
            return

        keep_path = Path(keep).resolve() if keep else None
        kept = [p for p in files if keep_path is not None and p.resolve() == keep_path]
        others = [p for p in files if p not in kept]

        for stale in others[max(self.max_backups - len(kept), 0):]:
            try:
                stale.unlink(missing_ok=True)
                logger.debug(f"[BackupManager] Removed old backup {stale.name}")
            except OSError as e:
                logger.warning(f"[BackupManager] Failed to delete old backup '{stale}': {e}")

    @staticmethod
    def _sorted_backups(paths: Iterable[Path]) -> List[Path]:
        """Newest first by mtime; the timestamp and counter in the name break ties."""
        entries: List[Tuple[int, Tuple[str, int], str, Path]] = []
        for p in paths:
            try:
                if p.is_file():
                    entries.append((p.stat().st_mtime_ns, _name_order(p.name), p.name, p))
            except OSError:
                # Deleted by someone else between listing and stat
                continue
        entries.sort(key=lambda e: e[:3], reverse=True)
        return [e[3] for e in entries]

    def list_backups(self, identity_key: str) -> List[Path]:
        """Backups for a Steam user, newest first.

        Falls back to the old flat ``backups/shortcuts/`` folder when the
        per-user folder has none.
        """
        backup_dir = self.get_backup_folder_for_user(identity_key)
        backups = []
        if backup_dir.is_dir():
            backups = self._sorted_backups(backup_dir.glob(BACKUP_FILE_PATTERN))
        if backups:
            return backups

        legacy_dir = self.backups_root / LEGACY_BACKUP_KIND
        if legacy_dir.is_dir():
            legacy = self._sorted_backups(
                legacy_dir.glob(f"*-{identity_key}-*{BACKUP_FILE_EXTENSION}")
            )
            if legacy:
                logger.info(f"[BackupManager] Using {len(legacy)} legacy backup(s) for user {identity_key}")
            return legacy
        return []

    def restore(self, backup_file_path: PathLike, identity_key: str) -> bool:
        """Copy a backup over the user's shortcuts.vdf.

        The current shortcuts.vdf, if any, is snapshotted first so a restore
        can itself be undone. That snapshot never prunes the backup being restored.

        Returns:
            True on success, False if the backup is missing, the target can't
            be resolved or any step fails
        """
        try:
            backup_file = Path(backup_file_path)
            if not backup_file.is_file():
                logger.warning(f"[BackupManager] Backup file not found: {backup_file_path}")
                return False

            try:
                target = self.resolve_target(identity_key)
            except IdentityResolutionError as e:
                logger.warning(f"[BackupManager] Could not determine shortcuts.vdf path for user {identity_key}: {e}")
                return False

            if target.exists():
                self.snapshot(target, identity_key, keep=backup_file)

            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(backup_file, target)
            logger.info(f"[BackupManager] Restored backup '{backup_file_path}' to '{target}'")
            return True
        except Exception as e:
            logger.error(f"[BackupManager] Failed to restore backup '{backup_file_path}': {e}", exc_info=True)
            return False

    def write_with_backup(
        self,
        target_path: PathLike,
        shortcuts: List[SteamShortcut],
        text: bool = False,
    ) -> None:
        """Snapshot the current file, then write ``shortcuts`` to ``target_path``.

        The snapshot is best effort: if it fails the write still happens.
        Write errors propagate to the caller.

        Args:
            target_path: shortcuts.vdf to overwrite
            shortcuts: Records to write (re-indexed from 0)
            text: Write the text encoding instead of binary
        """
        try:
            identity_key = derive_identity_key_from_path(target_path) or DEFAULT_IDENTITY_KEY
            self.snapshot(target_path, identity_key)
        except Exception as e:
            logger.warning(f"[BackupManager] Creating shortcuts.vdf backup failed: {e}")

        if text:
            write_shortcuts_text(target_path, shortcuts)
        else:
            write_shortcuts(target_path, shortcuts)
