#!/usr/bin/env python3
"""
Steam Shortcuts CLI

Inspect, convert and back up Steam's shortcuts.vdf from the command line.

Usage:
    steamshortcuts read <shortcuts.vdf> [--text]
    steamshortcuts write-sample <out.vdf> [--text]
    steamshortcuts roundtrip <in.vdf> <out.vdf>
    steamshortcuts export-text <shortcuts.vdf> <out.txt>
    steamshortcuts import-text <in.txt> <shortcuts.vdf>
    steamshortcuts users
    steamshortcuts backups <user id>
    steamshortcuts snapshot <shortcuts.vdf> [--user ID]
    steamshortcuts restore <backup.bak.vdf> <user id>

Exit codes: 0 ok, 1 usage or operation failure, 2 unexpected error.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .controllers.backup_manager import BackupManager
from .errors import FormatError
from .settings import load_settings
from .shortcuts import (
    SteamShortcut,
    read_shortcuts,
    read_shortcuts_text,
    write_shortcuts,
    write_shortcuts_text,
)
from .utils.paths import BACKUPS_DIR, DEFAULT_IDENTITY_KEY, derive_identity_key_from_path, is_backup_file
from .utils.steam_user import get_steam_user_ids, get_valid_users

logger = logging.getLogger("steamshortcuts.cli")


def _sample_shortcuts() -> List[SteamShortcut]:
    return [
        SteamShortcut(
            app_name="My Game",
            exe="C:/Games/MyGame/MyGame.exe",
            start_dir="C:/Games/MyGame",
            launch_options="-windowed",
            tags=["Action", "Indie"],
        ),
        SteamShortcut(
            app_name="Emulator Title",
            exe="C:/Emu/emu.exe",
            start_dir="C:/Emu",
            launch_options="--rom C:/Roms/title.rom",
            tags=["Emulator"],
        ),
    ]


def _print_shortcut(s: SteamShortcut) -> None:
    print(f"- {s.app_name}")
    print(f"  appid: {s.effective_app_id}")
    print(f"  exe: {s.exe}")
    print(f"  dir: {s.start_dir}")
    print(f"  args: {s.launch_options}")
    print(f"  url: {s.launch_url}")
    if s.tags:
        print(f"  tags: {', '.join(s.tags)}")


def cmd_read(args, manager: BackupManager) -> int:
    reader = read_shortcuts_text if args.text else read_shortcuts
    items = reader(args.path)
    print(f"Read {len(items)} shortcuts from {args.path}")
    for s in items:
        _print_shortcut(s)
    return 0


def cmd_write_sample(args, manager: BackupManager) -> int:
    manager.write_with_backup(args.path, _sample_shortcuts(), text=args.text)
    print(f"Wrote sample to {args.path}")
    return 0


def cmd_roundtrip(args, manager: BackupManager) -> int:
    items = read_shortcuts(args.src)
    write_shortcuts(args.dst, items)
    print(f"Roundtripped {len(items)} entries from {args.src} -> {args.dst}")
    return 0


def cmd_export_text(args, manager: BackupManager) -> int:
    items = read_shortcuts(args.src)
    write_shortcuts_text(args.dst, items)
    print(f"Exported {len(items)} shortcuts to {args.dst}")
    return 0


def cmd_import_text(args, manager: BackupManager) -> int:
    items = read_shortcuts_text(args.src)
    manager.write_with_backup(args.dst, items)
    print(f"Imported {len(items)} shortcuts into {args.dst}")
    return 0


def cmd_users(args, manager: BackupManager) -> int:
    root = manager.steam_root_path
    if not root:
        print("Set a valid Steam library path (--steam-root).", file=sys.stderr)
        return 1
    users = get_valid_users(root, get_steam_user_ids(root))
    if not users:
        print("No Steam users found.")
        return 0
    for user in users:
        print(f"{user.user_id}\t{user.display_name}")
    return 0


def cmd_backups(args, manager: BackupManager) -> int:
    backups = manager.list_backups(args.user)
    if not backups:
        print("No backups found for this Steam user.")
        return 0
    for path in backups:
        print(path)
    return 0


def cmd_snapshot(args, manager: BackupManager) -> int:
    user = args.user or derive_identity_key_from_path(args.path) or DEFAULT_IDENTITY_KEY
    dst = manager.snapshot(args.path, user)
    if dst is None:
        print(f"Nothing backed up from {args.path}", file=sys.stderr)
        return 1
    print(f"Backup created: {dst}")
    return 0


def cmd_restore(args, manager: BackupManager) -> int:
    if not is_backup_file(args.backup):
        print("Please select a valid backup file (*.bak.vdf).", file=sys.stderr)
        return 1
    if manager.restore(args.backup, args.user):
        print("Backup restored successfully.")
        return 0
    print("Failed to restore backup.", file=sys.stderr)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="steamshortcuts", description="Steam shortcuts.vdf tool")
    parser.add_argument("--steam-root", help="Steam installation path (default: from settings)")
    parser.add_argument("--backups-root", default=BACKUPS_DIR, help="Backup folder root")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("read", help="List shortcuts in a file")
    p.add_argument("path")
    p.add_argument("--text", action="store_true", help="File uses the text encoding")
    p.set_defaults(func=cmd_read)

    p = sub.add_parser("write-sample", help="Write two sample shortcuts")
    p.add_argument("path")
    p.add_argument("--text", action="store_true", help="Write the text encoding")
    p.set_defaults(func=cmd_write_sample)

    p = sub.add_parser("roundtrip", help="Read a binary file and write it back out")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=cmd_roundtrip)

    p = sub.add_parser("export-text", help="Convert binary shortcuts.vdf to text")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=cmd_export_text)

    p = sub.add_parser("import-text", help="Convert text to binary shortcuts.vdf (with backup)")
    p.add_argument("src")
    p.add_argument("dst")
    p.set_defaults(func=cmd_import_text)

    p = sub.add_parser("users", help="List Steam users")
    p.set_defaults(func=cmd_users)

    p = sub.add_parser("backups", help="List backups for a Steam user")
    p.add_argument("user")
    p.set_defaults(func=cmd_backups)

    p = sub.add_parser("snapshot", help="Back up a shortcuts.vdf now")
    p.add_argument("path")
    p.add_argument("--user", help="Steam user id (default: taken from the path)")
    p.set_defaults(func=cmd_snapshot)

    p = sub.add_parser("restore", help="Restore a backup over a user's shortcuts.vdf")
    p.add_argument("backup")
    p.add_argument("user")
    p.set_defaults(func=cmd_restore)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    steam_root = args.steam_root or load_settings().steam_root_path or None
    manager = BackupManager(steam_root_path=steam_root, backups_root=args.backups_root)

    try:
        return args.func(args, manager)
    except (FileNotFoundError, FormatError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 2


if __name__ == '__main__':
    sys.exit(main())
