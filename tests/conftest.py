from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from steamshortcuts.shortcuts import SteamShortcut  # noqa: E402


@pytest.fixture
def sample_shortcuts() -> list:
    """One Windows-style entry with tags, one Linux entry with a fixed app id"""
    return [
        SteamShortcut(
            app_name="My Game",
            exe='"C:\\Games\\MyGame\\MyGame.exe"',
            start_dir='"C:\\Games\\MyGame"',
            launch_options="-windowed",
            tags=["Action", "Indie"],
        ),
        SteamShortcut(
            app_name="Emulator Title",
            exe="/usr/bin/emu",
            start_dir="/usr/bin",
            app_id=0x80000001,
            is_hidden=1,
            last_play_time=1700000000,
        ),
    ]
