from __future__ import annotations

from pathlib import Path

from steamshortcuts.utils import (
    delete_game_artwork,
    export_artwork_to_grid,
    find_artwork,
    get_grid_icon_path,
    get_missing_artwork_types,
    pick_grid_preview,
)

APP_ID = 3000000000
SIGNED_APP_ID = APP_ID - 2**32


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"img")
    return path


def test_find_artwork_any_extension(tmp_path: Path) -> None:
    cover = _touch(tmp_path / f"{APP_ID}.png")
    poster = _touch(tmp_path / f"{APP_ID}p.jpg")
    icon = _touch(tmp_path / f"{APP_ID}_icon.ico")

    found = find_artwork(tmp_path, APP_ID)

    assert found == {"cover": cover, "poster": poster, "icon": icon, "hero": None}


def test_find_artwork_accepts_signed_id(tmp_path: Path) -> None:
    hero = _touch(tmp_path / f"{APP_ID}_hero.png")
    assert find_artwork(tmp_path, SIGNED_APP_ID)["hero"] == hero


def test_find_artwork_without_grid(tmp_path: Path) -> None:
    assert set(find_artwork(None, APP_ID).values()) == {None}
    assert set(find_artwork(tmp_path / "missing", APP_ID).values()) == {None}
    assert set(find_artwork(tmp_path, 0).values()) == {None}


def test_pick_grid_preview_order(tmp_path: Path) -> None:
    assert pick_grid_preview(tmp_path, APP_ID) is None
    icon = _touch(tmp_path / f"{APP_ID}_icon.png")
    assert pick_grid_preview(tmp_path, APP_ID) == icon
    cover = _touch(tmp_path / f"{APP_ID}.png")
    assert pick_grid_preview(tmp_path, APP_ID) == cover
    poster = _touch(tmp_path / f"{APP_ID}p.png")
    assert pick_grid_preview(tmp_path, APP_ID) == poster
    hero = _touch(tmp_path / f"{APP_ID}_hero.png")
    assert pick_grid_preview(tmp_path, APP_ID) == hero


def test_get_grid_icon_path(tmp_path: Path) -> None:
    icon = _touch(tmp_path / f"{APP_ID}_icon.png")
    assert get_grid_icon_path(tmp_path, APP_ID) == icon


def test_get_missing_artwork_types(tmp_path: Path) -> None:
    _touch(tmp_path / f"{APP_ID}.png")
    assert get_missing_artwork_types(tmp_path, APP_ID) == {"poster", "hero", "icon"}


def test_export_artwork_to_grid(tmp_path: Path) -> None:
    cover = _touch(tmp_path / "src" / "cover.jpg")
    icon = _touch(tmp_path / "src" / "icon.png")
    grid = tmp_path / "grid"

    results = export_artwork_to_grid(grid, SIGNED_APP_ID, cover=str(cover), icon=str(icon),
                                     background=str(tmp_path / "src" / "missing.png"))

    assert results == {"cover": True, "poster": True, "icon": True}
    assert sorted(p.name for p in grid.iterdir()) == [
        f"{APP_ID}.jpg", f"{APP_ID}_icon.png", f"{APP_ID}p.jpg",
    ]


def test_export_artwork_without_grid_or_id(tmp_path: Path) -> None:
    cover = _touch(tmp_path / "cover.jpg")
    assert export_artwork_to_grid(None, APP_ID, cover=str(cover)) == {}
    assert export_artwork_to_grid(tmp_path / "grid", 0, cover=str(cover)) == {}


def test_delete_game_artwork(tmp_path: Path) -> None:
    _touch(tmp_path / f"{APP_ID}.png")
    _touch(tmp_path / f"{APP_ID}_hero.png")
    other = _touch(tmp_path / "12345.png")

    assert delete_game_artwork(tmp_path, APP_ID) == {"cover": True, "hero": True}
    assert [p.name for p in tmp_path.iterdir()] == [other.name]
