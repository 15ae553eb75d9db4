"""Checksum and identity helpers for non-Steam shortcuts.

Steam identifies a non-Steam shortcut by a 32-bit app id computed as the
CRC-32 of the executable path followed by the display name, with the high
bit set. The 64-bit "game id" used by ``steam://rungameid/`` URLs is the app
id shifted into the upper half with the shortcut type flag in the lower half.
"""

from typing import Optional

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3

CRC32_POLYNOMIAL = 0xEDB88320
SHORTCUT_APPID_FLAG = 0x80000000
SHORTCUT_GAMEID_FLAG = 0x02000000

_MASK_32 = 0xFFFFFFFF
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def _build_crc32_table() -> list:
    table = []
    for i in range(256):
        c = i
        for _ in range(8):
            if c & 1:
                c = CRC32_POLYNOMIAL ^ (c >> 1)
            else:
                c >>= 1
        table.append(c)
    return table


_CRC32_TABLE = _build_crc32_table()


def crc32(data: bytes) -> int:
    """Standard reflected CRC-32 (the one zlib and Steam use).

    >>> hex(crc32(b"123456789"))
    '0xcbf43926'
    """
    crc = _MASK_32
    for b in data:
        crc = (crc >> 8) ^ _CRC32_TABLE[(crc ^ b) & 0xFF]
    return crc ^ _MASK_32


def fingerprint(text: str) -> str:
    """FNV-1a 64-bit hash of the UTF-8 bytes, as 16 lowercase hex digits.

    Good enough for stable ids of non-adversarial input; not a security hash.
    """
    h = FNV_OFFSET_BASIS
    for b in (text or "").encode("utf-8"):
        h ^= b
        h = (h * FNV_PRIME) & _MASK_64
    return f"{h:016x}"


def normalize_path(path: Optional[str]) -> str:
    """Trim whitespace and remove one pair of surrounding double quotes."""
    if not path or not path.strip():
        return ""
    trimmed = path.strip()
    if len(trimmed) >= 2 and trimmed[0] == '"' and trimmed[-1] == '"':
        return trimmed[1:-1]
    return trimmed


def derive_shortcut_id(exe_path: Optional[str], display_name: Optional[str]) -> int:
    """Generate the unsigned app id Steam assigns to a non-Steam shortcut.

    The exe is normalized first so quoted and unquoted paths map to the
    same id.
    """
    seed = normalize_path(exe_path) + (display_name or "").strip()
    return crc32(seed.encode("utf-8")) | SHORTCUT_APPID_FLAG


def to_launch_game_id(app_id: int) -> int:
    """64-bit game id for ``steam://rungameid/`` URLs."""
    return ((app_id & _MASK_32) << 32) | SHORTCUT_GAMEID_FLAG


def to_signed_app_id(app_id: int) -> int:
    """Convert an unsigned app id to the signed int32 stored in shortcuts.vdf.

    Example: 3037054256 -> -1257913040
    """
    app_id &= _MASK_32
    return app_id - 2**32 if app_id & 0x80000000 else app_id


def to_unsigned_app_id(app_id: int) -> int:
    """Convert a signed int32 app id to unsigned (used for artwork filenames)."""
    return app_id if app_id >= 0 else app_id + 2**32
