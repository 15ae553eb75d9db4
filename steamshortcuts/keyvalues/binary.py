"""Binary KeyValues (VDF) codec, as used by Steam's shortcuts.vdf.

A node is a run of ``(type, key, value)`` entries closed by an end marker.
There are no length prefixes anywhere: keys and string values are
NUL-terminated UTF-8, ints are 4 bytes, and nested nodes recurse until their
own end marker. A shortcuts file therefore ends with two end markers, one for
the ``shortcuts`` node and one for the root.
"""

import io
import struct
from typing import Any, BinaryIO, Dict

from ..errors import FormatError

TYPE_NODE = 0x00
TYPE_STRING = 0x01
TYPE_INT32 = 0x02
TYPE_END = 0x08

# Steam only ships on little-endian hosts, and reads the int as-is
_INT32 = struct.Struct("<i")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def load(fp: BinaryIO) -> Dict[str, Any]:
    """Read one node from a binary stream.

    The stream is left positioned just after the node's end marker.

    Raises:
        FormatError: on an unknown type byte or if the stream ends early
    """
    return _read_node(fp)


def loads(data: bytes) -> Dict[str, Any]:
    """Parse a node from bytes (see :func:`load`)."""
    return load(io.BytesIO(data))


def dump(node: Dict[str, Any], fp: BinaryIO) -> None:
    """Write ``node`` to a binary stream, keys in iteration order.

    Values map to wire types as follows: ``dict`` is a nested node, ``int``
    within int32 range is an int32, ``None`` is an empty string and anything
    else is written as ``str(value)``.
    """
    fp.write(dumps(node))


def dumps(node: Dict[str, Any]) -> bytes:
    buf = bytearray()
    _write_node(buf, node)
    return bytes(buf)


def _read_byte(fp: BinaryIO) -> int:
    b = fp.read(1)
    if not b:
        raise FormatError("Unexpected end of stream (truncated KeyValues data)")
    return b[0]


def _read_cstring(fp: BinaryIO) -> str:
    chunks = bytearray()
    while True:
        b = fp.read(1)
        if not b:
            raise FormatError("Unexpected end of stream inside a string")
        if b == b"\x00":
            break
        chunks += b
    return chunks.decode("utf-8", errors="replace")


def _read_int32(fp: BinaryIO) -> int:
    raw = fp.read(4)
    if len(raw) != 4:
        raise FormatError("Unexpected end of stream inside an int32 value")
    return _INT32.unpack(raw)[0]


def _read_node(fp: BinaryIO) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    while True:
        type_byte = _read_byte(fp)
        if type_byte == TYPE_END:
            return result
        if type_byte not in (TYPE_NODE, TYPE_STRING, TYPE_INT32):
            raise FormatError(f"Unsupported KV type: 0x{type_byte:02x}")

        key = _read_cstring(fp)
        if type_byte == TYPE_STRING:
            result[key] = _read_cstring(fp)
        elif type_byte == TYPE_INT32:
            result[key] = _read_int32(fp)
        else:
            result[key] = _read_node(fp)


def _encode_cstring(value: str) -> bytes:
    raw = value.encode("utf-8")
    if b"\x00" in raw:
        raise FormatError(f"Cannot encode string with embedded NUL: {value!r}")
    return raw + b"\x00"


def _write_node(buf: bytearray, node: Dict[str, Any]) -> None:
    for key, value in node.items():
        encoded_key = _encode_cstring(str(key))
        if isinstance(value, dict):
            buf.append(TYPE_NODE)
            buf += encoded_key
            _write_node(buf, value)
        elif (
            isinstance(value, int)
            and not isinstance(value, bool)
            and _INT32_MIN <= value <= _INT32_MAX
        ):
            buf.append(TYPE_INT32)
            buf += encoded_key
            buf += _INT32.pack(value)
        else:
            buf.append(TYPE_STRING)
            buf += encoded_key
            buf += _encode_cstring("" if value is None else str(value))
    buf.append(TYPE_END)
