"""Text KeyValues (VDF) codec.

The text form is what Steam uses for loginusers.vdf, localconfig.vdf and
friends::

    "shortcuts"
    {
    	"0"
    	{
    		"AppName"	"My Game"
    	}
    }

Parsing is done by a small tokenizer with one token of lookahead. Quoted
strings take the character after a backslash verbatim (``\\"`` is a quote,
``\\n`` is the letter ``n``). ``//`` starts a line comment. A single ``/``
that is not followed by another ``/`` is dropped along with the character
after it, because the tokenizer can't push a character back; quote such
values if they need to survive.
"""

from typing import Any, Dict, List, Optional, TextIO, Tuple

from ..errors import FormatError

OPEN_BRACE = "{"
CLOSE_BRACE = "}"

# Token kinds
_BRACE = "brace"
_STRING = "string"

Token = Tuple[str, str]


class _CharReader:
    """Character cursor over a string with ``peek``/``read`` like a text stream."""

    def __init__(self, text: str):
        self._text = text
        self._pos = 0

    def peek(self) -> Optional[str]:
        if self._pos >= len(self._text):
            return None
        return self._text[self._pos]

    def read(self) -> Optional[str]:
        ch = self.peek()
        if ch is not None:
            self._pos += 1
        return ch


class Tokenizer:
    """Splits KeyValues text into brace and string tokens, one token of lookahead."""

    def __init__(self, text: str):
        self._reader = _CharReader(text)
        self._buffered: Optional[Token] = None
        self._exhausted = False

    def peek(self) -> Optional[Token]:
        if self._buffered is None and not self._exhausted:
            self._buffered = self._read_token()
            self._exhausted = self._buffered is None
        return self._buffered

    def read(self) -> Optional[Token]:
        token = self.peek()
        self._buffered = None
        return token

    def read_string(self) -> Optional[str]:
        """Consume a string token; None at end of input.

        Raises:
            FormatError: if the next token is a brace
        """
        token = self.read()
        if token is None:
            return None
        kind, text = token
        if kind == _BRACE:
            raise FormatError(f"Expected string token but found '{text}'")
        return text

    def _read_token(self) -> Optional[Token]:
        self._skip_whitespace_and_comments()
        ch = self._reader.peek()
        if ch is None:
            return None
        if ch in (OPEN_BRACE, CLOSE_BRACE):
            self._reader.read()
            return (_BRACE, ch)
        if ch == '"':
            return (_STRING, self._read_quoted())

        # Bare token: runs until whitespace or a brace
        chars: List[str] = []
        while True:
            ch = self._reader.peek()
            if ch is None or ch.isspace() or ch in (OPEN_BRACE, CLOSE_BRACE):
                break
            chars.append(ch)
            self._reader.read()
        return (_STRING, "".join(chars))

    def _read_quoted(self) -> str:
        self._reader.read()  # opening quote
        chars: List[str] = []
        while True:
            ch = self._reader.read()
            if ch is None or ch == '"':
                break
            if ch == "\\":
                escaped = self._reader.read()
                if escaped is None:
                    break
                chars.append(escaped)
            else:
                chars.append(ch)
        return "".join(chars)

    def _skip_whitespace_and_comments(self) -> None:
        while True:
            ch = self._reader.peek()
            if ch is None:
                return
            if ch.isspace():
                self._reader.read()
                continue
            if ch == "/":
                self._reader.read()
                if self._reader.peek() == "/":
                    while True:
                        ch = self._reader.read()
                        if ch is None or ch == "\n":
                            break
                    continue
                # No push-back: the character after a lone '/' goes with it
                self._reader.read()
            return


def loads(text: str, strict: bool = True) -> Dict[str, Any]:
    """Parse KeyValues text into a dict of strings and nested dicts.

    The top level is a plain sequence of pairs, not wrapped in braces.

    Args:
        text: KeyValues text (a leading UTF-8 BOM is ignored)
        strict: Raise on a node left open at end of input or a key with no
            value. With ``strict=False`` the parser stops quietly and returns
            what it has read so far.

    Raises:
        FormatError: when a brace appears where a key or value is expected,
            or (strict only) on truncated input
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    tokens = Tokenizer(text)
    root: Dict[str, Any] = {}
    while tokens.peek() is not None:
        key = tokens.read_string()
        root[key] = _read_value(tokens, key, strict)
    return root


def load(fp: TextIO, strict: bool = True) -> Dict[str, Any]:
    return loads(fp.read(), strict=strict)


def _read_value(tokens: Tokenizer, key: str, strict: bool) -> Any:
    nxt = tokens.peek()
    if nxt == (_BRACE, OPEN_BRACE):
        tokens.read()
        return _read_node(tokens, strict)
    value = tokens.read_string()
    if value is None:
        if strict:
            raise FormatError(f"Unexpected end of input: key '{key}' has no value")
        return ""
    return value


def _read_node(tokens: Tokenizer, strict: bool) -> Dict[str, Any]:
    node: Dict[str, Any] = {}
    while True:
        token = tokens.peek()
        if token is None:
            if strict:
                raise FormatError("Unexpected end of input: unterminated node")
            return node
        if token == (_BRACE, CLOSE_BRACE):
            tokens.read()
            return node
        key = tokens.read_string()
        node[key] = _read_value(tokens, key, strict)


def dumps(node: Dict[str, Any]) -> str:
    """Serialize a node to KeyValues text (tab-indented, everything quoted).

    Quotes and backslashes inside keys and values are backslash-escaped so
    Windows paths survive a round trip. Ints are written as decimal text and
    come back as strings.
    """
    lines: List[str] = []
    _write_pairs(lines, node, 0)
    return "".join(lines)


def dump(node: Dict[str, Any], fp: TextIO) -> None:
    fp.write(dumps(node))


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _write_pairs(lines: List[str], node: Dict[str, Any], depth: int) -> None:
    indent = "\t" * depth
    for key, value in node.items():
        if isinstance(value, dict):
            lines.append(f'{indent}"{_escape(str(key))}"\n')
            lines.append(f"{indent}{{\n")
            _write_pairs(lines, value, depth + 1)
            lines.append(f"{indent}}}\n")
        else:
            text = "" if value is None else str(value)
            lines.append(f'{indent}"{_escape(str(key))}"\t"{_escape(text)}"\n')
