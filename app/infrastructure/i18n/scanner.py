"""Line-oriented scanner for YAML-like language files.

Walks a document one physical line at a time and tracks nesting with an
indentation stack seeded with a ``(-1, "")`` sentinel. For every ``key: rest``
line it yields a ``KeyLine`` carrying the dotted path, the position of the key
token and, for leaves, the decoded value. Scalar sequence items (``- value``)
are yielded as ``SequenceScalar`` records under the enclosing key.

Block scalars (``|`` / ``>``) and quoted values spanning several lines are
consumed as a whole, so their interior lines are never read as keys.

Both the tolerant flattener and the key locator are built on ``iter_records``;
they differ only in what they keep from each record.
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

_KEY_LINE = re.compile(
    r"""^(?P<key>"(?:[^"\\]|\\.)*"|'(?:[^']|'')*'|[^\s:#'"][^:#]*?)\s*:(?P<rest>.*)$"""
)
_BLOCK_INDICATOR = re.compile(r"^[|>][+-]?[1-9]?[+-]?(?:\s+#.*)?$")
_INLINE_COMMENT = re.compile(r"\s#")
_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|x[0-9a-fA-F]{2}|.)", re.DOTALL)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "\\": "\\",
    "/": "/",
    "0": "\0",
    " ": " ",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "f": "\f",
    "v": "\v",
}


@dataclass(frozen=True)
class KeyLine:
    """A ``key: rest`` line.

    Attributes:
        line: 0-based line of the key token.
        column: 0-based column of the key token, after any sequence dash.
        key_text: The key token as written, quotes included.
        path: Full dotted path of the key.
        value: Decoded leaf value, or None when the line opens a nested scope.
    """

    line: int
    column: int
    key_text: str
    path: str
    value: Optional[str]


@dataclass(frozen=True)
class SequenceScalar:
    """A ``- value`` item belonging to the sequence stored under ``path``."""

    line: int
    column: int
    path: str
    value: str


ScanRecord = Union[KeyLine, SequenceScalar]


def split_lines(text: str) -> List[str]:
    """Split text into physical lines, accepting any newline convention."""
    if text.startswith("\ufeff"):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def count_indent(line: str) -> int:
    """Number of leading spaces (tabs do not count as indentation)."""
    return len(line) - len(line.lstrip(" "))


def strip_inline_comment(value: str) -> str:
    """Drop a trailing ``# comment`` (a hash preceded by whitespace) and trim."""
    match = _INLINE_COMMENT.search(value)
    if match:
        value = value[: match.start()]
    return value.strip()


def _replace_escape(match: "re.Match[str]") -> str:
    sequence = match.group(1)
    if sequence[0] in "uUx" and len(sequence) > 1:
        try:
            return chr(int(sequence[1:], 16))
        except ValueError:
            return match.group(0)
    return _SIMPLE_ESCAPES.get(sequence, match.group(0))


def unescape_double_quoted(value: str) -> str:
    """Decode the escape sequences allowed inside double quotes."""
    return _ESCAPE.sub(_replace_escape, value)


def unescape_single_quoted(value: str) -> str:
    """Single quotes only escape themselves, by doubling."""
    return value.replace("''", "'")


def unquote_key(key_text: str) -> str:
    """Trim a key token and remove one pair of matching surrounding quotes."""
    key = key_text.strip()
    if len(key) >= 2 and key[0] == key[-1] and key[0] in "\"'":
        inner = key[1:-1]
        key = (
            unescape_double_quoted(inner)
            if key[0] == '"'
            else unescape_single_quoted(inner)
        )
    return key.strip()


def _closing_quote(text: str, quote: str) -> int:
    index = 0
    while index < len(text):
        char = text[index]
        if quote == '"' and char == "\\":
            index += 2
            continue
        if char == quote:
            if quote == "'" and text[index + 1 : index + 2] == "'":
                index += 2
                continue
            return index
        index += 1
    return -1


def read_quoted(lines: List[str], start: int, text: str) -> Tuple[str, int]:
    """Read a quoted value that may continue over the following lines.

    Args:
        lines: All lines of the document.
        start: Index of the line the value starts on.
        text: The value text on that line, beginning with the opening quote.

    Returns:
        The unescaped value and the index of the line holding the closing
        quote (the last line of the document when the quote is never closed).
        Each line break inside the quotes becomes a newline in the value.
    """
    quote = text[0]
    buffer = text[1:]
    parts: List[str] = []
    index = start

    while True:
        end = _closing_quote(buffer, quote)
        if end >= 0:
            parts.append(buffer[:end])
            break
        parts.append(buffer.rstrip())
        if index + 1 >= len(lines):
            break
        index += 1
        # Continuation indentation only mirrors nesting, so it is not kept
        buffer = lines[index].strip()

    raw = "\n".join(parts)
    if quote == '"':
        return unescape_double_quoted(raw), index
    return unescape_single_quoted(raw), index


def read_block_scalar(lines: List[str], start: int, base_indent: int) -> Tuple[str, int]:
    """Read the literal lines of a block scalar opened on line ``start``.

    Content is every following line indented deeper than ``base_indent``;
    blank lines are kept as empty lines and trailing blank lines are dropped.
    The content is de-indented by the indentation of its first line.

    Returns:
        The joined value and the index of the last consumed line.
    """
    collected: List[str] = []
    block_indent: Optional[int] = None
    index = start + 1

    while index < len(lines):
        line = lines[index]
        if not line.strip():
            collected.append("")
            index += 1
            continue
        indent = count_indent(line)
        if indent <= base_indent:
            break
        if block_indent is None:
            block_indent = indent
        collected.append(line[min(indent, block_indent) :])
        index += 1

    while collected and collected[-1] == "":
        collected.pop()
    return "\n".join(collected), index - 1


def read_value(lines: List[str], start: int, rest: str, base_indent: int) -> Tuple[str, int]:
    """Decode the value following a key (or a sequence dash).

    Returns:
        The value and the index of the last line it occupies.
    """
    if _BLOCK_INDICATOR.match(rest):
        return read_block_scalar(lines, start, base_indent)
    if rest[0] in "\"'":
        return read_quoted(lines, start, rest)
    return strip_inline_comment(rest), start


def iter_records(text: str) -> Iterator[ScanRecord]:
    """Yield a record for every key line and scalar sequence item in ``text``.

    Records come in document order; a key that appears twice is yielded twice.
    """
    lines = split_lines(text)
    stack: List[Tuple[int, str]] = [(-1, "")]
    index = 0

    while index < len(lines):
        raw = lines[index]
        stripped = raw.strip()
        if not stripped or stripped.startswith("#"):
            index += 1
            continue

        indent = count_indent(raw)
        column = len(raw) - len(raw.lstrip(" \t"))
        content = stripped
        in_sequence = False

        if content.startswith("-"):
            after = content[1:]
            if not after or not after[0].isspace():
                # "-value" or a bare dash: nothing addressable on this line
                index += 1
                continue
            body = after.lstrip()
            column += 1 + len(after) - len(body)
            content = body
            in_sequence = True

        # Sequence items may sit at the same indentation as their parent key
        if in_sequence:
            while len(stack) > 1 and stack[-1][0] > indent:
                stack.pop()
        else:
            while len(stack) > 1 and stack[-1][0] >= indent:
                stack.pop()
        parent = stack[-1][1]

        match = _KEY_LINE.match(content)
        if match and in_sequence and match.group("rest")[:1] not in ("", " ", "\t"):
            match = None

        if match is None:
            if in_sequence and parent:
                value, last = read_value(lines, index, content, indent)
                yield SequenceScalar(line=index, column=column, path=parent, value=value)
                index = last + 1
                continue
            index += 1
            continue

        key_text = match.group("key")
        key = unquote_key(key_text)
        if not key:
            index += 1
            continue

        path = f"{parent}.{key}" if parent else key
        rest = match.group("rest").strip()
        scope_indent = column if in_sequence else indent

        if not rest or rest.startswith("#"):
            yield KeyLine(line=index, column=column, key_text=key_text, path=path, value=None)
            stack.append((scope_indent, path))
            index += 1
            continue

        value, last = read_value(lines, index, rest, scope_indent)
        yield KeyLine(line=index, column=column, key_text=key_text, path=path, value=value)
        index = last + 1
