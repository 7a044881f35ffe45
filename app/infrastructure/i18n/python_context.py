"""Context extraction from Python calling code.

Short key references such as ``t("hello")`` are resolved relative to where
they appear: the file, the enclosing class and the enclosing function. The
helpers here recover that scope and the string literal under a position.

Positions are 0-based ``(line, column)`` pairs where the column counts
characters, not bytes.
"""

import ast
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from infrastructure.i18n.models import ScopeContext

_KEY_LIKE = re.compile(r"^[A-Za-z0-9_.-]+$")
_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
_STRING_PREFIX = re.compile(r"""^([furbFURB]*)(\"\"\"|'''|"|')""")
_DEF_HEADER = re.compile(r"^(?:async\s+)?def\s+([A-Za-z_]\w*)")
_CLASS_HEADER = re.compile(r"^class\s+([A-Za-z_]\w*)")


@dataclass(frozen=True)
class StringLiteral:
    """Content of a string literal and the span it occupies.

    ``value`` is the text between the quotes as written (escapes are not
    decoded). The span covers exactly that text, end exclusive.
    """

    value: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int


def file_stem_from_filename(filename: Optional[str]) -> Optional[str]:
    """Stem of a ``.py`` file name or path; None for anything else."""
    if not filename:
        return None
    name = re.split(r"[/\\]", filename)[-1]
    if not name.lower().endswith(".py"):
        return None
    return name[:-3] or None


def is_key_like(value: str) -> bool:
    return bool(_KEY_LIKE.match(value))


def find_keys_in_string(value: str) -> List[str]:
    """Key references inside a string literal, in order and without repeats.

    The whole trimmed string counts when it looks like a key, and so does the
    trimmed content of every ``{...}`` placeholder that looks like one.

    Example:
        >>> find_keys_in_string("Hi {user.name}, {greeting}!")
        ['user.name', 'greeting']
    """
    keys: List[str] = []

    def add(candidate: str) -> None:
        if candidate and is_key_like(candidate) and candidate not in keys:
            keys.append(candidate)

    add(value.strip())
    for match in _PLACEHOLDER.finditer(value):
        add(match.group(1).strip())
    return keys


class _SourceMap:
    """Converts between (line, column) positions and absolute offsets."""

    def __init__(self, source: str):
        self.lines = source.split("\n")
        self.starts: List[int] = []
        offset = 0
        for line in self.lines:
            self.starts.append(offset)
            offset += len(line) + 1

    def offset(self, line: int, column: int) -> Optional[int]:
        if line < 0 or line >= len(self.lines):
            return None
        if column < 0 or column > len(self.lines[line]):
            return None
        return self.starts[line] + column

    def position(self, offset: int) -> Tuple[int, int]:
        line = 0
        for index, start in enumerate(self.starts):
            if start > offset:
                break
            line = index
        return line, offset - self.starts[line]

    def node_span(self, node: ast.AST) -> Optional[Tuple[int, int]]:
        """Absolute character span of an AST node (ast columns are UTF-8 bytes)."""
        end_lineno = getattr(node, "end_lineno", None)
        end_col = getattr(node, "end_col_offset", None)
        if getattr(node, "lineno", None) is None or end_lineno is None or end_col is None:
            return None
        start = self._char_offset(node.lineno - 1, node.col_offset)
        end = self._char_offset(end_lineno - 1, end_col)
        if start is None or end is None:
            return None
        return start, end

    def _char_offset(self, line: int, byte_column: int) -> Optional[int]:
        if line < 0 or line >= len(self.lines):
            return None
        text = self.lines[line]
        column = len(text.encode("utf-8")[:byte_column].decode("utf-8", errors="ignore"))
        return self.starts[line] + column


def _parse(source: str) -> Optional[ast.AST]:
    try:
        return ast.parse(source)
    except (SyntaxError, ValueError):
        return None


def _ast_scope(tree: ast.AST, source_map: _SourceMap, offset: int) -> Tuple[Optional[str], Optional[str]]:
    class_name: Optional[str] = None
    function_name: Optional[str] = None
    node = tree

    while True:
        for child in ast.iter_child_nodes(node):
            span = source_map.node_span(child)
            if span is None or not span[0] <= offset <= span[1]:
                continue
            if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
                function_name = child.name
            elif isinstance(child, ast.ClassDef):
                class_name = child.name
            node = child
            break
        else:
            return class_name, function_name


def _indentation_scope(lines: List[str], line: int, column: int) -> Tuple[Optional[str], Optional[str]]:
    class_name: Optional[str] = None
    function_name: Optional[str] = None

    current = lines[line] if 0 <= line < len(lines) else ""
    threshold = len(current) - len(current.lstrip()) if current.strip() else column

    for index in range(min(line, len(lines)) - 1, -1, -1):
        if threshold <= 0:
            break
        text = lines[index]
        stripped = text.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(text) - len(text.lstrip())
        if indent >= threshold:
            continue

        threshold = indent
        header = _DEF_HEADER.match(stripped)
        if header and function_name is None:
            function_name = header.group(1)
            continue
        header = _CLASS_HEADER.match(stripped)
        if header and class_name is None:
            class_name = header.group(1)

    return class_name, function_name


def scope_at(
    source: str,
    line: int,
    column: int,
    filename: Optional[str] = None,
) -> ScopeContext:
    """Scope of a position in Python source.

    The innermost enclosing function and the innermost enclosing class are
    reported independently. Source that does not parse is scanned by
    indentation for ``def``/``class`` headers above the position instead.
    """
    source_map = _SourceMap(source)
    offset = source_map.offset(line, column)
    tree = _parse(source)

    if tree is not None and offset is not None:
        class_name, function_name = _ast_scope(tree, source_map, offset)
    else:
        class_name, function_name = _indentation_scope(source_map.lines, line, column)

    return ScopeContext(
        file_stem=file_stem_from_filename(filename),
        class_name=class_name,
        function_name=function_name,
    )


def _unquote_span(raw: str) -> Optional[Tuple[int, int]]:
    match = _STRING_PREFIX.match(raw)
    if not match:
        return None
    quote = match.group(2)
    content_start = len(match.group(1)) + len(quote)
    content_end = len(raw) - len(quote)
    if not raw.endswith(quote) or content_end < content_start:
        return None
    return content_start, content_end


def _ast_string_at(
    tree: ast.AST, source: str, source_map: _SourceMap, offset: int
) -> Optional[StringLiteral]:
    nested = set()
    best: Optional[Tuple[int, int]] = None
    for node in ast.walk(tree):
        if id(node) in nested:
            if isinstance(node, ast.JoinedStr):
                nested.update(id(value) for value in node.values)
            continue
        if isinstance(node, ast.FormattedValue):
            # Format specs are JoinedStr nodes without quotes of their own
            if node.format_spec is not None:
                nested.add(id(node.format_spec))
            continue
        if isinstance(node, ast.JoinedStr):
            nested.update(id(value) for value in node.values)
        elif not (isinstance(node, ast.Constant) and isinstance(node.value, str)):
            continue
        span = source_map.node_span(node)
        if span is None or not span[0] <= offset <= span[1]:
            continue
        if best is None or span[1] - span[0] < best[1] - best[0]:
            best = span

    if best is None:
        return None

    raw = source[best[0] : best[1]]
    content = _unquote_span(raw)
    if content is None:
        return None
    start, end = best[0] + content[0], best[0] + content[1]
    if not start <= offset <= end:
        return None

    start_line, start_column = source_map.position(start)
    end_line, end_column = source_map.position(end)
    return StringLiteral(source[start:end], start_line, start_column, end_line, end_column)


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    index -= 1
    while index >= 0 and text[index] == "\\":
        backslashes += 1
        index -= 1
    return backslashes % 2 == 1


def _line_string_at(text: str, line: int, column: int) -> Optional[StringLiteral]:
    if column < 0 or column > len(text):
        return None

    start = -1
    for index in range(min(column - 1, len(text) - 1), -1, -1):
        if text[index] in "\"'" and not _is_escaped(text, index):
            start = index
            break
    if start < 0:
        return None

    quote = text[start]
    end = -1
    for index in range(start + 1, len(text)):
        if text[index] == quote and not _is_escaped(text, index):
            end = index
            break
    if end < 0 or not start + 1 <= column <= end:
        return None

    return StringLiteral(text[start + 1 : end], line, start + 1, line, end)


def string_at(source: str, line: int, column: int) -> Optional[StringLiteral]:
    """The string literal whose content surrounds a position, if any."""
    source_map = _SourceMap(source)
    offset = source_map.offset(line, column)
    if offset is None:
        return None

    tree = _parse(source)
    if tree is not None:
        return _ast_string_at(tree, source, source_map, offset)
    return _line_string_at(source_map.lines[line], line, column)
