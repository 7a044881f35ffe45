"""Flattening parsers: turn one language file into a flat key -> string table.

Two interchangeable strategies share the ``Flattener`` interface:

- ``StrictFlattener`` parses the text with PyYAML and walks the resulting
  tree. It raises ``ParseError`` on anything PyYAML rejects.
- ``TolerantFlattener`` is the line-oriented fallback built on
  ``infrastructure.i18n.scanner``. It never raises and always returns a
  best-effort table.

``flatten_with_mode`` tries the strict parser first and falls back to the
tolerant one, reporting which strategy produced the table.
"""

from datetime import date, datetime
from typing import Any, Dict, List, NamedTuple, Optional, Protocol, Set

import yaml

from infrastructure.i18n.errors import ParseError
from infrastructure.i18n.models import ParseMode
from infrastructure.i18n.scanner import KeyLine, SequenceScalar, iter_records
from infrastructure.logging import get_module_logger

logger = get_module_logger()

FlatTable = Dict[str, str]

# Tags whose implicit resolution is kept: null (so `key:` reads as "") and
# merge keys. Every other plain scalar stays a string exactly as authored.
_KEPT_IMPLICIT_TAGS = ("tag:yaml.org,2002:null", "tag:yaml.org,2002:merge")


class TextLoader(yaml.SafeLoader):
    """SafeLoader that does not re-type plain scalars.

    PyYAML follows YAML 1.1, where `Yes`, `off`, `12:30` or `1_000` are
    booleans and numbers. In translation files they are text.
    """


def _text_resolvers():
    resolvers = {}
    for first, entries in yaml.SafeLoader.yaml_implicit_resolvers.items():
        kept = [(tag, regexp) for tag, regexp in entries if tag in _KEPT_IMPLICIT_TAGS]
        if kept:
            resolvers[first] = kept
    return resolvers


TextLoader.yaml_implicit_resolvers = _text_resolvers()


class Flattener(Protocol):
    """Common contract of the flattening strategies."""

    mode: ParseMode

    def flatten(self, text: str, source: Optional[str] = None) -> FlatTable: ...


def _scalar_to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        # Literal block scalars keep a final line break under clip chomping
        return value.rstrip("\n")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (dict, list)):
        return yaml.safe_dump(
            value, default_flow_style=True, allow_unicode=True, sort_keys=False
        ).strip()
    return str(value)


def _flatten_node(node: Any, prefix: str, out: FlatTable, ancestors: Set[int]) -> None:
    if isinstance(node, dict):
        if id(node) in ancestors:
            raise ParseError(f"Recursive alias under '{prefix}'")
        ancestors.add(id(node))
        for key, child in node.items():
            segment = "null" if key is None else _scalar_to_string(key)
            if not segment:
                continue
            _flatten_node(child, f"{prefix}.{segment}" if prefix else segment, out, ancestors)
        ancestors.discard(id(node))
        return

    if not prefix:
        return

    if isinstance(node, list):
        out[prefix] = ", ".join(_scalar_to_string(item) for item in node)
        return

    out[prefix] = _scalar_to_string(node)


class StrictFlattener:
    """Flatten a document parsed by PyYAML with ``TextLoader``.

    Mappings extend the dotted prefix, sequences are joined with ``", "`` and
    stored as one leaf, scalars are stringified (null becomes ``""``, trailing
    line breaks of strings are dropped). Plain scalars keep their authored
    text; only an empty value or `null`/`~` reads as null.
    """

    mode = ParseMode.STRICT

    def flatten(self, text: str, source: Optional[str] = None) -> FlatTable:
        """Parse and flatten ``text``.

        Raises:
            ParseError: If the text is not valid YAML, its root is not a mapping or
                it contains a recursive alias.
        """
        try:
            document = yaml.load(text, Loader=TextLoader)
        except RecursionError as e:
            raise ParseError("Document nesting is too deep", source=source) from e
        except (yaml.YAMLError, ValueError) as e:
            # PyYAML raises ValueError for explicit tags such as !!timestamp 2024-13-01
            mark = getattr(e, "problem_mark", None)
            raise ParseError(
                f"Invalid YAML: {e}",
                source=source,
                line=mark.line if mark is not None else None,
                column=mark.column if mark is not None else None,
            ) from e

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ParseError(
                f"Document root must be a mapping, got {type(document).__name__}",
                source=source,
            )

        out: FlatTable = {}
        try:
            _flatten_node(document, "", out, set())
        except ParseError as e:
            e.source = source
            raise
        except RecursionError as e:
            raise ParseError("Document nesting is too deep", source=source) from e
        return out


class TolerantFlattener:
    """Best-effort line-oriented flattener for documents PyYAML rejects.

    Later duplicates of a key overwrite earlier ones. Scalar sequence items
    are joined with ``", "`` under the key that opens the sequence.
    """

    mode = ParseMode.TOLERANT

    def flatten(self, text: str, source: Optional[str] = None) -> FlatTable:
        out: FlatTable = {}
        sequences: Dict[str, List[str]] = {}

        for record in iter_records(text):
            if isinstance(record, SequenceScalar):
                items = sequences.setdefault(record.path, [])
                items.append(record.value)
                out[record.path] = ", ".join(items)
            elif isinstance(record, KeyLine):
                if record.value is None:
                    # A key reopened later starts a fresh sequence
                    sequences.pop(record.path, None)
                else:
                    out[record.path] = record.value

        return out


class FlattenResult(NamedTuple):
    """A flat table together with the strategy that produced it."""

    table: FlatTable
    mode: ParseMode
    error: Optional[ParseError] = None


_strict = StrictFlattener()
_tolerant = TolerantFlattener()


def flatten_strict(text: str) -> FlatTable:
    """Flatten with the strict parser. Raises ``ParseError`` on invalid input."""
    return _strict.flatten(text)


def flatten_tolerant(text: str) -> FlatTable:
    """Flatten with the tolerant parser. Never raises."""
    return _tolerant.flatten(text)


def flatten_with_mode(text: str, source: Optional[str] = None) -> FlattenResult:
    """Flatten ``text``, strict first, tolerant on failure.

    The mode is ``FAILED`` when the tolerant parser had to be used and found
    no entries at all.
    """
    try:
        return FlattenResult(_strict.flatten(text, source=source), ParseMode.STRICT)
    except ParseError as e:
        table = _tolerant.flatten(text, source=source)
        logger.info(
            "parsed_with_tolerant_parser",
            source=source,
            error=str(e),
            error_line=e.line,
            entry_count=len(table),
        )
        mode = ParseMode.TOLERANT if table else ParseMode.FAILED
        return FlattenResult(table, mode, e)


def flatten(text: str) -> FlatTable:
    """Flatten ``text`` into dotted keys, using whichever parser succeeds."""
    return flatten_with_mode(text).table
