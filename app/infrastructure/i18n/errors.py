"""Exceptions raised by the language key index."""

from typing import Optional


class I18nError(Exception):
    """Base class for language index errors."""


class ParseError(I18nError):
    """The strict parser rejected a document.

    Never escapes a reload: the index retries the document with the tolerant
    parser instead.

    Attributes:
        source: Identifier of the offending file, when known.
        line: 0-based line of the problem, when the YAML parser reported one.
        column: 0-based column of the problem, when reported.
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        super().__init__(message)
        self.source = source
        self.line = line
        self.column = column


class TranslationSourceError(I18nError):
    """A translation source could not be read or decoded as UTF-8.

    Attributes:
        source: Identifier of the unreadable file.
    """

    def __init__(self, message: str, source: str):
        super().__init__(message)
        self.source = source
