"""Key location scanner.

Recovers the exact line and column of every key token so callers can jump
to a key's definition. Runs independently of value parsing, so it still
works on files that neither flattener can fully interpret.
"""

from typing import Dict

from infrastructure.i18n.models import KeyLocation
from infrastructure.i18n.scanner import KeyLine, iter_records


def locate_keys(text: str, source: str = "") -> Dict[str, KeyLocation]:
    """Map every dotted key in ``text`` to the position of its key token.

    Args:
        text: Document text.
        source: Identifier stored on each location.

    Returns:
        Dotted key -> KeyLocation. When a key is defined twice the later
        definition wins.
    """
    locations: Dict[str, KeyLocation] = {}
    for record in iter_records(text):
        if isinstance(record, KeyLine):
            locations[record.path] = KeyLocation(
                source=source,
                line=record.line,
                column=record.column,
                key_text=record.key_text,
            )
    return locations
