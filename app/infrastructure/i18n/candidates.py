"""Candidate key expansion.

Maps a short identifier found in calling code to the fully-qualified keys
it may refer to, most locally scoped first.
"""

from typing import List, Optional

from infrastructure.i18n.models import ScopeContext


def compute_candidate_keys(raw_key: str, scope: Optional[ScopeContext] = None) -> List[str]:
    """Expand ``raw_key`` into an ordered, de-duplicated list of dotted keys.

    The literal text is tried first, then (if it contains underscores) the
    same text with hyphens, since code identifiers use ``_`` where YAML keys
    often use ``-``. A variant that already contains a dot is taken as fully
    qualified. Otherwise, for scope ``(file, class, function)``::

        file.class.function.key
        file.class.key
        file.function.key
        file.key
        file.general.key
        general.key
        key

    Parts of the scope that are missing are skipped along with every
    candidate that needs them.

    Example:
        >>> compute_candidate_keys("hello", ScopeContext(file_stem="bot"))
        ['bot.hello', 'bot.general.hello', 'general.hello', 'hello']
    """
    key = raw_key.strip()
    if not key:
        return []

    scope = scope or ScopeContext()
    file_prefix = scope.file_stem or None
    class_prefix = scope.class_name or None
    function_prefix = scope.function_name or None

    variants = [key]
    if "_" in key:
        variants.append(key.replace("_", "-"))

    candidates: List[str] = []
    seen = set()

    def add(candidate: str) -> None:
        if candidate not in seen:
            seen.add(candidate)
            candidates.append(candidate)

    for variant in variants:
        if "." in variant:
            add(variant)
            continue

        if file_prefix and class_prefix and function_prefix:
            add(f"{file_prefix}.{class_prefix}.{function_prefix}.{variant}")
        if file_prefix and class_prefix:
            add(f"{file_prefix}.{class_prefix}.{variant}")
        if file_prefix and function_prefix:
            add(f"{file_prefix}.{function_prefix}.{variant}")
        if file_prefix:
            add(f"{file_prefix}.{variant}")
            add(f"{file_prefix}.general.{variant}")
        add(f"general.{variant}")
        add(variant)

    return candidates
