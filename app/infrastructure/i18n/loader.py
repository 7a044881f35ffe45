"""Translation sources and file enumeration.

The index reads its input through the ``TranslationSource`` protocol: an
identifier plus a way to fetch the raw bytes. Sources backed by the file
system or by in-memory content are provided, along with helpers that find
the language folder and enumerate the YAML files below it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union, runtime_checkable

from infrastructure.i18n.errors import TranslationSourceError
from infrastructure.logging import get_module_logger

logger = get_module_logger()

YAML_PATTERNS = ("*.yml", "*.yaml")


@runtime_checkable
class TranslationSource(Protocol):
    """A language file as seen by the index."""

    @property
    def identifier(self) -> str:
        """Stable identifier (usually the path); also used to guess the language."""
        ...

    def read_bytes(self) -> bytes:
        """Return the raw content.

        Raises:
            TranslationSourceError: If the content cannot be read.
        """
        ...


@dataclass(frozen=True)
class FileTranslationSource:
    """Translation source backed by a file on disk."""

    path: Path

    @property
    def identifier(self) -> str:
        return str(self.path)

    def read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise TranslationSourceError(
                f"Cannot read {self.path}: {e}", source=str(self.path)
            ) from e


@dataclass(frozen=True)
class InMemoryTranslationSource:
    """Translation source holding its content directly."""

    identifier: str
    content: bytes

    def read_bytes(self) -> bytes:
        return self.content


def read_text(source: TranslationSource) -> str:
    """Read a source and decode it as UTF-8 (a leading BOM is dropped).

    Raises:
        TranslationSourceError: If the source is unreadable or not UTF-8.
    """
    try:
        raw = source.read_bytes()
    except TranslationSourceError:
        raise
    except OSError as e:
        raise TranslationSourceError(
            f"Cannot read {source.identifier}: {e}", source=source.identifier
        ) from e

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise TranslationSourceError(
            f"{source.identifier} is not valid UTF-8: {e}", source=source.identifier
        ) from e


def resolve_language_folder(
    folder_path: str,
    workspace_roots: Sequence[Union[str, Path]] = (),
) -> Optional[Path]:
    """Turn the configured folder path into a directory to scan.

    Absolute paths are used as-is. A relative path is joined to the first
    workspace root where it names an existing directory, or to the first
    root when none does.

    Returns:
        The folder, or None when the path is empty or is relative with no
        workspace root to resolve it against.
    """
    if not folder_path:
        return None

    folder = Path(folder_path)
    if folder.is_absolute():
        return folder

    roots = [Path(root) for root in workspace_roots]
    if not roots:
        return None

    for root in roots:
        candidate = root / folder
        if candidate.is_dir():
            return candidate

    return roots[0] / folder


def discover_translation_files(folder: Union[str, Path]) -> List[FileTranslationSource]:
    """Find every ``.yml``/``.yaml`` file below ``folder``, sorted by path."""
    root = Path(folder)
    if not root.is_dir():
        logger.warning("language_folder_not_found", folder=str(root))
        return []

    paths = {path for pattern in YAML_PATTERNS for path in root.rglob(pattern)}
    sources = [FileTranslationSource(path) for path in sorted(paths) if path.is_file()]
    logger.debug("discovered_translation_files", folder=str(root), count=len(sources))
    return sources
