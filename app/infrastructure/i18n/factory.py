"""Factory functions for creating language indexes.

Provides convenience functions for building an index from the configured
language folder, suitable for application start-up and for reload triggers.
"""

from pathlib import Path
from typing import Optional, Sequence, Union

from infrastructure.configuration import LanguageSettings
from infrastructure.configuration import settings as app_settings
from infrastructure.events import EventDispatcher
from infrastructure.i18n.index import LanguageIndex
from infrastructure.i18n.loader import discover_translation_files, resolve_language_folder
from infrastructure.i18n.models import IndexStats
from infrastructure.logging import get_module_logger

logger = get_module_logger()


def load_language_folder(
    index: LanguageIndex,
    settings: LanguageSettings,
    workspace_roots: Sequence[Union[str, Path]] = (),
) -> IndexStats:
    """Reload ``index`` from every YAML file in the configured language folder.

    When no folder can be resolved or it holds no language files, the index
    is reloaded with no sources and ends up empty.

    Args:
        index: Index to reload.
        settings: Supplies the folder path and the language codes.
        workspace_roots: Directories a relative folder path is resolved against.

    Returns:
        Counters of the published snapshot.
    """
    folder = resolve_language_folder(settings.root_folder, workspace_roots)
    if folder is None:
        logger.warning(
            "language_folder_unresolved",
            folder_path=settings.root_folder,
            workspace_root_count=len(workspace_roots),
        )
        return index.reload([], settings)

    sources = discover_translation_files(folder)
    if not sources:
        logger.warning("no_language_files_in_folder", folder=str(folder))

    return index.reload(sources, settings)


def create_language_index(
    settings: Optional[LanguageSettings] = None,
    workspace_roots: Sequence[Union[str, Path]] = (),
    dispatcher: Optional[EventDispatcher] = None,
    preload: bool = True,
) -> LanguageIndex:
    """Create and configure a LanguageIndex instance.

    Args:
        settings: Language settings (default: the application settings).
        workspace_roots: Directories a relative folder path is resolved against.
        dispatcher: Event dispatcher used for change notification
            (default: a dispatcher owned by the index).
        preload: Whether to perform the first reload immediately (default: True).

    Returns:
        LanguageIndex: Configured index, loaded unless ``preload`` is False.

    Usage:
        # Application settings, folder relative to the current directory
        index = create_language_index(workspace_roots=[Path.cwd()])

        # Explicit settings, loaded later
        index = create_language_index(LanguageSettings(), preload=False)
        load_language_folder(index, settings, workspace_roots)
    """
    settings = settings or app_settings.language
    index = LanguageIndex(dispatcher=dispatcher)

    if preload:
        stats = load_language_folder(index, settings, workspace_roots)
        logger.info(
            "language_index_created_with_preload",
            folder_path=settings.root_folder,
            language_count=stats.language_count,
            file_count=stats.file_count,
        )
    else:
        logger.info("language_index_created_lazy", folder_path=settings.root_folder)

    return index
