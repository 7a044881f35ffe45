"""Per-language index of flattened translation keys.

The index owns one immutable snapshot of per-language tables and key
locations. ``reload`` builds a complete new snapshot from a list of sources
and publishes it with a single assignment, so readers see either the old
snapshot or the new one, never a half-built state. Reloads are serialized.
"""

from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set

from infrastructure.configuration import LanguageSettings
from infrastructure.events import Event, EventDispatcher, EventHandler
from infrastructure.i18n.errors import TranslationSourceError
from infrastructure.i18n.flatten import FlattenResult, flatten_with_mode
from infrastructure.i18n.language_guess import guess_languages
from infrastructure.i18n.loader import TranslationSource, read_text
from infrastructure.i18n.locations import locate_keys
from infrastructure.i18n.models import (
    IndexStats,
    KeyLocation,
    LanguageCode,
    ParseMode,
    ResolvedTranslation,
    normalize_language,
)
from infrastructure.logging import bind_reload_context, get_module_logger

logger = get_module_logger()

RELOADED_EVENT = "language_index.reloaded"


@dataclass(frozen=True)
class _Snapshot:
    tables: Mapping[LanguageCode, Mapping[str, str]] = field(default_factory=dict)
    locations: Mapping[LanguageCode, Mapping[str, KeyLocation]] = field(
        default_factory=dict
    )
    parse_modes: Mapping[str, ParseMode] = field(default_factory=dict)
    stats: IndexStats = field(default_factory=IndexStats)
    loaded_at: Optional[datetime] = None


class LanguageIndex:
    """Queryable index of translation keys across languages.

    Lifecycle: create, ``reload`` any number of times, ``dispose``. Queries
    are side-effect free and never raise for unknown keys or languages; a
    miss is reported as None (or an empty collection).

    Attributes:
        RELOADED_EVENT: Event type dispatched after every publish.
    """

    RELOADED_EVENT = RELOADED_EVENT

    def __init__(self, dispatcher: Optional[EventDispatcher] = None):
        self._snapshot = _Snapshot()
        self._reload_lock = Lock()
        # Guards the snapshot swap against dispose(); never held while loading
        self._publish_lock = Lock()
        self._events = dispatcher or EventDispatcher()
        self._disposed = False

    # Lifecycle

    def reload(
        self,
        sources: Iterable[TranslationSource],
        settings: LanguageSettings,
    ) -> IndexStats:
        """Rebuild the index from ``sources`` and publish it atomically.

        Each source is read, assigned a language, scanned for key locations
        and flattened (strict parser first, tolerant parser on failure). A
        source that cannot be read is logged, counted as failed and skipped;
        it never aborts the reload.

        Args:
            sources: Every language file of the pass.
            settings: Supplies the default and fallback language codes.

        Returns:
            Counters of the published snapshot.
        """
        if self._disposed:
            logger.warning("reload_on_disposed_index")
            return self._snapshot.stats

        with self._reload_lock:
            sources = list(sources)
            with bind_reload_context(source_count=len(sources)):
                snapshot = self._build_snapshot(sources, settings)
                with self._publish_lock:
                    if self._disposed:
                        logger.warning("reload_discarded_after_dispose", **snapshot.stats.to_dict())
                        return self._snapshot.stats
                    self._snapshot = snapshot
                logger.info("language_index_reloaded", **snapshot.stats.to_dict())

        self._events.dispatch(Event(event_type=RELOADED_EVENT, metadata=snapshot.stats.to_dict()))
        return snapshot.stats

    def _build_snapshot(
        self, sources: List[TranslationSource], settings: LanguageSettings
    ) -> _Snapshot:
        guesses = guess_languages(
            [source.identifier for source in sources],
            settings.default_language,
            settings.fallback_language,
        )

        tables: Dict[LanguageCode, Dict[str, str]] = {}
        locations: Dict[LanguageCode, Dict[str, KeyLocation]] = {}
        parse_modes: Dict[str, ParseMode] = {}
        counts = {mode: 0 for mode in ParseMode}

        for source in sources:
            identifier = source.identifier
            guess = guesses[identifier]
            try:
                text = read_text(source)
            except TranslationSourceError as e:
                logger.warning("translation_file_unreadable", source=identifier, error=str(e))
                parse_modes[identifier] = ParseMode.FAILED
                counts[ParseMode.FAILED] += 1
                continue
            except Exception:  # pylint: disable=broad-except
                logger.exception("translation_file_unreadable", source=identifier)
                parse_modes[identifier] = ParseMode.FAILED
                counts[ParseMode.FAILED] += 1
                continue

            # Locations come from their own scan and survive any value-parse failure
            file_locations = locate_keys(text, identifier)
            result = self._flatten_source(text, identifier)

            locations.setdefault(guess.language, {}).update(file_locations)
            tables.setdefault(guess.language, {}).update(result.table)
            parse_modes[identifier] = result.mode
            counts[result.mode] += 1

            if result.mode is ParseMode.FAILED:
                logger.warning(
                    "translation_file_empty",
                    source=identifier,
                    language=guess.language,
                    location_count=len(file_locations),
                )
            logger.debug(
                "translation_file_loaded",
                source=identifier,
                language=guess.language,
                tagged=guess.tagged,
                parse_mode=result.mode.value,
                entry_count=len(result.table),
            )

        unique_keys: Set[str] = set()
        for table in tables.values():
            unique_keys.update(table)

        stats = IndexStats(
            file_count=len(sources),
            language_count=len(tables),
            unique_key_count=len(unique_keys),
            total_entry_count=sum(len(table) for table in tables.values()),
            strict_parse_count=counts[ParseMode.STRICT],
            tolerant_parse_count=counts[ParseMode.TOLERANT],
            failed_parse_count=counts[ParseMode.FAILED],
        )
        if not sources:
            logger.warning("no_translation_files_found")

        return _Snapshot(
            tables=tables,
            locations=locations,
            parse_modes=parse_modes,
            stats=stats,
            loaded_at=datetime.now(),
        )

    @staticmethod
    def _flatten_source(text: str, identifier: str) -> FlattenResult:
        try:
            return flatten_with_mode(text, identifier)
        except Exception:  # pylint: disable=broad-except
            logger.exception("translation_file_failed", source=identifier)
            return FlattenResult({}, ParseMode.FAILED)

    def on_did_update(self, handler: EventHandler) -> Callable[[], None]:
        """Subscribe to snapshot publications.

        The handler receives an ``Event`` whose metadata holds the new stats.

        Returns:
            A callable that unsubscribes the handler.
        """
        return self._events.subscribe(RELOADED_EVENT, handler)

    def dispose(self) -> None:
        """Drop every subscriber and the published snapshot.

        A reload still in progress finishes its work but discards the result.
        """
        with self._publish_lock:
            self._disposed = True
            self._snapshot = _Snapshot()
        self._events.clear_handlers()
        logger.info("language_index_disposed")

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def last_loaded_at(self) -> Optional[datetime]:
        """When the current snapshot was published; None before the first reload."""
        return self._snapshot.loaded_at

    # Queries

    def resolve(self, key: str, settings: LanguageSettings) -> Optional[ResolvedTranslation]:
        """Resolve ``key`` through the default -> fallback -> any language chain.

        Returns:
            The first hit, flagged ``from_default`` only when it came from the
            default language, or None when no language has the key.
        """
        snapshot = self._snapshot
        default = normalize_language(settings.default_language)
        fallback = normalize_language(settings.fallback_language)

        value = snapshot.tables.get(default, {}).get(key)
        if value is not None:
            return ResolvedTranslation(key=key, value=value, language=default, from_default=True)

        value = snapshot.tables.get(fallback, {}).get(key)
        if value is not None:
            return ResolvedTranslation(key=key, value=value, language=fallback, from_default=False)

        for language, table in snapshot.tables.items():
            value = table.get(key)
            if value is not None:
                return ResolvedTranslation(
                    key=key, value=value, language=language, from_default=False
                )

        return None

    def resolve_all_languages(self, key: str) -> Dict[LanguageCode, str]:
        """Every language that translates ``key``, mapped to its value."""
        return {
            language: table[key]
            for language, table in self._snapshot.tables.items()
            if key in table
        }

    def get_key_location(self, language: str, key: str) -> Optional[KeyLocation]:
        """Where ``key`` is defined for ``language``, or None."""
        return self._snapshot.locations.get(normalize_language(language), {}).get(key)

    def get_any_key_location(self, key: str) -> Optional[KeyLocation]:
        """Where ``key`` is defined in the first language that has it, or None."""
        for locations in self._snapshot.locations.values():
            location = locations.get(key)
            if location is not None:
                return location
        return None

    def get_all_keys(self) -> Set[str]:
        """Union of the keys of every language."""
        keys: Set[str] = set()
        for table in self._snapshot.tables.values():
            keys.update(table)
        return keys

    def get_languages(self) -> List[LanguageCode]:
        """Loaded languages in stored order."""
        return list(self._snapshot.tables)

    def get_language_table(self, language: str) -> Dict[str, str]:
        """Copy of the flat table of one language (empty when not loaded)."""
        return dict(self._snapshot.tables.get(normalize_language(language), {}))

    def get_detailed_stats(self) -> IndexStats:
        """Counters of the current snapshot."""
        return self._snapshot.stats

    def get_parse_modes(self) -> Dict[str, ParseMode]:
        """Per-source parse strategy of the last reload, for diagnostics."""
        return dict(self._snapshot.parse_modes)
