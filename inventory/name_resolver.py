"""
Per-run cache turning opaque identifiers into display names.

Mappings are built lazily from bulk "list all" calls, once per (kind, region),
and shared by every collector running in the same run. Concurrent requests for
a cold entry are coalesced: the first caller runs the loader while the others
wait for it and then read the cached mapping.
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .constants import CANCELLATION_POLL_INTERVAL, ERROR_MESSAGES
from .exceptions import CollectionCancelled, ConfigurationError
from .normalizer import string_value

logger = logging.getLogger(__name__)

# loader(ctx, region) -> {identifier: name}
NameLoader = Callable[[Any, str], Mapping[str, str]]


class _CacheEntry:
    def __init__(self):
        self.ready = threading.Event()
        self.mapping: Mapping[str, str] = MappingProxyType({})
        self.error: Optional[str] = None
        self.cancelled = False


class NameResolver:
    """Thread-safe, populate-once cache of identifier to name mappings."""

    def __init__(self, loaders: Optional[Dict[str, NameLoader]] = None):
        self._lock = threading.Lock()
        self._loaders: Dict[str, NameLoader] = dict(loaders or {})
        self._entries: Dict[Tuple[str, str], _CacheEntry] = {}
        self._calls: Dict[Tuple[str, str], int] = {}

    def register_loader(self, kind: str, loader: NameLoader) -> None:
        with self._lock:
            self._loaders[kind] = loader

    def kinds(self) -> List[str]:
        return sorted(self._loaders)

    def get_all(self, ctx, kind: str, region: str) -> Mapping[str, str]:
        """
        Return the full id -> name mapping for a kind in a region.

        The loader runs at most once per (kind, region) for the resolver's
        lifetime. A failing loader is cached as an empty mapping.

        Args:
            ctx: Run or pair context used for cancellation
            kind: Name kind (e.g. "kms", "vpc")
            region: Region scope of the mapping

        Returns:
            Read-only mapping of identifier to display name

        Raises:
            CollectionCancelled: If the run is cancelled while populating or waiting
        """
        key = (kind, region)
        with self._lock:
            entry = self._entries.get(key)
            owner = entry is None
            if owner:
                entry = _CacheEntry()
                self._entries[key] = entry
                self._calls[key] = self._calls.get(key, 0) + 1

        if owner:
            self._populate(ctx, key, entry)
        else:
            while not entry.ready.wait(CANCELLATION_POLL_INTERVAL):
                ctx.check()

        if entry.cancelled:
            ctx.check()
        return entry.mapping

    def resolve_name(self, ctx, kind: str, region: str, identifier: Any) -> str:
        """Resolve one identifier; unknown identifiers are returned unchanged."""
        ident = string_value(identifier)
        if not ident:
            return ""
        return self.get_all(ctx, kind, region).get(ident, ident)

    def resolve_names(
        self, ctx, kind: str, region: str, identifiers: Optional[Iterable[Any]]
    ) -> List[str]:
        ids = [string_value(identifier) for identifier in identifiers or []]
        ids = [ident for ident in ids if ident]
        if not ids:
            return []
        mapping = self.get_all(ctx, kind, region)
        return [mapping.get(ident, ident) for ident in ids]

    def call_count(self, kind: str, region: str) -> int:
        """Number of loader invocations issued for (kind, region)."""
        with self._lock:
            return self._calls.get((kind, region), 0)

    def error(self, kind: str, region: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get((kind, region))
        return entry.error if entry else None

    def _populate(self, ctx, key: Tuple[str, str], entry: _CacheEntry) -> None:
        kind, region = key
        try:
            loader = self._loaders.get(kind)
            if loader is None:
                raise ConfigurationError(ERROR_MESSAGES["unknown_name_kind"].format(kind=kind))
            ctx.check()
            mapping = dict(loader(ctx, region))
            entry.mapping = MappingProxyType(mapping)
            logger.debug("Cached %d %s names for %s", len(mapping), kind, region)
        except CollectionCancelled:
            entry.cancelled = True
            with self._lock:
                self._entries.pop(key, None)
            raise
        except Exception as e:
            entry.error = str(e)
            logger.warning("Name lookup for %s in %s unavailable: %s", kind, region, e)
        finally:
            entry.ready.set()
