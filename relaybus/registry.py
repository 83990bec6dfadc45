"""Registry for listener management.

This module provides ListenerRegistry for storing and querying listeners,
with a per-event-name cache of resolved wildcard listeners.
"""

import threading

from loguru import logger

from relaybus._types import Invocable
from relaybus.matcher import matches
from relaybus.resolver import ListenerEntry, ListenerResolver
from relaybus.utils import PUSHED_SUFFIX, event_name_of, is_wildcard, loaded_type

log = logger.bind(source=__name__)


class ListenerRegistry:
    """Registry table for event listeners.

    Exact-name listeners and wildcard-pattern listeners are kept in
    separate insertion-ordered tables.  Resolved wildcard listeners are
    cached per concrete event name; registering any new pattern clears the
    whole cache since it may match names cached before it existed.

    One re-entrant lock guards both tables and the cache, so pattern
    registration and cache invalidation are atomic.  ``listeners()``
    returns a fresh list, which callers may iterate without the lock while
    other code (including the listeners themselves) mutates the registry.
    """

    def __init__(self, resolver: ListenerResolver) -> None:
        """Initialize empty registry.

        Post:
            _listeners, _wildcards and _wildcards_cache are empty dicts.
        """
        self._resolver = resolver
        self._lock = threading.RLock()
        self._listeners: dict[str, list[ListenerEntry]] = {}
        self._wildcards: dict[str, list[ListenerEntry]] = {}
        self._wildcards_cache: dict[str, list[Invocable]] = {}

    def add(self, event: str, entry: ListenerEntry) -> None:
        """Register a listener entry for an event name or pattern.

        Args:
            event: Validated event name, possibly containing ``*``.
            entry: Parsed listener entry.

        Post:
            entry appended to the name's list.
            wildcard cache cleared if *event* is a pattern.
        """
        with self._lock:
            if is_wildcard(event):
                self._wildcards.setdefault(event, []).append(entry)
                self._wildcards_cache.clear()
                log.debug("Wildcard listener {} added for {}", entry.name, event)
            else:
                self._listeners.setdefault(event, []).append(entry)
                log.debug("Listener {} added for {}", entry.name, event)

    def remove(self, event: str) -> None:
        """Remove every listener registered under *event*.

        Forgetting an exact name leaves wildcard listeners alone, and the
        other way round.  Cached wildcard resolutions for every concrete
        name that *event* matches are purged.

        Args:
            event: Exact event name or pattern, as registered.
        """
        with self._lock:
            if is_wildcard(event):
                self._wildcards.pop(event, None)
            else:
                self._listeners.pop(event, None)

            for key in [k for k in self._wildcards_cache if matches(event, k)]:
                del self._wildcards_cache[key]
        log.debug("Listeners forgotten for {}", event)

    def remove_pushed(self) -> None:
        """Remove every exact-name entry ending with ``_pushed``."""
        with self._lock:
            for key in [k for k in self._listeners if k.endswith(PUSHED_SUFFIX)]:
                self.remove(key)

    def has_listeners(self, event: str) -> bool:
        with self._lock:
            return (
                event in self._listeners
                or event in self._wildcards
                or self.has_wildcard_listeners(event)
            )

    def has_wildcard_listeners(self, event: str) -> bool:
        with self._lock:
            return any(matches(pattern, event) for pattern in self._wildcards)

    def raw(self) -> dict[str, list[ListenerEntry]]:
        """Return a copy of the exact-name table, entries unresolved."""
        with self._lock:
            return {name: list(entries) for name, entries in self._listeners.items()}

    def listeners(self, event: str, event_type: type | None = None) -> list[Invocable]:
        """Return the invocables for an event, in execution order.

        Order is: exact-name listeners, then wildcard listeners (patterns
        in registration order), then listeners registered under the base
        classes of the event type.

        Args:
            event: Concrete event name.
            event_type: Class the event was dispatched as.  When None, the
                class is looked up from *event* among loaded modules, which
                cannot find classes defined inside functions.

        Returns:
            New list; mutating it or the registry does not affect the other.
        """
        with self._lock:
            result = self._prepare(event)
            result.extend(self._wildcard_listeners(event))

            if event_type is None:
                event_type = loaded_type(event)
            if event_type is not None:
                result.extend(self._interface_listeners(event_type))
            return result

    def _prepare(self, event: str) -> list[Invocable]:
        return [
            self._resolver.make_listener(entry)
            for entry in self._listeners.get(event, [])
        ]

    def _wildcard_listeners(self, event: str) -> list[Invocable]:
        cached = self._wildcards_cache.get(event)
        if cached is None:
            cached = [
                self._resolver.make_listener(entry, wildcard=True)
                for pattern, entries in self._wildcards.items()
                if matches(pattern, event)
                for entry in entries
            ]
            self._wildcards_cache[event] = cached
        return list(cached)

    def _interface_listeners(self, event_type: type) -> list[Invocable]:
        result: list[Invocable] = []
        for base in event_type.__mro__[1:]:
            if base is object:
                continue
            name = event_name_of(base)
            if name in self._listeners:
                result.extend(self._prepare(name))
        return result
