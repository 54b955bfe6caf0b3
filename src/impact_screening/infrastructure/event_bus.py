"""Event bus infrastructure for the impact screening engine.

Provides a synchronous pub-sub event bus plus an in-memory event store for
audit trails and tests.  The bus catches and logs handler errors so that a
failing subscriber never breaks a screening.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Sequence

from impact_screening.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class EventBus:
    """Thread-safe synchronous pub-sub for domain events.

    Handlers are invoked **in registration order**.  A handler that raises is
    logged and skipped; subsequent handlers still execute.

    Usage::

        bus = EventBus()
        bus.subscribe(ScreeningCompleted, audit_log.record)
        bus.publish(ScreeningCompleted(...))
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[type[DomainEvent], list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []

    def subscribe(self, event_type: type[DomainEvent], handler: Handler) -> None:
        """Register *handler* for a specific *event_type*."""
        with self._lock:
            self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        """Register *handler* to receive **every** published event."""
        with self._lock:
            self._global_handlers.append(handler)

    def unsubscribe(self, event_type: type[DomainEvent], handler: Handler) -> bool:
        """Remove *handler* from *event_type*. Returns ``True`` if found."""
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            try:
                handlers.remove(handler)
                return True
            except ValueError:
                return False

    def publish(self, event: DomainEvent) -> None:
        """Publish *event* to all matching handlers (global first, then typed)."""
        with self._lock:
            global_snapshot = list(self._global_handlers)
            typed_snapshot = list(self._handlers.get(type(event), []))

        for handler in global_snapshot + typed_snapshot:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Error in handler %r for %s", handler, type(event).__name__
                )


class EventStore:
    """In-memory append-only event store.

    Wire it to a bus with ``bus.subscribe_all(store.append)``.
    """

    def __init__(self, max_size: int = 0) -> None:
        self._events: list[DomainEvent] = []
        self._max_size = max_size
        self._lock = threading.Lock()

    def append(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)
            if self._max_size > 0 and len(self._events) > self._max_size:
                self._events = self._events[-self._max_size:]

    def query(self, event_type: type[DomainEvent] | None = None) -> Sequence[DomainEvent]:
        """Return stored events, optionally filtered by type."""
        with self._lock:
            result = list(self._events)
        if event_type is not None:
            result = [e for e in result if isinstance(e, event_type)]
        return result

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
