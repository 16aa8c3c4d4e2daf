"""Minimal publish/subscribe bus for observational softrefs events.

Handlers subscribed for a base event type also receive its subclasses.
Synchronous handlers run on the publishing thread, which for cleanup events
is whatever thread the collector happened to run on.
"""

from __future__ import annotations

import logging
import queue
import threading
import uuid
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Type

LOGGER = logging.getLogger(__name__)


@dataclass(kw_only=True)
class Event:
    """Base event class."""
    timestamp: datetime = field(default_factory=datetime.now)
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Subscription:
    """Handle returned by subscribe(); can be used to unsubscribe."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    event_type: Type = Event
    handler: Callable = field(default=lambda e: None)
    async_: bool = False
    active: bool = True

    def cancel(self):
        self.active = False


_STOP = object()


class EventBus:
    """Publish/subscribe bus whose :meth:`publish` never waits on a lock.

    Cleanup events are published from the collector's callback, which may
    run on a thread that is itself inside :meth:`subscribe`.  Subscriptions
    are therefore kept as tuples that writers replace under ``_lock`` and
    :meth:`publish` reads without it.  Asynchronous handlers are handed to a
    :class:`queue.SimpleQueue` drained by worker threads; the workers are
    started from the foreground (:meth:`subscribe` with ``async_=True`` or
    :meth:`publish_async`), never from :meth:`publish`.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, max_workers: int = 2):
        self._logger = logger or LOGGER
        self._subscriptions: Dict[Type[Event], Tuple[Subscription, ...]] = {}
        self._max_workers = max_workers
        self._queue: "queue.SimpleQueue[object]" = queue.SimpleQueue()
        self._workers: List[threading.Thread] = []
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], handler: Callable, async_: bool = False) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler, async_=async_)
        with self._lock:
            self._subscriptions[event_type] = self._subscriptions.get(event_type, ()) + (sub,)
            if async_:
                self._start_workers()
        return sub

    def unsubscribe(self, subscription: Subscription):
        subscription.active = False
        with self._lock:
            subs = self._subscriptions.get(subscription.event_type, ())
            if subscription in subs:
                self._subscriptions[subscription.event_type] = tuple(s for s in subs if s is not subscription)

    def handler_count(self, event_type: Type[Event]) -> int:
        return len(self._matching(event_type))

    def publish(self, event: Event):
        for sub in self._matching(type(event)):
            if not sub.active:
                continue
            if sub.async_:
                self._queue.put((sub.handler, event, None))
                continue
            try:
                sub.handler(event)
            except Exception:
                self._logger.exception("Handler failed for %s", type(event).__name__)

    def publish_async(self, event: Event) -> List[Future]:
        """Queue every active handler for the workers and return the futures."""
        with self._lock:
            self._start_workers()
        futures: List[Future] = []
        for sub in self._matching(type(event)):
            if sub.active:
                future: Future = Future()
                self._queue.put((sub.handler, event, future))
                futures.append(future)
        return futures

    def shutdown(self):
        """Drain queued handlers and stop the workers."""
        with self._lock:
            workers, self._workers = self._workers, []
        for _ in workers:
            self._queue.put(_STOP)
        for worker in workers:
            worker.join()

    def _matching(self, event_type: Type[Event]) -> List[Subscription]:
        # Lock-free: tuples are replaced, never mutated.
        subscriptions = self._subscriptions
        matched: List[Subscription] = []
        for base in event_type.__mro__:
            matched.extend(subscriptions.get(base, ()))
        return matched

    def _start_workers(self):
        """Start the worker threads; caller holds ``_lock``."""
        while len(self._workers) < self._max_workers:
            worker = threading.Thread(
                target=self._drain,
                name=f"softrefs-events-{len(self._workers)}",
                daemon=True,
            )
            worker.start()
            self._workers.append(worker)

    def _drain(self):
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            handler, event, future = item
            self._safe_call(handler, event, future)

    def _safe_call(self, handler, event, future: Optional[Future] = None):
        if future is not None and not future.set_running_or_notify_cancel():
            return
        try:
            handler(event)
        except Exception as exc:
            self._logger.exception("Async handler failed for %s", type(event).__name__)
            if future is not None:
                future.set_exception(exc)
        else:
            if future is not None:
                future.set_result(None)
