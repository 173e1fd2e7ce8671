from collections import defaultdict, deque
from typing import Callable, Deque, Dict, Iterable, List, Type, TypeVar

from .events import Event

EventHandler = Callable[[Event], None]
E = TypeVar("E", bound=Event)


class EventBus:
    """
    Synchronous FIFO event bus.

    ``publish`` only enqueues; handlers run when :meth:`dispatch` drains
    the queue. A handler registered for a base class also receives its
    subclasses. Everything happens on the caller's thread, so a run is
    fully deterministic.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Type[Event], List[EventHandler]] = defaultdict(list)
        self._queue: Deque[Event] = deque()
        self._dispatching = False
        self._resolved: Dict[Type[Event], List[EventHandler]] = {}

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        self._subscribers[event_type].append(handler)  # type: ignore[arg-type]
        self._resolved.clear()

    def unsubscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        """
        Remove a handler; unknown handlers are ignored.
        """

        handlers = self._subscribers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)  # type: ignore[arg-type]
            self._resolved.clear()

    def publish(self, event: Event) -> None:
        self._queue.append(event)

    def publish_all(self, events: Iterable[Event]) -> None:
        self._queue.extend(events)

    def dispatch(self) -> None:
        """
        Deliver queued events, including those published by handlers
        while draining. Nested calls return immediately; the outer call
        finishes the queue.
        """

        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._queue:
                event = self._queue.popleft()
                for handler in self._handlers_for(type(event)):
                    handler(event)
        finally:
            self._dispatching = False

    def _handlers_for(self, event_cls: Type[Event]) -> List[EventHandler]:
        handlers = self._resolved.get(event_cls)
        if handlers is None:
            handlers = [
                handler
                for event_type, registered in self._subscribers.items()
                if issubclass(event_cls, event_type)
                for handler in registered
            ]
            self._resolved[event_cls] = handlers
        return list(handlers)

    def clear(self) -> None:
        self._queue.clear()
        self._subscribers.clear()
        self._resolved.clear()

    @property
    def pending(self) -> int:
        return len(self._queue)
