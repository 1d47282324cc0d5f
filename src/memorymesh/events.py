"""Graph lifecycle notifications.

Provides EventNotifier, a synchronous publish/subscribe registry used by the
storage, transaction and manager layers to announce before/after points
(``beforeAddNodes``, ``afterCommit``, ...). Observability collaborators
subscribe to these; the core never depends on anyone listening.

Dispatch runs every listener even when some of them raise, then raises one
EventDispatchError describing all failures.
"""

import functools
import logging
from collections.abc import Callable
from typing import Any

from .errors import EventDispatchError, describe_error

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]
Unsubscribe = Callable[[], None]


def _require_callable(listener: Any) -> None:
    if not callable(listener):
        raise TypeError(f"Listener must be callable, got {type(listener).__name__}")


class EventNotifier:
    """Registry of synchronous event listeners.

    Usage::

        events = EventNotifier()

        def audit(payload: dict) -> None:
            log.info("added %d nodes", len(payload["nodes"]))

        unsubscribe = events.on("afterAddNodes", audit)
        events.emit("afterAddNodes", {"nodes": [...]})
        unsubscribe()
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Unsubscribe:
        """Register *listener* for *event* and return a function that removes it."""
        _require_callable(listener)
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self._remove(event, lambda registered: registered is listener)

    def once(self, event: str, listener: Listener) -> Unsubscribe:
        """Register *listener* to run on the next emission of *event* only."""
        _require_callable(listener)

        @functools.wraps(listener)
        def wrapper(payload: Any = None) -> Any:
            self._remove(event, lambda registered: registered is wrapper)
            return listener(payload)

        self._listeners.setdefault(event, []).append(wrapper)
        return lambda: self._remove(event, lambda registered: registered is wrapper)

    def off(self, event: str, listener: Listener) -> None:
        """Remove one registration of *listener*; unknown events/listeners are ignored.

        A listener registered through :meth:`once` can be removed by passing
        the original callable.
        """
        _require_callable(listener)
        self._remove(
            event,
            lambda registered: registered == listener or getattr(registered, "__wrapped__", None) == listener,
        )

    def _remove(self, event: str, matches: Callable[[Listener], bool]) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        for index, registered in enumerate(listeners):
            if matches(registered):
                del listeners[index]
                break
        if not listeners:
            del self._listeners[event]

    def emit(self, event: str, payload: Any = None) -> bool:
        """Invoke every listener for *event* in registration order.

        Returns:
            True if at least one listener was invoked, False otherwise.

        Raises:
            EventDispatchError: after all listeners ran, if any of them raised.
        """
        listeners = list(self._listeners.get(event, ()))
        if not listeners:
            return False

        errors: list[Exception] = []
        for listener in listeners:
            try:
                listener(payload)
            except Exception as exc:
                logger.warning("Listener for '%s' raised: %s", event, describe_error(exc))
                errors.append(exc)

        if errors:
            raise EventDispatchError(event, errors, payload)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def event_names(self) -> list[str]:
        return [name for name, listeners in self._listeners.items() if listeners]

    def get_listeners(self, event: str) -> list[Listener]:
        """Return a copy of the listeners registered for *event*."""
        return list(self._listeners.get(event, ()))

    def remove_all_listeners(self, event: str | None = None) -> None:
        """Clear listeners for *event*, or for every event when called without one."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
