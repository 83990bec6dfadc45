"""Test double for :class:`relaybus.Dispatcher`.

:class:`EventFake` records dispatched events instead of running their
listeners, and offers assertions over what was recorded.  Everything else
(registration, pushing, forgetting) is forwarded to the wrapped dispatcher.

Example::

    fake = EventFake(Dispatcher(), ["order.shipped"])
    checkout(fake)
    fake.assert_dispatched("order.shipped", lambda order: order.id == 7)
"""

from collections.abc import Callable, Iterable
from typing import Any

from relaybus._types import EventName
from relaybus.dispatcher import Dispatcher
from relaybus.matcher import matches
from relaybus.resolver import ListenerResolver
from relaybus.utils import first_parameter_types, normalize_event_name, wrap_payload


class EventFake:
    """Dispatcher wrapper that records events rather than dispatching them.

    Args:
        dispatcher: Dispatcher to forward non-faked calls to.
        events_to_fake: Event names, patterns or classes to intercept.
            Empty (the default) intercepts every event.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        events_to_fake: Iterable[EventName] = (),
    ) -> None:
        self.dispatcher = dispatcher
        self._events_to_fake = [normalize_event_name(e) for e in events_to_fake]
        self._events: dict[str, list[list[Any]]] = {}
        self._pushed: dict[str, list[list[Any]]] = {}

    def __getattr__(self, name: str) -> Any:
        return getattr(self.dispatcher, name)

    # -- deferred events ------------------------------------------------------

    def push(self, event: str, payload: Any = None) -> None:
        """Hold a faked event until :meth:`flush`, forward any other."""
        name = normalize_event_name(event)
        if not self._should_fake(name):
            self.dispatcher.push(name, payload)
            return
        self._pushed.setdefault(name, []).append(wrap_payload(payload))

    def flush(self, event: str) -> None:
        """Record every payload held for a faked event, in push order."""
        name = normalize_event_name(event)
        if not self._should_fake(name):
            self.dispatcher.flush(name)
            return
        for payload in list(self._pushed.get(name, [])):
            self.dispatch(name, payload)

    def forget_pushed(self) -> None:
        self._pushed.clear()
        self.dispatcher.forget_pushed()

    # -- dispatching ----------------------------------------------------------

    def dispatch(self, event: Any, payload: Any = None, halt: bool = False) -> Any:
        """Record *event* when it is faked, otherwise dispatch it for real."""
        if isinstance(event, (str, type)):
            name, args = normalize_event_name(event), wrap_payload(payload)
        else:
            name, args = normalize_event_name(type(event)), [event]

        if self._should_fake(name):
            self._events.setdefault(name, []).append(args)
            return None if halt else []
        return self.dispatcher.dispatch(event, payload, halt)

    def until(self, event: Any, payload: Any = None) -> Any:
        return self.dispatch(event, payload, halt=True)

    def _should_fake(self, name: str) -> bool:
        if not self._events_to_fake:
            return True
        return any(matches(pattern, name) for pattern in self._events_to_fake)

    # -- queries --------------------------------------------------------------

    def dispatched(
        self, event: EventName, callback: Callable[..., bool] | None = None
    ) -> list[list[Any]]:
        """Return the recorded payloads of *event* accepted by *callback*.

        Args:
            event: Event name or class.
            callback: Predicate called with each recorded payload spread
                as positional arguments.  None accepts everything.

        Returns:
            Matching payloads, in dispatch order.
        """
        records = self._events.get(normalize_event_name(event), [])
        if callback is None:
            return list(records)
        return [args for args in records if callback(*args)]

    def has_dispatched(self, event: EventName) -> bool:
        return bool(self._events.get(normalize_event_name(event)))

    # -- assertions -----------------------------------------------------------

    def assert_dispatched(
        self,
        event: EventName | Callable[..., bool],
        callback: Callable[..., bool] | int | None = None,
    ) -> None:
        """Assert that an event was dispatched.

        Args:
            event: Event name or class.  A typed predicate may be given
                instead; its first parameter annotation names the event.
            callback: Predicate over the payload, or an exact count.

        Raises:
            AssertionError: If no (or not exactly *callback*) matching
                dispatch was recorded.
        """
        if not isinstance(event, (str, type)):
            for event_type in first_parameter_types(event):
                self.assert_dispatched(event_type, event)
            return

        if isinstance(callback, int):
            self.assert_dispatched_times(event, callback)
            return

        name = normalize_event_name(event)
        if not self.dispatched(name, callback):
            raise AssertionError(f"The expected [{name}] event was not dispatched.")

    def assert_dispatched_times(self, event: EventName, times: int = 1) -> None:
        name = normalize_event_name(event)
        count = len(self.dispatched(name))
        if count != times:
            raise AssertionError(
                f"The expected [{name}] event was dispatched {count} times "
                f"instead of {times} times."
            )

    def assert_not_dispatched(
        self,
        event: EventName | Callable[..., bool],
        callback: Callable[..., bool] | None = None,
    ) -> None:
        if not isinstance(event, (str, type)):
            for event_type in first_parameter_types(event):
                self.assert_not_dispatched(event_type, event)
            return

        name = normalize_event_name(event)
        if self.dispatched(name, callback):
            raise AssertionError(f"The unexpected [{name}] event was dispatched.")

    def assert_nothing_dispatched(self) -> None:
        count = sum(len(records) for records in self._events.values())
        if count:
            raise AssertionError(f"{count} unexpected events were dispatched.")

    def assert_listening(self, event: EventName, listener: Any) -> None:
        """Assert that *listener* is registered for the exact name *event*.

        Args:
            event: Event name or class.
            listener: Registration value as it was given to ``listen``.
        """
        name = normalize_event_name(event)
        expected = ListenerResolver.parse(listener)
        registered = self.dispatcher.get_raw_listeners().get(name, [])
        if expected not in registered:
            raise AssertionError(
                f"Event [{name}] does not have the [{expected.name}] listener attached to it."
            )
