"""Synchronous event dispatcher."""

from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

from relaybus._types import EventName, Invocable, ListenerValue
from relaybus.contracts import InstanceResolver
from relaybus.exceptions import ListenerResolutionError, RegistrationError
from relaybus.registry import ListenerRegistry
from relaybus.resolver import ClassEntry, ListenerEntry, ListenerResolver
from relaybus.utils import (
    PUSHED_SUFFIX,
    callable_name,
    event_name_of,
    first_parameter_types,
    normalize_event_name,
    wrap_payload,
)

log = logger.bind(source=__name__)


class Dispatcher:
    """Synchronous event dispatcher.

    Executes listeners on the calling thread in registration order.
    Listeners may call back into the dispatcher (dispatch, listen, forget)
    while an event is being dispatched; each dispatch works on its own
    snapshot of the listener list.

    Args:
        container: Instance resolver used to build class-based listeners and
            to resolve subscribers given by identifier.  Only needed when
            such listeners are registered.

    Example::

        events = Dispatcher()
        events.listen("order.*", lambda name, payload: print(name))
        events.dispatch("order.created", {"id": 7})
    """

    def __init__(self, container: InstanceResolver | None = None) -> None:
        self._container = container
        self._resolver = ListenerResolver(container)
        self._registry = ListenerRegistry(self._resolver)

    # -- registration ---------------------------------------------------------

    def listen(
        self,
        events: EventName | list[EventName] | tuple[EventName, ...] | Callable[..., Any],
        listener: ListenerValue | None = None,
    ) -> None:
        """Register a listener with the dispatcher.

        Supports two forms:
        - ``listen(events, listener)``: *events* is a name, a pattern
          containing ``*``, an event class, or a list of those.
        - ``listen(func)``: the event classes are read from the annotation
          of ``func``'s first parameter; a union registers once per member.

        Args:
            events: Event name(s) or a typed callable.
            listener: Callable, class reference or ``(target, "method")``.

        Post:
            Listener appended to every given event name.

        Raises:
            RegistrationError: If a name is empty, the listener has an
                unsupported shape, or no event type can be inferred.
        """
        if listener is None:
            if isinstance(events, type) or not callable(events):
                raise RegistrationError(
                    f"no listener given for {events!r}"
                )
            for event_type in first_parameter_types(events):
                self.listen(event_type, events)
            return

        names = events if isinstance(events, (list, tuple)) else [events]
        entry = self._resolver.parse(listener)
        for name in names:
            self._registry.add(normalize_event_name(name), entry)

    def on[F: Callable[..., Any]](self, *events: EventName) -> Callable[[F], F]:
        """Decorator to register a function as listener.

        With no arguments the event types are inferred from the function's
        first parameter annotation, as with ``listen(func)``.

        Args:
            events: Event names, patterns or classes to listen for.

        Returns:
            Decorator function that returns the original function unchanged.

        Example::

            @events.on("user.created", "user.updated")
            def audit(user): ...

            @events.on()
            def ship(event: OrderPlaced): ...
        """

        def decorator(func: F) -> F:
            if events:
                self.listen(list(events), func)
            else:
                self.listen(func)
            return func

        return decorator

    def subscribe(self, subscriber: Any) -> None:
        """Register an event subscriber with the dispatcher.

        Args:
            subscriber: Subscriber instance, or a class or identifier the
                instance resolver can build one from.

        Post:
            Every listener from the subscriber's mapping is registered.
            String listeners naming one of the subscriber's methods become
            ``(type(subscriber), method)`` class listeners.

        Raises:
            ListenerResolutionError: If an identifier cannot be resolved.
            RegistrationError: If the subscriber has no ``subscribe`` method
                or returns something other than a mapping or None.
        """
        subscriber = self._resolve_subscriber(subscriber)
        subscribe = getattr(subscriber, "subscribe", None)
        if not callable(subscribe):
            raise RegistrationError(
                f"{type(subscriber).__qualname__} has no subscribe() method"
            )

        events = subscribe(self)
        if events is None:
            return
        if not isinstance(events, Mapping):
            raise RegistrationError(
                f"{type(subscriber).__qualname__}.subscribe() returned "
                f"{type(events).__name__}, expected a mapping or None"
            )

        for event, listeners in events.items():
            for listener in listeners if isinstance(listeners, list) else [listeners]:
                if isinstance(listener, str) and callable(
                    getattr(subscriber, listener, None)
                ):
                    self.listen(event, ClassEntry(type(subscriber), listener))
                    continue
                self.listen(event, listener)
        log.debug(
            "Subscribed {} to {} event(s)", type(subscriber).__qualname__, len(events)
        )

    def _resolve_subscriber(self, subscriber: Any) -> Any:
        if not isinstance(subscriber, (str, type)):
            return subscriber
        if self._container is None:
            raise ListenerResolutionError(
                f"cannot resolve subscriber {subscriber!r}: no instance resolver configured"
            )
        return self._container.make(subscriber)

    # -- deferred events ------------------------------------------------------

    def push(self, event: str, payload: Any = None) -> None:
        """Register an event and payload to be dispatched by :meth:`flush`.

        The payload is captured now; every flush dispatches it again until
        :meth:`forget_pushed` (or ``forget(event + "_pushed")``) is called.
        """
        event = normalize_event_name(event)
        payload = wrap_payload(payload)

        def pushed() -> None:
            self.dispatch(event, payload)

        self.listen(event + PUSHED_SUFFIX, pushed)

    def flush(self, event: str) -> None:
        """Dispatch every payload pushed for *event*, in push order."""
        self.dispatch(normalize_event_name(event) + PUSHED_SUFFIX)

    def forget_pushed(self) -> None:
        """Forget all of the pushed listeners."""
        self._registry.remove_pushed()

    # -- dispatching ----------------------------------------------------------

    def until(self, event: Any, payload: Any = None) -> Any:
        """Dispatch until the first non-None response is returned.

        Returns:
            The first non-None response, or None.
        """
        return self.dispatch(event, payload, halt=True)

    def dispatch(self, event: Any, payload: Any = None, halt: bool = False) -> Any:
        """Fire an event and call the listeners.

        When *event* is an object (anything but a string), its class
        identifier is used as the event name and the object itself becomes
        the only payload element.

        Listeners run in order: exact-name, wildcard, then base-class
        listeners.  A listener returning exactly ``False`` stops the
        dispatch; its ``False`` is not recorded.  With *halt*, the first
        non-None response is returned and no further listener runs.

        Warning:
            Listeners can recursively call dispatch(). Cycles are not
            detected; an A→B→A chain ends in Python's RecursionError.

        Args:
            event: Event name or event object.
            payload: Positional arguments for the listeners (see
                :func:`relaybus.utils.wrap_payload`).  Ignored for objects.
            halt: Return the first non-None response.

        Returns:
            List of responses, or with *halt* the first non-None response
            (None when there was none).

        Raises:
            RegistrationError: If the event name is empty.
            Exception: Whatever a listener raises, unchanged.
        """
        event, payload, event_type = self._parse_event_and_payload(event, payload)
        listeners = self._registry.listeners(event, event_type)
        log.debug("Dispatch {} to {} listener(s)", event, len(listeners))

        responses: list[Any] = []
        for listener in listeners:
            response = listener(event, payload)

            if halt and response is not None:
                return response

            if response is False:
                log.debug("Dispatch {} stopped by {}", event, callable_name(listener))
                break

            responses.append(response)

        return None if halt else responses

    @staticmethod
    def _parse_event_and_payload(
        event: Any, payload: Any
    ) -> tuple[str, list[Any], type | None]:
        if isinstance(event, type):
            return normalize_event_name(event), wrap_payload(payload), event
        if isinstance(event, str):
            return normalize_event_name(event), wrap_payload(payload), None
        return event_name_of(type(event)), [event], type(event)

    # -- queries and removal --------------------------------------------------

    def get_listeners(self, event: EventName) -> list[Invocable]:
        """Get all of the resolved listeners for a given event name."""
        event_type = event if isinstance(event, type) else None
        return self._registry.listeners(normalize_event_name(event), event_type)

    def get_raw_listeners(self) -> dict[str, list[ListenerEntry]]:
        """Get the raw, unresolved exact-name listeners."""
        return self._registry.raw()

    def has_listeners(self, event: EventName) -> bool:
        return self._registry.has_listeners(normalize_event_name(event))

    def has_wildcard_listeners(self, event: EventName) -> bool:
        return self._registry.has_wildcard_listeners(normalize_event_name(event))

    def make_listener(self, listener: ListenerValue, wildcard: bool = False) -> Invocable:
        """Resolve a registration value into an ``(event, payload)`` invocable."""
        return self._resolver.make_listener(listener, wildcard)

    def forget(self, event: EventName) -> None:
        """Remove a set of listeners from the dispatcher.

        Args:
            event: Exact event name, event class or wildcard pattern.
        """
        self._registry.remove(normalize_event_name(event))
