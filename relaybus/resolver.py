"""Listener resolution.

Turns registration values into the uniform invocable shape
``(event_name, payload) -> response`` used by the dispatcher.

Registration values are parsed once, at registration time, into one of
two entry kinds:

- :class:`CallableEntry` for functions, bound methods, callable instances
  and ``(instance, "method")`` pairs.
- :class:`ClassEntry` for class references (a class, ``"identifier"``,
  ``"identifier@method"`` or ``(class_or_identifier, "method")``) whose
  instance is built by the instance resolver each time the listener runs.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from relaybus._types import Invocable, Payload
from relaybus.contracts import TRANSACTIONS_BINDING, InstanceResolver
from relaybus.exceptions import ListenerResolutionError, RegistrationError
from relaybus.utils import callable_name, parse_callback

log = logger.bind(source=__name__)

DEFAULT_METHOD = "handle"
FALLBACK_METHOD = "__call__"


@dataclass(frozen=True)
class CallableEntry:
    """Listener given as a ready-to-call object.

    Attributes:
        func: The callable itself.
    """

    func: Callable[..., Any]

    @property
    def name(self) -> str:
        return callable_name(self.func)


@dataclass(frozen=True)
class ClassEntry:
    """Listener given as a class reference.

    Attributes:
        target: Class object or identifier understood by the instance resolver.
        method: Method to call; None means ``"handle"``.
    """

    target: type | str
    method: str | None = None

    @property
    def name(self) -> str:
        target = callable_name(self.target) if isinstance(self.target, type) else self.target
        return f"{target}@{self.method or DEFAULT_METHOD}"


type ListenerEntry = CallableEntry | ClassEntry


class ListenerResolver:
    """Parses registration values and builds invocables from them.

    Args:
        container: Instance resolver used for :class:`ClassEntry` listeners.
            May be None when only callables are registered.
    """

    def __init__(self, container: InstanceResolver | None = None) -> None:
        self._container = container

    @staticmethod
    def parse(listener: Any) -> ListenerEntry:
        """Validate a registration value and convert it into an entry.

        Args:
            listener: Registration value (see module docstring), or an
                entry, which is returned unchanged.

        Returns:
            Parsed listener entry.

        Raises:
            RegistrationError: If the value has no supported shape.
        """
        if isinstance(listener, (CallableEntry, ClassEntry)):
            return listener
        if isinstance(listener, str):
            if not listener:
                raise RegistrationError("listener identifier must not be empty")
            if "@" in listener:
                return ClassEntry(*parse_callback(listener, DEFAULT_METHOD))
            return ClassEntry(listener)
        if isinstance(listener, type):
            return ClassEntry(listener)
        if isinstance(listener, (tuple, list)):
            if len(listener) != 2 or not isinstance(listener[1], str):
                raise RegistrationError(
                    f"listener pair must be (target, 'method'), got {listener!r}"
                )
            target, method = listener
            if isinstance(target, (str, type)):
                return ClassEntry(target, method)
            try:
                return CallableEntry(getattr(target, method))
            except AttributeError as exc:
                raise RegistrationError(
                    f"{type(target).__qualname__} has no method {method!r}"
                ) from exc
        if callable(listener):
            return CallableEntry(listener)
        raise RegistrationError(
            f"unsupported listener type {type(listener).__name__}: {listener!r}"
        )

    def make_listener(self, listener: Any, wildcard: bool = False) -> Invocable:
        """Build the invocable for a registration value.

        Non-wildcard listeners receive the payload spread as positional
        arguments.  Wildcard listeners receive ``(event_name, payload)``
        so they can tell which concrete event fired.

        Args:
            listener: Registration value or parsed entry.
            wildcard: Whether the listener was registered under a pattern.

        Returns:
            Callable taking ``(event_name, payload)``.
        """
        entry = self.parse(listener)
        if isinstance(entry, ClassEntry):
            return self.create_class_listener(entry, wildcard)

        func = entry.func

        def invoke(event: str, payload: Payload) -> Any:
            if wildcard:
                return func(event, payload)
            return func(*payload)

        invoke.__qualname__ = entry.name
        return invoke

    def create_class_listener(self, entry: ClassEntry, wildcard: bool = False) -> Invocable:
        """Build an invocable that instantiates the listener class lazily.

        The instance is resolved on every invocation so the container's
        lifetime policy (shared or transient) stays in charge.
        """

        def invoke(event: str, payload: Payload) -> Any:
            handler = self._create_class_callable(entry)
            if wildcard:
                return handler(event, payload)
            return handler(*payload)

        invoke.__qualname__ = entry.name
        return invoke

    def _create_class_callable(self, entry: ClassEntry) -> Callable[..., Any]:
        if self._container is None:
            raise ListenerResolutionError(
                f"cannot resolve {entry.name}: no instance resolver configured"
            )

        method = entry.method or DEFAULT_METHOD
        instance = self._container.make(entry.target)
        if not hasattr(instance, method):
            method = FALLBACK_METHOD

        if self._should_run_after_commit(instance):
            return self._create_callback_after_commit(instance, method)
        return getattr(instance, method)

    def _should_run_after_commit(self, instance: Any) -> bool:
        return bool(getattr(instance, "after_commit", False)) and bool(
            self._container is not None and self._container.bound(TRANSACTIONS_BINDING)
        )

    def _create_callback_after_commit(
        self, instance: Any, method: str
    ) -> Callable[..., None]:
        def defer(*args: Any) -> None:
            handler = getattr(instance, method)
            log.debug(
                "Deferring {} until transaction commit", callable_name(handler)
            )
            self._container.make(TRANSACTIONS_BINDING).add_callback(  # type: ignore[union-attr]
                lambda: handler(*args)
            )

        return defer
