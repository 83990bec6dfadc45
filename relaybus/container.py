"""Minimal instance resolver.

:class:`Container` implements :class:`relaybus.contracts.InstanceResolver`
for applications without a dependency-injection container of their own.
It supports explicit bindings (transient or shared), pre-built instances,
and falls back to importing and instantiating classes with no arguments.

Typical usage::

    container = Container()
    container.singleton(Mailer, lambda c: Mailer(host="smtp"))
    events = Dispatcher(container)
    events.listen("user.created", "app.listeners.SendWelcome@handle")
"""

import importlib
from collections.abc import Callable
from typing import Any

from loguru import logger

from relaybus.exceptions import ListenerResolutionError

log = logger.bind(source=__name__)

type Factory = Callable[["Container"], Any]


class Container:
    """Registry of factories and shared instances keyed by identifier.

    Identifiers are classes or strings.  Unbound string identifiers are
    imported as ``"package.module.Class"`` or ``"package.module:Class"``.
    """

    def __init__(self) -> None:
        self._bindings: dict[Any, tuple[Factory, bool]] = {}
        self._instances: dict[Any, Any] = {}

    def bind(self, identifier: Any, factory: Factory, shared: bool = False) -> None:
        """Register a factory for *identifier*.

        Args:
            identifier: Class or string key.
            factory: Called with the container to build the instance.
            shared: Build once and reuse the result.
        """
        self._instances.pop(identifier, None)
        self._bindings[identifier] = (factory, shared)

    def singleton(self, identifier: Any, factory: Factory) -> None:
        self.bind(identifier, factory, shared=True)

    def instance(self, identifier: Any, obj: Any) -> Any:
        """Register an already built object and return it."""
        self._bindings.pop(identifier, None)
        self._instances[identifier] = obj
        return obj

    def bound(self, identifier: Any) -> bool:
        return identifier in self._instances or identifier in self._bindings

    def make(self, identifier: Any) -> Any:
        """Resolve *identifier* to an instance.

        Args:
            identifier: Class or string key.

        Returns:
            The shared instance, a freshly built one, or a new instance of
            the (imported) class.

        Raises:
            ListenerResolutionError: If the identifier cannot be imported or
                the class cannot be instantiated.
        """
        if identifier in self._instances:
            return self._instances[identifier]

        if identifier in self._bindings:
            factory, shared = self._bindings[identifier]
            obj = factory(self)
            if shared:
                self._instances[identifier] = obj
            return obj

        cls = identifier if isinstance(identifier, type) else self._import(identifier)
        try:
            return cls()
        except Exception as exc:
            raise ListenerResolutionError(
                f"cannot instantiate {cls.__qualname__}: {exc}"
            ) from exc

    @staticmethod
    def _import(identifier: Any) -> type:
        if not isinstance(identifier, str) or not identifier:
            raise ListenerResolutionError(f"cannot resolve {identifier!r}")

        if ":" in identifier:
            module_path, _, attr_path = identifier.partition(":")
        else:
            module_path, _, attr_path = identifier.rpartition(".")
        if not module_path or not attr_path:
            raise ListenerResolutionError(
                f"'{identifier}' is not bound and is not a dotted class path"
            )

        try:
            obj: Any = importlib.import_module(module_path)
            for attr in attr_path.split("."):
                obj = getattr(obj, attr)
        except (ImportError, AttributeError) as exc:
            raise ListenerResolutionError(f"cannot import '{identifier}'") from exc

        if not isinstance(obj, type):
            raise ListenerResolutionError(f"'{identifier}' is not a class")
        log.debug("Imported {} for resolution", identifier)
        return obj
