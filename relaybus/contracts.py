"""Capabilities the dispatcher consumes from its host application.

The dispatcher never constructs these itself; the host passes an
:class:`InstanceResolver` (usually its dependency-injection container) to
``Dispatcher(container=...)``.
"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

TRANSACTIONS_BINDING = "db.transactions"
"""Resolver binding under which a :class:`TransactionSink` is looked up."""


@runtime_checkable
class InstanceResolver(Protocol):
    """Builds listener and subscriber instances from class references."""

    def make(self, identifier: Any) -> Any: ...

    def bound(self, identifier: Any) -> bool: ...


@runtime_checkable
class TransactionSink(Protocol):
    """Runs callbacks once the current unit of work commits."""

    def add_callback(self, callback: Callable[[], Any]) -> None: ...


@runtime_checkable
class Subscriber(Protocol):
    """Object registering several listeners in one go.

    ``subscribe`` returns a mapping of event name to a listener or a list
    of listeners.  A string naming one of the subscriber's own methods is
    registered as a class-method listener on the subscriber's type.
    Returning None means the subscriber called ``dispatcher.listen``
    itself.
    """

    def subscribe(self, dispatcher: Any) -> Mapping[str, Any] | None: ...
