"""relaybus - An in-process publish/subscribe event bus for Python.

This package provides a synchronous dispatcher with wildcard
subscriptions, halting dispatch, deferred (pushed) events and
subscriber-based bulk registration.
"""

__version__ = "0.1.0"

from loguru import logger

# Disable all relaybus logging by default.  Users opt in with:
#     from loguru import logger
#     logger.enable("relaybus")
logger.disable("relaybus")

from relaybus.container import Container
from relaybus.contracts import (
    TRANSACTIONS_BINDING,
    InstanceResolver,
    Subscriber,
    TransactionSink,
)
from relaybus.dispatcher import Dispatcher
from relaybus.events import Event, MutableEvent
from relaybus.exceptions import (
    EventError,
    EventValidationError,
    ListenerResolutionError,
    RegistrationError,
)
from relaybus.matcher import matches
from relaybus.provider import register_events
from relaybus.resolver import CallableEntry, ClassEntry

__all__ = [
    # Version
    "__version__",
    # Dispatcher
    "Dispatcher",
    "CallableEntry",
    "ClassEntry",
    "matches",
    # Event classes
    "Event",
    "MutableEvent",
    # Host capabilities
    "Container",
    "InstanceResolver",
    "Subscriber",
    "TransactionSink",
    "TRANSACTIONS_BINDING",
    "register_events",
    # Exception classes
    "EventError",
    "EventValidationError",
    "ListenerResolutionError",
    "RegistrationError",
]
