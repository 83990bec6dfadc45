"""Shared type definitions for relaybus.

All type aliases use PEP 695 ``type`` statement syntax.
"""

from collections.abc import Callable
from typing import Any

type EventName = str | type
"""A routing key as accepted by registration and query methods.

Types are converted to their identifier via
:func:`relaybus.utils.event_name_of`.
"""

type Payload = list[Any]
"""Normalized positional arguments delivered to listeners."""

type Invocable = Callable[[str, Payload], Any]
"""Uniform shape every registration value is resolved into."""

type ListenerValue = Callable[..., Any] | str | type | tuple[Any, str] | list[Any]
"""Raw value accepted by ``Dispatcher.listen``."""
