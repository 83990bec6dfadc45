import inspect
import sys
import types
import typing
from typing import Any

from relaybus.exceptions import RegistrationError

WILDCARD = "*"
PUSHED_SUFFIX = "_pushed"


def callable_name(cb: Any) -> str:
    """Return a human-readable name for a callable, safe for logging.

    Falls back through ``__qualname__``, ``__name__``, and ``repr()``
    so that ``functools.partial``, callable instances, and other exotic
    callables never raise ``AttributeError``.

    Args:
        cb: Any callable object.

    Returns:
        Display name string.
    """
    return (
        getattr(cb, "__qualname__", None) or getattr(cb, "__name__", None) or repr(cb)
    )


def event_name_of(event_type: type) -> str:
    """Return the routing identifier of an event type.

    Args:
        event_type: Class used as an event.

    Returns:
        ``"<module>.<qualname>"``, e.g. ``"shop.events.OrderPlaced"``.
    """
    return f"{event_type.__module__}.{event_type.__qualname__}"


def normalize_event_name(event: Any) -> str:
    """Convert a name-or-type into a validated event name.

    Args:
        event: Event name string or event class.

    Returns:
        Non-empty event name.

    Raises:
        RegistrationError: If *event* is empty or of an unsupported type.
    """
    if isinstance(event, type):
        return event_name_of(event)
    if not isinstance(event, str):
        raise RegistrationError(
            f"event name must be str or type, got {type(event).__name__}"
        )
    if not event:
        raise RegistrationError("event name must not be empty")
    return event


def is_wildcard(name: str) -> bool:
    return WILDCARD in name


def loaded_type(name: str) -> type | None:
    """Look up an already-imported class by its event identifier.

    Only modules present in ``sys.modules`` are consulted; nothing is
    imported as a side effect.  Nested classes are supported since the
    qualname part may itself contain dots.

    Args:
        name: Identifier as produced by :func:`event_name_of`.

    Returns:
        The class, or None when no loaded module defines it.
    """
    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module = sys.modules.get(".".join(parts[:split]))
        if module is None:
            continue
        obj: Any = module
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                break
        if isinstance(obj, type):
            return obj
    return None


def wrap_payload(payload: Any) -> list[Any]:
    """Normalize a payload into a list of positional arguments.

    ``None`` becomes an empty list, lists and tuples are copied, any other
    value (mappings and objects included) becomes a one-element list.
    """
    if payload is None:
        return []
    if isinstance(payload, (list, tuple)):
        return list(payload)
    return [payload]


def parse_callback(callback: str, default: str) -> tuple[str, str]:
    """Split ``"identifier@method"`` into its parts.

    Args:
        callback: Class identifier optionally followed by ``@method``.
        default: Method name used when none is given.

    Returns:
        Tuple of (identifier, method).
    """
    target, sep, method = callback.partition("@")
    return target, (method if sep and method else default)


def first_parameter_types(func: Any) -> list[type]:
    """Read the event type(s) declared on a callable's first parameter.

    Annotations are resolved with ``typing.get_type_hints`` so string
    (postponed) annotations work.  ``A | B`` and ``Optional[A]`` yield
    every non-None member.

    Args:
        func: Callable to inspect.

    Returns:
        Declared event types, in union order.

    Raises:
        RegistrationError: If the first parameter is missing or unannotated.
    """
    try:
        params = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError) as exc:
        raise RegistrationError(
            f"cannot inspect signature of {callable_name(func)}"
        ) from exc
    if not params:
        raise RegistrationError(
            f"{callable_name(func)} has no parameter to infer the event from"
        )

    target = func if inspect.isroutine(func) else type(func).__call__
    try:
        annotation = typing.get_type_hints(target).get(params[0].name)
    except (NameError, TypeError):
        annotation = params[0].annotation
    if annotation is None or annotation is inspect.Parameter.empty:
        raise RegistrationError(
            f"first parameter of {callable_name(func)} has no type annotation"
        )

    if isinstance(annotation, types.UnionType) or typing.get_origin(annotation) is typing.Union:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
    else:
        members = [annotation]

    for member in members:
        if not isinstance(member, type):
            raise RegistrationError(
                f"first parameter of {callable_name(func)} must be annotated "
                f"with event classes, got {member!r}"
            )
    return members
