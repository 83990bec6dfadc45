"""Event models for relaybus.

Any object can be dispatched as an event; these pydantic base classes are
an optional convenience giving typed events validation and immutability.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from relaybus.exceptions import EventValidationError


class MutableEvent(BaseModel):
    """Typed event whose fields listeners may update in place.

    Useful when listeners collect results on the event itself, e.g. a
    ``PriceQuoted`` event whose listeners adjust ``total`` in turn.
    Assignments are validated, and unknown fields are rejected.

    Raises:
        EventValidationError: If construction arguments fail validation.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid", strict=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise EventValidationError(str(exc)) from exc


class Event(MutableEvent):
    """Immutable typed event.

    An instance is routed under its class identifier
    (``"<module>.<qualname>"``) and is the only argument its listeners
    receive.  Listeners registered for a base class, ``Event`` included,
    run after those registered for the concrete class::

        >>> class OrderPlaced(Event):
        ...     order_id: int
        >>> events.listen(OrderPlaced, lambda e: e.order_id)
        >>> events.listen(Event, lambda e: "seen")
        >>> events.dispatch(OrderPlaced(order_id=7))
        [7, 'seen']

    Raises:
        EventValidationError: If fields fail pydantic validation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)
