"""Exception hierarchy for relaybus.

All custom exceptions inherit from EventError base class.  Exceptions
raised by listeners themselves are never wrapped: they propagate out of
``Dispatcher.dispatch`` unchanged.
"""


class EventError(Exception):
    """Base exception for all relaybus errors.

    Allows callers to catch every framework-specific error with a single
    except clause without also catching failures raised by listeners.
    """


class RegistrationError(EventError, ValueError):
    """Invalid listener registration.

    Raised when:
    - An event name is empty or is neither a string nor a type
    - A listener value is not a callable, class reference or method pair
    - A typed closure declares no annotated first parameter
    """


class ListenerResolutionError(EventError, LookupError):
    """A class-based listener could not be resolved to an instance.

    Raised by :class:`relaybus.container.Container` when an identifier can
    neither be found among its bindings, imported nor instantiated, and by
    the resolver when no instance resolver is configured at all.  The
    underlying exception, if any, is chained via ``__cause__``.
    """


class EventValidationError(EventError, ValueError):
    """Event model validation failed.

    This wraps pydantic.ValidationError to provide a framework-specific exception type.
    """
