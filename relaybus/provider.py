"""Bootstrap helper wiring a dispatcher into a container."""

from loguru import logger

from relaybus.container import Container
from relaybus.dispatcher import Dispatcher

log = logger.bind(source=__name__)

EVENTS_BINDING = "events"


def register_events(container: Container) -> Container:
    """Bind a shared :class:`Dispatcher` under ``"events"``.

    The dispatcher receives *container* as its instance resolver, so
    class-based listeners are built from the same bindings as the rest of
    the application.

    Args:
        container: Application container.

    Returns:
        The same container, for chaining.
    """
    container.singleton(EVENTS_BINDING, lambda app: Dispatcher(app))
    container.singleton(Dispatcher, lambda app: app.make(EVENTS_BINDING))
    log.debug("Event dispatcher bound as '{}'", EVENTS_BINDING)
    return container
