"""Shared test fixtures for all relaybus tests."""

import pytest

from relaybus import Container, Dispatcher, Event


class Auditable:
    """Plain base class used as an interface-like capability."""


class OrderPlaced(Auditable):
    """Plain-object event implementing Auditable."""

    def __init__(self, order_id: int) -> None:
        self.order_id = order_id


class OrderCancelled(Auditable):
    def __init__(self, order_id: int) -> None:
        self.order_id = order_id


class UserCreated(Event):
    """Pydantic event model."""

    user_id: int
    email: str = "user@example.com"


class Recorder:
    """Class-based listener recording every call on the class itself."""

    calls: list[tuple[str, tuple]] = []

    def handle(self, *args):
        Recorder.calls.append(("handle", args))
        return "handled"

    def on_user(self, *args):
        Recorder.calls.append(("on_user", args))
        return "on_user"


class FakeTransactions:
    """Transaction sink collecting callbacks until commit() is called."""

    def __init__(self) -> None:
        self.callbacks: list = []

    def add_callback(self, callback) -> None:
        self.callbacks.append(callback)

    def commit(self) -> None:
        callbacks, self.callbacks = self.callbacks, []
        for callback in callbacks:
            callback()


@pytest.fixture(autouse=True)
def reset_recorder():
    """Clear class-level recorder state between tests."""
    Recorder.calls = []
    yield
    Recorder.calls = []


@pytest.fixture
def container() -> Container:
    return Container()


@pytest.fixture
def dispatcher(container: Container) -> Dispatcher:
    """Dispatcher backed by a fresh container."""
    return Dispatcher(container)


@pytest.fixture
def sample_payload() -> dict:
    """Sample event payload for testing."""
    return {"to": "a@b.com", "subject": "hello"}
