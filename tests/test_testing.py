"""Tests for the EventFake test double."""

import subprocess
import sys

import pytest
from conftest import OrderPlaced, UserCreated

from relaybus import Dispatcher
from relaybus.testing import EventFake


class TestFakeRecording:
    def test_fakes_every_event_by_default(self):
        d = Dispatcher()
        called = []
        d.listen("ping", lambda: called.append(1))
        fake = EventFake(d)

        assert fake.dispatch("ping") == []
        assert called == []
        fake.assert_dispatched("ping")

    def test_only_listed_events_are_faked(self):
        d = Dispatcher()
        d.listen("real", lambda: "ran")
        fake = EventFake(d, ["order.*"])

        assert fake.dispatch("real") == ["ran"]
        fake.dispatch("order.created", [1])
        fake.assert_dispatched("order.created")
        fake.assert_not_dispatched("real")

    def test_until_on_faked_event_returns_none(self):
        fake = EventFake(Dispatcher())
        assert fake.until("ping") is None
        fake.assert_dispatched_times("ping", 1)

    def test_object_events_recorded_by_type(self):
        fake = EventFake(Dispatcher())
        event = OrderPlaced(4)
        fake.dispatch(event)
        assert fake.dispatched(OrderPlaced) == [[event]]
        assert fake.has_dispatched(OrderPlaced)

    def test_registration_is_forwarded(self):
        d = Dispatcher()
        fake = EventFake(d)
        fake.listen("ping", print)
        assert d.has_listeners("ping")


class TestFakePushed:
    def test_flush_records_instead_of_running_listeners(self):
        d = Dispatcher()
        called = []
        d.listen("mail", lambda to: called.append(to))
        fake = EventFake(d)

        fake.push("mail", ["a@b.com"])
        fake.assert_nothing_dispatched()

        fake.flush("mail")
        assert called == []
        assert fake.dispatched("mail") == [["a@b.com"]]

    def test_push_of_unfaked_event_is_forwarded(self):
        d = Dispatcher()
        called = []
        d.listen("real", lambda value: called.append(value))
        fake = EventFake(d, ["mail"])

        fake.push("real", [1])
        fake.flush("real")
        assert called == [1]
        fake.assert_nothing_dispatched()

    def test_forget_pushed_drops_held_payloads(self):
        fake = EventFake(Dispatcher())
        fake.push("mail", ["a@b.com"])
        fake.forget_pushed()
        fake.flush("mail")
        fake.assert_not_dispatched("mail")


class TestFakeAssertions:
    def test_assertions_survive_optimized_mode(self):
        """Assertion helpers still fail when Python runs with -O."""
        code = (
            "from relaybus import Dispatcher\n"
            "from relaybus.testing import EventFake\n"
            "EventFake(Dispatcher()).assert_dispatched('never')\n"
        )
        result = subprocess.run(
            [sys.executable, "-O", "-c", code], capture_output=True, text=True
        )
        assert result.returncode != 0
        assert "AssertionError" in result.stderr

    def test_assert_dispatched_with_predicate(self):
        fake = EventFake(Dispatcher())
        fake.dispatch("mail", [{"to": "a@b.com"}])

        fake.assert_dispatched("mail", lambda message: message["to"] == "a@b.com")
        with pytest.raises(AssertionError, match="was not dispatched"):
            fake.assert_dispatched("mail", lambda message: message["to"] == "x")

    def test_assert_dispatched_with_count(self):
        fake = EventFake(Dispatcher())
        fake.dispatch("mail")
        fake.dispatch("mail")

        fake.assert_dispatched("mail", 2)
        with pytest.raises(AssertionError, match="dispatched 2 times instead of 3"):
            fake.assert_dispatched_times("mail", 3)

    def test_assert_dispatched_with_typed_predicate(self):
        fake = EventFake(Dispatcher())
        fake.dispatch(UserCreated(user_id=3))

        def is_user_three(event: UserCreated) -> bool:
            return event.user_id == 3

        def any_order(event: OrderPlaced) -> bool:
            return True

        fake.assert_dispatched(is_user_three)
        fake.assert_not_dispatched(any_order)

    def test_assert_not_dispatched(self):
        fake = EventFake(Dispatcher())
        fake.assert_not_dispatched("mail")
        fake.dispatch("mail")
        with pytest.raises(AssertionError, match="unexpected \\[mail\\]"):
            fake.assert_not_dispatched("mail")

    def test_assert_nothing_dispatched(self):
        fake = EventFake(Dispatcher())
        fake.assert_nothing_dispatched()
        fake.dispatch("mail")
        with pytest.raises(AssertionError, match="1 unexpected events"):
            fake.assert_nothing_dispatched()

    def test_assert_listening(self):
        d = Dispatcher()

        def send_mail(*args):
            pass

        d.listen("user.created", send_mail)
        d.listen("user.created", "app.listeners.Audit@log")
        fake = EventFake(d)

        fake.assert_listening("user.created", send_mail)
        fake.assert_listening("user.created", "app.listeners.Audit@log")
        with pytest.raises(AssertionError, match="does not have"):
            fake.assert_listening("user.created", print)
