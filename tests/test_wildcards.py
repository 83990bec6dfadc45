"""Tests for wildcard matching and the wildcard listener cache."""

import pytest

from relaybus import Dispatcher, matches


class TestMatches:
    @pytest.mark.parametrize(
        ("pattern", "name"),
        [
            ("order.*", "order.created"),
            ("order.*", "order."),
            ("*", "anything.at.all"),
            ("*.created", "user.created"),
            ("order.*.done", "order.payment.done"),
            ("a*b*c", "abc"),
            ("exact", "exact"),
        ],
    )
    def test_matching(self, pattern, name):
        assert matches(pattern, name)

    @pytest.mark.parametrize(
        ("pattern", "name"),
        [
            ("order.*", "orders.created"),
            ("order.*", "Order.created"),
            ("order.*", "my.order.created"),
            ("*.created", "user.created.late"),
            ("order.?", "order.x"),
            ("order.[ab]", "order.a"),
        ],
    )
    def test_not_matching(self, pattern, name):
        """Match is anchored, case-sensitive, and only '*' is special."""
        assert not matches(pattern, name)

    def test_other_glob_characters_are_literal(self):
        assert matches("order.?", "order.?")
        assert matches("order.[ab]*", "order.[ab]x")


class TestWildcardDispatch:
    def test_wildcard_listener_receives_name_and_payload(self, sample_payload):
        """Wildcard listeners get (event_name, payload)."""
        d = Dispatcher()
        seen = []
        d.listen("order.*", lambda name, payload: seen.append((name, payload)))

        d.dispatch("order.created", sample_payload)
        assert seen == [("order.created", [sample_payload])]

    def test_wildcard_does_not_invoke_unrelated_exact_listener(self):
        d = Dispatcher()
        calls = []
        d.listen("order.*", lambda name, payload: calls.append("wild"))
        d.listen("order.updated", lambda: calls.append("updated"))

        d.dispatch("order.created")
        assert calls == ["wild"]

    def test_exact_listeners_run_before_wildcards(self):
        d = Dispatcher()
        order = []
        d.listen("order.*", lambda name, payload: order.append("wild"))
        d.listen("order.created", lambda: order.append("exact"))

        d.dispatch("order.created")
        assert order == ["exact", "wild"]

    def test_patterns_run_in_registration_order(self):
        d = Dispatcher()
        order = []
        d.listen("*", lambda name, payload: order.append("all"))
        d.listen("order.*", lambda name, payload: order.append("order"))
        d.listen("*", lambda name, payload: order.append("all-again"))

        d.dispatch("order.created")
        assert order == ["all", "all-again", "order"]

    def test_wildcard_false_short_circuits(self):
        d = Dispatcher()
        d.listen("order.*", lambda name, payload: False)
        d.listen("order.*", lambda name, payload: "never")
        assert d.dispatch("order.created") == []


class TestWildcardCache:
    def test_new_pattern_invalidates_cache(self):
        """A pattern registered after a dispatch is seen by the next one."""
        d = Dispatcher()
        calls = []
        d.listen("order.*", lambda name, payload: calls.append("first"))
        d.dispatch("order.created")

        d.listen("*.created", lambda name, payload: calls.append("second"))
        calls.clear()
        d.dispatch("order.created")
        assert calls == ["first", "second"]

    def test_cached_listeners_reused(self):
        """Resolved wildcard listeners are reused across dispatches."""
        d = Dispatcher()
        d.listen("order.*", lambda name, payload: name)

        first = d.get_listeners("order.created")
        second = d.get_listeners("order.created")
        assert first == second
        assert first is not second

    def test_forget_pattern_purges_cache(self):
        d = Dispatcher()
        calls = []
        d.listen("order.*", lambda name, payload: calls.append("wild"))
        d.dispatch("order.created")

        d.forget("order.*")
        calls.clear()
        d.dispatch("order.created")
        assert calls == []
        assert not d.has_wildcard_listeners("order.created")

    def test_forget_pattern_keeps_other_patterns(self):
        d = Dispatcher()
        calls = []
        d.listen("order.*", lambda name, payload: calls.append("order"))
        d.listen("*.created", lambda name, payload: calls.append("created"))
        d.dispatch("order.created")

        d.forget("order.*")
        calls.clear()
        d.dispatch("order.created")
        assert calls == ["created"]

    def test_forget_exact_name_keeps_wildcards(self):
        """Forgetting a concrete name leaves wildcard listeners intact."""
        d = Dispatcher()
        calls = []
        d.listen("order.created", lambda: calls.append("exact"))
        d.listen("order.*", lambda name, payload: calls.append("wild"))
        d.dispatch("order.created")

        d.forget("order.created")
        calls.clear()
        d.dispatch("order.created")
        assert calls == ["wild"]


class TestWildcardQueries:
    def test_has_wildcard_listeners(self):
        d = Dispatcher()
        d.listen("order.*", lambda name, payload: None)
        assert d.has_wildcard_listeners("order.created")
        assert not d.has_wildcard_listeners("user.created")

    def test_has_listeners_through_pattern(self):
        d = Dispatcher()
        d.listen("order.*", lambda name, payload: None)
        assert d.has_listeners("order.shipped")
        assert d.has_listeners("order.*")
        assert not d.has_listeners("user.created")
