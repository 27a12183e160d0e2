"""
Tests for the store layer: local backend, remote command protocol and
failover counting.
"""

from unittest.mock import MagicMock

import pytest
import requests

from app.store import (
    LocalStore,
    RemoteStore,
    FailoverCounter,
    UNAVAILABLE,
    is_unavailable,
    create_store_module,
)
from config_manager import StoreConfig


class FakeTime:
    """Controllable epoch clock."""

    def __init__(self, start: float = 1_000_000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


def make_response(ok=True, status_code=200, body=None, json_error=False):
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    if json_error:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body if body is not None else {"result": None}
    return resp


class TestUnavailableSentinel:
    """Test the UNAVAILABLE sentinel."""

    def test_sentinel_is_falsy_singleton(self):
        assert not UNAVAILABLE
        assert is_unavailable(UNAVAILABLE)
        assert not is_unavailable(None)
        assert not is_unavailable(0)
        assert repr(UNAVAILABLE) == "UNAVAILABLE"


class TestLocalStore:
    """Test the process-local store."""

    def setup_method(self):
        self.clock = FakeTime()
        self.store = LocalStore(clock=self.clock)

    def test_increment_starts_at_one(self):
        assert self.store.increment("k") == 1
        assert self.store.increment("k") == 2
        assert self.store.get("k") == 2

    def test_get_absent_key(self):
        assert self.store.get("missing") is None

    def test_expire_missing_key_returns_false(self):
        assert self.store.expire("missing", 10) is False

    def test_counter_resets_after_expiry(self):
        self.store.increment("k")
        self.store.expire("k", 60)
        self.store.increment("k")

        self.clock.advance(59)
        assert self.store.get("k") == 2

        self.clock.advance(1)
        assert self.store.get("k") is None
        assert self.store.increment("k") == 1

    def test_set_with_ttl(self):
        assert self.store.set("token", '{"a": 1}', 30) is True
        assert self.store.get("token") == '{"a": 1}'

        self.clock.advance(31)
        assert self.store.get("token") is None

    def test_purge_expired(self):
        self.store.set("a", "1", 10)
        self.store.set("b", "2", 100)
        self.store.increment("c")

        self.clock.advance(50)
        assert self.store.purge_expired() == 1
        assert len(self.store) == 2

    def test_expired_entries_are_swept_on_write(self):
        store = LocalStore(clock=self.clock, purge_interval_seconds=60)
        for i in range(500):
            store.increment(f"rl:10.0.{i // 256}.{i % 256}")
            store.expire(f"rl:10.0.{i // 256}.{i % 256}", 60)
        store.set("premium:tok", "{}", 3600)
        assert len(store) == 501

        self.clock.advance(120)
        store.increment("rl:192.0.2.1")

        # Only the unexpired token and the new counter remain
        assert len(store) == 2
        assert store.get("premium:tok") == "{}"

    def test_sweep_runs_at_most_once_per_interval(self):
        store = LocalStore(clock=self.clock, purge_interval_seconds=60)
        store.set("a", "1", 10)

        self.clock.advance(30)
        store.increment("b")
        # Expired but not yet swept; reads still hide it
        assert len(store) == 2
        assert store.get("a") is None

        store.set("c", "1", 10)
        self.clock.advance(31)
        store.increment("d")
        assert len(store) == 2

    def test_local_store_is_not_shared(self):
        assert self.store.shared is False


class TestRemoteStore:
    """Test the remote command protocol."""

    def setup_method(self):
        self.session = MagicMock()
        self.store = RemoteStore(
            url="https://store.example.com",
            token="secret-token",
            timeout=2.0,
            session=self.session,
        )

    def test_increment_sends_single_command(self):
        self.session.post.return_value = make_response(body={"result": 3})

        assert self.store.increment("rl:1.2.3.4") == 3

        self.session.post.assert_called_once_with(
            "https://store.example.com",
            json=["INCR", "rl:1.2.3.4"],
            headers={"Authorization": "Bearer secret-token"},
            timeout=2.0,
        )

    def test_expire_sends_ttl_as_argument(self):
        self.session.post.return_value = make_response(body={"result": 1})

        assert self.store.expire("rl:1.2.3.4", 60) is True
        assert self.session.post.call_args.kwargs["json"] == ["EXPIRE", "rl:1.2.3.4", "60"]

    def test_expire_on_missing_key(self):
        self.session.post.return_value = make_response(body={"result": 0})
        assert self.store.expire("gone", 60) is False

    def test_set_is_one_atomic_command_with_ttl(self):
        self.session.post.return_value = make_response(body={"result": "OK"})

        assert self.store.set("premium:abc", '{"code": "PL-X1"}', 86400) is True
        assert self.session.post.call_args.kwargs["json"] == [
            "SET", "premium:abc", '{"code": "PL-X1"}', "EX", "86400"
        ]
        assert self.session.post.call_count == 1

    def test_get_absent_returns_none(self):
        self.session.post.return_value = make_response(body={"result": None})
        assert self.store.get("premium:missing") is None

    def test_get_returns_value(self):
        self.session.post.return_value = make_response(body={"result": "7"})
        assert self.store.get("usage:week:2026-01-26:1.2.3.4") == "7"

    def test_non_success_status_is_unavailable(self):
        self.session.post.return_value = make_response(ok=False, status_code=503)

        assert self.store.increment("k") is UNAVAILABLE
        assert self.store.get("k") is UNAVAILABLE
        assert self.store.expire("k", 1) is UNAVAILABLE
        assert self.store.set("k", "v", 1) is UNAVAILABLE

    def test_transport_error_is_unavailable(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError("down")
        assert self.store.increment("k") is UNAVAILABLE

    def test_timeout_is_unavailable(self):
        self.session.post.side_effect = requests.exceptions.Timeout("slow")
        assert self.store.get("k") is UNAVAILABLE

    def test_error_reply_is_unavailable(self):
        self.session.post.return_value = make_response(body={"error": "WRONGTYPE"})
        assert self.store.increment("k") is UNAVAILABLE

    def test_invalid_json_is_unavailable(self):
        self.session.post.return_value = make_response(json_error=True)
        assert self.store.get("k") is UNAVAILABLE

    def test_unconfigured_store_never_calls_network(self):
        store = RemoteStore(url="", token="", session=self.session)

        assert store.is_configured is False
        assert store.increment("k") is UNAVAILABLE
        self.session.post.assert_not_called()

    def test_remote_store_is_shared(self):
        assert self.store.shared is True


class TestFailoverCounter:
    """Test counting with fallback to the local store."""

    def setup_method(self):
        self.clock = FakeTime()
        self.local = LocalStore(clock=self.clock)

    def test_hit_on_healthy_primary_sets_expiry_once(self):
        primary = MagicMock()
        primary.increment.side_effect = [1, 2]
        primary.expire.return_value = True
        counter = FailoverCounter(primary, self.local)

        first = counter.hit("rl:ip", 60)
        second = counter.hit("rl:ip", 60)

        assert (first.count, first.degraded) == (1, False)
        assert (second.count, second.degraded) == (2, False)
        primary.expire.assert_called_once_with("rl:ip", 60)
        assert self.local.get("rl:ip") is None

    def test_hit_falls_back_to_local_store(self):
        primary = MagicMock()
        primary.increment.return_value = UNAVAILABLE
        counter = FailoverCounter(primary, self.local)

        hit = counter.hit("rl:ip", 60)

        assert hit.count == 1
        assert hit.degraded is True
        primary.expire.assert_not_called()

        self.clock.advance(61)
        assert counter.hit("rl:ip", 60).count == 1

    def test_failed_expiry_still_returns_count(self):
        primary = MagicMock()
        primary.increment.return_value = 1
        primary.expire.return_value = UNAVAILABLE
        counter = FailoverCounter(primary, self.local)

        hit = counter.hit("rl:ip", 60)

        assert hit.count == 1
        assert hit.degraded is False

    def test_missing_expiry_is_restored_on_next_hit(self):
        primary = MagicMock()
        primary.increment.side_effect = [1, 2, 3]
        primary.expire.side_effect = [UNAVAILABLE, True]
        counter = FailoverCounter(primary, self.local)

        counter.hit("rl:ip", 60)
        counter.hit("rl:ip", 60)
        counter.hit("rl:ip", 60)

        # Retried once after the failure, then not again
        assert primary.expire.call_count == 2
        primary.expire.assert_called_with("rl:ip", 60)

    def test_expiry_retried_until_accepted(self):
        primary = MagicMock()
        primary.increment.side_effect = [1, 2, 3, 4]
        primary.expire.side_effect = [UNAVAILABLE, UNAVAILABLE, True]
        counter = FailoverCounter(primary, self.local)

        for _ in range(4):
            counter.hit("usage:week:2026-01-26:ip", 600)

        assert primary.expire.call_count == 3

    def test_read_prefers_primary(self):
        primary = MagicMock()
        primary.get.return_value = "4"
        counter = FailoverCounter(primary, self.local)

        assert counter.read("usage:k") == 4

    def test_read_falls_back_and_defaults_to_zero(self):
        primary = MagicMock()
        primary.get.return_value = UNAVAILABLE
        counter = FailoverCounter(primary, self.local)

        assert counter.read("usage:k") == 0
        self.local.increment("usage:k")
        assert counter.read("usage:k") == 1


class TestStoreModule:
    """Test startup backend selection."""

    def test_local_primary_when_remote_not_configured(self):
        module = create_store_module(StoreConfig(url="", token="", timeout=1.0))

        assert module["shared"] is None
        assert module["primary"] is module["local"]
        assert isinstance(module["local"], LocalStore)

    def test_remote_primary_when_configured(self):
        module = create_store_module(StoreConfig(url="https://store.example.com", token="t", timeout=1.0))

        assert isinstance(module["primary"], RemoteStore)
        assert module["shared"] is module["primary"]
        assert module["counter"].fallback is module["local"]

    def test_injected_shared_store(self):
        shared = LocalStore()
        module = create_store_module(StoreConfig(url="", token="", timeout=1.0), shared_store=shared)

        assert module["shared"] is shared
        assert module["primary"] is shared
