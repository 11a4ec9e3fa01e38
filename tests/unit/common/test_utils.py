"""Tests for common.utils module."""

from common.utils import Deadline, get_value


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestGetValue:
    def test_reads_dict_key(self) -> None:
        assert get_value({"url": "x"}, "url") == "x"

    def test_reads_attribute(self) -> None:
        class Obj:
            url = "y"

        assert get_value(Obj(), "url") == "y"

    def test_missing_returns_none(self) -> None:
        assert get_value({}, "url") is None
        assert get_value(object(), "url") is None


class TestDeadline:
    def test_expires_after_budget(self) -> None:
        clock = FakeClock()
        deadline = Deadline(10, clock)
        assert not deadline.expired()
        clock.now += 9.5
        assert deadline.remaining() == 0.5
        clock.now += 1
        assert deadline.expired()

    def test_no_limit_never_expires(self) -> None:
        clock = FakeClock()
        for seconds in (None, 0):
            deadline = Deadline(seconds, clock)
            clock.now += 10_000
            assert deadline.remaining() is None
            assert not deadline.expired()
