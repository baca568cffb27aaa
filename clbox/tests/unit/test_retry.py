"""
Unit tests for the bounded retry combinator.
"""

from unittest.mock import MagicMock

import pytest

from clbox.commands.errors import RetryExhaustedError
from clbox.commands.retry import RetryConfig, retry_call


def flaky(failures, exc=ConnectionError):
    """A callable that raises ``failures`` times and then returns "ok"."""
    calls = {"count": 0}

    def func():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise exc(f"failure {calls['count']}")
        return "ok"

    return func, calls


@pytest.mark.parametrize("failures", [0, 1, 4, 9])
def test_succeeds_after_n_failures(failures, fake_clock):
    func, calls = flaky(failures)
    config = RetryConfig(max_attempts=10, delay=1.0)

    assert retry_call(func, config=config, sleep=fake_clock.sleep) == "ok"
    assert calls["count"] == failures + 1
    assert fake_clock.sleeps == [1.0] * failures
    assert fake_clock.now >= failures * config.delay


def test_exhausts_after_max_attempts(fake_clock):
    func, calls = flaky(100)
    config = RetryConfig(max_attempts=5, delay=0.5)

    with pytest.raises(RetryExhaustedError) as exc_info:
        retry_call(func, config=config, sleep=fake_clock.sleep)

    error = exc_info.value
    assert calls["count"] == 5
    assert error.attempts == 5
    assert error.delay == 0.5
    assert "5 attempts" in error.message
    assert isinstance(error.last_exception, ConnectionError)
    assert error.__cause__ is error.last_exception
    # no wait after the final attempt
    assert fake_clock.sleeps == [0.5] * 4


def test_backoff_multiplies_delay(fake_clock):
    func, _ = flaky(3)
    config = RetryConfig(max_attempts=4, delay=1.0, backoff=2.0)

    retry_call(func, config=config, sleep=fake_clock.sleep)

    assert fake_clock.sleeps == [1.0, 2.0, 4.0]


def test_unlisted_exception_is_not_retried(fake_clock):
    func, calls = flaky(1, exc=KeyError)
    config = RetryConfig(max_attempts=3, delay=1.0, exceptions=(ConnectionError,))

    with pytest.raises(KeyError):
        retry_call(func, config=config, sleep=fake_clock.sleep)
    assert calls["count"] == 1
    assert fake_clock.sleeps == []


def test_on_retry_receives_attempt_numbers(fake_clock):
    func, _ = flaky(2)
    on_retry = MagicMock()

    retry_call(
        func,
        config=RetryConfig(max_attempts=3, delay=0.1),
        sleep=fake_clock.sleep,
        on_retry=on_retry,
    )

    assert [c.args[0] for c in on_retry.call_args_list] == [1, 2]


def test_arguments_are_forwarded(fake_clock):
    func = MagicMock(return_value=42)

    assert retry_call(func, 1, 2, config=RetryConfig(), sleep=fake_clock.sleep, key="v") == 42
    func.assert_called_once_with(1, 2, key="v")


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        RetryConfig(max_attempts=0)
