"""
Unit tests for readiness polling.
"""

import pytest

from clbox.commands.errors import ClientError, ReadinessTimeoutError
from clbox.commands.readiness import wait_for_availability
from clbox.commands.retry import RetryConfig


@pytest.mark.parametrize("failures", [0, 3, 9])
def test_ready_after_n_failed_probes(failures, rest_clients, fake_clock):
    rest_clients.health_failures = failures
    client = rest_clients("172.28.0.2", 4000)
    config = RetryConfig(max_attempts=10, delay=1.0)

    wait_for_availability(client, "cl-client-0", config=config, sleep=fake_clock.sleep)

    assert client.health_calls == failures + 1
    assert fake_clock.now >= failures * config.delay


def test_exhaustion_names_attempts_and_delay(rest_clients, fake_clock):
    rest_clients.health_failures = 1000
    client = rest_clients("172.28.0.2", 4000)
    config = RetryConfig(max_attempts=10, delay=1.0)

    with pytest.raises(ReadinessTimeoutError) as exc_info:
        wait_for_availability(client, "cl-client-0", config=config, sleep=fake_clock.sleep)

    error = exc_info.value
    assert client.health_calls == 10
    assert error.attempts == 10
    assert error.delay == 1.0
    assert "10 attempts" in error.message
    assert "1.0s" in error.message
    assert error.service_id == "cl-client-0"
    assert error.code == "READINESS_TIMEOUT"
    assert isinstance(error.__cause__, ClientError)


def test_never_probes_again_once_ready(rest_clients, fake_clock):
    client = rest_clients("172.28.0.2", 4000)

    wait_for_availability(
        client, "cl-client-0", config=RetryConfig(max_attempts=3, delay=5.0), sleep=fake_clock.sleep
    )

    assert client.health_calls == 1
    assert fake_clock.sleeps == []
