import asyncio

import pytest
from curl_cffi.requests.exceptions import RequestException

from announcement_monitor.core.models import RateLimitedError, TransportError
from announcement_monitor.core.retry import FetchCascade
from tests.fakes import FakeResponse


class ScriptedFactory:
    """Hands out one scripted outcome per call"""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)

        async def _request():
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome

        return _request()


def test_rate_limited_exhausts_attempts_with_doubling_backoff(sleep):
    factory = ScriptedFactory(*(FakeResponse(429, "slow down") for _ in range(4)))
    cascade = FetchCascade(max_attempts=4, initial_delay=0.5, sleep=sleep)

    with pytest.raises(RateLimitedError) as exc_info:
        asyncio.run(cascade.run(factory))

    assert factory.calls == 4
    assert sleep.delays == [0.5, 1.0, 2.0]
    assert exc_info.value.status_code == 429
    assert "slow down" in exc_info.value.excerpt


@pytest.mark.parametrize("status", [200, 404, 500])
def test_non_retryable_status_returned_on_first_attempt(sleep, status):
    factory = ScriptedFactory(FakeResponse(status, "body"))
    cascade = FetchCascade(max_attempts=3, initial_delay=0.5, sleep=sleep)

    response = asyncio.run(cascade.run(factory))

    assert response.status_code == status
    assert factory.calls == 1
    assert sleep.delays == []


def test_blocked_then_success(sleep):
    factory = ScriptedFactory(FakeResponse(403, "blocked"), FakeResponse(200, "ok"))
    cascade = FetchCascade(max_attempts=3, initial_delay=1.0, sleep=sleep)

    response = asyncio.run(cascade.run(factory))

    assert response.text == "ok"
    assert factory.calls == 2
    assert sleep.delays == [1.0]


def test_transport_error_retried_then_success(sleep):
    factory = ScriptedFactory(RequestException("connection reset"), FakeResponse(200, "ok"))
    cascade = FetchCascade(max_attempts=3, initial_delay=0.5, sleep=sleep)

    response = asyncio.run(cascade.run(factory))

    assert response.status_code == 200
    assert sleep.delays == [0.5]


def test_final_transport_error_propagates_wrapped(sleep):
    factory = ScriptedFactory(*(RequestException("timeout") for _ in range(3)))
    cascade = FetchCascade(max_attempts=3, initial_delay=0.5, sleep=sleep)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(cascade.run(factory))

    assert isinstance(exc_info.value.__cause__, RequestException)
    assert factory.calls == 3
    assert sleep.delays == [0.5, 1.0]


def test_other_exceptions_are_not_retried(sleep):
    factory = ScriptedFactory(KeyError("boom"), FakeResponse(200))
    cascade = FetchCascade(max_attempts=3, sleep=sleep)

    with pytest.raises(KeyError):
        asyncio.run(cascade.run(factory))

    assert factory.calls == 1
    assert sleep.delays == []


def test_single_attempt_never_sleeps(sleep):
    factory = ScriptedFactory(FakeResponse(429))
    cascade = FetchCascade(max_attempts=1, sleep=sleep)

    with pytest.raises(RateLimitedError):
        asyncio.run(cascade.run(factory))

    assert sleep.delays == []


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        FetchCascade(max_attempts=0)
