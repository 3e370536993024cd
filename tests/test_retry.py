import logging

import pytest

from dreamcommerce.exceptions import QuotaExceeded, RequestFailed
from dreamcommerce.headers import MAX_RETRY_AFTER, parse_headers
from dreamcommerce.retry import DEFAULT_RETRY_LIMIT, RetryLoop, RetryState


def throttled(seconds="1"):
    return RequestFailed(headers=parse_headers(["HTTP/1.1 429 Too Many Requests", f"Retry-After: {seconds}"]), status_code=429)


class Script:
    """Sequência de resultados/erros devolvidos a cada tentativa."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_retry_state_counts_down():
    state = RetryState(2)
    assert not state.exhausted
    state.consume()
    state.consume()
    assert state.exhausted
    assert state.used == 2


def test_default_limit():
    assert RetryLoop().counter.limit == DEFAULT_RETRY_LIMIT == 5


def test_success_first_try():
    waits = []
    loop = RetryLoop(sleep=waits.append)
    assert loop.run(Script("ok")) == "ok"
    assert loop.state is RetryLoop.State.DONE
    assert loop.attempts == 1
    assert waits == []


def test_three_waits_then_success():
    waits = []
    loop = RetryLoop(4, sleep=waits.append)
    script = Script(throttled(), throttled(), throttled(), {"id": 1})

    assert loop.run(script) == {"id": 1}
    assert waits == [1.0, 1.0, 1.0]
    assert loop.waits == waits
    assert loop.counter.remaining == 1
    assert loop.state is RetryLoop.State.DONE


@pytest.mark.parametrize("limit", [0, 2, 5])
def test_quota_exceeded_after_limit(limit):
    waits = []
    loop = RetryLoop(limit, sleep=waits.append)
    script = Script(*[throttled("7") for _ in range(limit + 1)])

    with pytest.raises(QuotaExceeded) as exc_info:
        loop.run(script)

    assert script.calls == limit + 1
    assert waits == [7.0] * limit
    assert loop.state is RetryLoop.State.ERROR
    assert isinstance(exc_info.value.__cause__, RequestFailed)
    assert exc_info.value.headers.retry_after == "7"


def test_failure_without_retry_after_propagates():
    waits = []
    loop = RetryLoop(sleep=waits.append)
    err = RequestFailed(headers=parse_headers(["HTTP/1.1 404 Not Found"]), status_code=404)

    with pytest.raises(RequestFailed) as exc_info:
        loop.run(Script(err, "never"))

    assert exc_info.value is err
    assert loop.attempts == 1
    assert waits == []
    assert loop.state is RetryLoop.State.ERROR


def test_failure_without_headers_propagates():
    loop = RetryLoop(sleep=lambda s: None)
    with pytest.raises(RequestFailed):
        loop.run(Script(RequestFailed("no response")))


def test_unparseable_retry_after_is_not_retried():
    waits = []
    loop = RetryLoop(sleep=waits.append)
    with pytest.raises(RequestFailed):
        loop.run(Script(throttled("later"), "never"))
    assert waits == []


def test_other_exceptions_are_not_retried():
    loop = RetryLoop(sleep=lambda s: None)
    script = Script(KeyError("x"), "never")
    with pytest.raises(KeyError):
        loop.run(script)
    assert script.calls == 1
    assert loop.state is RetryLoop.State.ERROR


def test_zero_retry_after_is_not_retried():
    waits = []
    loop = RetryLoop(sleep=waits.append)
    with pytest.raises(RequestFailed):
        loop.run(Script(throttled("0"), "never"))
    assert waits == []
    assert loop.counter.remaining == DEFAULT_RETRY_LIMIT


def test_huge_retry_after_sleeps_capped_value():
    waits = []
    loop = RetryLoop(1, sleep=waits.append)
    assert loop.run(Script(throttled("99999999999999999999"), "ok")) == "ok"
    assert waits == [MAX_RETRY_AFTER]


def test_wait_log_reports_retries_left(caplog):
    loop = RetryLoop(2, sleep=lambda s: None)
    with caplog.at_level(logging.WARNING, logger="dreamcommerce.retry"):
        loop.run(Script(throttled(), "ok"))
    assert "restam 1" in caplog.text
