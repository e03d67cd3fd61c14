import pytest

from httpchain import (
    DecodeError,
    HTTPStatusError,
    PrivateKey,
    Response,
    RetryConfig,
    TransportError,
    add_error_steps,
    add_request_steps,
    add_response_steps,
    build,
    get_private,
    run,
)
from httpchain.steps import decode_body, handle_http_errors, retry_step
from httpchain.steps.retry import retry_delay

OK = Response(status=200, headers=(("content-type", "application/json"),), body=b'{"ok": true}')


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def make_request(fake_adapter, sleeps):
    def _make_request(results, **retry_kwargs):
        adapter = fake_adapter(*results)
        config = RetryConfig(sleep=sleeps.append, **retry_kwargs)
        request = build("GET", "http://x/", adapter=adapter)
        request = add_response_steps(request, [decode_body])
        request = add_error_steps(request, [("retry", retry_step(config))])
        return adapter, request

    return _make_request


class TestRetryBudget:
    """Attempt counting across nested runs."""

    @pytest.mark.parametrize("failures,max_attempts", [(0, 1), (1, 2), (2, 3), (2, 5), (3, 4)])
    def test_enough_attempts_succeed(self, make_request, failures, max_attempts):
        adapter, request = make_request([TransportError("down")] * failures + [OK], max_attempts=max_attempts)

        final, result = run(request)

        assert result.body == {"ok": True}
        assert len(adapter.calls) == failures + 1
        assert get_private(final, PrivateKey.RETRY_COUNT, 0) == failures
        assert final.halted is (failures > 0)

    @pytest.mark.parametrize("failures,max_attempts", [(1, 1), (2, 2), (3, 2), (4, 4)])
    def test_too_few_attempts_fail(self, make_request, failures, max_attempts):
        errors = [TransportError(f"down {i}") for i in range(failures)]
        adapter, request = make_request(errors + [OK], max_attempts=max_attempts)

        _, result = run(request)

        assert result is errors[max_attempts - 1]
        assert len(adapter.calls) == max_attempts

    def test_response_steps_run_once_on_retried_response(self, make_request, trace):
        adapter, request = make_request([TransportError("down"), OK], max_attempts=2)

        def count(req, resp):
            trace.append("count")
            return req, resp

        _, result = run(add_response_steps(request, [count]))

        assert trace == ["count"]
        assert result.body == {"ok": True}

    def test_retried_request_reruns_request_steps(self, make_request, trace):
        adapter, request = make_request([TransportError("down"), OK], max_attempts=2)

        def mark(req):
            trace.append(get_private(req, PrivateKey.RETRY_COUNT, 0))
            return req

        run(add_request_steps(request, [mark]))

        assert trace == [0, 1]


class TestRetryPolicy:
    """Which exceptions get retried and how long to wait."""

    def test_not_retryable_returned_unchanged(self, make_request, sleeps):
        error = DecodeError("bad")
        adapter, request = make_request([error], max_attempts=5)

        final, result = run(request)

        assert result is error
        assert len(adapter.calls) == 1
        assert sleeps == []
        assert final.halted is False

    def test_custom_predicate(self, make_request):
        adapter, request = make_request([ValueError("flaky"), OK], max_attempts=3, retryable=lambda e: isinstance(e, ValueError))

        _, result = run(request)

        assert result.status == 200
        assert len(adapter.calls) == 2

    def test_method_filter(self, fake_adapter):
        adapter = fake_adapter(TransportError("down"), OK)
        step = retry_step(RetryConfig(methods=["get", "head"], sleep=lambda s: None))
        request = add_error_steps(build("POST", "http://x/", adapter=adapter), [step])

        _, result = run(request)

        assert isinstance(result, TransportError)
        assert len(adapter.calls) == 1

    def test_backoff_delays(self, make_request, sleeps):
        results = [TransportError("down")] * 3 + [OK]
        _, request = make_request(results, max_attempts=4, backoff=lambda n: n + 1.0, max_delay=2.5)

        run(request)

        assert sleeps == [1.0, 2.0, 2.5]

    def test_later_error_steps_see_unhandled_exception(self, make_request, trace):
        error = DecodeError("bad")
        _, request = make_request([error])

        def record(req, exc):
            trace.append(exc)
            return req, exc

        run(add_error_steps(request, [record]))

        assert trace == [error]

    def test_retries_transient_status_with_http_errors(self, fake_adapter, sleeps):
        adapter = fake_adapter(Response(status=503, headers=(("retry-after", "7"),)), OK)
        request = build("GET", "http://x/", adapter=adapter)
        request = add_response_steps(request, [decode_body, handle_http_errors])
        request = add_error_steps(request, [retry_step(RetryConfig(sleep=sleeps.append))])

        _, result = run(request)

        assert result.body == {"ok": True}
        assert sleeps == [7.0]


class TestRetryDelay:
    """Delay computation."""

    def test_default_backoff(self):
        config = RetryConfig()

        assert [retry_delay(config, n, TransportError("x")) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_retry_after_capped(self):
        error = HTTPStatusError("slow down", response=Response(status=429, headers=(("Retry-After", "120"),)), retryable=True)

        assert retry_delay(RetryConfig(max_delay=10), 0, error) == 10

    def test_retry_after_http_date_falls_back(self):
        error = HTTPStatusError("slow down", response=Response(status=429, headers=(("retry-after", "Wed, 21 Oct 2015 07:28:00 GMT"),)))

        assert retry_delay(RetryConfig(), 1, error) == 1.0
