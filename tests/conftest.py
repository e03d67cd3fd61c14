import json
from collections.abc import Callable, Iterable
from typing import Any

import pytest

from httpchain import Request, Response


class FakeAdapter:
    """Adapter replaying canned results and recording every request it gets."""

    def __init__(self, results: Iterable[Response | Exception]):
        self._results = list(results)
        self.calls: list[Request] = []

    def __call__(self, request: Request) -> Response | Exception:
        self.calls.append(request)
        index = min(len(self.calls), len(self._results)) - 1
        return self._results[index]


@pytest.fixture
def fake_adapter() -> Callable[..., FakeAdapter]:
    def _fake_adapter(*results: Response | Exception) -> FakeAdapter:
        return FakeAdapter(results or [Response(status=200, body=b"ok")])

    return _fake_adapter


@pytest.fixture
def echo_adapter() -> Callable[[Request], Response]:
    """Adapter answering with the received headers as a JSON object."""

    def _echo(request: Request) -> Response:
        body = json.dumps(dict(request.headers)).encode()
        return Response(status=200, headers=(("content-type", "application/json"),), body=body)

    return _echo


@pytest.fixture
def trace() -> list[str]:
    return []


@pytest.fixture
def recording_steps(trace: list[str]) -> dict[str, Callable[[str], Callable[..., Any]]]:
    """Factories for steps that append their label to ``trace`` and pass through."""

    def request_step(label: str):
        def step(request):
            trace.append(label)
            return request

        return step

    def response_step(label: str):
        def step(request, response):
            trace.append(label)
            return request, response

        return step

    def error_step(label: str):
        def step(request, exception):
            trace.append(label)
            return request, exception

        return step

    return {"request": request_step, "response": response_step, "error": error_step}
