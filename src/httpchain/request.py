"""Request construction and the step composition API.

Every function here is pure: it returns an updated copy of the request (or
response) and leaves its argument untouched.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from http import HTTPMethod
from typing import Any, TypeVar, overload

from httpchain.config import PipelineConfig
from httpchain.constants import PrivateKey
from httpchain.exceptions import DuplicateStepError, StepNotFoundError
from httpchain.models import Header, Request, Response, Step
from httpchain.transport import HttpxAdapter

logger = logging.getLogger(__name__)

Message = TypeVar("Message", Request, Response)

StepSpec = Callable[..., Any] | tuple[str, Callable[..., Any]] | Step

_STEP_LISTS = ("request_steps", "response_steps", "error_steps")


def _header_pairs(headers: Mapping[str, str] | Iterable[Header] | None) -> tuple[Header, ...]:
    if headers is None:
        return ()
    if isinstance(headers, Mapping):
        return tuple((str(k), str(v)) for k, v in headers.items())
    return tuple((str(k), str(v)) for k, v in headers)


def build(
    method: str | HTTPMethod,
    url: str,
    *,
    headers: Mapping[str, str] | Iterable[Header] | None = None,
    body: bytes | str | None = None,
    adapter: Callable[[Request], Response | Exception] | None = None,
    config: PipelineConfig | None = None,
    private: Mapping[str, Any] | None = None,
) -> Request:
    """Create a request with empty step lists.

    Args:
        method: HTTP method, normalized to upper case
        url: Target URL
        headers: Extra headers, appended after the configured ones
        body: Request body; text is UTF-8 encoded
        adapter: Transport adapter, an HttpxAdapter when omitted
        config: Pipeline options; its headers seed the request and its timeout
            is handed to the adapter through the private store
        private: Initial private store contents

    Returns:
        New Request
    """
    config = config or PipelineConfig()

    if isinstance(body, str):
        body = body.encode("utf-8")

    store: dict[str, Any] = dict(private or {})
    if config.timeout is not None:
        store.setdefault(PrivateKey.TIMEOUT, config.timeout)

    return Request(
        method=str(method).upper(),
        url=str(url),
        headers=_header_pairs(config.headers) + _header_pairs(headers),
        body=body,
        private=store,
        adapter=adapter or HttpxAdapter(),
        options=config,
    )


def _coerce_step(spec: StepSpec, name: str | None = None) -> Step:
    match spec:
        case Step():
            return spec if name is None else replace(spec, name=name)
        case (str() as step_name, func) if callable(func):
            return Step(func=func, name=name or step_name)
        case func if callable(func):
            return Step(func=func, name=name)
        case _:
            raise TypeError(f"Not a step: {spec!r}")


def _insert(request: Request, attr: str, specs: Iterable[StepSpec], *, prepend: bool = False) -> Request:
    existing: tuple[Step, ...] = getattr(request, attr)
    added = tuple(_coerce_step(spec) for spec in specs)

    seen = {step.name for step in existing if step.name}
    for step in added:
        if step.name is None:
            continue
        if step.name in seen:
            raise DuplicateStepError(f"Step '{step.name}' is already registered in {attr}")
        seen.add(step.name)

    steps = added + existing if prepend else existing + added
    return replace(request, **{attr: steps})


def add_request_step(request: Request, step: StepSpec, name: str | None = None) -> Request:
    return _insert(request, "request_steps", [_coerce_step(step, name)])


def add_response_step(request: Request, step: StepSpec, name: str | None = None) -> Request:
    return _insert(request, "response_steps", [_coerce_step(step, name)])


def add_error_step(request: Request, step: StepSpec, name: str | None = None) -> Request:
    return _insert(request, "error_steps", [_coerce_step(step, name)])


def add_request_steps(request: Request, steps: Iterable[StepSpec]) -> Request:
    """Append request steps in the given order.

    Each item is a callable, a ``(name, callable)`` pair or a ``Step``.
    """
    return _insert(request, "request_steps", steps)


def add_response_steps(request: Request, steps: Iterable[StepSpec]) -> Request:
    return _insert(request, "response_steps", steps)


def add_error_steps(request: Request, steps: Iterable[StepSpec]) -> Request:
    return _insert(request, "error_steps", steps)


def prepend_request_steps(request: Request, steps: Iterable[StepSpec]) -> Request:
    return _insert(request, "request_steps", steps, prepend=True)


def prepend_response_steps(request: Request, steps: Iterable[StepSpec]) -> Request:
    return _insert(request, "response_steps", steps, prepend=True)


def prepend_error_steps(request: Request, steps: Iterable[StepSpec]) -> Request:
    return _insert(request, "error_steps", steps, prepend=True)


def remove_step(request: Request, step: str | Callable[..., Any]) -> Request:
    """Remove exactly one registered step.

    A string removes the step registered under that name; a callable removes
    the first entry wrapping that very object. Lists are searched in request,
    response, error order.

    Raises:
        StepNotFoundError: If nothing matches
    """
    for attr in _STEP_LISTS:
        steps: tuple[Step, ...] = getattr(request, attr)
        for index, entry in enumerate(steps):
            if (isinstance(step, str) and entry.name == step) or entry.func is step:
                logger.debug(f"Removed step {entry.label} from {attr}")
                return replace(request, **{attr: steps[:index] + steps[index + 1 :]})

    raise StepNotFoundError(f"Step not found: {step if isinstance(step, str) else repr(step)}")


@overload
def halt(request: Request) -> Request: ...


@overload
def halt(request: Request, result: Response) -> tuple[Request, Response]: ...


@overload
def halt(request: Request, result: Exception) -> tuple[Request, Exception]: ...


def halt(request, result=None):
    """Mark the request halted, optionally pairing it with a step result."""
    halted = replace(request, halted=True)
    if result is None:
        return halted
    return halted, result


def get_private(message: Request | Response, key: str, default: Any = None) -> Any:
    return message.private.get(key, default)


def put_private(message: Message, key: str, value: Any) -> Message:
    return replace(message, private={**message.private, key: value})


def update_private(message: Message, values: Mapping[str, Any]) -> Message:
    return replace(message, private={**message.private, **values})


def get_header(message: Request | Response, name: str) -> list[str]:
    """All values of a header, case-insensitively, in order of appearance."""
    wanted = name.lower()
    return [value for key, value in message.headers if key.lower() == wanted]


def put_header(message: Message, name: str, value: str) -> Message:
    """Set a header, replacing every existing occurrence.

    The new value takes the position of the first occurrence, or goes last
    when the header is absent.
    """
    wanted = name.lower()
    headers: list[Header] = []
    placed = False
    for key, existing in message.headers:
        if key.lower() != wanted:
            headers.append((key, existing))
        elif not placed:
            headers.append((name, value))
            placed = True
    if not placed:
        headers.append((name, value))
    return replace(message, headers=tuple(headers))


def append_header(message: Message, name: str, value: str) -> Message:
    return replace(message, headers=message.headers + ((name, value),))


def delete_header(message: Message, name: str) -> Message:
    wanted = name.lower()
    return replace(message, headers=tuple((k, v) for k, v in message.headers if k.lower() != wanted))
