"""Value types flowing through the pipeline.

``Request`` and ``Response`` are frozen dataclasses: steps never mutate them,
they return updated copies (see ``dataclasses.replace`` and the helpers in
``httpchain.request``). That keeps a step-configured request usable as a
template for any number of concurrent runs.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar

if TYPE_CHECKING:
    from httpchain.config import PipelineConfig

Header = tuple[str, str]


class RequestStep(Protocol):
    def __call__(self, request: "Request", /) -> "Request | tuple[Request, Response] | tuple[Request, Exception]": ...


class ResponseStep(Protocol):
    def __call__(self, request: "Request", response: "Response", /) -> "tuple[Request, Response] | tuple[Request, Exception]": ...


class ErrorStep(Protocol):
    def __call__(self, request: "Request", exception: Exception, /) -> "tuple[Request, Exception] | tuple[Request, Response]": ...


StepT = TypeVar("StepT", RequestStep, ResponseStep, ErrorStep)


@dataclass(frozen=True)
class Step(Generic[StepT]):
    """A registered step, optionally named for later override or removal."""

    func: StepT
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or getattr(self.func, "__name__", repr(self.func))


@dataclass(frozen=True)
class Response:
    status: int
    headers: tuple[Header, ...] = ()
    body: Any = b""
    private: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Request:
    """HTTP request together with the steps that will process it.

    Attributes:
        method: Upper-case HTTP method token
        url: Target URL
        headers: Ordered name/value pairs, duplicates allowed
        body: Raw request body or None
        private: Store for step-to-step handoff, treat as read-only
        halted: Set by a step to stop the current phase
        request_steps: Steps run before the adapter
        response_steps: Steps run on a response
        error_steps: Steps run on an exception
        adapter: Transport adapter invoked after the request steps
        options: Configuration the request was built with
    """

    method: str
    url: str
    headers: tuple[Header, ...] = ()
    body: bytes | None = None
    private: dict[str, Any] = field(default_factory=dict)
    halted: bool = False
    request_steps: tuple[Step[RequestStep], ...] = ()
    response_steps: tuple[Step[ResponseStep], ...] = ()
    error_steps: tuple[Step[ErrorStep], ...] = ()
    adapter: Callable[["Request"], "Response | Exception"] | None = field(default=None, repr=False)
    options: "PipelineConfig | None" = field(default=None, repr=False)
