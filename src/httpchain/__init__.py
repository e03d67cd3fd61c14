"""Composable HTTP client pipelines.

Build a request, attach request/response/error steps, then ``run`` it::

    from httpchain import build, add_request_step, run

    request = build("GET", "https://example.com/")
    request = add_request_step(request, my_step, name="mine")
    request, result = run(request)
"""

from httpchain.config import PipelineConfig, RetryConfig
from httpchain.constants import Phase, PrivateKey
from httpchain.exceptions import (
    CrossoverLimitError,
    DecodeError,
    DuplicateStepError,
    HaltedWithoutResult,
    HTTPStatusError,
    InvalidStepResultError,
    PipelineError,
    StepError,
    StepNotFoundError,
    TransportError,
)
from httpchain.models import ErrorStep, Request, RequestStep, Response, ResponseStep, Step
from httpchain.pipeline import run, run_or_raise, transition
from httpchain.request import (
    add_error_step,
    add_error_steps,
    add_request_step,
    add_request_steps,
    add_response_step,
    add_response_steps,
    append_header,
    build,
    delete_header,
    get_header,
    get_private,
    halt,
    prepend_error_steps,
    prepend_request_steps,
    prepend_response_steps,
    put_header,
    put_private,
    remove_step,
    update_private,
)
from httpchain.steps import attach_default_steps, new
from httpchain.transport import Adapter, HttpxAdapter, RequestsAdapter

__all__ = [
    # Config
    "PipelineConfig",
    "RetryConfig",
    # Models
    "ErrorStep",
    "Phase",
    "PrivateKey",
    "Request",
    "RequestStep",
    "Response",
    "ResponseStep",
    "Step",
    # Composition
    "add_error_step",
    "add_error_steps",
    "add_request_step",
    "add_request_steps",
    "add_response_step",
    "add_response_steps",
    "append_header",
    "attach_default_steps",
    "build",
    "delete_header",
    "get_header",
    "get_private",
    "halt",
    "new",
    "prepend_error_steps",
    "prepend_request_steps",
    "prepend_response_steps",
    "put_header",
    "put_private",
    "remove_step",
    "update_private",
    # Engine
    "run",
    "run_or_raise",
    "transition",
    # Transport
    "Adapter",
    "HttpxAdapter",
    "RequestsAdapter",
    # Exceptions
    "CrossoverLimitError",
    "DecodeError",
    "DuplicateStepError",
    "HTTPStatusError",
    "HaltedWithoutResult",
    "InvalidStepResultError",
    "PipelineError",
    "StepError",
    "StepNotFoundError",
    "TransportError",
]
