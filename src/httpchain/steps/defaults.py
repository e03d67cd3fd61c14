from collections.abc import Callable
from http import HTTPMethod
from typing import Any

from httpchain.config import PipelineConfig
from httpchain.models import Request
from httpchain.request import add_error_steps, add_request_steps, add_response_steps, build
from httpchain.steps.compression import decompress_body
from httpchain.steps.decoding import decode_body
from httpchain.steps.errors import handle_http_errors
from httpchain.steps.headers import default_headers
from httpchain.steps.retry import retry_step


def attach_default_steps(request: Request, config: PipelineConfig | None = None) -> Request:
    """Register the default step bundle.

    Order:

    - request steps: default_headers
    - response steps: decompress_body, decode_body, then handle_http_errors
      when ``config.http_errors == "raise"``
    - error steps: retry, unless ``config.retry`` is None

    Args:
        request: Request to extend
        config: Options to read, defaults to the ones the request was built with

    Returns:
        Request with the default steps appended
    """
    config = config or request.options or PipelineConfig()

    request = add_request_steps(request, [("default_headers", default_headers)])

    response_steps: list[tuple[str, Callable[..., Any]]] = [
        ("decompress_body", decompress_body),
        ("decode_body", decode_body),
    ]
    if config.http_errors == "raise":
        response_steps.append(("handle_http_errors", handle_http_errors))
    request = add_response_steps(request, response_steps)

    if config.retry is not None:
        request = add_error_steps(request, [("retry", retry_step(config.retry))])

    return request


def new(method: str | HTTPMethod, url: str, **kwargs: Any) -> Request:
    """``build`` followed by ``attach_default_steps``."""
    request = build(method, url, **kwargs)
    return attach_default_steps(request)
