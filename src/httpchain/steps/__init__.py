"""Reference steps and the default step bundle."""

from httpchain.steps.compression import decompress_body
from httpchain.steps.decoding import decode_body
from httpchain.steps.defaults import attach_default_steps, new
from httpchain.steps.errors import handle_http_errors
from httpchain.steps.headers import default_headers, put_header_step
from httpchain.steps.retry import retry_step

__all__ = [
    "attach_default_steps",
    "decode_body",
    "decompress_body",
    "default_headers",
    "handle_http_errors",
    "new",
    "put_header_step",
    "retry_step",
]
