from dataclasses import replace

from httpchain.config import default_user_agent
from httpchain.constants import DEFAULT_ACCEPT_ENCODING
from httpchain.models import Header, Request, RequestStep
from httpchain.request import get_header, put_header


def default_headers(request: Request) -> Request:
    """Prepend user-agent and accept-encoding unless already present."""
    options = request.options
    defaults: list[Header] = [("user-agent", options.user_agent if options else default_user_agent())]
    if options is None or options.decompress_body:
        defaults.append(("accept-encoding", DEFAULT_ACCEPT_ENCODING))

    missing = tuple((name, value) for name, value in defaults if not get_header(request, name))
    if not missing:
        return request
    return replace(request, headers=missing + request.headers)


def put_header_step(name: str, value: str) -> RequestStep:
    """Build a request step that sets one header."""

    def put_header_value(request: Request) -> Request:
        return put_header(request, name, value)

    put_header_value.__name__ = f"put_header_{name.lower().replace('-', '_')}"
    return put_header_value
