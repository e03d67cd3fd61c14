"""Transport adapters.

An adapter takes a finalized Request and returns a Response or an Exception
value. Adapters report failures by returning ``TransportError`` values rather
than raising, and they hand the body over exactly as received on the wire:
content decoding is left to response steps.
"""

import logging
from typing import TYPE_CHECKING, Protocol

import httpx
import requests

from httpchain.constants import PrivateKey
from httpchain.exceptions import TransportError
from httpchain.models import Response

if TYPE_CHECKING:
    from httpchain.models import Request

logger = logging.getLogger(__name__)


class Adapter(Protocol):
    def __call__(self, request: "Request", /) -> Response | Exception: ...


class HttpxAdapter:
    """Sends requests with ``httpx``.

    Args:
        client: Client to send with. When omitted a short-lived client is
            opened for every request.
    """

    def __init__(self, client: httpx.Client | None = None):
        self._client = client

    def __call__(self, request: "Request") -> Response | Exception:
        timeout = request.private.get(PrivateKey.TIMEOUT)
        try:
            if self._client is not None:
                return self._send(self._client, request, timeout)
            with httpx.Client() as client:
                return self._send(client, request, timeout)
        except httpx.TimeoutException as e:
            return TransportError(f"HTTP request timed out: {str(e)}", kind="timeout")
        except httpx.ConnectError as e:
            return TransportError(f"HTTP connection error: {str(e)}", kind="connect")
        except httpx.HTTPError as e:
            return TransportError(f"HTTP request failed: {str(e)}", kind="http")

    @staticmethod
    def _send(client: httpx.Client, request: "Request", timeout: float | None) -> Response:
        http_request = client.build_request(
            request.method,
            request.url,
            headers=list(request.headers),
            content=request.body,
            timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
        )
        logger.debug(f"Sending {request.method} {request.url}")
        http_response = client.send(http_request, stream=True)
        try:
            content = b"".join(http_response.iter_raw())
        finally:
            http_response.close()

        return Response(
            status=http_response.status_code,
            headers=tuple(http_response.headers.multi_items()),
            body=content,
        )


class RequestsAdapter:
    """Sends requests with ``requests``.

    ``requests`` keeps headers in a dict, so repeated request header names are
    joined with ``", "`` before sending.

    Args:
        session: Session to send with. When omitted a short-lived session is
            opened for every request.
    """

    def __init__(self, session: requests.Session | None = None):
        self._session = session

    def __call__(self, request: "Request") -> Response | Exception:
        timeout = request.private.get(PrivateKey.TIMEOUT)
        try:
            if self._session is not None:
                return self._send(self._session, request, timeout)
            with requests.Session() as session:
                return self._send(session, request, timeout)
        except requests.Timeout as e:
            return TransportError(f"HTTP request timed out: {str(e)}", kind="timeout")
        except requests.ConnectionError as e:
            return TransportError(f"HTTP connection error: {str(e)}", kind="connect")
        except requests.RequestException as e:
            return TransportError(f"HTTP request failed: {str(e)}", kind="http")

    @staticmethod
    def _send(session: requests.Session, request: "Request", timeout: float | None) -> Response:
        headers: dict[str, str] = {}
        for name, value in request.headers:
            headers[name] = f"{headers[name]}, {value}" if name in headers else value

        logger.debug(f"Sending {request.method} {request.url}")
        http_response = session.request(
            request.method,
            request.url,
            headers=headers,
            data=request.body,
            timeout=timeout,
            stream=True,
        )
        try:
            content = http_response.raw.read(decode_content=False)
        finally:
            http_response.close()

        return Response(
            status=http_response.status_code,
            headers=tuple(http_response.raw.headers.items()),
            body=content,
        )
