from httpchain.constants import RETRYABLE_STATUS_CODES
from httpchain.exceptions import HTTPStatusError
from httpchain.models import Request, Response


def handle_http_errors(request: Request, response: Response) -> tuple[Request, Response] | tuple[Request, Exception]:
    """Turn 4xx and 5xx responses into HTTPStatusError values."""
    if response.status < 400:
        return request, response

    error = HTTPStatusError(
        f"HTTP error status: {response.status}",
        response=response,
        retryable=response.status in RETRYABLE_STATUS_CODES,
    )
    return request, error
