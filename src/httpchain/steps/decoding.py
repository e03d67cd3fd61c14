import json
import logging
from dataclasses import replace

from httpchain.constants import BODILESS_STATUS_CODES, PrivateKey
from httpchain.exceptions import DecodeError
from httpchain.models import Request, Response
from httpchain.request import get_header, get_private
from httpchain.steps.compression import content_codings

logger = logging.getLogger(__name__)


def parse_content_type(value: str) -> tuple[str, dict[str, str]]:
    """Split a content-type header into the media type and its parameters."""
    media_type, _, rest = value.partition(";")
    params: dict[str, str] = {}
    for param in rest.split(";"):
        key, sep, param_value = param.partition("=")
        if sep:
            params[key.strip().lower()] = param_value.strip().strip('"')
    return media_type.strip().lower(), params


def is_json(media_type: str) -> bool:
    return media_type == "application/json" or media_type.endswith("+json")


def decode_body(request: Request, response: Response) -> tuple[Request, Response] | tuple[Request, Exception]:
    """Replace a JSON or text body with the decoded value.

    Bodies with other media types and bodies a previous step already decoded
    are left alone, as are the empty bodies of HEAD requests and of 204 and
    304 responses. A JSON or text body that still carries a content coding
    is a DecodeError.
    """
    if get_private(request, PrivateKey.RAW) or (request.options and not request.options.decode_body):
        return request, response
    if not isinstance(response.body, bytes):
        return request, response
    if not response.body and (request.method == "HEAD" or response.status in BODILESS_STATUS_CODES):
        return request, response

    content_type = get_header(response, "content-type")
    if not content_type:
        return request, response

    media_type, params = parse_content_type(content_type[0])
    charset = params.get("charset", "utf-8")

    if not (is_json(media_type) or media_type.startswith("text/")):
        logger.debug(f"Keeping raw body for media type {media_type}")
        return request, response

    codings = [coding for coding in content_codings(response) if coding != "identity"]
    if codings:
        return request, DecodeError(f"Cannot decode {media_type} body still encoded with {', '.join(codings)}")

    if is_json(media_type):
        try:
            decoded = json.loads(response.body.decode(charset))
        except (UnicodeDecodeError, LookupError, json.JSONDecodeError) as e:
            return request, DecodeError(f"Cannot decode {media_type} body: {str(e)}")
    else:
        try:
            decoded = response.body.decode(charset)
        except (UnicodeDecodeError, LookupError) as e:
            return request, DecodeError(f"Cannot decode {media_type} body as {charset}: {str(e)}")

    return request, replace(response, body=decoded)
