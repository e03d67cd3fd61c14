import gzip
import logging
import zlib
from collections.abc import Callable
from dataclasses import replace

from httpchain.constants import PrivateKey
from httpchain.exceptions import DecodeError
from httpchain.models import Request, Response
from httpchain.request import delete_header, get_header, get_private

logger = logging.getLogger(__name__)


def _inflate(data: bytes) -> bytes:
    # servers send both zlib-wrapped and raw deflate streams
    try:
        return zlib.decompress(data)
    except zlib.error:
        return zlib.decompress(data, -zlib.MAX_WBITS)


DECOMPRESSORS: dict[str, Callable[[bytes], bytes]] = {
    "gzip": gzip.decompress,
    "x-gzip": gzip.decompress,
    "deflate": _inflate,
    "identity": lambda data: data,
}


def content_codings(response: Response) -> list[str]:
    """Content codings in the order they were applied."""
    return [coding.strip().lower() for value in get_header(response, "content-encoding") for coding in value.split(",") if coding.strip()]


def decompress_body(request: Request, response: Response) -> tuple[Request, Response] | tuple[Request, Exception]:
    """Undo supported content encodings and drop the content-encoding header.

    Responses naming any unsupported coding pass through unchanged.
    """
    if get_private(request, PrivateKey.RAW) or (request.options and not request.options.decompress_body):
        return request, response
    if not isinstance(response.body, bytes) or not response.body:
        return request, response

    codings = content_codings(response)
    if not codings:
        return request, response

    unsupported = [coding for coding in codings if coding not in DECOMPRESSORS]
    if unsupported:
        logger.debug(f"Leaving body compressed, unsupported content-encoding: {', '.join(unsupported)}")
        return request, response

    body = response.body
    for coding in reversed(codings):
        try:
            body = DECOMPRESSORS[coding](body)
        except (OSError, EOFError, zlib.error) as e:
            return request, DecodeError(f"Cannot decompress {coding} body: {str(e)}")

    return request, replace(delete_header(response, "content-encoding"), body=body)
