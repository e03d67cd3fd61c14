from enum import StrEnum


class Phase(StrEnum):
    """Phases of a single pipeline run."""

    REQUESTING = "requesting"
    RESPONDING = "responding"
    HANDLING = "handling"
    DONE = "done"


class PrivateKey(StrEnum):
    """Well-known keys of the request private store."""

    RETRY_COUNT = "retry_count"
    TIMEOUT = "timeout"
    RAW = "raw"


DEFAULT_ACCEPT_ENCODING = "gzip, deflate"

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

BODILESS_STATUS_CODES = frozenset({204, 304})
