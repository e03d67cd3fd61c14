import time
from collections.abc import Callable, Mapping
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, NonNegativeFloat, PositiveFloat, PositiveInt, field_validator


def _get_version() -> str:
    try:
        return version("httpchain")
    except PackageNotFoundError:
        return "unknown"


def default_user_agent() -> str:
    return f"httpchain/{_get_version()}"


def exponential_backoff(attempt: int) -> float:
    """Delay in seconds before retry number ``attempt + 1``: 0.5, 1, 2, 4..."""
    return 2**attempt * 0.5


def _normalize_headers(v: Any) -> Any:
    if isinstance(v, Mapping):
        return list(v.items())
    return v


HeaderPairs = Annotated[list[tuple[str, str]], BeforeValidator(_normalize_headers)]


class RetryConfig(BaseModel):
    max_attempts: PositiveInt = Field(
        default=4,
        description="Total number of adapter invocations allowed, the first attempt included.",
        examples=[1, 4],
    )
    backoff: Callable[[int], float] = Field(
        default=exponential_backoff,
        description="Maps the zero-based retry number to a delay in seconds.",
    )
    max_delay: NonNegativeFloat = Field(default=30.0, description="Upper bound for any single wait, in seconds.")
    retryable: Callable[[Exception], bool] | None = Field(
        default=None,
        description="Retryability predicate. Defaults to the exception's own 'retryable' hint.",
    )
    methods: frozenset[str] | None = Field(
        default=None,
        description="Only retry requests with these methods. None retries any method.",
        examples=[["GET", "HEAD"]],
    )
    sleep: Callable[[float], Any] = Field(default=time.sleep, description="Blocking wait used between attempts.")
    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("methods", mode="before")
    @classmethod
    def _upper_methods(cls, v: Any) -> Any:
        if v is None:
            return v
        return frozenset(str(m).upper() for m in v)


class PipelineConfig(BaseModel):
    """Options a request is built with and the default step bundle reads."""

    headers: HeaderPairs = Field(default_factory=list, description="Headers every built request starts with, in order.")
    user_agent: str = Field(default_factory=default_user_agent, description="Value of the user-agent header added by default_headers.")
    decode_body: bool = Field(default=True, description="Let decode_body turn recognized content types into Python values.")
    decompress_body: bool = Field(default=True, description="Let decompress_body undo supported content encodings.")
    http_errors: Literal["raise", "return"] = Field(
        default="return",
        description="'raise' turns 4xx/5xx responses into HTTPStatusError values, 'return' leaves them as responses.",
    )
    retry: RetryConfig | None = Field(default_factory=RetryConfig, description="Retry policy. None disables the retry step.")
    timeout: PositiveFloat | None = Field(default=None, description="Deadline in seconds handed to the transport adapter.")
    max_crossovers: PositiveInt | None = Field(
        default=None,
        description="Maximum error-to-response cross-overs per run. None means unbounded.",
    )
    model_config = ConfigDict(extra="forbid", frozen=True)
