"""Error taxonomy.

Two families live here:

- ``PipelineError`` and its subclasses are *values*. Adapters and steps return
  them, the engine carries them through the error phase, and ``run`` hands the
  last one back to the caller. They are never raised by the engine itself.
- ``StepError`` and its subclasses signal programming mistakes in how steps are
  registered or what they return. These are raised immediately.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpchain.models import Response


class PipelineError(Exception):
    """Base class for errors carried through the pipeline as values."""

    kind: str = "pipeline"
    retryable: bool = False

    def __init__(self, message: str, *, kind: str | None = None, retryable: bool | None = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        if retryable is not None:
            self.retryable = retryable

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r}, retryable={self.retryable!r})"


class TransportError(PipelineError):
    """Connection, timeout or protocol failure reported by a transport adapter."""

    kind = "transport"
    retryable = True


class DecodeError(PipelineError):
    """Response body does not match its declared encoding or content type."""

    kind = "decode"


class HaltedWithoutResult(PipelineError):
    """A request step halted the pipeline before any response or error existed."""

    kind = "halted"

    def __init__(self, message: str = "Pipeline halted before a response or error was produced"):
        super().__init__(message)


class HTTPStatusError(PipelineError):
    """Response carried an error status code."""

    kind = "http_status"

    def __init__(self, message: str, *, response: "Response", retryable: bool = False):
        super().__init__(message, retryable=retryable)
        self.response = response


class CrossoverLimitError(PipelineError):
    """Error steps resolved back to a response more often than allowed."""

    kind = "crossover_limit"


class StepError(Exception):
    """Misuse of the step composition API or a step breaking its contract."""


class StepNotFoundError(StepError):
    pass


class DuplicateStepError(StepError):
    pass


class InvalidStepResultError(StepError):
    pass
