"""Pipeline execution engine.

A run drives a Request through three ordered step lists under an explicit
phase state machine:

- REQUESTING: request steps, then the transport adapter
- RESPONDING: response steps over the held Response
- HANDLING: error steps over the held Exception
- DONE: the held (Request, Response | Exception) pair is returned

After every step the outcome is classified into a ``Signal`` and the next
phase is looked up in ``TRANSITIONS``. Moving to a different phase starts
that phase's list from its first step; staying in a phase continues with the
next step. The halted flag is inspected after the step's outcome has been
applied, so a halting step's Response or Exception becomes the final result
but the phase it points to is never entered.
"""

import logging
from enum import StrEnum

from httpchain.constants import Phase
from httpchain.exceptions import CrossoverLimitError, HaltedWithoutResult, InvalidStepResultError
from httpchain.models import Request, Response, Step
from httpchain.transport import HttpxAdapter

logger = logging.getLogger(__name__)


class Signal(StrEnum):
    """Classified outcome of a single step or adapter call."""

    REQUEST = "request"
    RESPONSE = "response"
    EXCEPTION = "exception"
    HALTED = "halted"
    EXHAUSTED = "exhausted"


TRANSITIONS: dict[tuple[Phase, Signal], Phase] = {
    (Phase.REQUESTING, Signal.REQUEST): Phase.REQUESTING,
    (Phase.REQUESTING, Signal.RESPONSE): Phase.RESPONDING,
    (Phase.REQUESTING, Signal.EXCEPTION): Phase.HANDLING,
    (Phase.REQUESTING, Signal.HALTED): Phase.DONE,
    (Phase.RESPONDING, Signal.RESPONSE): Phase.RESPONDING,
    (Phase.RESPONDING, Signal.EXCEPTION): Phase.HANDLING,
    (Phase.RESPONDING, Signal.HALTED): Phase.DONE,
    (Phase.RESPONDING, Signal.EXHAUSTED): Phase.DONE,
    (Phase.HANDLING, Signal.EXCEPTION): Phase.HANDLING,
    (Phase.HANDLING, Signal.RESPONSE): Phase.RESPONDING,
    (Phase.HANDLING, Signal.HALTED): Phase.DONE,
    (Phase.HANDLING, Signal.EXHAUSTED): Phase.DONE,
}


def transition(phase: Phase, signal: Signal) -> Phase:
    """Next phase for a signal observed in ``phase``.

    REQUESTING has no EXHAUSTED entry: when its list runs out the adapter is
    called and its result is fed back as RESPONSE or EXCEPTION.

    Raises:
        InvalidStepResultError: If the signal is not legal in that phase
    """
    try:
        return TRANSITIONS[(phase, signal)]
    except KeyError:
        raise InvalidStepResultError(f"Illegal outcome '{signal}' in phase '{phase}'") from None


def _steps_for(request: Request, phase: Phase) -> tuple[Step, ...]:
    match phase:
        case Phase.REQUESTING:
            return request.request_steps
        case Phase.RESPONDING:
            return request.response_steps
        case Phase.HANDLING:
            return request.error_steps
    return ()


def _call_step(phase: Phase, step: Step, request: Request, held: Response | Exception | None) -> tuple[Request, Response | Exception | None]:
    if phase is Phase.REQUESTING:
        outcome = step.func(request)
    else:
        outcome = step.func(request, held)

    match outcome:
        case Request() if phase is Phase.REQUESTING:
            return outcome, None
        case (Request() as new_request, Response() | Exception() as result):
            return new_request, result
        case _:
            raise InvalidStepResultError(f"Step '{step.label}' returned an invalid result in phase '{phase}': {outcome!r}")


def _classify(result: Response | Exception | None) -> Signal:
    match result:
        case None:
            return Signal.REQUEST
        case Response():
            return Signal.RESPONSE
        case _:
            return Signal.EXCEPTION


def _call_adapter(request: Request) -> Response | Exception:
    adapter = request.adapter or HttpxAdapter()
    try:
        result = adapter(request)
    except Exception as e:
        logger.warning(f"Adapter raised {type(e).__name__}, handing it to error steps: {str(e)}")
        return e

    if not isinstance(result, Response | Exception):
        raise InvalidStepResultError(f"Adapter returned neither a Response nor an Exception: {result!r}")
    return result


def run(request: Request) -> tuple[Request, Response | Exception]:
    """Run the request through its steps and the transport adapter.

    The step list of a phase is read once when the phase is entered, so a
    step that edits its own phase's list affects the next entry into that
    phase, not the traversal in progress.

    Args:
        request: Request carrying the steps and adapter to use

    Returns:
        Final request and either the final Response or the Exception the run
        failed with. The request is halted when a step halted the run; the
        retry step halts it after a retried run so its result is final.

    Raises:
        InvalidStepResultError: If a step or the adapter breaks its contract
    """
    max_crossovers = request.options.max_crossovers if request.options else None
    crossovers = 0

    phase = Phase.REQUESTING
    index = 0
    steps = request.request_steps
    held: Response | Exception | None = None

    while phase is not Phase.DONE:
        if index < len(steps):
            step = steps[index]
            request, result = _call_step(phase, step, request, held)
            if result is not None:
                held = result
            if request.halted:
                signal = Signal.HALTED
                logger.debug(f"Step {step.label} halted the pipeline in phase {phase}")
            else:
                signal = _classify(result)
        elif phase is Phase.REQUESTING:
            held = _call_adapter(request)
            signal = _classify(held)
        else:
            signal = Signal.EXHAUSTED

        next_phase = transition(phase, signal)

        if phase is Phase.HANDLING and next_phase is Phase.RESPONDING:
            crossovers += 1
            if max_crossovers is not None and crossovers > max_crossovers:
                held = CrossoverLimitError(f"Error steps resolved to a response more than {max_crossovers} times")
                next_phase = Phase.DONE

        if next_phase is phase:
            index += 1
        else:
            logger.debug(f"Pipeline {phase} -> {next_phase} on {signal}")
            phase = next_phase
            index = 0
            steps = _steps_for(request, phase)

    if held is None:
        held = HaltedWithoutResult()

    return request, held


def run_or_raise(request: Request) -> Response:
    """Run the request and raise the Exception it fails with, if any."""
    _, result = run(request)
    if isinstance(result, Exception):
        raise result
    return result
