from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol, Sequence

from .context import SetupContext
from .errors import FatalError, RestartRequested, StepWarning

logger = logging.getLogger(__name__)


class CheckStatus(str, enum.Enum):
    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class Check:
    status: CheckStatus
    detail: str = ""

    @classmethod
    def satisfied(cls, detail: str = "") -> "Check":
        return cls(CheckStatus.SATISFIED, detail)

    @classmethod
    def unsatisfied(cls, detail: str = "") -> "Check":
        return cls(CheckStatus.UNSATISFIED, detail)

    @classmethod
    def indeterminate(cls, detail: str = "") -> "Check":
        return cls(CheckStatus.INDETERMINATE, detail)

    @classmethod
    def of(cls, ok: bool, detail: str = "") -> "Check":
        return cls.satisfied(detail) if ok else cls.unsatisfied(detail)

    @property
    def ok(self) -> bool:
        return self.status is CheckStatus.SATISFIED


class Outcome(str, enum.Enum):
    ALREADY_SATISFIED = "already-satisfied"
    NEWLY_SATISFIED = "newly-satisfied"
    WARNED = "warned-and-skipped"
    FATAL = "fatal"


class Step(Protocol):
    """A single idempotent step.

    check() must be a pure read. apply() may prompt, shell out and write.
    Optional export(ctx) publishes environment additions once the goal holds.
    """

    step_id: str
    required: bool

    def check(self, ctx: SetupContext) -> Check:
        ...

    def apply(self, ctx: SetupContext) -> None:
        ...


@dataclass
class StepResult:
    step_id: str
    outcome: Outcome
    detail: str = ""
    warnings: List[str] = field(default_factory=list)


@dataclass
class PipelineResult:
    results: List[StepResult]
    warnings: List[str]
    fatal: Optional[FatalError] = None
    restarts: int = 0

    @property
    def ok(self) -> bool:
        return self.fatal is None

    @property
    def exit_code(self) -> int:
        return 0 if self.fatal is None else self.fatal.exit_code

    def outcome_of(self, step_id: str) -> Optional[Outcome]:
        for r in self.results:
            if r.step_id == step_id:
                return r.outcome
        return None


def _export(step: Step, ctx: SetupContext) -> None:
    export = getattr(step, "export", None)
    if export is not None:
        export(ctx)


def run_step(step: Step, ctx: SetupContext) -> StepResult:
    """Check, maybe apply, classify. Raises FatalError and RestartRequested.

    A step whose apply() recorded warnings is classified as warned: its goal
    may still not hold and the next run will try again.
    """

    try:
        check = step.check(ctx)
    except (FatalError, RestartRequested):
        raise
    except Exception as e:
        if step.required:
            raise FatalError(f"{step.step_id}: could not read current state: {e}") from e
        check = Check.indeterminate(f"check failed: {e}")

    if check.status is CheckStatus.SATISFIED:
        logger.info("%s: already satisfied%s", step.step_id, f" ({check.detail})" if check.detail else "",
                    extra={"badge": "OK"})
        _export(step, ctx)
        return StepResult(step.step_id, Outcome.ALREADY_SATISFIED, check.detail)

    if check.status is CheckStatus.INDETERMINATE:
        logger.info("%s: could not determine state (%s); applying", step.step_id, check.detail)
    else:
        logger.info("%s: %s", step.step_id, check.detail or "not satisfied; applying")

    before = len(ctx.warnings)
    try:
        step.apply(ctx)
    except (FatalError, RestartRequested):
        raise
    except StepWarning as e:
        ctx.warn(f"{step.step_id}: {e}")
        return StepResult(step.step_id, Outcome.WARNED, str(e), ctx.warnings[before:])
    except Exception as e:
        if step.required:
            raise FatalError(f"{step.step_id} failed: {e}") from e
        ctx.warn(f"{step.step_id} failed: {e}")
        return StepResult(step.step_id, Outcome.WARNED, str(e), ctx.warnings[before:])

    warnings = ctx.warnings[before:]
    if warnings:
        logger.info("%s: finished with %d warning(s)", step.step_id, len(warnings))
        return StepResult(step.step_id, Outcome.WARNED, warnings[-1], warnings)

    _export(step, ctx)
    logger.info("%s: done", step.step_id, extra={"badge": "OK"})
    return StepResult(step.step_id, Outcome.NEWLY_SATISFIED, check.detail)


def run_pipeline(*, ctx: SetupContext, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order. Stops at the first fatal error; RestartRequested propagates."""

    results: List[StepResult] = []
    for step in steps:
        try:
            results.append(run_step(step, ctx))
        except FatalError as e:
            logger.error("%s: %s", step.step_id, e)
            results.append(StepResult(step.step_id, Outcome.FATAL, str(e)))
            return PipelineResult(results=results, warnings=list(ctx.warnings), fatal=e)
        except RestartRequested as e:
            e.step_id = step.step_id
            e.results = results
            raise
    return PipelineResult(results=results, warnings=list(ctx.warnings))


def run_with_restarts(
    *,
    ctx: SetupContext,
    build_steps: Callable[[SetupContext], Sequence[Step]],
    max_restarts: int = 3,
) -> PipelineResult:
    """Run the pipeline, starting over from the top whenever a step asks to.

    Every step is idempotent, so a repeat pass only redoes what still needs
    doing. Steps are rebuilt per pass so plans reflect the refreshed state.
    """

    restarts = 0
    while True:
        ctx.warnings.clear()
        try:
            result = run_pipeline(ctx=ctx, steps=build_steps(ctx))
        except RestartRequested as e:
            restarts += 1
            if restarts > max_restarts:
                fatal = FatalError(
                    f"Gave up after {max_restarts} restarts: {e.reason}",
                    remediation="finish the external install manually",
                )
                logger.error("%s", fatal)
                results = [*e.results, StepResult(e.step_id or "restart", Outcome.FATAL, str(fatal))]
                return PipelineResult(results=results, warnings=list(ctx.warnings), fatal=fatal, restarts=restarts - 1)
            logger.info("Restarting run from the first step (%d/%d): %s", restarts, max_restarts, e.reason)
            continue
        result.restarts = restarts
        return result
