"""Ordered, idempotence-checked stage execution.

A plan is a list of ``Stage`` and ``StageGroup`` items.  Each item may carry a
precondition that inspects the filesystem; when it reports the work as
already done the item is skipped without side effects.  A group checks its
precondition once and then runs or skips all of its members together.

Failures are fail-fast: a subprocess or filesystem error inside a stage marked
``abort_on_failure`` raises ``StageError`` and nothing after it runs.  There is
no rollback; re-running the pipeline is the recovery path.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from dappstrap.config import ProjectConfig
from dappstrap.runner import CommandError
from dappstrap.utils import (
    format_duration,
    print_error,
    print_info,
    print_stage_header,
    print_success,
)

StageBody = Callable[[ProjectConfig], Awaitable[Union[str, None]]]
Precondition = Callable[[ProjectConfig], bool]


class StageStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


class StageError(Exception):
    """Raised when an abort-on-failure stage fails."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"Stage '{stage}' failed: {message}")


@dataclass
class Stage:
    """A single named unit of pipeline work."""

    name: str
    body: StageBody
    precondition: Precondition | None = None
    abort_on_failure: bool = True
    skip_message: str = ""


@dataclass
class StageGroup:
    """Stages that are skipped or run as one unit, guarded by one marker."""

    name: str
    precondition: Precondition
    stages: list[Stage] = field(default_factory=list)
    skip_message: str = ""


@dataclass
class StageResult:
    name: str
    status: StageStatus
    detail: str = ""
    duration: float = 0.0


PlanItem = Union[Stage, StageGroup]


class StageRunner:
    """Runs a plan strictly in declaration order."""

    def __init__(self, config: ProjectConfig) -> None:
        self.config = config
        self.results: list[StageResult] = []
        self._counter = 0

    async def run(self, plan: list[PlanItem]) -> list[StageResult]:
        """Execute every item of *plan*.

        Returns:
            The results recorded by this call, in order.

        Raises:
            StageError: When an abort-on-failure stage fails.
        """
        start = len(self.results)
        for item in plan:
            self._counter += 1
            print_stage_header(self._counter, item.name)
            if isinstance(item, StageGroup):
                await self._run_group(item)
            else:
                if self._is_done(item.precondition):
                    self._skip(item.name, item.skip_message)
                    continue
                await self._run_stage(item)
        return self.results[start:]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_done(self, precondition: Precondition | None) -> bool:
        return precondition is not None and precondition(self.config)

    def _skip(self, name: str, hint: str) -> None:
        print_info(f"{name}: already done, skipped.")
        if hint:
            print_info(hint)
        self.results.append(StageResult(name=name, status=StageStatus.SKIPPED, detail="already done"))

    async def _run_group(self, group: StageGroup) -> None:
        if self._is_done(group.precondition):
            print_info(f"{group.name}: already set up, skipping the whole group.")
            if group.skip_message:
                print_info(group.skip_message)
            for stage in group.stages:
                self.results.append(
                    StageResult(name=stage.name, status=StageStatus.SKIPPED, detail=f"{group.name} already set up")
                )
            return

        for stage in group.stages:
            await self._run_stage(stage)
        print_success(f"{group.name} ready.")

    async def _run_stage(self, stage: Stage) -> None:
        stage_start = time.monotonic()
        try:
            detail = await stage.body(self.config)
        except CommandError as exc:
            self._fail(stage, str(exc), stage_start)
            return
        except OSError as exc:
            self._fail(
                stage,
                f"{exc}. Make sure you have write permissions.",
                stage_start,
            )
            return

        elapsed = time.monotonic() - stage_start
        self.results.append(
            StageResult(
                name=stage.name,
                status=StageStatus.COMPLETED,
                detail=detail or "",
                duration=elapsed,
            )
        )
        print_success(f"{stage.name} done in {format_duration(elapsed)}")

    def _fail(self, stage: Stage, message: str, stage_start: float) -> None:
        elapsed = time.monotonic() - stage_start
        self.results.append(
            StageResult(name=stage.name, status=StageStatus.FAILED, detail=message, duration=elapsed)
        )
        if stage.abort_on_failure:
            print_error(f"{stage.name} failed: {message}")
            print_error("ABORTING...")
            raise StageError(stage.name, message)
        print_info(f"{stage.name} did not complete (best effort, continuing): {message}")
