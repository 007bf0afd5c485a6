# step_workflows/__init__.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, FrozenSet

from . import docker_build, docker_pull

if TYPE_CHECKING:
    from ..model import Job, Step
    from ..runner import StepContext


@dataclass(frozen=True)
class StepWorkflow:
    """A typed step kind the runner knows how to execute."""
    kind: str
    display_name: str
    run_step: Callable[["Job", "Step", "StepContext"], None]
    job_kinds: FrozenSet[str] = field(default_factory=lambda: frozenset({"freestyle"}))

    def is_applicable(self, job_kind: str) -> bool:
        return job_kind in self.job_kinds


STEP_WORKFLOWS: Dict[str, StepWorkflow] = {
    docker_build.KIND: StepWorkflow(
        kind=docker_build.KIND,
        display_name=docker_build.DISPLAY_NAME,
        run_step=docker_build.run_step,
    ),
    docker_pull.KIND: StepWorkflow(
        kind=docker_pull.KIND,
        display_name=docker_pull.DISPLAY_NAME,
        run_step=docker_pull.run_step,
    ),
}


def get_workflow(kind: str) -> StepWorkflow:
    try:
        return STEP_WORKFLOWS[kind]
    except KeyError:
        raise ValueError(
            f"Unknown step kind: {kind!r}. Known kinds: {sorted(STEP_WORKFLOWS)}"
        ) from None
