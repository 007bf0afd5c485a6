# step_workflows/docker_pull.py
from __future__ import annotations

from typing import TYPE_CHECKING, List

from .. import settings
from ..model import Job, PullImageConfig, Step

if TYPE_CHECKING:
    from ..runner import StepContext

KIND = "docker_pull"
DISPLAY_NAME = "Pull Docker image"


def docker_pull_step(name: str, image: str, *, cwd: str | None = None) -> Step:
    """Create a step that pulls an image locally."""
    return Step(name=name, cwd=cwd, kind=KIND, data=PullImageConfig(image=image).to_dict())


def pull_command(image: str, *, docker: str = "docker") -> List[str]:
    return [docker, "pull", image]


def perform(config: PullImageConfig, ctx: StepContext) -> bool:
    """Pull `config.image` with `docker pull`. Returns True on success."""
    # Import here to avoid circular import
    from ..runner import AbortError

    if not config.image_defined:
        raise AbortError(
            f"No docker image defined.  The '{DISPLAY_NAME}' build step requires an image."
        )

    image = config.image
    console = ctx.console
    console.print_info(f"Attempting to pull image '{image}' from docker repository")

    # No redirection needed, so no shell
    proc = ctx.launcher.launch(
        pull_command(image, docker=settings.DOCKER),
        cwd=ctx.workspace,
        stdout=console.stream,
        stderr=console.stream,
    )
    code = proc.join()
    if code != 0:
        raise AbortError(f"Unable to pull docker image: '{image}'")

    return True


def run_step(job: Job, step: Step, ctx: StepContext) -> None:
    """Run a docker pull step of `job`."""
    perform(PullImageConfig.from_dict(step.data), ctx)
