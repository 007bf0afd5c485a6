# step_workflows/docker_build.py
from __future__ import annotations

import enum
from pathlib import Path
from typing import TYPE_CHECKING, List

from .. import settings
from ..command import join_command, quote
from ..model import BuildImageConfig, Job, Step

if TYPE_CHECKING:
    from ..runner import StepContext

KIND = "docker_build"
DISPLAY_NAME = "Build Docker image"


class BuildStrategy(enum.Enum):
    """How the Dockerfile reaches `docker build`."""
    CONTENT = "content"      # inline text, fed on stdin through a heredoc
    DIRECTORY = "directory"  # directory used as the build context
    FILE = "file"            # file redirected to stdin, no build context


# ---------------------------------------------------------------------
# Build step helper
# ---------------------------------------------------------------------

def docker_build_step(
    name: str,
    *,
    dockerfile: str | None = None,
    image: str | None = None,
    content: str | None = None,
    cwd: str | None = None,
) -> Step:
    """Create a step that builds a Docker image."""
    config = BuildImageConfig(dockerfile=dockerfile, image=image, content=content)
    return Step(name=name, cwd=cwd, kind=KIND, data=config.to_dict())


# ---------------------------------------------------------------------
# Command construction
# ---------------------------------------------------------------------

def select_strategy(config: BuildImageConfig, workspace: Path) -> BuildStrategy:
    """
    Pick exactly one strategy: inline content first, then a directory, then
    a plain file. A path that does not exist is treated as a file and left
    for docker to reject.
    """
    if config.has_content:
        return BuildStrategy.CONTENT
    if (workspace / config.dockerfile_or(".")).is_dir():
        return BuildStrategy.DIRECTORY
    return BuildStrategy.FILE


def build_command(
    config: BuildImageConfig,
    image: str,
    strategy: BuildStrategy,
    *,
    docker: str = "docker",
) -> List[str]:
    """Tokens of the `docker build` command line for the given strategy."""
    cmd = [docker, "build", "-t", quote(image)]
    if strategy is BuildStrategy.CONTENT:
        cmd.extend(["-", f"<<EOF\n{config.content}\nEOF"])
    elif strategy is BuildStrategy.DIRECTORY:
        cmd.append(config.dockerfile_or("."))
    else:
        # docker only reads a Dockerfile from a directory or from stdin
        cmd.extend(["-", "<", config.dockerfile_or(".")])
    return cmd


# ---------------------------------------------------------------------
# Build step execution
# ---------------------------------------------------------------------

def perform(config: BuildImageConfig, ctx: StepContext) -> bool:
    """
    Build the image described by `config`.

    Returns True on success.

    Raises:
        AbortError: docker exited with a nonzero code.
        OSError: the shell could not be started.
        KeyboardInterrupt: the wait was interrupted.
    """
    # Import here to avoid circular import
    from ..runner import AbortError

    build_file = config.dockerfile_or(".")
    image = config.image_or(ctx.default_image_name())
    console = ctx.console

    console.print_info(
        f"Attempting to create Docker image '{image}' with build file '{build_file}'"
    )

    strategy = select_strategy(config, ctx.workspace)
    cmd = join_command(build_command(config, image, strategy, docker=settings.DOCKER))
    console.print_debug(f"strategy={strategy.value} cmd={cmd}")

    # Redirection and heredocs only mean something to a shell
    proc = ctx.launcher.launch(
        [settings.SHELL, "-c", cmd],
        cwd=ctx.workspace,
        stdout=console.stream,
        stderr=console.stream,
    )
    code = proc.join()
    if code != 0:
        if strategy is BuildStrategy.CONTENT:
            raise AbortError(f"Unable to build docker content: '{config.content}'")
        raise AbortError(f"Unable to build docker file: '{build_file}'")

    return True


def run_step(job: Job, step: Step, ctx: StepContext) -> None:
    """Run a docker build step of `job`."""
    perform(BuildImageConfig.from_dict(step.data), ctx)
