from .dsl import job, sh, docker_build, docker_pull, workflow, wf, JobBuilder, build
from .runner import run_workflow, AbortError
from .model import Job, Step, BuildImageConfig, PullImageConfig

__all__ = [
    "job", "sh", "docker_build", "docker_pull", "workflow", "wf", "JobBuilder", "build",
    "run_workflow", "AbortError", "Job", "Step", "BuildImageConfig", "PullImageConfig",
]
