# src/ciborium/dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Union

from .model import Job, Step
from .naming import tokenize
from .step_workflows.docker_build import docker_build_step
from .step_workflows.docker_pull import docker_pull_step

Names = Union[str, Sequence[str], None]


def _names(value: Names) -> List[str]:
    if isinstance(value, str):
        return tokenize(value)
    return list(value or [])


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(name: str, cmd: str, *, cwd: str | None = None) -> Step:
    """Create a shell step."""
    return Step(name=name, run=cmd, cwd=cwd)


def docker_build(
    name: str,
    *,
    dockerfile: str | None = None,
    image: str | None = None,
    content: str | None = None,
    cwd: str | None = None,
) -> Step:
    """Create a "Build Docker image" step."""
    return docker_build_step(name, dockerfile=dockerfile, image=image, content=content, cwd=cwd)


def docker_pull(name: str, image: str, *, cwd: str | None = None) -> Step:
    """Create a "Pull Docker image" step."""
    return docker_pull_step(name, image, cwd=cwd)


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *steps: Step,  # allow: job("x", sh(...), docker_build(...))
    steps_list: Optional[List[Step]] = None,  # allow: job("x", steps_list=[...])
    needs: Names = None,
    env: Optional[Dict[str, str]] = None,
    requires: Names = None,
    kind: str = "freestyle",
    cwd: str | None = None,  # default cwd applied to steps missing cwd
) -> Job:
    steps_final: List[Step] = []
    if steps_list:
        steps_final.extend(list(steps_list))
    steps_final.extend(list(steps))

    if not steps_final:
        raise ValueError(f"job({name!r}) must have at least one step")

    if cwd is not None:
        steps_final = [s if s.cwd is not None else replace(s, cwd=cwd) for s in steps_final]

    return Job(
        name=name,
        steps=steps_final,
        needs=_names(needs),
        env={k: str(v) for k, v in (env or {}).items()},
        requires=_names(requires),
        kind=kind,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, name: str):
        self.name = name
        self._needs: list[str] = []
        self._steps: list[Step] = []
        self._env: dict[str, str] = {}
        self._requires: list[str] = []
        self._kind: str = "freestyle"

    def depends_on(self, *job_names: str):
        self._needs.extend(job_names)
        return self

    def define_requirements(self, *tools: str):
        for t in tools:
            self._requires.extend(tokenize(t))
        return self

    def define_step(self, name: str, run: str, cwd: str | None = None):
        self._steps.append(Step(name=name, run=run, cwd=cwd))
        return self

    def build_image(self, name: str, **kwargs):
        self._steps.append(docker_build(name, **kwargs))
        return self

    def pull_image(self, name: str, image: str, cwd: str | None = None):
        self._steps.append(docker_pull(name, image, cwd=cwd))
        return self

    def with_env(self, **env):
        self._env.update({k: str(v) for k, v in env.items()})
        return self

    def of_kind(self, kind: str):
        self._kind = kind
        return self

    def build(self) -> Job:
        if not self._steps:
            raise ValueError(f"Job '{self.name}' has no steps")

        return Job(
            name=self.name,
            steps=self._steps,
            needs=self._needs,
            env=self._env,
            requires=self._requires,
            kind=self._kind,
        )


def build(name: str) -> JobBuilder:
    """Convenience: build('image').build_image(...).build()"""
    return JobBuilder(name)


# ---------------------------------------------------------------------
# Workflow helper (single-file story)
# ---------------------------------------------------------------------

def wf(*jobs: Job) -> List[Job]:
    """
    Workflow definition helper. Use this name so you can define your own
    def workflow(): return wf(job(...), job(...)).

    Users can write:
        from ciborium import wf, job, docker_build

        def workflow():
            return wf(
                job("image", docker_build("Build", dockerfile=".")),
            )

    Or use JOBS directly:
        JOBS = wf(job(...), job(...))
    """
    return list(jobs)


workflow = wf  # alias (avoid naming your function workflow if you use it)
