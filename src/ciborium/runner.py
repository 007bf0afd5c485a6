# runner.py
from __future__ import annotations

import runpy
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set

from . import naming, settings
from .dag import topo_order
from .launcher import Launcher
from .model import Job, Node, Step
from .step_workflows import get_workflow
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class CIError(Exception):
    """
    Structured CI error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    job: str
    step: str | None
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}", f"job={self.job}"]
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class StepFailure(Exception):
    job: str
    step: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"[{self.job}] step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


@dataclass
class AbortError(Exception):
    """A step gave up; `message` says why. The job fails, nothing is retried."""
    message: str
    job: str = ""
    step: str | None = None

    def __str__(self) -> str:
        return self.message


TOOL_HINTS = {
    "docker": "Install Docker and ensure the daemon is running.",
}


# ----------------------------------------------------------------------
# Step context
# ----------------------------------------------------------------------

@dataclass
class StepContext:
    """Everything a step needs from the job it runs in."""
    job: Job
    workspace: Path
    launcher: Launcher
    console: Console

    @property
    def project_name(self) -> str:
        return self.job.name

    def default_image_name(self) -> str:
        return naming.image_name(self.project_name)


def current_node() -> Node:
    return Node(display_name=settings.NODE_NAME or None)


# ----------------------------------------------------------------------
# Workflow loading (local file/module)
# ----------------------------------------------------------------------

def load_workflow(path: str | Path) -> List[Job]:
    """
    Load a workflow from a python or json file path.

    A python file must define either:
      - workflow() -> List[Job]
      - JOBS = [Job, ...]

    A json file is a workflow saved by `persistence.save_workflow`.

    Returns:
      List[Job], already validated
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")

    if wf_path.suffix == ".json":
        from .persistence import load_workflow_json
        jobs = load_workflow_json(wf_path)
    elif wf_path.suffix == ".py":
        module_name = f"ciborium_workflow_{wf_path.stem}"
        globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

        jobs = None
        if "workflow" in globals_dict and callable(globals_dict["workflow"]):
            jobs = globals_dict["workflow"]()
        elif "JOBS" in globals_dict:
            jobs = globals_dict["JOBS"]
    else:
        raise ValueError(f"Workflow must be a .py or .json file, got: {wf_path.name}")

    if not isinstance(jobs, list) or not all(isinstance(j, Job) for j in jobs):
        raise TypeError(
            "Workflow must return/define a List[Job]. "
            "Define workflow() -> List[Job] or JOBS = [Job, ...]."
        )

    validate_jobs(jobs)
    return jobs


def validate_jobs(jobs: List[Job]) -> None:
    """
    Check the workflow before anything runs: job graph is sound, every typed
    step is known and applies to the kind of job it sits in.
    """
    topo_order(jobs)
    for j in jobs:
        for step in j.steps:
            if step.kind is None:
                continue
            wf = get_workflow(step.kind)
            if not wf.is_applicable(j.kind):
                raise CIError(
                    kind="step_not_applicable",
                    job=j.name,
                    step=step.name,
                    message=f"'{wf.display_name}' steps cannot be used in {j.kind!r} jobs",
                    details={"allowed": ",".join(sorted(wf.job_kinds))},
                )


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def _check_requirements(job: Job) -> None:
    for tool in job.requires:
        if shutil.which(tool) is None:
            raise CIError(
                kind="tool_unavailable",
                job=job.name,
                step=None,
                message=f"{tool} is not available",
                details={"hint": TOOL_HINTS.get(tool, f"Install {tool} or fix PATH."), "tool": tool},
            )


def _run_shell_step(job: Job, step: Step, ctx: StepContext) -> None:
    ctx.console.print_command(step.run)
    proc = ctx.launcher.launch(
        [settings.SHELL, "-c", step.run],
        cwd=ctx.workspace,
        stdout=ctx.console.stream,
        stderr=ctx.console.stream,
    )
    code = proc.join()
    if code != 0:
        raise StepFailure(job=job.name, step=step.name, cmd=step.run, exit_code=code)


def run_step(job: Job, step: Step, ctx: StepContext) -> None:
    """Run one step, plain shell or typed."""
    if step.kind is None:
        _run_shell_step(job, step, ctx)
        return
    try:
        get_workflow(step.kind).run_step(job, step, ctx)
    except AbortError as e:
        e.job = e.job or job.name
        e.step = e.step or step.name
        raise


def run_job(
    job: Job,
    repo_root: Path,
    *,
    launcher: Launcher | None = None,
    console: Console | None = None,
) -> str:
    """
    Run every step of `job` in order. Returns "ok"; raises on failures.
    """
    console = console or get_console()
    launcher = launcher or Launcher(env=job.env or None)
    _check_requirements(job)

    for step in job.steps:
        workspace = (repo_root / (step.cwd or ".")).resolve()
        if not workspace.exists():
            raise FileNotFoundError(f"[{job.name}] step '{step.name}' cwd not found: {workspace}")

        console.print_step(step.name)
        ctx = StepContext(
            job=job,
            workspace=workspace,
            launcher=launcher,
            console=console,
        )
        run_step(job, step, ctx)

    return "ok"


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_workflow(
    jobs: List[Job],
    *,
    repo_root: str | Path = ".",
    fail_fast: bool = True,
    launcher: Launcher | None = None,
    console: Console | None = None,
) -> Dict[str, str]:
    """
    Run jobs one at a time in dependency order.

    Returns a status per job: "ok", "failed", "skipped(upstream)" or, after a
    failure with fail_fast, "skipped(fail-fast)".
    """
    console = console or get_console()
    repo_root_p = Path(repo_root).resolve()

    validate_jobs(jobs)
    by_name = {j.name: j for j in jobs}
    order = topo_order(jobs)

    results: Dict[str, str] = {}
    failed: Set[str] = set()

    for name in order:
        j = by_name[name]
        if fail_fast and failed:
            results[name] = "skipped(fail-fast)"
            console.print_job_skipped(name, "fail-fast")
            continue
        blocked = [d for d in j.needs if results.get(d) != "ok"]
        if blocked:
            results[name] = "skipped(upstream)"
            console.print_job_skipped(name, f"needs {', '.join(blocked)}")
            continue

        console.print_job_start(name)
        try:
            results[name] = run_job(j, repo_root_p, launcher=launcher, console=console)
            console.print_success(name)
        except Exception as e:
            results[name] = "failed"
            failed.add(name)
            console.print_job_failed(name, e)

    return results

