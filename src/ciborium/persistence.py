# persistence.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .model import Job, Step
from .naming import tokenize


def _names(value: Any) -> List[str]:
    # Accepts a list or a whitespace separated string ("lint test").
    if value is None:
        return []
    if isinstance(value, str):
        return tokenize(value)
    return [str(v) for v in value]


def job_to_dict(job: Job) -> dict:
    """
    Convert a Job model to a plain dictionary.
    This is the reverse of job_from_dict().
    """
    steps = []
    for step in job.steps:
        step_dict: Dict[str, Any] = {"name": step.name}
        if step.run:
            step_dict["run"] = step.run
        if step.cwd is not None:
            step_dict["cwd"] = step.cwd
        if step.kind is not None:
            step_dict["kind"] = step.kind
        if step.data is not None:
            step_dict["data"] = step.data
        steps.append(step_dict)

    return {
        "name": job.name,
        "kind": job.kind,
        "steps": steps,
        "needs": job.needs,
        "env": job.env,
        "requires": job.requires,
    }


def job_from_dict(job_dict: dict) -> Job:
    """
    Convert a job dictionary to a Job model.

    Only `name` is mandatory. Fields written by older versions may be
    missing or null and fall back to their defaults.
    """
    steps = []
    for step_dict in job_dict.get("steps") or []:
        steps.append(
            Step(
                name=step_dict["name"],
                run=step_dict.get("run") or "",
                cwd=step_dict.get("cwd"),
                kind=step_dict.get("kind"),
                data=step_dict.get("data"),
            )
        )

    return Job(
        name=job_dict["name"],
        steps=steps,
        needs=_names(job_dict.get("needs")),
        env=dict(job_dict.get("env") or {}),
        requires=_names(job_dict.get("requires")),
        kind=job_dict.get("kind") or "freestyle",
    )


def save_workflow(jobs: List[Job], path: str | Path) -> Path:
    """Write jobs to `path` as JSON. Returns the path written."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    payload = {"jobs": [job_to_dict(j) for j in jobs]}
    out.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n")
    return out


def load_workflow_json(path: str | Path) -> List[Job]:
    """Read jobs written by save_workflow()."""
    data = json.loads(Path(path).read_text())
    if isinstance(data, list):
        job_dicts = data
    else:
        job_dicts = data.get("jobs") or []
    return [job_from_dict(d) for d in job_dicts]
