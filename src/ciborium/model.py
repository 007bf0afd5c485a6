# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


def _text(data: Dict[str, Any], key: str) -> Optional[str]:
    # Older persisted steps may lack a key or carry an explicit null.
    value = data.get(key)
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Step:
    """A single unit of work (step) inside a CI job.

    Plain shell steps only use `run`. Image steps set `kind` and keep their
    configuration in `data` so it survives a round trip through JSON.
    """
    name: str
    run: str = ""
    cwd: str | None = None
    kind: str | None = None
    data: Dict[str, Any] | None = None


@dataclass
class Job:
    """
    A CI job: steps + dependencies + metadata.

    `kind` is the job type; step workflows declare which kinds they apply to.
    """
    name: str
    steps: list[Step]

    needs: list[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    requires: list[str] = field(default_factory=list)
    kind: str = "freestyle"


@dataclass(frozen=True)
class Node:
    """The machine a job is built on."""
    display_name: str | None = None


# ---------------------------------------------------------------------
# Step configurations
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class BuildImageConfig:
    """
    Configuration of a "Build Docker image" step.

    There are two ways to get a Dockerfile:
      - it is checked out with the project (`dockerfile`), or
      - it is defined on the step itself (`content`).

    `content` wins whenever it is non-empty. A `dockerfile` that names a
    directory is used as the docker build context; anything else is piped to
    docker on stdin, which leaves the build without a context (no local ADD).
    """
    dockerfile: str | None = None
    image: str | None = None
    content: str | None = None

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    def dockerfile_or(self, default: str) -> str:
        return self.dockerfile or default

    def image_or(self, default: str) -> str:
        return self.image or default

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> BuildImageConfig:
        data = data or {}
        return cls(
            dockerfile=_text(data, "dockerfile"),
            image=_text(data, "image"),
            content=_text(data, "content"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.dockerfile is not None:
            out["dockerfile"] = self.dockerfile
        if self.image is not None:
            out["image"] = self.image
        if self.content is not None:
            out["content"] = self.content
        return out


@dataclass(frozen=True)
class PullImageConfig:
    """Configuration of a "Pull Docker image" step."""
    image: str | None = None

    @property
    def image_defined(self) -> bool:
        return bool(self.image)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> PullImageConfig:
        return cls(image=_text(data or {}, "image"))

    def to_dict(self) -> Dict[str, Any]:
        if self.image is None:
            return {}
        return {"image": self.image}
