import io
from pathlib import Path

import pytest

from ciborium import settings
from ciborium.model import Job
from ciborium.runner import StepContext
from ciborium.ui.console import Console


class FakeProc:
    def __init__(self, code=0, interrupt=False):
        self.code = code
        self.interrupt = interrupt

    def join(self):
        if self.interrupt:
            raise KeyboardInterrupt()
        return self.code


class FakeLauncher:
    """Records launches instead of starting processes."""

    def __init__(self, codes=None, interrupt=False, error=None):
        self.codes = list(codes or [])
        self.interrupt = interrupt
        self.error = error
        self.calls = []

    def launch(self, cmds, *, cwd=None, stdout=None, stderr=None):
        self.calls.append({"cmds": list(cmds), "cwd": cwd, "stdout": stdout, "stderr": stderr})
        if self.error is not None:
            raise self.error
        code = self.codes.pop(0) if self.codes else 0
        return FakeProc(code, interrupt=self.interrupt)


@pytest.fixture(autouse=True)
def default_tools(monkeypatch):
    """Pin shell, docker binary and node name regardless of the environment."""
    monkeypatch.setattr(settings, "SHELL", "/bin/sh")
    monkeypatch.setattr(settings, "DOCKER", "docker")
    monkeypatch.setattr(settings, "NODE_NAME", "")


@pytest.fixture
def console():
    """Console writing the job log to a buffer."""
    return Console(stream=io.StringIO())


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def make_ctx(tmp_path, console):
    """Build a StepContext for project 'foo' in a temporary workspace."""
    def _make(launcher, workspace: Path = None, project: str = "foo"):
        return StepContext(
            job=Job(name=project, steps=[]),
            workspace=workspace or tmp_path,
            launcher=launcher,
            console=console,
        )
    return _make


@pytest.fixture
def make_launcher():
    return FakeLauncher
