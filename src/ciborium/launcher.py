# launcher.py
# Starts external processes for steps and forwards their output.
# Step workflows never call subprocess directly; they go through Launcher so
# tests can swap in a fake.

from __future__ import annotations

import os
import signal
import subprocess
import threading
from pathlib import Path
from typing import IO, Dict, List, Optional, Sequence


def _pump(src: IO[str], sink: Optional[IO[str]]) -> None:
    for line in iter(src.readline, ""):
        if sink is not None:
            sink.write(line)
            sink.flush()
    src.close()


class Proc:
    """Handle on a launched process."""

    def __init__(self, popen: subprocess.Popen, pumps: List[threading.Thread]):
        self.popen = popen
        self._pumps = pumps

    @property
    def pid(self) -> int:
        return self.popen.pid

    def join(self) -> int:
        """
        Block until the process exits and all of its output is forwarded.

        Returns:
            The process exit code.

        If the wait is interrupted (Ctrl-C / job abort) the process and every
        process it started are killed and the KeyboardInterrupt is re-raised.
        """
        try:
            code = self.popen.wait()
        except KeyboardInterrupt:
            # The process leads its own group, so this reaches its children too.
            try:
                os.killpg(self.popen.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            self.popen.wait()
            raise
        for t in self._pumps:
            t.join()
        return code


class Launcher:
    """Launches commands with a working directory and streamed stdout/stderr."""

    def __init__(self, env: Optional[Dict[str, str]] = None):
        self.env = env

    def launch(
        self,
        cmds: Sequence[str],
        *,
        cwd: str | Path | None = None,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> Proc:
        """
        Start `cmds` (no shell) and forward each output line to the sinks.

        Raises:
            OSError: if the process cannot be started (e.g. missing binary).
        """
        env = None
        if self.env:
            env = os.environ.copy()
            env.update(self.env)

        popen = subprocess.Popen(
            list(cmds),
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            # docker output is not always valid UTF-8
            errors="replace",
            start_new_session=True,
        )
        pumps = [
            threading.Thread(target=_pump, args=(popen.stdout, stdout), daemon=True),
            threading.Thread(target=_pump, args=(popen.stderr, stderr), daemon=True),
        ]
        for t in pumps:
            t.start()
        return Proc(popen, pumps)
