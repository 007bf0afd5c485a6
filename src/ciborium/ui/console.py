"""Job log and user-facing messages for Ciborium."""

from __future__ import annotations

import sys
import traceback
from typing import Optional, TextIO


class Console:
    """Writes the job log and error reports.

    Everything a job produces, including the output of launched processes,
    goes to `stream`. Errors that stop the CLI itself go to stderr.
    """

    def __init__(self, debug: bool = False, stream: Optional[TextIO] = None):
        self.debug = debug
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved on every access so a swapped sys.stdout is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def print_run_started(self, workflow: str, job_count: int, node: str) -> None:
        self._print(f"\nRUN STARTED  workflow={workflow}  node={node}  jobs={job_count}\n")

    def print_job_start(self, name: str) -> None:
        self._print(f"\n>> job {name}")

    def print_step(self, name: str) -> None:
        self._print(f"-- step {name}")

    def print_command(self, cmd: str) -> None:
        self._print(f"$ {cmd}")

    def print_success(self, name: str) -> None:
        self._print(f"<< {name}: success")

    def print_job_skipped(self, name: str, reason: str) -> None:
        self._print(f"\n>> job {name}: skipped ({reason})")

    def print_job_failed(self, name: str, error: BaseException) -> None:
        """Report a failed job. Exit codes and hints are shown when the error has them."""
        self._print(f"<< {name}: FAILED")
        exit_code = getattr(error, "exit_code", None)
        if exit_code is not None:
            self._print(f"   exit code {exit_code}")
        hint = (getattr(error, "details", None) or {}).get("hint")
        if hint:
            self._print(f"   hint: {hint}")
        text = str(error) or type(error).__name__
        self._print(f"   {text if self.debug else text.splitlines()[0]}")

    def print_results(self, results: dict[str, str]) -> None:
        width = max((len(name) for name in results), default=0)
        self._print("\nRESULTS")
        for name, status in results.items():
            shown = "SUCCESS" if status == "ok" else status.upper()
            self._print(f"  {name.ljust(width)}  {shown}")

    def print_error(self, title: str, message: str, hint: Optional[str] = None) -> None:
        lines = [f"ERROR: {title}", f"  {message}"]
        if hint:
            lines.append(f"  hint: {hint}")
        print("\n".join(lines), file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        if self.debug:
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        self._print(message)

    def print_debug(self, message: str) -> None:
        if self.debug:
            print(f"[debug] {message}", file=sys.stderr)


# Set by the CLI; library callers get a plain console on first use.
_console: Optional[Console] = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    global _console
    _console = console
