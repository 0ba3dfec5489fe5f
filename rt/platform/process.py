"""Subprocess execution with Result-based error handling.

Every external tool the release tool drives (git, gh, npm/pnpm/yarn, the
project's build and precheck commands) goes through this module.

Usage:
    result = run(["git", "rev-parse", "HEAD"], cwd=project_dir)
    match result:
        case Ok(stdout):
            sha = stdout.strip()
        case Err(error):
            print(f"git failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from rt.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessOutput", "run", "run_graceful", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A failed command. `returncode` is -1 when it timed out or never started."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def detail(self) -> str:
        """Most useful text to show a caretaker: stderr, else stdout, else the summary."""
        return self.stderr.strip() or self.stdout.strip() or str(self)

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Captured output of a command whose failure the caller inspects itself."""

    status: int
    stdout: str
    stderr: str


def run_graceful(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    input: str | None = None,
    timeout: float | None = None,
) -> ProcessOutput:
    """Execute a command and return its output regardless of exit status.

    A process that cannot start or times out is reported with status -1.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        stdout = e.stdout if isinstance(e.stdout, str) else ""
        return ProcessOutput(status=-1, stdout=stdout, stderr=f"Command timed out after {timeout}s")
    except OSError as e:
        return ProcessOutput(status=-1, stdout="", stderr=str(e))

    return ProcessOutput(status=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    input: str | None = None,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` in `cwd` and return its stdout.

    `input` is written to stdin. Any non-zero status becomes a `ProcessError`
    carrying both captured streams.
    """
    out = run_graceful(cmd, cwd, env, input=input, timeout=timeout)
    if out.status != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=out.status,
                stdout=out.stdout,
                stderr=out.stderr,
            )
        )
    return Ok(out.stdout)


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output streamed to the terminal.

    Used for long-running steps (dependency install) where the caretaker
    should see progress. Only the exit status is captured.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )
    return Ok(None)
