"""Command execution abstraction for external tools."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from plugin_patcher.errors import PatcherError, ToolMissingError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandResult:
    """Outcome of one external command."""

    args: tuple[str, ...]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Protocol implemented by command runners."""

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        """Run a command to completion and capture its output."""


class SubprocessCommandRunner:
    """Run commands with :mod:`subprocess`, capturing text output."""

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        argv = tuple(str(arg) for arg in args)
        logger.debug("Running %s (cwd=%s)", " ".join(argv), cwd or ".")
        try:
            completed = subprocess.run(  # noqa: S603
                argv,
                cwd=cwd,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as error:
            raise ToolMissingError(argv[0]) from error
        logger.debug("%s exited with %d", argv[0], completed.returncode)
        return CommandResult(
            args=argv,
            exit_code=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


def require_success(
    result: CommandResult,
    *,
    error: type[PatcherError],
    action: str,
) -> CommandResult:
    """Raise ``error`` with the command's diagnostics when it failed."""

    if result.ok:
        return result
    raise error(
        f"{action} failed with exit code {result.exit_code}.\n{diagnostics(result)}".rstrip(),
    )


def diagnostics(result: CommandResult, *, limit: int = 40) -> str:
    """Return the last ``limit`` lines of combined command output."""

    lines = [*result.stdout.splitlines(), *result.stderr.splitlines()]
    return "\n".join(lines[-limit:])
