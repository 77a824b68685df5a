"""Error taxonomy for pipeline stages.

Every error is fatal: no stage recovers from a failure in a prerequisite stage.
"""

from __future__ import annotations

from pathlib import Path


class PatcherError(RuntimeError):
    """Base class for all pipeline failures."""


class ToolMissingError(PatcherError):
    """Required external executable is not available."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Required tool not found in PATH: {tool}")
        self.tool = tool


class NetworkError(PatcherError):
    """Artifact transfer failed."""


class ChecksumError(NetworkError):
    """Downloaded file does not match the configured digest."""


class DecompileError(PatcherError):
    """Decompilation or baseline preparation failed; partial output is kept."""


class FormatError(PatcherError):
    """Source formatter failed."""


class PatchConflictError(PatcherError):
    """A stored patch did not apply; the work tree is left mid-apply."""

    def __init__(self, message: str, *, patch: Path) -> None:
        super().__init__(message)
        self.patch = patch


class BuildFailureError(PatcherError):
    """Build tool exited with a non-zero status."""

    def __init__(self, message: str, *, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class GitCommandError(PatcherError):
    """A git invocation failed outside of patch application."""
