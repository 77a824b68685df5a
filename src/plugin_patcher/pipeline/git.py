"""Typed wrapper over the git commands used by the pipeline."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from plugin_patcher.errors import GitCommandError
from plugin_patcher.process import CommandResult, CommandRunner, require_success

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "yes", "on", "1"}
SIGNING_KEY = "commit.gpgsign"


class GitWorkTree:
    """Runs git inside one work tree through a :class:`CommandRunner`."""

    def __init__(self, *, runner: CommandRunner, executable: str, work_tree: Path) -> None:
        self.runner = runner
        self.executable = executable
        self.work_tree = work_tree

    def run(self, *args: str) -> CommandResult:
        return self.runner.run([self.executable, *args], cwd=self.work_tree)

    def _checked(self, *args: str) -> CommandResult:
        return require_success(
            self.run(*args),
            error=GitCommandError,
            action=f"git {args[0]}",
        )

    def init(self) -> None:
        self._checked("init")

    def config_get(self, key: str, *, local: bool = False) -> str | None:
        args = ("config", "--local", "--get", key) if local else ("config", "--get", key)
        result = self.run(*args)
        # git config exits with 1 when the key is unset
        if result.exit_code == 1:
            return None
        require_success(result, error=GitCommandError, action=f"git config --get {key}")
        return result.stdout.strip()

    def config_set(self, key: str, value: str) -> None:
        self._checked("config", "--local", key, value)

    def config_unset(self, key: str) -> None:
        result = self.run("config", "--local", "--unset", key)
        # exit code 5 means the key was not set
        if result.exit_code not in (0, 5):
            require_success(result, error=GitCommandError, action=f"git config --unset {key}")

    def add(self, paths: Sequence[str]) -> None:
        self._checked("add", "--", *paths)

    def commit(self, message: str) -> None:
        self._checked("commit", "--quiet", "-m", message)

    def root_commit(self) -> str:
        result = self._checked("rev-list", "--max-parents=0", "HEAD")
        roots = result.stdout.split()
        if not roots:
            raise GitCommandError(f"No root commit found in {self.work_tree}")
        return roots[0]

    def reset_hard(self, ref: str = "HEAD") -> None:
        self._checked("reset", "--quiet", "--hard", ref)

    def clean(self) -> None:
        self._checked("clean", "-fdxq")

    def am(self, patch: Path) -> CommandResult:
        return self.run("am", str(patch))

    def am_in_progress(self) -> bool:
        return (self.work_tree / ".git" / "rebase-apply").is_dir()

    def am_abort(self) -> None:
        self._checked("am", "--abort")

    def format_patch(self, since: str, output_dir: Path) -> list[Path]:
        result = self._checked(
            "format-patch",
            "--no-stat",
            "-o",
            str(output_dir),
            f"{since}..HEAD",
        )
        return [Path(line.strip()) for line in result.stdout.splitlines() if line.strip()]

    @contextmanager
    def signing_disabled(self) -> Iterator[None]:
        """Turn commit signing off for the block and restore the local value afterwards."""

        effective = self.config_get(SIGNING_KEY)
        if effective is None or effective.lower() not in _TRUTHY:
            yield
            return

        original_local = self.config_get(SIGNING_KEY, local=True)
        logger.info("Temporarily disabling %s in %s", SIGNING_KEY, self.work_tree)
        self.config_set(SIGNING_KEY, "false")
        try:
            yield
        finally:
            if original_local is None:
                self.config_unset(SIGNING_KEY)
            else:
                self.config_set(SIGNING_KEY, original_local)
