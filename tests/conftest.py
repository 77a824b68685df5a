"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from plugin_patcher.config import ArtifactSettings, DecompilerSettings, Settings
from plugin_patcher.pipeline.context import PipelineContext
from plugin_patcher.process import CommandResult

Handler = Callable[[tuple[str, ...], Path | None], CommandResult | None]

_TEMPLATES = {
    "astylerc": "style=java\n",
    "gitignore": "target/\n",
    "pom.xml": "<project><artifactId>demo</artifactId></project>\n",
    "files.txt": "# baseline paths\n.gitignore\npom.xml\n\nsrc/main/java\nsrc/main/resources\n",
}


class FakeCommandRunner:
    """Records every command; per-program handlers may return a custom result."""

    def __init__(self) -> None:
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []
        self._handlers: dict[str, Handler] = {}

    def on(self, program: str, handler: Handler) -> None:
        self._handlers[program] = handler

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        argv = tuple(str(arg) for arg in args)
        self.calls.append((argv, cwd))
        handler = self._handlers.get(argv[0])
        if handler is not None:
            result = handler(argv, cwd)
            if result is not None:
                return result
        return CommandResult(args=argv, exit_code=0, stdout="", stderr="")

    def commands(self, program: str) -> list[tuple[str, ...]]:
        return [argv for argv, _ in self.calls if argv[0] == program]


def write_templates(root: Path) -> Path:
    templates = root / "templates"
    templates.mkdir(parents=True, exist_ok=True)
    for name, content in _TEMPLATES.items():
        (templates / name).write_text(content, "utf-8")
    return templates


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    write_templates(tmp_path)
    return Settings(
        root_dir=tmp_path,
        artifact=ArtifactSettings(
            name="demo",
            version="1.2.0",
            url="https://example.com/demo-1.2.0.jar",
        ),
        decompiler=DecompilerSettings(url="https://example.com/tools/vineflower-1.10.1.jar"),
    )


@pytest.fixture()
def fake_runner() -> FakeCommandRunner:
    return FakeCommandRunner()


@pytest.fixture()
def make_context(settings: Settings, fake_runner: FakeCommandRunner):
    """Build a context over ``settings``; the runner defaults to the recording fake."""

    def _factory(**kwargs) -> PipelineContext:
        kwargs.setdefault("runner", fake_runner)
        return PipelineContext.create(settings, **kwargs)

    return _factory


@pytest.fixture()
def git_env(tmp_path: Path, monkeypatch) -> None:
    """Isolate git from the user's configuration and give commits a fixed identity."""

    global_config = tmp_path / "gitconfig"
    global_config.write_text("[init]\n\tdefaultBranch = main\n", "utf-8")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Patch Author")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "patch.author@example.com")
