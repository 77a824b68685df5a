from __future__ import annotations

import zipfile
from pathlib import Path

import allure
import httpx
import pytest

from plugin_patcher.errors import DecompileError, FormatError
from plugin_patcher.http.fetcher import ArtifactDownloader
from plugin_patcher.pipeline.decompile import decompile, ensure_decompiled
from plugin_patcher.process import CommandResult
from plugin_patcher.tasks import DECOMPILE, DOWNLOAD

pytestmark = [
    allure.epic("Pipeline"),
    allure.feature("Decompile & Baseline"),
]

_DECOMPILED = {
    "com/example/demo/DemoPlugin.java": "package com.example.demo;\nclass DemoPlugin {}\n",
    "com/example/demo/cmd/Reload.java": "package com.example.demo.cmd;\nclass Reload {}\n",
    "plugin.yml": "name: Demo\nversion: 1.2.0\nmain: com.example.demo.DemoPlugin\n",
    "config.yml": "debug: false\n",
    "META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n",
}


def _fake_decompiler(argv: tuple[str, ...], _cwd: Path | None) -> None:
    output_dir = Path(argv[-1])
    artifact = Path(argv[-2])
    with zipfile.ZipFile(output_dir / artifact.name, "w") as bundle:
        for name, content in _DECOMPILED.items():
            bundle.writestr(name, content)


def _fake_formatter(_argv: tuple[str, ...], cwd: Path | None) -> None:
    assert cwd is not None
    for source in cwd.rglob("*.java"):
        source.with_name(source.name + ".orig").write_text(source.read_text())


def _git_with_signing(*, fail_on: str | None = None):
    def handler(argv: tuple[str, ...], _cwd: Path | None) -> CommandResult | None:
        if argv[1:] == ("config", "--get", "commit.gpgsign"):
            return CommandResult(argv, 0, "true\n", "")
        if argv[1:] == ("config", "--local", "--get", "commit.gpgsign"):
            return CommandResult(argv, 1, "", "")
        if fail_on is not None and argv[1] == fail_on:
            return CommandResult(argv, 1, "", f"fatal: {fail_on} exploded")
        return None

    return handler


@pytest.fixture()
def ready_runner(fake_runner):
    fake_runner.on("java", _fake_decompiler)
    fake_runner.on("astyle", _fake_formatter)
    fake_runner.on("git", _git_with_signing())
    return fake_runner


def _git_subcommands(fake_runner) -> list[tuple[str, ...]]:
    return [argv[1:] for argv in fake_runner.commands("git")]


def test_decompile_builds_normalized_tree_and_baseline(settings, ready_runner, make_context):
    ctx = make_context()
    ctx.tracker.mark_done(DOWNLOAD)

    decompile(ctx)

    tree = settings.project_dir
    files = sorted(p.relative_to(tree).as_posix() for p in tree.rglob("*") if p.is_file())
    assert files == [
        ".gitignore",
        "pom.xml",
        "src/main/java/com/example/demo/DemoPlugin.java",
        "src/main/java/com/example/demo/cmd/Reload.java",
        "src/main/resources/config.yml",
        "src/main/resources/plugin.yml",
    ]
    manifest = (tree / "src/main/resources/plugin.yml").read_text()
    assert "version: ${project.version}\n" in manifest
    assert "version: 1.2.0" not in manifest
    assert (tree / "pom.xml").read_text() == (settings.templates_dir / "pom.xml").read_text()
    assert ctx.tracker.is_done(DECOMPILE)

    (java,) = ready_runner.commands("java")
    assert java[:3] == ("java", "-jar", str(settings.decompiler_path))
    assert java[-2:] == (str(settings.artifact_path), str(settings.decompiled_dir))
    (astyle,) = ready_runner.commands("astyle")
    assert f"--options={settings.templates_dir / 'astylerc'}" in astyle
    assert "--recursive" in astyle

    assert _git_subcommands(ready_runner) == [
        ("init",),
        ("config", "--get", "commit.gpgsign"),
        ("config", "--local", "--get", "commit.gpgsign"),
        ("config", "--local", "commit.gpgsign", "false"),
        ("add", "--", ".gitignore", "pom.xml", "src/main/java", "src/main/resources"),
        ("commit", "--quiet", "-m", "Decompiled demo 1.2.0"),
        ("reset", "--quiet", "--hard", "HEAD"),
        ("clean", "-fdxq"),
        ("config", "--local", "--unset", "commit.gpgsign"),
    ]


def test_decompile_restores_signing_when_commit_fails(settings, ready_runner, make_context):
    ready_runner.on("git", _git_with_signing(fail_on="commit"))
    ctx = make_context()
    ctx.tracker.mark_done(DOWNLOAD)

    with pytest.raises(DecompileError, match="commit exploded"):
        decompile(ctx)

    assert _git_subcommands(ready_runner)[-1] == ("config", "--local", "--unset", "commit.gpgsign")
    assert not ctx.tracker.is_done(DECOMPILE)
    assert (settings.project_dir / "src/main/resources/plugin.yml").is_file()


def test_decompile_leaves_signing_alone_when_disabled(ready_runner, make_context):
    ready_runner.on("git", lambda argv, _cwd: None)
    ctx = make_context()
    ctx.tracker.mark_done(DOWNLOAD)

    decompile(ctx)

    assert not any("false" in argv for argv in _git_subcommands(ready_runner))
    assert ctx.tracker.is_done(DECOMPILE)


def test_decompiler_failure_aborts_before_formatting(settings, ready_runner, make_context):
    ready_runner.on("java", lambda argv, _cwd: CommandResult(argv, 1, "", "bad class file"))
    ctx = make_context()
    ctx.tracker.mark_done(DOWNLOAD)

    with pytest.raises(DecompileError, match="bad class file"):
        decompile(ctx)

    assert ready_runner.commands("astyle") == []
    assert ready_runner.commands("git") == []
    assert settings.decompiled_dir.is_dir()


def test_formatter_failure_raises_format_error(ready_runner, make_context):
    ready_runner.on("astyle", lambda argv, _cwd: CommandResult(argv, 2, "", "bad options"))
    ctx = make_context()
    ctx.tracker.mark_done(DOWNLOAD)

    with pytest.raises(FormatError, match="bad options"):
        decompile(ctx)
    assert ready_runner.commands("git") == []


def test_decompile_wipes_previous_partial_output(settings, ready_runner, make_context):
    stale = settings.project_dir / "leftover.txt"
    stale.parent.mkdir(parents=True)
    stale.write_text("from an aborted run")
    ctx = make_context()
    ctx.tracker.mark_done(DOWNLOAD)

    decompile(ctx)

    assert not stale.exists()


def test_ensure_decompiled_runs_download_first_then_skips(settings, ready_runner, make_context):
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return httpx.Response(200, content=b"jar")

    ctx = make_context(
        downloader_factory=lambda: ArtifactDownloader(transport=httpx.MockTransport(handler)),
    )

    ensure_decompiled(ctx)
    calls_after_first_run = len(ready_runner.calls)
    ensure_decompiled(ctx)

    assert len(requested) == 2
    assert ctx.tracker.completed() == [DECOMPILE, DOWNLOAD]
    assert len(ready_runner.calls) == calls_after_first_run
