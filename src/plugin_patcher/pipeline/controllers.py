"""Controllers for pipeline CLI commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from plugin_patcher.config import Settings
from plugin_patcher.http.fetcher import ArtifactDownloader
from plugin_patcher.pipeline.build import build_jar
from plugin_patcher.pipeline.cleanup import cleanup
from plugin_patcher.pipeline.context import PipelineContext
from plugin_patcher.pipeline.decompile import decompile
from plugin_patcher.pipeline.download import download_artifacts
from plugin_patcher.pipeline.patches import apply_patches, rebuild_patch_set
from plugin_patcher.process import CommandRunner
from plugin_patcher.tasks import DECOMPILE, DOWNLOAD
from plugin_patcher.tools import locate_all


@dataclass(slots=True)
class PipelineCommand:
    """CLI inputs shared by every pipeline command."""

    root_dir: Path | None
    progress: Callable[[str], None] | None = None


class PipelineCliController:
    """Coordinates pipeline command execution."""

    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        downloader_factory: Callable[[], ArtifactDownloader] | None = None,
    ) -> None:
        self.runner = runner
        self.downloader_factory = downloader_factory

    def check_tools(self, command: PipelineCommand) -> dict[str, str]:
        settings = Settings.from_env(root_dir=command.root_dir)
        return locate_all(settings.tools.required())

    def download(self, command: PipelineCommand) -> list[str]:
        ctx = self._context(command)
        if ctx.tracker.is_done(DOWNLOAD):
            return [_already_done(DOWNLOAD)]
        download_artifacts(ctx)
        return [f"Plugin artifact ready: {ctx.settings.artifact_path}"]

    def decompile(self, command: PipelineCommand) -> list[str]:
        ctx = self._context(command)
        if ctx.tracker.is_done(DECOMPILE):
            return [_already_done(DECOMPILE)]
        decompile(ctx)
        return [f"Baseline source tree ready: {ctx.settings.project_dir}"]

    def apply(self, command: PipelineCommand) -> list[str]:
        ctx = self._context(command)
        patches = apply_patches(ctx)
        return [f"Work tree patched: patches={len(patches)} dir={ctx.settings.project_dir}"]

    def rebuild(self, command: PipelineCommand) -> list[str]:
        ctx = self._context(command)
        written = rebuild_patch_set(ctx)
        return [f"Patch set rebuilt: patches={len(written)} dir={ctx.settings.patches_dir}"]

    def build(self, command: PipelineCommand) -> list[str]:
        ctx = self._context(command)
        outcome = build_jar(ctx)
        lines = [f"Build finished: output={outcome.output_dir}"]
        lines.extend(f"  jar={artifact}" for artifact in outcome.artifacts)
        return lines

    def cleanup(self, command: PipelineCommand) -> list[str]:
        ctx = self._context(command)
        removed = cleanup(ctx)
        return [f"Cleanup finished: removed={len(removed)}"]

    def _context(self, command: PipelineCommand) -> PipelineContext:
        return PipelineContext.create(
            Settings.from_env(root_dir=command.root_dir),
            runner=self.runner,
            downloader_factory=self.downloader_factory,
            progress=command.progress,
        )


def _already_done(task: str) -> str:
    return f"Task {task!r} already done. Run cleanup to start over."
