"""Explicit state shared by every pipeline stage."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from plugin_patcher.config import Settings
from plugin_patcher.http.fetcher import ArtifactDownloader
from plugin_patcher.pipeline.git import GitWorkTree
from plugin_patcher.process import CommandRunner, SubprocessCommandRunner
from plugin_patcher.tasks import TaskTracker

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineContext:
    """Settings, collaborators and progress sink for one CLI invocation."""

    settings: Settings
    runner: CommandRunner
    tracker: TaskTracker
    downloader_factory: Callable[[], ArtifactDownloader]
    progress: Callable[[str], None] | None = None
    messages: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        runner: CommandRunner | None = None,
        downloader_factory: Callable[[], ArtifactDownloader] | None = None,
        progress: Callable[[str], None] | None = None,
    ) -> PipelineContext:
        def _default_downloader() -> ArtifactDownloader:
            return ArtifactDownloader(
                timeout_seconds=settings.http.timeout_seconds,
                max_retries=settings.http.max_retries,
            )

        return cls(
            settings=settings,
            runner=runner or SubprocessCommandRunner(),
            tracker=TaskTracker(settings.tasks_dir),
            downloader_factory=downloader_factory or _default_downloader,
            progress=progress,
        )

    def git(self) -> GitWorkTree:
        return GitWorkTree(
            runner=self.runner,
            executable=self.settings.tools.git,
            work_tree=self.settings.project_dir,
        )

    def report(self, message: str) -> None:
        logger.info("%s", message)
        self.messages.append(message)
        if self.progress is not None:
            self.progress(message)
