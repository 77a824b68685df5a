"""Remove every generated artifact so the next run starts from scratch."""

from __future__ import annotations

import shutil
from pathlib import Path

from plugin_patcher.pipeline.context import PipelineContext


def cleanup(ctx: PipelineContext) -> list[Path]:
    """Delete markers and working directories; patches and templates are kept."""

    settings = ctx.settings
    removed: list[Path] = []
    for path in (
        settings.tasks_dir,
        settings.decompiled_dir,
        settings.download_dir,
        settings.tools_dir,
        settings.project_dir,
    ):
        if path.exists():
            shutil.rmtree(path)
            removed.append(path)
            ctx.report(f"Removed {path}")
    return removed
