"""Decompile stage: turn the downloaded jar into a committed baseline source tree."""

from __future__ import annotations

import logging
import shutil

from plugin_patcher.errors import DecompileError, FormatError, GitCommandError
from plugin_patcher.pipeline import layout
from plugin_patcher.pipeline.context import PipelineContext
from plugin_patcher.pipeline.download import ensure_downloaded
from plugin_patcher.process import require_success
from plugin_patcher.tasks import DECOMPILE

logger = logging.getLogger(__name__)


def ensure_decompiled(ctx: PipelineContext) -> None:
    if not ctx.tracker.is_done(DECOMPILE):
        decompile(ctx)


def decompile(ctx: PipelineContext) -> None:
    """Decompile, normalize and commit the clean baseline.

    Each step must succeed before the next one runs. On failure the decompiler
    output and the partially prepared work tree are left in place; the next run
    wipes them before starting over.
    """

    ensure_downloaded(ctx)
    settings = ctx.settings
    tree = settings.project_dir

    for stale in (settings.decompiled_dir, tree):
        if stale.exists():
            shutil.rmtree(stale)
    settings.decompiled_dir.mkdir(parents=True)

    run_decompiler(ctx)
    count = layout.unpack_archive(settings.decompiled_dir / settings.artifact.file_name, tree)
    ctx.report(f"Unpacked {count} files into {tree}")

    run_formatter(ctx)

    layout.relocate_sources(tree, settings.layout.source_suffix)
    layout.rewrite_manifest_version(
        tree / layout.RESOURCES_ROOT / settings.layout.manifest_name,
        settings.layout.version_placeholder,
    )
    layout.copy_templates(settings.templates_dir, tree)
    allowed = layout.read_allow_list(settings.templates_dir / layout.ALLOW_LIST)

    try:
        commit_baseline(ctx, allowed)
    except GitCommandError as error:
        raise DecompileError(f"Creating baseline commit failed: {error}") from error

    ctx.tracker.mark_done(DECOMPILE)
    ctx.report(f"Decompiled {settings.artifact.file_name} into {tree}")


def run_decompiler(ctx: PipelineContext) -> None:
    settings = ctx.settings
    result = ctx.runner.run(
        [
            settings.tools.java,
            "-jar",
            str(settings.decompiler_path),
            *settings.decompiler.extra_args,
            str(settings.artifact_path),
            str(settings.decompiled_dir),
        ],
        cwd=settings.root_dir,
    )
    require_success(result, error=DecompileError, action="Decompiler")


def run_formatter(ctx: PipelineContext) -> None:
    settings = ctx.settings
    tree = settings.project_dir
    result = ctx.runner.run(
        [
            settings.tools.formatter,
            f"--options={settings.templates_dir / layout.FORMATTER_OPTIONS}",
            "--recursive",
            f"--suffix={settings.layout.backup_suffix}",
            "--quiet",
            f"{tree}/*{settings.layout.source_suffix}",
        ],
        cwd=tree,
    )
    require_success(result, error=FormatError, action="Formatter")
    removed = layout.remove_backup_files(tree, settings.layout.backup_suffix)
    logger.debug("Removed %d formatter backup files", removed)


def commit_baseline(ctx: PipelineContext, allowed: list[str]) -> None:
    """Create the single root commit from the allow-listed paths only."""

    git = ctx.git()
    git.init()
    with git.signing_disabled():
        git.add(allowed)
        git.commit(f"Decompiled {ctx.settings.artifact.name} {ctx.settings.artifact.version}")
        git.reset_hard()
        git.clean()
