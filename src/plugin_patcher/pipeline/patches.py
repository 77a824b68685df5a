"""Patch engine: apply the stored patch set, or regenerate it from commits."""

from __future__ import annotations

import logging
from pathlib import Path

from plugin_patcher.errors import PatchConflictError
from plugin_patcher.pipeline.context import PipelineContext
from plugin_patcher.pipeline.decompile import ensure_decompiled
from plugin_patcher.process import diagnostics
from plugin_patcher.tasks import PATCH

logger = logging.getLogger(__name__)

PATCH_GLOB = "*.patch"


def list_patches(patches_dir: Path) -> list[Path]:
    """Stored patches in application order (file name order)."""

    if not patches_dir.is_dir():
        return []
    return sorted(path for path in patches_dir.glob(PATCH_GLOB) if path.is_file())


def ensure_patched(ctx: PipelineContext) -> None:
    """Apply the patch set unless a complete apply already left the tree patched."""

    if not ctx.tracker.is_done(PATCH) or ctx.git().am_in_progress():
        apply_patches(ctx)


def apply_patches(ctx: PipelineContext) -> list[Path]:
    """Reset the work tree to its baseline and commit every stored patch on top.

    The first patch that fails stops the run with the ``git am`` session left
    open, so the conflict can be resolved by hand.
    """

    ensure_decompiled(ctx)
    ctx.tracker.clear(PATCH)
    git = ctx.git()

    if git.am_in_progress():
        logger.warning("Aborting unfinished git am session in %s", git.work_tree)
        git.am_abort()
    root = git.root_commit()
    git.reset_hard(root)
    ctx.report(f"Reset work tree to baseline {root[:12]}")

    patches = list_patches(ctx.settings.patches_dir)
    for patch in patches:
        result = git.am(patch)
        if not result.ok:
            raise PatchConflictError(
                f"Patch {patch.name} does not apply; resolve it with git am in "
                f"{git.work_tree}.\n{diagnostics(result)}".rstrip(),
                patch=patch,
            )
        ctx.report(f"Applied {patch.name}")

    ctx.tracker.mark_done(PATCH)
    ctx.report(f"Applied {len(patches)} patches")
    return patches


def rebuild_patch_set(ctx: PipelineContext) -> list[Path]:
    """Replace the stored patch set with one patch per commit after the baseline."""

    ensure_patched(ctx)
    git = ctx.git()
    patches_dir = ctx.settings.patches_dir

    for stale in list_patches(patches_dir):
        stale.unlink()
    patches_dir.mkdir(parents=True, exist_ok=True)

    written = git.format_patch(git.root_commit(), patches_dir)
    for patch in written:
        ctx.report(f"Wrote {patch.name}")
    ctx.report(f"Rebuilt {len(written)} patches in {patches_dir}")
    return written
