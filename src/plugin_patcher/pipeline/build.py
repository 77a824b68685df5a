"""Build stage: run the build tool against the patched work tree."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from plugin_patcher.errors import BuildFailureError
from plugin_patcher.pipeline.context import PipelineContext
from plugin_patcher.pipeline.patches import apply_patches
from plugin_patcher.process import diagnostics

BUILD_OUTPUT_DIR = "target"
_SKIPPED_SUFFIXES = ("-sources.jar", "-javadoc.jar", "-tests.jar")


@dataclass(slots=True)
class BuildOutcome:
    """Where the build left its output."""

    output_dir: Path
    artifacts: list[Path]


def build_jar(ctx: PipelineContext) -> BuildOutcome:
    """Re-apply the stored patch set and run the build tool in the work tree."""

    apply_patches(ctx)
    settings = ctx.settings
    tree = settings.project_dir

    ctx.report(f"Building {tree}")
    result = ctx.runner.run([settings.tools.build, *settings.tools.build_args], cwd=tree)
    if not result.ok:
        raise BuildFailureError(
            f"Build failed with exit code {result.exit_code}.\n{diagnostics(result)}".rstrip(),
            exit_code=result.exit_code,
        )

    output_dir = tree / BUILD_OUTPUT_DIR
    outcome = BuildOutcome(output_dir=output_dir, artifacts=find_artifacts(output_dir))
    ctx.report(f"Build output: {output_dir}")
    return outcome


def find_artifacts(output_dir: Path) -> list[Path]:
    """Built jars, without shaded originals and secondary classifier jars."""

    if not output_dir.is_dir():
        return []
    return sorted(
        path
        for path in output_dir.glob("*.jar")
        if not path.name.startswith("original-") and not path.name.endswith(_SKIPPED_SUFFIXES)
    )
