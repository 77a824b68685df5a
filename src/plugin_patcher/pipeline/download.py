"""Download stage: fetch the decompiler and the plugin artifact."""

from __future__ import annotations

from plugin_patcher.errors import PatcherError
from plugin_patcher.http.fetcher import verify_sha256
from plugin_patcher.pipeline.context import PipelineContext
from plugin_patcher.process import require_success
from plugin_patcher.tasks import DOWNLOAD


def ensure_downloaded(ctx: PipelineContext) -> None:
    if not ctx.tracker.is_done(DOWNLOAD):
        download_artifacts(ctx)


def download_artifacts(ctx: PipelineContext) -> None:
    """Fetch both jars, verify configured digests and register the plugin with Maven."""

    settings = ctx.settings
    settings.validate_for_download()

    with ctx.downloader_factory() as downloader:
        tool = downloader.download(settings.decompiler.url, settings.decompiler_path)
        verify_sha256(tool, settings.decompiler.sha256)
        ctx.report(f"Downloaded decompiler: {tool.path} ({tool.size} bytes)")

        artifact = downloader.download(settings.artifact.url, settings.artifact_path)
        verify_sha256(artifact, settings.artifact.sha256)
        ctx.report(f"Downloaded plugin: {artifact.path} ({artifact.size} bytes)")

    register_artifact(ctx)
    ctx.tracker.mark_done(DOWNLOAD)


def register_artifact(ctx: PipelineContext) -> None:
    """Install the downloaded jar into the local Maven repository."""

    settings = ctx.settings
    result = ctx.runner.run(
        [
            settings.tools.build,
            "--batch-mode",
            "install:install-file",
            f"-Dfile={settings.artifact_path}",
            f"-DgroupId={settings.artifact.group_id}",
            f"-DartifactId={settings.artifact.name}",
            f"-Dversion={settings.artifact.version}",
            "-Dpackaging=jar",
        ],
        cwd=settings.root_dir,
    )
    require_success(result, error=PatcherError, action="Registering plugin with local repository")
    ctx.report(
        "Registered "
        f"{settings.artifact.group_id}:{settings.artifact.name}:{settings.artifact.version}",
    )
