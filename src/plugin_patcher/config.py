"""Runtime configuration for the download/decompile/patch/build pipeline."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_DECOMPILER_URL = (
    "https://github.com/Vineflower/vineflower/releases/download/1.10.1/vineflower-1.10.1.jar"
)


@dataclass(slots=True)
class ArtifactSettings:
    """Remote plugin artifact coordinates."""

    name: str = "plugin"
    version: str = ""
    url: str = ""
    sha256: str = ""
    group_id: str = "local.plugins"

    @property
    def file_name(self) -> str:
        return f"{self.name}-{self.version}.jar" if self.version else f"{self.name}.jar"


@dataclass(slots=True)
class DecompilerSettings:
    """Decompiler jar location and extra flags."""

    url: str = DEFAULT_DECOMPILER_URL
    sha256: str = ""
    extra_args: tuple[str, ...] = ()

    @property
    def file_name(self) -> str:
        name = Path(urlparse(self.url).path).name
        return name or "decompiler.jar"


@dataclass(slots=True)
class ToolSettings:
    """External executables, checked in declaration order at startup."""

    git: str = "git"
    java: str = "java"
    formatter: str = "astyle"
    build: str = "mvn"
    build_args: tuple[str, ...] = ("package",)

    def required(self) -> tuple[str, ...]:
        return (self.git, self.java, self.formatter, self.build)


@dataclass(slots=True)
class LayoutSettings:
    """Source tree normalization settings."""

    manifest_name: str = "plugin.yml"
    version_placeholder: str = "${project.version}"
    source_suffix: str = ".java"
    backup_suffix: str = ".orig"


@dataclass(slots=True)
class HttpSettings:
    """Download client settings."""

    timeout_seconds: float = 60.0
    max_retries: int = 3


@dataclass(slots=True)
class Settings:
    """Application settings grouped by pipeline concerns."""

    root_dir: Path = field(default_factory=Path.cwd)
    artifact: ArtifactSettings = field(default_factory=ArtifactSettings)
    decompiler: DecompilerSettings = field(default_factory=DecompilerSettings)
    tools: ToolSettings = field(default_factory=ToolSettings)
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    http: HttpSettings = field(default_factory=HttpSettings)

    @property
    def tasks_dir(self) -> Path:
        return self.root_dir / ".tasks"

    @property
    def tools_dir(self) -> Path:
        return self.root_dir / "tools"

    @property
    def download_dir(self) -> Path:
        return self.root_dir / "download"

    @property
    def decompiled_dir(self) -> Path:
        return self.root_dir / "decompiled"

    @property
    def project_dir(self) -> Path:
        return self.root_dir / "project"

    @property
    def patches_dir(self) -> Path:
        return self.root_dir / "patches"

    @property
    def templates_dir(self) -> Path:
        return self.root_dir / "templates"

    @property
    def artifact_path(self) -> Path:
        return self.download_dir / self.artifact.file_name

    @property
    def decompiler_path(self) -> Path:
        return self.tools_dir / self.decompiler.file_name

    @classmethod
    def from_env(cls, root_dir: Path | None = None) -> Settings:
        """Load settings from environment with defaults suitable for a local checkout."""

        env_root = os.getenv("PLUGIN_PATCHER_ROOT_DIR", "").strip()
        return cls(
            root_dir=(root_dir or (Path(env_root) if env_root else Path.cwd())).resolve(),
            artifact=ArtifactSettings(
                name=os.getenv("PLUGIN_PATCHER_ARTIFACT_NAME", "plugin").strip() or "plugin",
                version=os.getenv("PLUGIN_PATCHER_ARTIFACT_VERSION", "").strip(),
                url=os.getenv("PLUGIN_PATCHER_ARTIFACT_URL", "").strip(),
                sha256=os.getenv("PLUGIN_PATCHER_ARTIFACT_SHA256", "").strip().lower(),
                group_id=os.getenv("PLUGIN_PATCHER_ARTIFACT_GROUP_ID", "local.plugins").strip(),
            ),
            decompiler=DecompilerSettings(
                url=os.getenv("PLUGIN_PATCHER_DECOMPILER_URL", DEFAULT_DECOMPILER_URL).strip(),
                sha256=os.getenv("PLUGIN_PATCHER_DECOMPILER_SHA256", "").strip().lower(),
                extra_args=_env_args("PLUGIN_PATCHER_DECOMPILER_ARGS", default=()),
            ),
            tools=ToolSettings(
                git=os.getenv("PLUGIN_PATCHER_GIT", "git"),
                java=os.getenv("PLUGIN_PATCHER_JAVA", "java"),
                formatter=os.getenv("PLUGIN_PATCHER_FORMATTER", "astyle"),
                build=os.getenv("PLUGIN_PATCHER_BUILD_TOOL", "mvn"),
                build_args=_env_args("PLUGIN_PATCHER_BUILD_ARGS", default=("package",)),
            ),
            layout=LayoutSettings(
                manifest_name=os.getenv("PLUGIN_PATCHER_MANIFEST_NAME", "plugin.yml"),
                version_placeholder=os.getenv(
                    "PLUGIN_PATCHER_VERSION_PLACEHOLDER",
                    "${project.version}",
                ),
            ),
            http=HttpSettings(
                timeout_seconds=_env_float("PLUGIN_PATCHER_HTTP_TIMEOUT_SECONDS", 60.0),
                max_retries=_env_int("PLUGIN_PATCHER_HTTP_MAX_RETRIES", 3),
            ),
        )

    def validate_for_download(self) -> None:
        """Fail fast before any network traffic when artifact coordinates are incomplete."""

        if not self.artifact.url:
            raise ValueError(
                "Plugin artifact URL is required. Set PLUGIN_PATCHER_ARTIFACT_URL.",
            )
        _validate_url(self.artifact.url, "plugin artifact")
        _validate_url(self.decompiler.url, "decompiler")
        if not self.artifact.version:
            raise ValueError(
                "Plugin artifact version is required. Set PLUGIN_PATCHER_ARTIFACT_VERSION.",
            )
        if self.http.timeout_seconds <= 0:
            raise ValueError("PLUGIN_PATCHER_HTTP_TIMEOUT_SECONDS must be positive.")
        if self.http.max_retries < 0:
            raise ValueError("PLUGIN_PATCHER_HTTP_MAX_RETRIES must be >= 0.")


def _validate_url(value: str, label: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            f"Invalid {label} URL: {value!r}. Expected an absolute http:// or https:// URL.",
        )


def _env_args(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    return tuple(shlex.split(value))


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {value!r}") from error


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as error:
        raise ValueError(f"Invalid numeric value for {name}: {value!r}") from error
