"""Source tree normalization helpers applied to decompiler output."""

from __future__ import annotations

import logging
import re
import shutil
import zipfile
from pathlib import Path, PurePosixPath

from plugin_patcher.errors import DecompileError

logger = logging.getLogger(__name__)

JAVA_ROOT = PurePosixPath("src/main/java")
RESOURCES_ROOT = PurePosixPath("src/main/resources")
MANIFEST_MF = PurePosixPath("META-INF/MANIFEST.MF")

FORMATTER_OPTIONS = "astylerc"
ALLOW_LIST = "files.txt"
# template file name -> destination inside the work tree
SCAFFOLD_FILES = {
    "gitignore": ".gitignore",
    "pom.xml": "pom.xml",
}

_VERSION_LINE = re.compile(r"^version\s*:")


def unpack_archive(archive: Path, dest: Path) -> int:
    """Extract ``archive`` into ``dest`` and return the number of files written."""

    if not archive.is_file():
        raise DecompileError(f"Decompiler output not found: {archive}")
    dest.mkdir(parents=True, exist_ok=True)
    root = dest.resolve()
    count = 0
    try:
        with zipfile.ZipFile(archive) as bundle:
            for member in bundle.infolist():
                target = (dest / member.filename).resolve()
                if not target.is_relative_to(root):
                    raise DecompileError(f"Refusing to extract {member.filename!r} outside {dest}")
                if member.is_dir():
                    continue
                bundle.extract(member, dest)
                count += 1
    except zipfile.BadZipFile as error:
        raise DecompileError(f"Decompiler output is not a valid archive: {archive}") from error
    return count


def remove_backup_files(root: Path, suffix: str) -> int:
    removed = 0
    for path in sorted(root.rglob(f"*{suffix}")):
        if path.is_file():
            path.unlink()
            removed += 1
    return removed


def relocate_sources(tree: Path, source_suffix: str = ".java") -> int:
    """Move sources under ``src/main/java`` and everything else under ``src/main/resources``."""

    files = [
        path
        for path in tree.rglob("*")
        if path.is_file() and ".git" not in path.relative_to(tree).parts
    ]
    moved = 0
    for path in sorted(files):
        relative = PurePosixPath(path.relative_to(tree).as_posix())
        if relative.parts[:2] == ("src", "main"):
            continue
        if relative == MANIFEST_MF:
            path.unlink()
            continue
        base = JAVA_ROOT if relative.suffix == source_suffix else RESOURCES_ROOT
        target = tree / base / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(path, target)
        moved += 1

    _prune_empty_dirs(tree)
    logger.debug("Relocated %d files in %s", moved, tree)
    return moved


def _prune_empty_dirs(tree: Path) -> None:
    for directory in sorted(
        (path for path in tree.rglob("*") if path.is_dir()),
        key=lambda path: len(path.parts),
        reverse=True,
    ):
        if ".git" in directory.relative_to(tree).parts:
            continue
        if not any(directory.iterdir()):
            directory.rmdir()


def rewrite_manifest_version(manifest: Path, placeholder: str) -> None:
    """Replace the first declared ``version:`` line with the build-tool placeholder."""

    if not manifest.is_file():
        raise DecompileError(f"Plugin manifest not found: {manifest}")
    lines = manifest.read_text("utf-8").splitlines(keepends=True)
    for index, line in enumerate(lines):
        if _VERSION_LINE.match(line):
            ending = "\n" if line.endswith("\n") else ""
            lines[index] = f"version: {placeholder}{ending}"
            manifest.write_text("".join(lines), "utf-8")
            return
    raise DecompileError(f"No version line found in {manifest}")


def copy_templates(templates_dir: Path, tree: Path) -> list[Path]:
    copied: list[Path] = []
    for source_name, target_name in SCAFFOLD_FILES.items():
        source = templates_dir / source_name
        if not source.is_file():
            raise DecompileError(f"Template file missing: {source}")
        target = tree / target_name
        shutil.copyfile(source, target)
        copied.append(target)
    return copied


def read_allow_list(path: Path) -> list[str]:
    """Return the paths to stage, skipping blank lines and ``#`` comments."""

    if not path.is_file():
        raise DecompileError(f"Allow-list not found: {path}")
    entries: list[str] = []
    for raw in path.read_text("utf-8").splitlines():
        entry = raw.strip()
        if not entry or entry.startswith("#"):
            continue
        entries.append(entry)
    return entries
