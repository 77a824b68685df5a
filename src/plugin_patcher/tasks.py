"""On-disk completion markers for one-shot pipeline stages."""

from __future__ import annotations

from pathlib import Path

DOWNLOAD = "download"
DECOMPILE = "decompile"
PATCH = "patch"


class TaskTracker:
    """Records stage completion as empty files in a tracking directory."""

    def __init__(self, tasks_dir: Path) -> None:
        self.tasks_dir = tasks_dir

    def is_done(self, name: str) -> bool:
        return (self.tasks_dir / name).is_file()

    def mark_done(self, name: str) -> None:
        self.tasks_dir.mkdir(parents=True, exist_ok=True)
        (self.tasks_dir / name).touch()

    def completed(self) -> list[str]:
        if not self.tasks_dir.is_dir():
            return []
        return sorted(path.name for path in self.tasks_dir.iterdir() if path.is_file())

    def clear(self, name: str) -> None:
        (self.tasks_dir / name).unlink(missing_ok=True)
