"""Pre-flight lookup of required external executables."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable

from plugin_patcher.errors import ToolMissingError

logger = logging.getLogger(__name__)


def locate(executable: str) -> str:
    """Return the resolved path of ``executable`` or raise ``ToolMissingError``."""

    resolved = shutil.which(executable)
    if resolved is None:
        raise ToolMissingError(executable)
    logger.debug("Resolved %s -> %s", executable, resolved)
    return resolved


def locate_all(executables: Iterable[str]) -> dict[str, str]:
    """Resolve every tool in order, stopping at the first missing one."""

    return {executable: locate(executable) for executable in executables}
