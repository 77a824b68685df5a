from __future__ import annotations

import sys
from pathlib import Path

import allure
import pytest

from plugin_patcher.errors import FormatError, ToolMissingError
from plugin_patcher.process import (
    CommandResult,
    SubprocessCommandRunner,
    diagnostics,
    require_success,
)

pytestmark = [
    allure.epic("Pipeline"),
    allure.feature("External Commands"),
]


def test_subprocess_runner_captures_output_and_exit_code(tmp_path: Path) -> None:
    runner = SubprocessCommandRunner()

    result = runner.run(
        [
            sys.executable,
            "-c",
            "import os, sys; print(os.getcwd()); print('warn', file=sys.stderr); sys.exit(3)",
        ],
        cwd=tmp_path,
    )

    assert result.exit_code == 3
    assert not result.ok
    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()
    assert result.stderr.strip() == "warn"


def test_subprocess_runner_reports_missing_executable() -> None:
    with pytest.raises(ToolMissingError, match="definitely-not-a-real-tool"):
        SubprocessCommandRunner().run(["definitely-not-a-real-tool", "--version"])


def test_require_success_passes_through_successful_result() -> None:
    result = CommandResult(args=("astyle",), exit_code=0, stdout="", stderr="")

    assert require_success(result, error=FormatError, action="Formatter") is result


def test_require_success_raises_with_tool_diagnostics() -> None:
    result = CommandResult(
        args=("astyle",),
        exit_code=2,
        stdout="formatting Main.java\n",
        stderr="Invalid option file\n",
    )

    with pytest.raises(FormatError, match="Formatter failed with exit code 2") as raised:
        require_success(result, error=FormatError, action="Formatter")
    assert "Invalid option file" in str(raised.value)


def test_diagnostics_keeps_only_the_tail() -> None:
    result = CommandResult(
        args=("mvn",),
        exit_code=1,
        stdout="\n".join(f"line {index}" for index in range(100)),
        stderr="BUILD FAILURE",
    )

    tail = diagnostics(result, limit=3).splitlines()

    assert tail == ["line 98", "line 99", "BUILD FAILURE"]
