"""CLI entrypoint for plugin-patcher."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import rich_click as click

from plugin_patcher import __version__
from plugin_patcher.errors import PatcherError
from plugin_patcher.pipeline.controllers import PipelineCliController, PipelineCommand

click.rich_click.USE_MARKDOWN = True
PIPELINE_CONTROLLER = PipelineCliController()

# Aliases are exact matches: command names are case-sensitive.
COMMAND_ALIASES = {
    "j": "jar",
    "p": "patch",
    "dec": "decompile",
    "rec": "recompile",
    "reb": "rebuild",
    "dl": "download",
    "clean": "cleanup",
    "c": "cleanup",
    "h": "help",
}
_NO_TOOLS_NEEDED = {"help"}


class AliasedGroup(click.RichGroup):
    """Command group that resolves short aliases to canonical command names."""

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        _, command, remaining = super().resolve_command(ctx, args)
        return (command.name if command is not None else None), command, remaining


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="plugin-patcher")
@click.option(
    "--root-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Workspace root holding templates/ and patches/. Defaults to PLUGIN_PATCHER_ROOT_DIR "
    "or the current directory.",
)
@click.option("--verbose", is_flag=True, default=False, help="Log external commands.")
@click.pass_context
def plugin_patcher(ctx: click.Context, root_dir: Path | None, verbose: bool) -> None:
    """Download, decompile, patch and rebuild a plugin jar."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = PipelineCommand(root_dir=root_dir, progress=click.echo)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return
    if ctx.invoked_subcommand in _NO_TOOLS_NEEDED:
        return
    with _cli_errors():
        PIPELINE_CONTROLLER.check_tools(ctx.obj)


@plugin_patcher.command("jar")
@click.pass_obj
def jar(command: PipelineCommand) -> None:
    """Run the full pipeline and build the patched jar (alias: j)."""

    with _cli_errors():
        _emit_lines(PIPELINE_CONTROLLER.build(command))


@plugin_patcher.command("patch")
@click.pass_obj
def patch(command: PipelineCommand) -> None:
    """Reset the work tree to its baseline and apply the patch set (alias: p)."""

    with _cli_errors():
        _emit_lines(PIPELINE_CONTROLLER.apply(command))


@plugin_patcher.command("decompile")
@click.pass_obj
def decompile(command: PipelineCommand) -> None:
    """Download, decompile, normalize and commit the baseline (alias: dec)."""

    with _cli_errors():
        _emit_lines(PIPELINE_CONTROLLER.decompile(command))


@plugin_patcher.command("recompile")
def recompile() -> None:
    """Reserved command name; not implemented (alias: rec)."""

    raise click.ClickException("Command 'recompile' is not implemented.")


@plugin_patcher.command("rebuild")
@click.pass_obj
def rebuild(command: PipelineCommand) -> None:
    """Regenerate patch files from the commits on top of the baseline (alias: reb)."""

    with _cli_errors():
        _emit_lines(PIPELINE_CONTROLLER.rebuild(command))


@plugin_patcher.command("download")
@click.pass_obj
def download(command: PipelineCommand) -> None:
    """Fetch the decompiler and the plugin, register it with Maven (alias: dl)."""

    with _cli_errors():
        _emit_lines(PIPELINE_CONTROLLER.download(command))


@plugin_patcher.command("cleanup")
@click.pass_obj
def cleanup(command: PipelineCommand) -> None:
    """Delete task markers and all working directories (aliases: clean, c)."""

    with _cli_errors():
        _emit_lines(PIPELINE_CONTROLLER.cleanup(command))


@plugin_patcher.command("help")
@click.pass_context
def help_(ctx: click.Context) -> None:
    """Show usage (alias: h)."""

    click.echo(ctx.parent.get_help() if ctx.parent is not None else ctx.get_help())


@contextmanager
def _cli_errors() -> Iterator[None]:
    try:
        yield
    except (PatcherError, ValueError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    plugin_patcher()
