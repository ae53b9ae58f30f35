"""envtemplator CLI - Main entry point."""

from pathlib import Path
from typing import List, Optional

import typer

from .. import __version__
from ..config import TemplatePath, build_config
from ..constants import Messages
from ..env_utils import load_env_files
from ..generator import generate_templates
from ..logger import configure_logging, get_logger
from ..process import exec_command
from .utils import error, handle_error, warning

logger = get_logger(__name__)

app = typer.Typer(
    name="envtemplator",
    help="Render config files from environment variables, then optionally exec a command",
    add_completion=False,
)


@app.command(
    context_settings={
        # everything after the command name belongs to the command
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    }
)
def generate(
    templates: Optional[List[str]] = typer.Option(
        None,
        "--template",
        "-t",
        help="Template as source:destination. Can be passed multiple times.",
    ),
    debug_templates: bool = typer.Option(
        False,
        "--debug-templates",
        help="Print rendered templates to stderr, each followed by '\\x00\\n'.",
    ),
    do_exec: bool = typer.Option(
        False,
        "--exec",
        help="Exec the command given as trailing arguments after generating templates.",
    ),
    print_version: bool = typer.Option(
        False,
        "--version",
        help="Print version and exit.",
    ),
    env_files: Optional[List[Path]] = typer.Option(
        None,
        "--env-file",
        help="Additional file with environment variables. Can be passed multiple times.",
    ),
    delim_left: str = typer.Option(
        "",
        "--delim-left",
        help="Override default left delimiter {{ (requires --delim-right).",
    ),
    delim_right: str = typer.Option(
        "",
        "--delim-right",
        help="Override default right delimiter }} (requires --delim-left).",
    ),
    keep_blank_lines: bool = typer.Option(
        False,
        "--keep-blank-lines",
        help="Keep consecutive blank lines in the output.",
    ),
    strict_undefined: bool = typer.Option(
        False,
        "--strict-undefined",
        help="Fail when a template uses an undefined variable.",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        min=0,
        help="Verbosity level (0 quiet, 1 info, 2 debug).",
    ),
    command: Optional[List[str]] = typer.Argument(
        None,
        help="Command and arguments to exec (with --exec).",
    ),
):
    """
    Generate files from templates using environment variables.

    Templates see the environment as Env (e.g. {{ Env.HOME }}). With --exec the
    process is replaced by the given command once all files are written.

    Examples:
        envtemplator -t /tmpl/nginx.conf:/etc/nginx/nginx.conf
        envtemplator --env-file app.env -t app.tmpl:app.conf --exec nginx -g 'daemon off;'
    """
    verbose = verbosity >= 2
    configure_logging(verbosity)

    try:
        config = build_config(
            templates=[TemplatePath.parse(value) for value in templates or []],
            debug_templates=debug_templates,
            delim_left=delim_left,
            delim_right=delim_right,
            keep_blank_lines=keep_blank_lines,
            strict_undefined=strict_undefined,
            verbosity=verbosity,
        )

        # no implicit .env: only the files asked for
        if env_files:
            load_env_files(env_files)

        if print_version:
            # the only stdout output; diagnostics go to stderr
            typer.echo(f"Version: {__version__}")
            raise typer.Exit(0)

        if verbosity > 0:
            logger.info("Generating templates")
        generate_templates(config)

        if not do_exec:
            if command:
                warning(f"Ignoring arguments without --exec: {' '.join(command)}")
            return

        if not command:
            error(Messages.MISSING_COMMAND)
            raise typer.Exit(1)
        exec_command(command)

    except typer.Exit:
        raise
    except KeyboardInterrupt:
        raise typer.Exit(130)
    except Exception as e:
        handle_error(e, verbose)
        raise typer.Exit(1)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
