"""Shared console helpers for the CLI."""

from rich.console import Console
from rich.markup import escape

from ..errors import EnvTemplatorError

# status output goes to stderr; stdout belongs to the exec'd command
console = Console(stderr=True, highlight=False)


def success(message: str) -> None:
    console.print(f"[bold green]✔[/bold green] {message}")


def info(message: str) -> None:
    console.print(f"[bold blue]ℹ[/bold blue] {message}")


def warning(message: str) -> None:
    console.print(f"[bold yellow]⚠[/bold yellow] {message}")


def error(message: str) -> None:
    console.print(f"[bold red]✖[/bold red] {message}")


def handle_error(e: Exception, verbose: bool = False) -> None:
    """Report an exception; show the traceback when verbose."""
    if isinstance(e, EnvTemplatorError):
        error(escape(f"[{e.code}] {e.message}"))
    else:
        error(escape(f"{type(e).__name__}: {e}"))
    if verbose:
        console.print_exception(show_locals=False)
