"""
envtemplator Logger

Thin structured wrapper over the standard ``logging`` module. Keyword
arguments passed to a log call are rendered as ``key=value`` pairs after the
message, so call sites read like:

    logger = get_logger(__name__)
    logger.info("Rendering template", source="a.tmpl", destination="/etc/a")

The CLI calls ``configure_logging`` once; library users keep whatever handlers
they have installed. With none installed anywhere, warnings such as the
``require`` deprecation still reach stderr through logging's last-resort handler.
"""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler

from .constants import VERBOSITY_LEVELS

ROOT_LOGGER_NAME = "envtemplator"


def _format_context(context: dict) -> str:
    return " ".join(f"{key}={value}" for key, value in context.items())


class EnvTemplatorLogger:
    """
    Logger accepting structured keyword context.

    Attributes:
        name: Name of the underlying ``logging.Logger``
    """

    def __init__(self, name: str):
        if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        self.name = name
        self._logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        msg: str,
        exc_info: bool = False,
        extra: Optional[dict] = None,
        **context: Any,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if context:
            msg = f"{msg} {_format_context(context)}"
        self._logger.log(level, msg, exc_info=exc_info, extra=extra, stacklevel=3)

    def debug(self, msg: str, **context: Any) -> None:
        self._log(logging.DEBUG, msg, **context)

    def info(self, msg: str, **context: Any) -> None:
        self._log(logging.INFO, msg, **context)

    def warning(self, msg: str, **context: Any) -> None:
        self._log(logging.WARNING, msg, **context)

    def error(self, msg: str, **context: Any) -> None:
        self._log(logging.ERROR, msg, **context)

    def isEnabledFor(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)


def get_logger(name: str) -> EnvTemplatorLogger:
    """Get a structured logger namespaced under ``envtemplator``."""
    return EnvTemplatorLogger(name)


def level_for_verbosity(verbosity: int) -> str:
    """Translate a -v count into a logging level name."""
    if verbosity <= 0:
        return VERBOSITY_LEVELS[0]
    return VERBOSITY_LEVELS.get(verbosity, VERBOSITY_LEVELS[max(VERBOSITY_LEVELS)])


def configure_logging(verbosity: int = 0, console: Optional[Console] = None) -> None:
    """
    Install a rich handler on the envtemplator logger tree.

    Calling it again replaces the previously installed handler.

    Args:
        verbosity: 0 for warnings only, 1 for info, 2 or more for debug
        console: Console to log to (defaults to a stderr console)
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    root.setLevel(level_for_verbosity(verbosity))


__all__ = [
    "EnvTemplatorLogger",
    "get_logger",
    "configure_logging",
    "level_for_verbosity",
]
