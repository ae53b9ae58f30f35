"""Replace the current process with the configured command."""

import os
import shutil
from typing import List, Mapping, NoReturn, Optional, Sequence

from .constants import Messages
from .errors import ExecError
from .logger import get_logger

logger = get_logger(__name__)


def resolve_command(command: str, path: Optional[str] = None) -> str:
    """
    Locate an executable the way a shell would.

    Raises:
        ExecError: If the command is not found on the search path
    """
    resolved = shutil.which(command, path=path)
    if resolved is None:
        raise ExecError(f'exec: "{command}": executable file not found in $PATH')
    return resolved


def exec_command(args: Sequence[str], environ: Optional[Mapping[str, str]] = None) -> NoReturn:
    """
    Replace the current process image with ``args``.

    Control only comes back if the exec itself fails.

    Args:
        args: Command followed by its arguments
        environ: Environment for the new process (defaults to ``os.environ``)

    Raises:
        ExecError: If args is empty, the command is missing or exec fails
    """
    argv: List[str] = list(args)
    if not argv:
        raise ExecError(Messages.MISSING_COMMAND)

    env = dict(os.environ if environ is None else environ)
    command_path = resolve_command(argv[0], path=env.get("PATH"))
    logger.debug("Executing command", path=command_path, args=argv[1:])

    try:
        os.execve(command_path, argv, env)
    except OSError as e:
        raise ExecError(f"Unable to exec '{command_path}'! {e}") from e
    raise ExecError(f"Unable to exec '{command_path}'!")


__all__ = [
    "resolve_command",
    "exec_command",
]
