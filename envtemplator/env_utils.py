"""
Environment Utilities
=====================

- Loading ``KEY=VALUE`` env files into the process environment
- Capturing the environment snapshot handed to templates

Env files never override variables that are already set, and the first file
that defines a variable wins. Nothing is loaded implicitly: without explicit
paths no ``.env`` lookup happens.
"""

import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, MutableMapping, Optional, Union

from dotenv import dotenv_values

from .constants import Defaults
from .errors import EnvFileError
from .logger import get_logger

logger = get_logger(__name__)


def load_env_files(
    paths: Iterable[Union[str, Path]],
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Load env files into the process environment.

    Args:
        paths: Env files, in priority order
        environ: Target mapping (defaults to ``os.environ``)

    Returns:
        Variables that were actually set by this call

    Raises:
        EnvFileError: If a file cannot be read
    """
    target = os.environ if environ is None else environ
    applied: Dict[str, str] = {}

    for path in paths:
        try:
            with open(path, "r", encoding=Defaults.ENCODING) as stream:
                values = dotenv_values(stream=stream)
        except OSError as e:
            raise EnvFileError(f"Unable to read env file '{path}': {e}", path=str(path)) from e

        for key, value in values.items():
            # bare "KEY" lines carry no value
            if value is None or key in target:
                continue
            target[key] = value
            applied[key] = value

        logger.debug("Loaded env file", path=str(path), variables=len(values))

    return applied


def snapshot_environ(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Copy the current environment into a plain dict for template rendering."""
    return dict(os.environ if environ is None else environ)


__all__ = [
    "load_env_files",
    "snapshot_environ",
]
