"""
envtemplator Shared Constants

This module defines constants used across the envtemplator package.
It serves as the single source of truth for defaults and fixed formats.

Usage:
    from envtemplator.constants import Defaults, Sentinels

    left = config.delim_left or Defaults.DELIM_LEFT
"""

# =============================================================================
# VERSION INFORMATION
# =============================================================================

ENVTEMPLATOR_VERSION = "0.1.0"
"""Current envtemplator version"""


# =============================================================================
# DEFAULT VALUES
# =============================================================================


class Defaults:
    """Rendering defaults."""

    DELIM_LEFT = "{{"
    """Default left expression delimiter"""

    DELIM_RIGHT = "}}"
    """Default right expression delimiter"""

    MAX_INCLUDE_DEPTH = 32
    """Maximum nesting of include() calls before the render is aborted"""

    MAX_INCLUDE_DEPTH_LIMIT = 64
    """Highest configurable include depth, kept well inside the interpreter recursion limit"""

    ENCODING = "utf-8"
    """Encoding used to read templates and write destinations"""

    TEMPLATE_SEPARATOR = ":"
    """Separator between source and destination in --template values"""


class FileModes:
    """Permission bits for generated files."""

    DESTINATION = 0o664
    """rw-rw-r--, applied when the destination is created (umask still applies)"""


class Sentinels:
    """Fixed markers written to diagnostic output."""

    DEBUG_TEMPLATE_END = "\x00\n"
    """Terminates each raw template dump when --debug-templates is set"""


class Messages:
    """Fixed user-facing messages."""

    REQUIRE_DEPRECATED = "require built-in function is deprecated. Use required instead."
    REQUIRE_MISSING = "Required argument is missing or empty!"
    INVALID_TEMPLATE_OPTION = "Option has invalid format!"
    MISSING_COMMAND = "Missing command to execute!"


# =============================================================================
# LOGGING
# =============================================================================

VERBOSITY_LEVELS = {
    0: "WARNING",
    1: "INFO",
    2: "DEBUG",
}
"""Mapping of -v verbosity values to logging level names (values above 2 use DEBUG)"""


__all__ = [
    "ENVTEMPLATOR_VERSION",
    "Defaults",
    "FileModes",
    "Sentinels",
    "Messages",
    "VERBOSITY_LEVELS",
]
