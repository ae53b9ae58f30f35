"""
envtemplator Error Classes

Every failure the tool can hit is fatal at the point it occurs. Errors carry
a stable ``code`` so the CLI (and callers embedding the library) can report
them uniformly.

Usage:
    from envtemplator.errors import RenderError

    raise RenderError("unexpected '}'", template="nginx.conf.tmpl")
"""

from typing import Any, Dict, List, Optional


class EnvTemplatorError(Exception):
    """Base class for all envtemplator errors."""

    code = "ENVTEMPLATOR_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for structured output."""
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
        }


class ConfigurationError(EnvTemplatorError):
    """Malformed command line or configuration values."""

    code = "CONFIGURATION_ERROR"


class EnvFileError(EnvTemplatorError):
    """An env file could not be read or parsed."""

    code = "ENV_FILE_ERROR"

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class TemplateFunctionError(EnvTemplatorError):
    """A template function received input it cannot handle, or refused a value."""

    code = "TEMPLATE_FUNCTION_ERROR"

    def __init__(self, message: str, function: Optional[str] = None):
        self.function = function
        super().__init__(message)


class InclusionCycleError(EnvTemplatorError):
    """Nested include() calls exceeded the allowed depth."""

    code = "INCLUSION_CYCLE"

    def __init__(self, chain: List[str], max_depth: int):
        self.chain = list(chain)
        self.max_depth = max_depth
        super().__init__(
            f"inclusion cycle: include depth exceeded {max_depth} "
            f"({' -> '.join(self.chain)})"
        )


class RenderError(EnvTemplatorError):
    """A template failed to parse or execute."""

    code = "RENDER_ERROR"

    def __init__(self, message: str, template: str, lineno: Optional[int] = None):
        self.template = template
        self.lineno = lineno
        location = f"{template}:{lineno}" if lineno else template
        super().__init__(f"template: {location}: {message}")


class GenerationError(EnvTemplatorError):
    """Generating one source/destination pair failed."""

    code = "GENERATION_ERROR"

    def __init__(self, source: str, destination: str, reason: str):
        self.source = source
        self.destination = destination
        super().__init__(f"error while generating '{source}' -> '{destination}'. {reason}")


class ExecError(EnvTemplatorError):
    """The command to run after generation could not be executed."""

    code = "EXEC_ERROR"


__all__ = [
    "EnvTemplatorError",
    "ConfigurationError",
    "EnvFileError",
    "TemplateFunctionError",
    "InclusionCycleError",
    "RenderError",
    "GenerationError",
    "ExecError",
]
