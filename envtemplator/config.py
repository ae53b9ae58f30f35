"""
envtemplator Configuration Models

Pydantic models describing one invocation: the list of template pairs and the
rendering switches. Everything the generator and renderer need is passed in
explicitly through these models; there is no process-wide state.

Usage:
    from envtemplator.config import TemplatePath, build_config

    config = build_config(
        templates=[TemplatePath.parse("/tmpl/app.conf:/etc/app.conf")],
        keep_blank_lines=False,
    )
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from typing_extensions import Self

from .constants import Defaults, Messages
from .errors import ConfigurationError


class TemplatePath(BaseModel):
    """One source template and the file it is rendered into."""

    source: str
    destination: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def parse(cls, value: str) -> "TemplatePath":
        """
        Parse a ``source:destination`` option value.

        Exactly one separator is required; surrounding whitespace of each
        part is stripped.

        Raises:
            ConfigurationError: If the value does not contain exactly one separator
        """
        parts = value.split(Defaults.TEMPLATE_SEPARATOR)
        if len(parts) != 2:
            raise ConfigurationError(f"{Messages.INVALID_TEMPLATE_OPTION} ({value!r})")
        source, destination = (part.strip() for part in parts)
        if not source or not destination:
            raise ConfigurationError(f"{Messages.INVALID_TEMPLATE_OPTION} ({value!r})")
        return cls(source=source, destination=destination)

    def __str__(self) -> str:
        return f"{{source: '{self.source}', destination: '{self.destination}'}}"


class GeneratorConfig(BaseModel):
    """
    Settings for one batch of template generation.

    Attributes:
        templates: Pairs rendered in declaration order
        debug_templates: Echo raw rendered output to the diagnostic stream
        delim_left: Left expression delimiter override (set with delim_right)
        delim_right: Right expression delimiter override (set with delim_left)
        keep_blank_lines: Skip blank-line collapsing
        strict_undefined: Fail on undefined template variables
        max_include_depth: Nesting limit for include() (at most 64)
        verbosity: 0 quiet, 1 info, 2+ debug
    """

    templates: List[TemplatePath] = Field(default_factory=list)
    debug_templates: bool = False
    delim_left: Optional[str] = None
    delim_right: Optional[str] = None
    keep_blank_lines: bool = False
    strict_undefined: bool = False
    max_include_depth: int = Field(
        default=Defaults.MAX_INCLUDE_DEPTH, ge=1, le=Defaults.MAX_INCLUDE_DEPTH_LIMIT
    )
    verbosity: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("delim_left", "delim_right")
    @classmethod
    def empty_delimiter_is_unset(cls, v: Optional[str]) -> Optional[str]:
        """An empty string means "not overridden", as with an omitted flag."""
        return v or None

    @model_validator(mode="after")
    def validate_delimiters(self) -> Self:
        """Both delimiters are overridden together or not at all."""
        if (self.delim_left is None) != (self.delim_right is None):
            raise ValueError("delim-left and delim-right must be set together")
        return self

    @property
    def left_delimiter(self) -> str:
        return self.delim_left or Defaults.DELIM_LEFT

    @property
    def right_delimiter(self) -> str:
        return self.delim_right or Defaults.DELIM_RIGHT


def build_config(**values: Any) -> GeneratorConfig:
    """
    Build a GeneratorConfig, reporting invalid values as ConfigurationError.

    Raises:
        ConfigurationError: If any value fails validation
    """
    try:
        return GeneratorConfig(**values)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {details}") from e


__all__ = [
    "TemplatePath",
    "GeneratorConfig",
    "build_config",
]
