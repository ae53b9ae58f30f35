"""
envtemplator

Renders configuration files from environment variables and optionally
replaces the current process with a command, for container entrypoints.

Usage:
    from envtemplator import TemplatePath, build_config, generate_templates

    config = build_config(templates=[TemplatePath.parse("app.tmpl:/etc/app.conf")])
    generate_templates(config)

Package Structure:
    envtemplator/
    ├── templates/      - Jinja2 renderer, function library, blank-line normalizer
    ├── cli/            - typer command line interface
    ├── config.py       - pydantic configuration models
    ├── generator.py    - batch generation of template pairs
    ├── env_utils.py    - env files and the environment snapshot
    └── process.py      - exec of the target command
"""

from .errors import (
    EnvTemplatorError,
    ConfigurationError,
    EnvFileError,
    TemplateFunctionError,
    InclusionCycleError,
    RenderError,
    GenerationError,
    ExecError,
)
from .constants import ENVTEMPLATOR_VERSION
from .config import TemplatePath, GeneratorConfig, build_config
from .env_utils import load_env_files, snapshot_environ
from .logger import get_logger, configure_logging
from .templates import (
    FUNCTIONS,
    TemplateRenderer,
    render_template,
    normalize_output,
)
from .generator import BatchGenerator, generate_templates
from .process import exec_command

__version__ = ENVTEMPLATOR_VERSION

__all__ = [
    "__version__",
    # Errors
    "EnvTemplatorError",
    "ConfigurationError",
    "EnvFileError",
    "TemplateFunctionError",
    "InclusionCycleError",
    "RenderError",
    "GenerationError",
    "ExecError",
    # Configuration
    "TemplatePath",
    "GeneratorConfig",
    "build_config",
    # Environment
    "load_env_files",
    "snapshot_environ",
    # Logging
    "get_logger",
    "configure_logging",
    # Rendering
    "FUNCTIONS",
    "TemplateRenderer",
    "render_template",
    "normalize_output",
    "BatchGenerator",
    "generate_templates",
    "exec_command",
]
