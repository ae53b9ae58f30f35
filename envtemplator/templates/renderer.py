"""
envtemplator Template Renderer
==============================

Renders one template body with Jinja2:

- Expression delimiters are configurable (``{{``/``}}`` by default)
- The environment snapshot is available as ``Env`` (``{{ Env.HOME }}``)
- The function library is registered as globals and filters
- ``include(name, data)`` renders another template by name; nesting is
  bounded so a template including itself forever fails cleanly

Parse errors and evaluation errors both surface as RenderError tagged with
the template name.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    Undefined,
    pass_context,
)
from jinja2.runtime import Context, Macro

from ..config import GeneratorConfig
from ..constants import Defaults
from ..env_utils import snapshot_environ
from ..errors import EnvTemplatorError, InclusionCycleError, RenderError, TemplateFunctionError
from ..logger import get_logger
from .functions import FUNCTIONS

logger = get_logger(__name__)


# ============================================================================
# Render Session
# ============================================================================


class RenderSession:
    """
    State of one top-level render: the Jinja2 environment, the environment
    snapshot and the stack of templates currently being included.

    Attributes:
        environment: Jinja2 environment the templates are loaded from
        max_include_depth: Deepest allowed nesting of include() calls
        stack: Names of the templates being rendered, outermost first
    """

    def __init__(
        self,
        environment: Environment,
        env_snapshot: Mapping,
        root_name: str,
        max_include_depth: int = Defaults.MAX_INCLUDE_DEPTH,
    ):
        self.environment = environment
        self.max_include_depth = max_include_depth
        self.stack: List[str] = [root_name]
        self._env = dict(env_snapshot)

    def context(self, data: Any = None) -> Dict[str, Any]:
        """Build the variables a template renders with."""
        ctx: Dict[str, Any] = {}
        if isinstance(data, Mapping):
            ctx.update(data)
        ctx["data"] = data
        ctx["Env"] = self._env
        return ctx

    def envall(self) -> Dict[str, str]:
        """Copy of the environment snapshot."""
        return dict(self._env)

    def include(self, name: str, data: Any = None, context: Optional[Context] = None) -> str:
        """
        Render template ``name`` with ``data`` and return its output.

        ``name`` is looked up as a template first, then among the macros
        defined by the calling template, so ``{% macro item(x) %}`` can be
        invoked as ``include('item', value)``.

        Raises:
            InclusionCycleError: If nesting would exceed max_include_depth
            TemplateFunctionError: If no template or macro with that name exists
        """
        if not isinstance(name, str):
            raise TemplateFunctionError(
                f"must pass a template name to 'include'; received {name!r}", function="include"
            )
        if len(self.stack) > self.max_include_depth:
            raise InclusionCycleError(self.stack + [name], self.max_include_depth)

        macro = None
        try:
            template = self.environment.get_template(name)
        except TemplateNotFound as e:
            macro = context.vars.get(name) if context is not None else None
            if not isinstance(macro, Macro):
                raise TemplateFunctionError(
                    f"include: template '{name}' not found", function="include"
                ) from e
        if macro is not None:
            return self._call_macro(name, macro, data)

        logger.debug("Including template", name=name, depth=len(self.stack))
        self.stack.append(name)
        try:
            return template.render(self.context(data))
        finally:
            self.stack.pop()

    def _call_macro(self, name: str, macro: Macro, data: Any) -> str:
        takes_data = data is not None and (macro.arguments or macro.catch_varargs)
        logger.debug("Including macro", name=name, depth=len(self.stack))
        self.stack.append(name)
        try:
            return str(macro(data) if takes_data else macro())
        finally:
            self.stack.pop()

    def bind(self) -> None:
        """Register the session-bound functions on the environment."""

        @pass_context
        def include(context: Context, name: str, data: Any = None) -> str:
            return self.include(name, data, context=context)

        for fn_name, fn in (
            ("include", include),
            ("eval", include),
            ("envall", self.envall),
        ):
            self.environment.globals[fn_name] = fn
        self.environment.filters["include"] = include


# ============================================================================
# Template Renderer
# ============================================================================


class TemplateRenderer:
    """
    Renders template sources against a fixed environment snapshot.

    The snapshot is taken once, when the renderer is created, and reused for
    every template it renders.

    Example:
        >>> renderer = TemplateRenderer(GeneratorConfig(), environ={"FOO": "bar"})
        >>> renderer.render_string("value={{ Env.FOO }}")
        'value=bar'
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        environ: Optional[Mapping] = None,
    ):
        """
        Initialize the renderer.

        Args:
            config: Delimiter and strictness settings
            environ: Variables exposed as ``Env`` (defaults to ``os.environ``)
        """
        self.config = config or GeneratorConfig()
        self.env_snapshot = snapshot_environ(environ)

    def create_environment(
        self, name: str, source: str, search_path: Optional[Union[str, Path]] = None
    ) -> Environment:
        """
        Build the Jinja2 environment for one template.

        The template itself is registered under ``name``; other templates
        are looked up in ``search_path``.
        """
        loaders = [DictLoader({name: source})]
        if search_path is not None:
            loaders.append(FileSystemLoader(str(search_path)))

        env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined if self.config.strict_undefined else Undefined,
            variable_start_string=self.config.left_delimiter,
            variable_end_string=self.config.right_delimiter,
        )

        for fn_name, fn in FUNCTIONS.items():
            env.globals[fn_name] = fn
            # builtin filters such as "replace" keep their Jinja2 meaning
            if fn_name not in env.filters:
                env.filters[fn_name] = fn

        return env

    def render_string(
        self,
        source: str,
        name: str = "template",
        search_path: Optional[Union[str, Path]] = None,
    ) -> str:
        """
        Render a template body.

        Args:
            source: Template text
            name: Name used in errors and for self-inclusion
            search_path: Directory searched by include()

        Returns:
            Rendered output

        Raises:
            RenderError: If the template fails to parse or execute
        """
        env = self.create_environment(name, source, search_path)
        session = RenderSession(
            env,
            self.env_snapshot,
            root_name=name,
            max_include_depth=self.config.max_include_depth,
        )
        session.bind()

        try:
            template = env.get_template(name)
            return template.render(session.context())
        except TemplateSyntaxError as e:
            raise RenderError(e.message or str(e), template=e.name or name, lineno=e.lineno) from e
        except TemplateError as e:
            raise RenderError(str(e), template=name) from e
        except EnvTemplatorError as e:
            raise RenderError(e.message, template=name) from e
        except RecursionError as e:
            raise RenderError(f"recursion limit reached: {e}", template=name) from e
        except Exception as e:
            raise RenderError(f"{type(e).__name__}: {e}", template=name) from e

    def render_file(self, path: Union[str, Path]) -> str:
        """Render a template file; it is named after its base name."""
        template_path = Path(path)
        source = template_path.read_text(encoding=Defaults.ENCODING)
        return self.render_string(
            source, name=template_path.name, search_path=template_path.parent
        )


# ============================================================================
# Convenience Functions
# ============================================================================


def render_template(
    source: str,
    environ: Optional[Mapping] = None,
    config: Optional[GeneratorConfig] = None,
    name: str = "template",
) -> str:
    """Convenience function to render a template body in one call."""
    return TemplateRenderer(config, environ=environ).render_string(source, name=name)


__all__ = [
    "RenderSession",
    "TemplateRenderer",
    "render_template",
]
