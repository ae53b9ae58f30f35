"""
Batch Template Generation
=========================

Renders every declared template pair in order:

1. Read the source template
2. Render it (see ``templates.renderer``)
3. Optionally dump the raw output to the diagnostic stream, terminated by
   ``"\\x00\\n"`` so consecutive dumps can be split apart
4. Collapse blank lines unless disabled
5. Write the destination (created with mode 0664)

The first failing pair stops the batch. Destinations written before the
failure are left in place.
"""

import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional, TextIO

from .config import GeneratorConfig, TemplatePath
from .constants import Defaults, FileModes, Sentinels
from .errors import EnvTemplatorError, GenerationError
from .logger import get_logger
from .templates import TemplateRenderer, normalize_output

logger = get_logger(__name__)


def write_destination(path: str, content: str, mode: int = FileModes.DESTINATION) -> None:
    """Write content to path, creating it with ``mode`` or truncating it."""

    def opener(file: str, flags: int) -> int:
        return os.open(file, flags, mode)

    with open(path, "w", encoding=Defaults.ENCODING, newline="", opener=opener) as f:
        f.write(content)


class BatchGenerator:
    """
    Generates destination files from template pairs.

    Attributes:
        config: Generation settings, including the pairs to render
        renderer: Renderer holding the environment snapshot
        debug_stream: Where raw output goes when debug_templates is set

    Example:
        >>> config = build_config(templates=[TemplatePath.parse("app.tmpl:app.conf")])
        >>> BatchGenerator(config).generate_all()
    """

    def __init__(
        self,
        config: GeneratorConfig,
        environ: Optional[Mapping[str, str]] = None,
        debug_stream: Optional[TextIO] = None,
    ):
        self.config = config
        self.renderer = TemplateRenderer(config, environ=environ)
        self._debug_stream = debug_stream

    @property
    def debug_stream(self) -> TextIO:
        return self._debug_stream if self._debug_stream is not None else sys.stderr

    def generate_file(self, pair: TemplatePath) -> str:
        """
        Render one pair and write its destination.

        Returns:
            The content written to the destination
        """
        result = self.renderer.render_file(pair.source)

        if self.config.debug_templates:
            logger.info(
                "Printing parsed template to the diagnostic stream "
                "(delimited by 2 character sequence of '\\x00\\n')",
                source=pair.source,
            )
            self.debug_stream.write(result)
            self.debug_stream.write(Sentinels.DEBUG_TEMPLATE_END)
            self.debug_stream.flush()

        output = normalize_output(result, keep_blank_lines=self.config.keep_blank_lines)
        write_destination(pair.destination, output)
        return output

    def generate_all(self) -> List[Path]:
        """
        Render every configured pair in declaration order.

        Returns:
            Destination paths written

        Raises:
            GenerationError: For the first pair that fails, naming its paths
        """
        written: List[Path] = []
        for pair in self.config.templates:
            if self.config.verbosity > 0:
                logger.info(f"generating {pair.source} -> {pair.destination}")
            try:
                self.generate_file(pair)
            except (EnvTemplatorError, OSError, UnicodeDecodeError) as e:
                raise GenerationError(pair.source, pair.destination, str(e)) from e
            written.append(Path(pair.destination))
        return written


def generate_templates(
    config: GeneratorConfig,
    environ: Optional[Mapping[str, str]] = None,
    debug_stream: Optional[TextIO] = None,
) -> List[Path]:
    """Convenience function to run one batch."""
    return BatchGenerator(config, environ=environ, debug_stream=debug_stream).generate_all()


__all__ = [
    "BatchGenerator",
    "generate_templates",
    "write_destination",
]
