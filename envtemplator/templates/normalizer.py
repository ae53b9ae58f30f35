"""Collapse runs of blank lines in rendered output."""

import io
from typing import Iterable, Iterator


def is_blank(line: str) -> bool:
    """A line is blank when it holds nothing but whitespace."""
    return line.strip() == ""


def collapse_blank_lines(lines: Iterable[str]) -> Iterator[str]:
    """
    Yield lines, dropping every blank line that directly follows another.

    Single pass, no lookahead: a run of blank lines is reduced to its first
    line, a lone blank line passes through untouched.
    """
    previous_blank = False
    for line in lines:
        blank = is_blank(line)
        if blank and previous_blank:
            continue
        previous_blank = blank
        yield line


def normalize_output(text: str, keep_blank_lines: bool = False) -> str:
    """
    Apply blank-line collapsing to a rendered template.

    Args:
        text: Raw rendered output
        keep_blank_lines: Return text unchanged when True

    Returns:
        Normalized output; a final line without newline is preserved
    """
    if keep_blank_lines:
        return text
    # newline="\n" splits on LF only and leaves CR bytes alone
    return "".join(collapse_blank_lines(io.StringIO(text, newline="\n")))


__all__ = [
    "is_blank",
    "collapse_blank_lines",
    "normalize_output",
]
