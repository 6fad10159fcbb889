# SPDX-License-Identifier: MIT
"""
POD Paragraph Tokenizer

Groups the lines of an input stream into raw paragraphs. Paragraphs end at
blank lines; a line starting with a doubled command marker (``==head1``)
at the start of a paragraph forms a complete one-line paragraph on its own.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator, List, Optional, Tuple

from .objects import InputStream
from .options import BLANK_LINE_RE, ParseOptions

logger = logging.getLogger(__name__)

LineHook = Callable[[str], Optional[str]]


def is_blank(line: str) -> bool:
    """True for a line holding only whitespace and line terminators."""
    return BLANK_LINE_RE.match(line) is not None


def tokenize(
    stream: InputStream,
    options: Optional[ParseOptions] = None,
    preprocess_line: Optional[LineHook] = None,
) -> Iterator[Tuple[str, int]]:
    """
    Yield ``(paragraph_text, first_line_number)`` for each paragraph.

    Args:
        stream: The input stream to read from
        options: Markup conventions (defaults apply when omitted)
        preprocess_line: Hook applied to every line; lines for which it
            returns an empty string or None are dropped

    Yields:
        The raw paragraph text (line terminators kept, blank terminator
        line excluded) and the stream line number it started on
    """
    options = options or ParseOptions()
    double_marker = options.double_marker_re
    buffer: List[str] = []
    start = 0

    for line in stream:
        if preprocess_line is not None:
            line = preprocess_line(line)
            if not line:
                continue

        if not buffer and double_marker.match(line):
            logger.debug("%s line %d: one-line command paragraph", stream.name, stream.num_lines)
            yield line, stream.num_lines
            continue

        if is_blank(line):
            if buffer:
                yield "".join(buffer), start
                buffer = []
            continue

        if not buffer:
            start = stream.num_lines
        buffer.append(line)

    if buffer:
        yield "".join(buffer), start
