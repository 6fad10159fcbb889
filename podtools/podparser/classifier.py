# SPDX-License-Identifier: MIT
"""
POD Paragraph Classifier

Decides whether a raw paragraph is a command, verbatim or ordinary text
paragraph and extracts the command name, its argument text and the
separator between them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from .objects import Paragraph, ParagraphKind
from .options import VERBATIM_RE, ParseOptions

logger = logging.getLogger(__name__)

# First run of whitespace that is followed by more text
SEPARATOR_RE = re.compile(r"(\s+)(?=\S)")


@dataclass
class Classification:
    """Outcome of classifying one paragraph."""

    paragraph: Optional[Paragraph]
    cutting: bool

    @property
    def dispatch(self) -> bool:
        return self.paragraph is not None


def starts_pod(text: str, options: Optional[ParseOptions] = None) -> bool:
    """True if the paragraph begins with a command marker and so ends cutting."""
    options = options or ParseOptions()
    return text.startswith(options.command_marker)


def split_command(text: str, options: Optional[ParseOptions] = None) -> Optional[Paragraph]:
    """
    Split a command paragraph into its parts.

    Args:
        text: Raw paragraph text, e.g. ``"=head1 NAME\\n"``
        options: Markup conventions (defaults apply when omitted)

    Returns:
        A command Paragraph, or None if the text is not a command paragraph
    """
    options = options or ParseOptions()
    match = options.command_re.match(text)
    if not match:
        return None

    prefix = match.group(1)
    rest = text[len(prefix):]
    sep_match = SEPARATOR_RE.search(rest)
    separator = sep_match.group(1) if sep_match else ""

    # Split on the first whitespace run after the name
    parts = rest.split(None, 1)
    name = parts[0]
    argument = parts[1] if len(parts) > 1 else ""

    return Paragraph(
        text=argument,
        name=name,
        prefix=prefix,
        separator=separator,
        kind=ParagraphKind.COMMAND,
    )


def classify_text(text: str, options: Optional[ParseOptions] = None) -> Paragraph:
    """Classify paragraph text without regard to the cutting state."""
    options = options or ParseOptions()
    paragraph = split_command(text, options)
    if paragraph is not None:
        return paragraph
    if VERBATIM_RE.match(text):
        return Paragraph(text=text, kind=ParagraphKind.VERBATIM)
    return Paragraph(text=text, kind=ParagraphKind.TEXT)


def classify(
    text: str,
    cutting: bool,
    options: Optional[ParseOptions] = None,
) -> Classification:
    """
    Classify a paragraph, applying the cutting rules.

    While cutting, anything that is not a command paragraph is ignored; a
    command ends cutting. The cut directive itself starts cutting and is
    never dispatched.

    Args:
        text: Raw (preprocessed) paragraph text
        cutting: Whether the parser is currently outside POD
        options: Markup conventions (defaults apply when omitted)

    Returns:
        The paragraph to dispatch (None when nothing is dispatched) and the
        new cutting state
    """
    options = options or ParseOptions()

    if cutting:
        if not starts_pod(text, options):
            return Classification(paragraph=None, cutting=True)
        cutting = False

    paragraph = classify_text(text, options)
    if paragraph.name == options.cut_directive:
        logger.debug("cut directive, resuming normal text")
        return Classification(paragraph=None, cutting=True)

    return Classification(paragraph=paragraph, cutting=cutting)
