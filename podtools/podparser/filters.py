# SPDX-License-Identifier: MIT
"""
POD Filters

Ready-made consumers of :class:`~.parser.Parser`:

- :class:`PodFilter` copies the POD portions of its input to the output,
  following ``=include`` directives.
- :class:`TreeCollector` records every dispatched paragraph together with
  its parse tree.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from .objects import Paragraph, ParagraphKind
from .parser import Parser

logger = logging.getLogger(__name__)

INCLUDE_COMMAND = "include"


class PodFilter(Parser):
    """Echo POD paragraphs unchanged, dropping everything outside POD."""

    def find_include(self, name: str) -> Optional[str]:
        """
        Locate an included file.

        Looks at the name as given, then next to the including file, then in
        that directory's parent.

        Args:
            name: File name from the ``=include`` paragraph

        Returns:
            The path to read, or None if no readable candidate exists
        """
        if os.path.isfile(name):
            return name

        here = os.path.dirname(self.input_file or "")
        for directory in (here, os.path.dirname(here) if here else ".."):
            candidate = os.path.join(directory, name)
            if os.path.isfile(candidate):
                return candidate

        return None

    def command(self, name: str, text: str, paragraph: Paragraph) -> None:
        if name != INCLUDE_COMMAND:
            self.verbatim(paragraph.raw_text, paragraph)
            return

        args = text.split()
        if not args:
            logger.warning("%s line %d: =include without a file name", paragraph.source, paragraph.line)
            return

        path = self.find_include(args[0])
        if path is None:
            logger.warning(
                "%s line %d: cannot find included file %s", paragraph.source, paragraph.line, args[0]
            )
            return

        open_paths = {os.path.abspath(stream.name) for stream in self.input_streams}
        if os.path.abspath(path) in open_paths:
            logger.warning(
                "%s line %d: %s is already being read, not including it again",
                paragraph.source, paragraph.line, path,
            )
            return

        self.parse_from_file(path, cutting=True)


class TreeCollector(Parser):
    """
    Collect paragraphs instead of writing them.

    Command and text paragraphs get their parse tree filled in; verbatim
    paragraphs are kept as-is.
    """

    def initialize(self) -> None:
        self.paragraphs: List[Paragraph] = []

    def begin_document(self) -> None:
        self.paragraphs = []

    def command(self, name: str, text: str, paragraph: Paragraph) -> None:
        self.interpolate_paragraph(paragraph)
        self.paragraphs.append(paragraph)

    def verbatim(self, text: str, paragraph: Optional[Paragraph] = None) -> None:
        if paragraph is None:
            paragraph = Paragraph(text=text, kind=ParagraphKind.VERBATIM)
        self.paragraphs.append(paragraph)

    def textblock(self, text: str, paragraph: Optional[Paragraph] = None) -> None:
        if paragraph is None:
            paragraph = Paragraph(text=text)
        self.interpolate_paragraph(paragraph)
        self.paragraphs.append(paragraph)
