# SPDX-License-Identifier: MIT
"""
POD Parser

A Python package for parsing POD (Plain Old Documentation). It splits input
into command, verbatim and text paragraphs, expands interior sequences such
as ``B<...>`` and ``C<< ... >>``, and calls overridable handlers so that
subclasses can translate POD into any output format.

Usage:
    from podtools.podparser import Parser, TreeCollector

    # Echo the POD portions of a file
    Parser().parse_from_file("module.pm")

    # Inspect paragraphs and their parse trees
    collector = TreeCollector()
    collector.parse_from_string(content)
    for paragraph in collector.paragraphs:
        print(paragraph.kind, paragraph.parse_tree)
"""

from .objects import (
    InputStream,
    Paragraph,
    ParagraphKind,
    ParseTree,
    SequenceNode,
)

from .options import ParseOptions

from .tokenizer import tokenize

from .classifier import (
    classify,
    classify_text,
    split_command,
    Classification,
)

from .sequences import SequenceExpander

from .parser import (
    Parser,
    ParserState,
    ParserPhase,
    PodParserError,
    InputError,
)

from .filters import PodFilter, TreeCollector

__version__ = "0.1.0"
__all__ = [
    # Document model
    "InputStream",
    "Paragraph",
    "ParagraphKind",
    "ParseTree",
    "SequenceNode",
    # Configuration
    "ParseOptions",
    # Tokenizer and classifier
    "tokenize",
    "classify",
    "classify_text",
    "split_command",
    "Classification",
    # Interior sequences
    "SequenceExpander",
    # Parser driver
    "Parser",
    "ParserState",
    "ParserPhase",
    "PodParserError",
    "InputError",
    # Consumers
    "PodFilter",
    "TreeCollector",
    # Version
    "__version__",
]
