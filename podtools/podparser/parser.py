# SPDX-License-Identifier: MIT
"""
POD Parser

Base class for POD filters and translators. The parser reads input
streams, groups lines into paragraphs, classifies each paragraph and calls
one of three handlers (:meth:`Parser.command`, :meth:`Parser.verbatim`,
:meth:`Parser.textblock`). Subclasses override the handlers, the
preprocessing hooks and :meth:`Parser.interior_sequence` to produce their
own output.

Usage:
    class Bolder(Parser):
        def interior_sequence(self, name, argument, node):
            return f"*{argument}*" if name == "B" else argument

    Bolder().parse_from_file("module.pod")
"""

from __future__ import annotations

import enum
import io
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, TextIO, Tuple

from .classifier import classify, starts_pod
from .objects import InputStream, Paragraph, ParagraphKind, ParseTree, SequenceNode
from .options import ParseOptions
from .sequences import SequenceExpander
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

Selector = Callable[[str], bool]

STDIN_NAME = "<standard input>"


class PodParserError(Exception):
    """Base error for the POD parser, carrying an optional input position."""

    def __init__(self, message: str, source: Optional[str] = None, line: int = 0) -> None:
        self.source = source
        self.line = line
        if source and line:
            message = f"{message} ({source} line {line})"
        elif source:
            message = f"{message} ({source})"
        super().__init__(message)


class InputError(PodParserError):
    """Raised when an input source cannot be opened or read."""


class ParserPhase(str, enum.Enum):
    IDLE = "idle"
    AWAITING_PARAGRAPH = "awaiting-paragraph"
    DISPATCHING = "dispatching"
    STREAM_EXHAUSTED = "stream-exhausted"


@dataclass
class ParserState:
    """Mutable state of one top-level parse."""

    cutting: bool = True
    streams: List[InputStream] = field(default_factory=list)
    sequences: List[SequenceNode] = field(default_factory=list)
    total_lines: int = 0
    line: int = 0
    phase: ParserPhase = ParserPhase.IDLE

    @property
    def top(self) -> Optional[InputStream]:
        return self.streams[-1] if self.streams else None


class Parser:
    """
    Parse POD from input streams and dispatch paragraphs to handlers.

    Args:
        options: Markup conventions; defaults describe standard POD
        output: Stream the default handlers write to (standard output
            when not given)
        selector: Optional predicate over raw paragraph text; paragraphs it
            rejects are dropped and cutting resumes
    """

    def __init__(
        self,
        options: Optional[ParseOptions] = None,
        output: Optional[TextIO] = None,
        selector: Optional[Selector] = None,
    ) -> None:
        self.options = options or ParseOptions()
        self.output = output
        self.selector = selector
        self.state = ParserState(cutting=self.options.start_cutting)
        self.initialize()

    # =========================================================================
    # Overridable hooks
    # =========================================================================

    def initialize(self) -> None:
        """Called once by the constructor; subclasses set up their fields here."""

    def begin_document(self) -> None:
        """Called before the first (outermost) input stream is read."""

    def end_document(self) -> None:
        """Called after the outermost input stream is exhausted."""

    def begin_input(self) -> None:
        """Called before every input stream, included ones too."""

    def end_input(self) -> None:
        """Called after every input stream, included ones too."""

    def preprocess_line(self, text: str) -> Optional[str]:
        """Return the line to use in place of ``text``; empty or None drops it."""
        return text

    def preprocess_paragraph(self, text: str) -> Optional[str]:
        """Return the paragraph to use in place of ``text``; empty or None drops it."""
        return text

    def command(self, name: str, text: str, paragraph: Paragraph) -> None:
        """Handle a command paragraph. By default it is treated as text."""
        self.textblock(paragraph.raw_text, paragraph)

    def verbatim(self, text: str, paragraph: Optional[Paragraph] = None) -> None:
        """Handle a verbatim paragraph. By default it is written unchanged."""
        self._emit(text)

    def textblock(self, text: str, paragraph: Optional[Paragraph] = None) -> None:
        """Handle an ordinary paragraph. By default it is interpolated and written."""
        self._emit(self.interpolate(text))

    def interior_sequence(self, name: str, argument: str, node: SequenceNode) -> str:
        """Return the substitution for one interior sequence. By default, its raw text."""
        return node.raw_text()

    def _emit(self, text: str) -> None:
        out = self.output if self.output is not None else sys.stdout
        out.write(text)
        if not text.endswith("\n"):
            out.write("\n")
        out.write("\n")

    # =========================================================================
    # Interpolation
    # =========================================================================

    def _expander(self) -> SequenceExpander:
        return SequenceExpander(
            options=self.options,
            on_sequence=self.interior_sequence,
            stack=self.state.sequences,
            source=self.input_file or "(unknown)",
            line=self.state.line,
        )

    def interpolate(self, text: str, end_pattern: Optional[str] = None) -> str:
        """
        Replace every interior sequence in ``text`` with the result of
        :meth:`interior_sequence`, innermost sequences first.

        Args:
            text: Text to expand
            end_pattern: Regular expression at which to stop expanding

        Returns:
            The expanded text (up to the end match, if one was given)
        """
        expanded, _ = self._expander().expand(text, end_pattern)
        return expanded

    def expand(self, text: str, end_pattern: Optional[str] = None) -> Tuple[str, str]:
        """Like :meth:`interpolate`, but also return the text after the end match."""
        return self._expander().expand(text, end_pattern)

    def parse_text(self, text: str) -> ParseTree:
        """Build the parse tree of ``text`` without substituting anything."""
        tree, _ = self._expander().build(text)
        return tree

    def interpolate_paragraph(self, paragraph: Paragraph) -> ParseTree:
        """Fill in ``paragraph.parse_tree`` on first request and return it."""
        if paragraph.parse_tree is None:
            saved = self.state.line
            self.state.line = paragraph.line
            try:
                tree = self.parse_text(paragraph.text)
            finally:
                self.state.line = saved
            paragraph.parse_tree = ParseTree(tree, owner=paragraph)
        return paragraph.parse_tree

    # =========================================================================
    # Paragraph dispatch
    # =========================================================================

    def parse_paragraph(self, text: str, line: int = 0) -> None:
        """
        Classify one raw paragraph and dispatch it to a handler.

        Paragraphs are dropped while cutting (until a command paragraph is
        seen), when rejected by the selector, or when preprocessing empties
        them. A cut directive starts cutting and is not dispatched.
        """
        state = self.state
        if state.cutting:
            if not starts_pod(text, self.options):
                logger.debug("%s line %d: skipped while cutting", self.input_file, line)
                return
            state.cutting = False

        if self.selector is not None and not self.selector(text):
            logger.debug("%s line %d: not selected", self.input_file, line)
            state.cutting = True
            return

        text = self.preprocess_paragraph(text)
        if not text or state.cutting:
            return

        result = classify(text, False, self.options)
        if not result.dispatch:
            state.cutting = result.cutting
            return

        paragraph = result.paragraph
        paragraph.source = self.input_file or "(unknown)"
        paragraph.line = line
        self._dispatch(paragraph)

    def _dispatch(self, paragraph: Paragraph) -> None:
        state = self.state
        state.phase = ParserPhase.DISPATCHING
        state.line = paragraph.line
        try:
            if paragraph.kind is ParagraphKind.COMMAND:
                self.command(paragraph.name, paragraph.text, paragraph)
            elif paragraph.kind is ParagraphKind.VERBATIM:
                self.verbatim(paragraph.text, paragraph)
            else:
                self.textblock(paragraph.text, paragraph)
        finally:
            state.phase = ParserPhase.AWAITING_PARAGRAPH

    # =========================================================================
    # Input streams
    # =========================================================================

    def _push_input_stream(
        self,
        source: Iterable[str],
        name: str,
        cutting: Optional[bool] = None,
    ) -> InputStream:
        if not self.state.streams:
            self.state = ParserState(cutting=self.options.start_cutting)
            if self.output is None:
                self.output = sys.stdout

        state = self.state
        stream = InputStream(source, name=name, was_cutting=state.cutting)
        if cutting is not None:
            state.cutting = cutting
        state.streams.append(stream)
        state.phase = ParserPhase.AWAITING_PARAGRAPH
        logger.debug("begin input %s (depth %d)", name, len(state.streams))

        try:
            if len(state.streams) == 1:
                self.begin_document()
            self.begin_input()
        except BaseException:
            state.streams.pop()
            state.cutting = stream.was_cutting
            state.phase = ParserPhase.AWAITING_PARAGRAPH if state.streams else ParserPhase.IDLE
            raise
        return stream

    def _pop_input_stream(self) -> Optional[InputStream]:
        state = self.state
        state.phase = ParserPhase.STREAM_EXHAUSTED

        self.end_input()
        if len(state.streams) == 1:
            self.end_document()

        stream = state.streams.pop()
        state.cutting = stream.was_cutting
        logger.debug(
            "end input %s after %d lines (cutting=%s)", stream.name, stream.num_lines, state.cutting
        )

        if state.streams:
            state.phase = ParserPhase.AWAITING_PARAGRAPH
        else:
            state.sequences.clear()
            state.phase = ParserPhase.IDLE
        return state.top

    def _count_line(self, text: str) -> Optional[str]:
        self.state.total_lines += 1
        return self.preprocess_line(text)

    def parse_from_lines(
        self,
        lines: Iterable[str],
        name: str = "<string>",
        cutting: Optional[bool] = None,
    ) -> None:
        """
        Parse POD from any iterable of lines.

        Args:
            lines: The line source (line terminators should be kept)
            name: Name reported by :attr:`input_file` while parsing
            cutting: Initial cutting state for this stream; when omitted,
                an outermost stream starts with ``options.start_cutting``
                and a nested stream inherits the current state
        """
        stream = self._push_input_stream(lines, name, cutting)
        try:
            for text, line in tokenize(stream, self.options, self._count_line):
                self.parse_paragraph(text, line)
        finally:
            self._pop_input_stream()

    def parse_from_string(self, text: str, name: str = "<string>", cutting: Optional[bool] = None) -> None:
        """Parse POD held in a string."""
        self.parse_from_lines(io.StringIO(text), name=name, cutting=cutting)

    def parse_from_filehandle(self, handle: TextIO, name: Optional[str] = None, cutting: Optional[bool] = None) -> None:
        """Parse POD read from an open text stream."""
        if name is None:
            name = getattr(handle, "name", None) or "(unknown)"
        self.parse_from_lines(handle, name=str(name), cutting=cutting)

    def parse_from_file(
        self,
        path: str,
        output: Optional[TextIO] = None,
        cutting: Optional[bool] = None,
    ) -> None:
        """
        Parse POD from a named file (``"-"`` for standard input).

        Args:
            path: File to read
            output: Stream for the default handlers; nested calls keep the
                current output when omitted
            cutting: Initial cutting state, see :meth:`parse_from_lines`

        Raises:
            InputError: If the file cannot be opened or decoded
        """
        if output is not None:
            self.output = output

        if path == "-":
            try:
                self.parse_from_lines(sys.stdin, name=STDIN_NAME, cutting=cutting)
            except UnicodeDecodeError as e:
                raise InputError(f"Cannot decode input: {e.reason}", source=STDIN_NAME) from e
            return

        try:
            handle = open(path, "r", encoding="utf-8")
        except OSError as e:
            raise InputError(f"Cannot open for reading: {e.strerror or e}", source=path) from e

        with handle:
            try:
                self.parse_from_lines(handle, name=path, cutting=cutting)
            except UnicodeDecodeError as e:
                raise InputError(f"Cannot decode input: {e.reason}", source=path) from e

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def cutting(self) -> bool:
        """True while the input lies outside POD."""
        return self.state.cutting

    @cutting.setter
    def cutting(self, value: bool) -> None:
        self.state.cutting = bool(value)

    @property
    def input_file(self) -> Optional[str]:
        """Name of the stream currently being read."""
        top = self.state.top
        return top.name if top is not None else None

    @property
    def top_stream(self) -> Optional[InputStream]:
        return self.state.top

    @property
    def input_streams(self) -> List[InputStream]:
        return list(self.state.streams)

    @property
    def total_lines(self) -> int:
        """Lines read across all streams of the current (or last) parse."""
        return self.state.total_lines

    @property
    def sequence_commands(self) -> List[SequenceNode]:
        """The interior sequences currently being expanded, outermost first."""
        return self.state.sequences
