# SPDX-License-Identifier: MIT
"""
POD Interior Sequence Expander

Bottom-up matcher for interior sequences such as ``B<bold>`` and
``C<< $a <=> $b >>``. Innermost sequences are resolved first; each
completed sequence is either handed to a substitution callback (flat
expansion) or kept as a node in a parse tree (tree building).

Malformed markup never raises: an unterminated sequence simply runs to the
end of the text.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from .objects import ParseTree, SequenceNode
from .options import ARROW_TAIL_RE, ParseOptions

logger = logging.getLogger(__name__)

SequenceCallback = Callable[[str, str, SequenceNode], Optional[str]]

# Whitespace that must follow an extended (doubled) left delimiter
EXTENDED_GAP_RE = re.compile(r"\s+")

SIMPLE_LEFT = "<"
SIMPLE_RIGHT = ">"


def raw_sequence(name: str, argument: str, node: SequenceNode) -> str:
    """Default substitution: the sequence exactly as written."""
    return node.raw_text()


class SequenceExpander:
    """
    Expands interior sequences within a block of paragraph text.

    The expander shares its stack of open sequences with whoever created it,
    so callbacks can inspect the sequences they are nested in while they
    run. The node being substituted is still on the stack when its callback
    is invoked.
    """

    def __init__(
        self,
        options: Optional[ParseOptions] = None,
        on_sequence: Optional[SequenceCallback] = None,
        stack: Optional[List[SequenceNode]] = None,
        source: str = "(unknown)",
        line: int = 0,
    ) -> None:
        self.options = options or ParseOptions()
        self.on_sequence = on_sequence or raw_sequence
        self.stack: List[SequenceNode] = stack if stack is not None else []
        self.source = source
        self.line = line
        self._scanners: Dict[Optional[str], Pattern[str]] = {}

    # -------------------------------------------------------------------------
    # Public entry points
    # -------------------------------------------------------------------------

    def expand(self, text: str, end_pattern: Optional[str] = None) -> Tuple[str, str]:
        """
        Substitute every interior sequence in ``text``.

        Args:
            text: The text to expand
            end_pattern: Regular expression ending the expansion early; by
                default the whole text is expanded

        Returns:
            The expanded text and whatever follows the end match (empty
            unless ``end_pattern`` matched)
        """
        tree, remainder = self._expand(text or "", end_pattern, build=False)
        return tree.raw_text(), remainder

    def build(self, text: str, end_pattern: Optional[str] = None) -> Tuple[ParseTree, str]:
        """
        Parse ``text`` into a tree of strings and sequence nodes.

        Same scanning rules as :meth:`expand`, but the substitution callback
        is not invoked.
        """
        return self._expand(text or "", end_pattern, build=True)

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    def _scanner(self, closer: Optional[str]) -> Pattern[str]:
        scanner = self._scanners.get(closer)
        if scanner is None:
            source = self.options.sequence_start_re.pattern
            if closer is not None:
                source = f"{source}|(?P<end>{closer})"
            scanner = re.compile(source)
            self._scanners[closer] = scanner
        return scanner

    def _expand(self, text: str, end_pattern: Optional[str], build: bool) -> Tuple[ParseTree, str]:
        tree = ParseTree()
        pos, closed = self._scan(text, 0, end_pattern, build, tree)
        if closed is not None:
            return tree, text[pos:]
        if end_pattern is None and text.endswith("\n") and not tree.raw_text().endswith("\n"):
            # An unterminated sequence swallowed the final newline
            tree.append("\n")
        return tree, ""

    def _scan(
        self,
        text: str,
        pos: int,
        closer: Optional[str],
        build: bool,
        tree: ParseTree,
    ) -> Tuple[int, Optional["re.Match[str]"]]:
        scanner = self._scanner(closer)

        while pos < len(text):
            match = scanner.search(text, pos)
            if match is None:
                break
            tree.append(text[pos:match.start()])
            pos = match.end()

            if match.group("name") is None:
                if self._false_end(match.group("end"), tree):
                    tree.append(match.group("end"))
                    continue
                return pos, match

            pos = self._sequence(text, match, build, tree)

        tree.append(text[pos:])
        return len(text), None

    def _false_end(self, end: str, tree: ParseTree) -> bool:
        """A '->' or '=>' inside C<...> does not close the sequence."""
        if end != SIMPLE_RIGHT or not self.stack:
            return False
        top = self.stack[-1]
        if top.name != self.options.literal_command or top.left != SIMPLE_LEFT:
            return False
        tail = tree.raw_text()[-2:]
        return ARROW_TAIL_RE.search(tail) is not None

    def _open(self, text: str, match: "re.Match[str]") -> Tuple[SequenceNode, int, str]:
        name = match.group("name")
        lefts = match.group("left")
        line = self.line + text.count("\n", 0, match.start())

        if self.options.extended_delimiters and len(lefts) > 1:
            gap = EXTENDED_GAP_RE.match(text, match.end("left"))
            if gap:
                right = ">" * len(lefts)
                node = SequenceNode(name, lefts + gap.group(0), right, self.source, line)
                return node, gap.end(), rf"(?:\s+|(?<=\s)){right}"

        node = SequenceNode(name, SIMPLE_LEFT, SIMPLE_RIGHT, self.source, line)
        return node, match.start("left") + 1, re.escape(SIMPLE_RIGHT)

    def _sequence(self, text: str, match: "re.Match[str]", build: bool, tree: ParseTree) -> int:
        node, start, closer = self._open(text, match)

        self.stack.append(node)
        try:
            pos, closed = self._scan(text, start, closer, build, node.children)
            if closed is None:
                logger.debug(
                    "%s line %d: unterminated %s%s sequence",
                    node.source, node.line, node.name, node.left.strip(),
                )
                node.right = ""
            else:
                node.right = closed.group(0)

            if build:
                tree.append(node)
            else:
                substitution = self.on_sequence(node.name, node.text, node)
                if substitution:
                    tree.append(substitution)
        finally:
            self.stack.pop()

        return pos
