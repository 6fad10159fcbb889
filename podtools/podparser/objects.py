# SPDX-License-Identifier: MIT
"""
POD Input Objects

Data model shared by the tokenizer, the classifier and the sequence
expander: input streams, paragraphs, interior sequences and the parse
trees that hold them.
"""

from __future__ import annotations

import enum
import weakref
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Union


class ParagraphKind(str, enum.Enum):
    """The three kinds of POD paragraph."""

    COMMAND = "command"
    VERBATIM = "verbatim"
    TEXT = "text"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Input Streams
# =============================================================================


class InputStream:
    """
    A named source of input lines.

    Any iterable of strings (a file object, a list of lines) can back a
    stream. The stream counts the lines it hands out and remembers the
    cutting state the parser was in when the stream was pushed, so that
    state can be restored once the stream is exhausted.
    """

    def __init__(
        self,
        source: Iterable[str],
        name: str = "(unknown)",
        was_cutting: bool = False,
    ) -> None:
        self.name = name
        self.was_cutting = was_cutting
        self._lines = iter(source)
        self._count = 0

    def getline(self) -> Optional[str]:
        """Return the next line, or None once the source is exhausted."""
        line = next(self._lines, None)
        if line is not None:
            self._count += 1
        return line

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.getline()
            if line is None:
                return
            yield line

    @property
    def num_lines(self) -> int:
        """Number of lines read from this stream so far."""
        return self._count

    def __repr__(self) -> str:
        return f"InputStream(name={self.name!r}, lines={self._count})"


# =============================================================================
# Parse Trees
# =============================================================================


Node = Union[str, "SequenceNode"]


class ParseTree:
    """
    An ordered sequence of text strings and interior sequences.

    Adjacent strings are always merged, so a tree never holds two text
    items side by side. A tree belongs to at most one owner (a paragraph or
    a sequence); sequences placed in a tree owned by a sequence get a weak
    back-reference to that sequence.
    """

    def __init__(self, items: Iterable[Node] = (), owner: Optional[Any] = None) -> None:
        self._items: List[Node] = []
        self._owner = weakref.ref(owner) if owner is not None else None
        for item in items:
            self.append(item)

    @property
    def owner(self) -> Optional[Any]:
        return self._owner() if self._owner is not None else None

    def _adopt(self, node: "SequenceNode") -> None:
        parent = self.owner
        node._set_parent(parent if isinstance(parent, SequenceNode) else None)

    def append(self, item: Union[Node, "ParseTree"]) -> "ParseTree":
        """Add an item at the end, merging text into a trailing string."""
        if isinstance(item, ParseTree):
            for child in item.children:
                self.append(child)
            return self
        if isinstance(item, str):
            if not item:
                return self
            if self._items and isinstance(self._items[-1], str):
                self._items[-1] += item
                return self
        else:
            self._adopt(item)
        self._items.append(item)
        return self

    def prepend(self, item: Union[Node, "ParseTree"]) -> "ParseTree":
        """Add an item at the start, merging text into a leading string."""
        if isinstance(item, ParseTree):
            for child in reversed(item.children):
                self.prepend(child)
            return self
        if isinstance(item, str):
            if not item:
                return self
            if self._items and isinstance(self._items[0], str):
                self._items[0] = item + self._items[0]
                return self
        else:
            self._adopt(item)
        self._items.insert(0, item)
        return self

    @property
    def children(self) -> List[Node]:
        """A copy of the items in this tree."""
        return list(self._items)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Node:
        return self._items[index]

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ParseTree):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"ParseTree({self._items!r})"

    def raw_text(self) -> str:
        """Reassemble the markup this tree was built from."""
        return "".join(
            item if isinstance(item, str) else item.raw_text() for item in self._items
        )

    def sequences(self) -> Iterator["SequenceNode"]:
        """Yield every sequence in the tree, outermost first."""
        for item in self._items:
            if isinstance(item, SequenceNode):
                yield item
                yield from item.children.sequences()

    def to_data(self) -> List[Any]:
        """Plain lists/dicts suitable for JSON output."""
        return [
            item if isinstance(item, str) else item.to_data() for item in self._items
        ]

    def release(self) -> None:
        """Drop the items and clear every back-reference below this tree."""
        for item in self._items:
            if isinstance(item, SequenceNode):
                item.release()
        self._items = []


# =============================================================================
# Paragraphs and Sequences
# =============================================================================


@dataclass
class Paragraph:
    """A single POD paragraph as handed to the consumer."""

    text: str
    name: Optional[str] = None
    prefix: str = "="
    separator: str = " "
    kind: ParagraphKind = ParagraphKind.TEXT
    source: str = "(unknown)"
    line: int = 0
    parse_tree: Optional[ParseTree] = field(default=None, repr=False, compare=False)

    @property
    def is_command(self) -> bool:
        return self.name is not None

    @property
    def raw_text(self) -> str:
        """The paragraph as it appeared in the input."""
        if self.name is None:
            return self.text
        return f"{self.prefix}{self.name}{self.separator}{self.text}"

    def to_data(self) -> dict:
        data = {
            "kind": str(self.kind),
            "name": self.name,
            "text": self.text,
            "source": self.source,
            "line": self.line,
        }
        if self.parse_tree is not None:
            data["tree"] = self.parse_tree.to_data()
        return data


class SequenceNode:
    """
    One interior sequence such as ``B<bold>``.

    The children tree is owned by the node. The enclosing sequence, if
    any, is only referenced weakly and is cleared by :meth:`release`.
    """

    def __init__(
        self,
        name: str,
        left: str = "<",
        right: str = ">",
        source: str = "(unknown)",
        line: int = 0,
        children: Iterable[Node] = (),
    ) -> None:
        self.name = name
        self.left = left
        self.right = right
        self.source = source
        self.line = line
        self._parent: Optional["weakref.ReferenceType[SequenceNode]"] = None
        self.children = ParseTree(owner=self)
        for child in children:
            self.children.append(child)

    def _set_parent(self, parent: Optional["SequenceNode"]) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    def nested(self) -> Optional["SequenceNode"]:
        """The sequence this one is nested in, if still alive."""
        return self._parent() if self._parent is not None else None

    @property
    def text(self) -> str:
        """The raw text between the delimiters."""
        return self.children.raw_text()

    def raw_text(self) -> str:
        return f"{self.name}{self.left}{self.children.raw_text()}{self.right}"

    def to_data(self) -> dict:
        return {
            "sequence": self.name,
            "left": self.left,
            "right": self.right,
            "children": self.children.to_data(),
        }

    def release(self) -> None:
        self._parent = None
        self.children.release()

    def __repr__(self) -> str:
        return f"SequenceNode({self.name!r}, {self.children.children!r})"
