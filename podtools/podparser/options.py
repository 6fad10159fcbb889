# SPDX-License-Identifier: MIT
"""
POD Parser Options

Tunable markup conventions used by the tokenizer, the paragraph classifier
and the interior sequence expander. The defaults describe the classic POD
format: ``=`` command markers, ``=cut`` to resume normal text, single
uppercase letters as sequence commands and ``C<...>`` as the literal-code
sequence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Pattern


# =============================================================================
# Default Conventions
# =============================================================================

DEFAULT_COMMAND_MARKER = "="
DEFAULT_CUT_DIRECTIVE = "cut"
DEFAULT_LITERAL_COMMAND = "C"
DEFAULT_SEQUENCE_PATTERN = r"[A-Z]"

# A line holding nothing but whitespace ends a paragraph
BLANK_LINE_RE = re.compile(r"^[ \t\r\n\f\v]*$")

# Leading whitespace marks a verbatim paragraph
VERBATIM_RE = re.compile(r"^\s")

# Right delimiter preceded by '-' or '=' (but not '--' or '==')
ARROW_TAIL_RE = re.compile(r"[^-=][-=]$")


@dataclass(frozen=True)
class ParseOptions:
    """Markup conventions for one parser instance."""

    command_marker: str = DEFAULT_COMMAND_MARKER
    cut_directive: str = DEFAULT_CUT_DIRECTIVE
    literal_command: str = DEFAULT_LITERAL_COMMAND
    sequence_pattern: str = DEFAULT_SEQUENCE_PATTERN
    extended_delimiters: bool = True
    start_cutting: bool = True
    _patterns: Dict[str, Pattern[str]] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if len(self.command_marker) != 1:
            raise ValueError(
                f"command marker must be a single character, got {self.command_marker!r}"
            )
        if self.command_marker.isspace() or self.command_marker.isalnum():
            raise ValueError(
                f"command marker must be a symbol, got {self.command_marker!r}"
            )
        if not self.cut_directive:
            raise ValueError("cut directive must not be empty")
        try:
            token = re.compile(self.sequence_pattern)
        except re.error as e:
            raise ValueError(f"invalid sequence pattern {self.sequence_pattern!r}: {e}") from e
        if token.groups:
            raise ValueError("sequence pattern must not contain capturing groups")
        if token.match(""):
            raise ValueError("sequence pattern must not match the empty string")

    def _compiled(self, key: str, source: str, flags: int = 0) -> Pattern[str]:
        pattern = self._patterns.get(key)
        if pattern is None:
            pattern = re.compile(source, flags)
            self._patterns[key] = pattern
        return pattern

    @property
    def command_re(self) -> Pattern[str]:
        """One or two command markers immediately followed by a non-space."""
        marker = re.escape(self.command_marker)
        return self._compiled("command", rf"^({marker}{{1,2}})(?=\S)")

    @property
    def double_marker_re(self) -> Pattern[str]:
        """A one-line command paragraph: exactly two markers then a non-space."""
        marker = re.escape(self.command_marker)
        return self._compiled("double", rf"^{marker}{{2}}(?=[^\s{marker}])")

    @property
    def sequence_start_re(self) -> Pattern[str]:
        """A sequence command token followed by one or more left delimiters."""
        return self._compiled(
            "sequence", rf"(?P<name>{self.sequence_pattern})(?P<left><+)"
        )
