# SPDX-License-Identifier: MIT
"""Tests for the POD interior sequence expander."""

import unittest

from podtools.podparser.objects import SequenceNode
from podtools.podparser.options import ParseOptions
from podtools.podparser.sequences import SequenceExpander


def build(text, **kwargs):
    tree, _ = SequenceExpander(**kwargs).build(text)
    return tree


def bracket(name, argument, node):
    return f"[{name}:{argument}]"


class TestFlatExpansion(unittest.TestCase):
    """Test substitution through the callback."""

    def test_plain_text_unchanged(self) -> None:
        """Test that text without sequences passes through."""
        expander = SequenceExpander()
        self.assertEqual(expander.expand("plain text\n"), ("plain text\n", ""))
        self.assertEqual(expander.expand("no newline"), ("no newline", ""))
        self.assertEqual(expander.expand(""), ("", ""))

    def test_expansion_is_idempotent(self) -> None:
        """Test that re-expanding substituted text changes nothing."""
        expander = SequenceExpander(on_sequence=lambda n, a, node: a.upper())
        once, _ = expander.expand("a B<bold> and I<italic> word\n")
        twice, _ = expander.expand(once)
        self.assertEqual(once, "a BOLD and ITALIC word\n")
        self.assertEqual(twice, once)

    def test_default_callback_keeps_markup(self) -> None:
        """Test that the default substitution is the raw sequence."""
        text = "See B<this> and C<< $a <=> $b >> too.\n"
        self.assertEqual(SequenceExpander().expand(text), (text, ""))

    def test_nested_substitution(self) -> None:
        """Test that inner sequences are substituted first."""
        order = []

        def record(name, argument, node):
            order.append(name)
            return f"[{name}:{argument}]"

        result, _ = SequenceExpander(on_sequence=record).expand("x B<y I<z>> w\n")
        self.assertEqual(result, "x [B:y [I:z]] w\n")
        self.assertEqual(order, ["I", "B"])

    def test_stack_during_callback(self) -> None:
        """Test that open sequences are visible to the callback."""
        stack = []
        seen = []

        def record(name, argument, node):
            seen.append([n.name for n in stack])
            self.assertIs(stack[-1], node)
            return argument

        SequenceExpander(on_sequence=record, stack=stack).expand("B<I<C<x>>>")
        self.assertEqual(seen, [["B", "I", "C"], ["B", "I"], ["B"]])
        self.assertEqual(stack, [])

    def test_unterminated_sequence(self) -> None:
        """Test permissive recovery from a missing right delimiter."""
        result, rest = SequenceExpander(on_sequence=bracket).expand("x B<open\n")
        self.assertEqual(result, "x [B:open\n]\n")
        self.assertEqual(rest, "")

    def test_unterminated_raw(self) -> None:
        """Test that the default callback keeps unterminated text literal."""
        result, _ = SequenceExpander().expand("x B<open I<y> end\n")
        self.assertEqual(result, "x B<open I<y> end\n")

    def test_end_pattern(self) -> None:
        """Test stopping at a caller-supplied end pattern."""
        expander = SequenceExpander(on_sequence=bracket)
        result, rest = expander.expand("a B<b> c| rest", end_pattern=r"\|")
        self.assertEqual(result, "a [B:b] c")
        self.assertEqual(rest, " rest")

    def test_end_pattern_not_found(self) -> None:
        """Test an end pattern that never matches."""
        result, rest = SequenceExpander().expand("a B<b> c", end_pattern=r"\|")
        self.assertEqual(result, "a B<b> c")
        self.assertEqual(rest, "")

    def test_none_substitution(self) -> None:
        """Test that a callback returning None removes the sequence."""
        result, _ = SequenceExpander(on_sequence=lambda n, a, node: None).expand("a X<gone>b")
        self.assertEqual(result, "ab")


class TestTreeBuilding(unittest.TestCase):
    """Test parse tree construction."""

    def test_nesting(self) -> None:
        """Test that B<I<inner>> nests I inside B."""
        tree = build("B<I<inner>>")
        self.assertEqual(len(tree), 1)
        outer = tree[0]
        self.assertIsInstance(outer, SequenceNode)
        self.assertEqual(outer.name, "B")
        self.assertEqual(len(outer.children), 1)
        inner = outer.children[0]
        self.assertEqual(inner.name, "I")
        self.assertEqual(inner.children.children, ["inner"])
        self.assertIs(inner.nested(), outer)
        self.assertIsNone(outer.nested())

    def test_same_letter_nesting(self) -> None:
        """Test immediately nested sequences with the same letter."""
        tree = build("B<B<x>>")
        self.assertEqual(tree[0].name, "B")
        self.assertEqual(tree[0].children[0].name, "B")
        self.assertEqual(tree[0].children[0].children.children, ["x"])

    def test_text_around_sequences(self) -> None:
        """Test that surrounding text stays as string leaves."""
        tree = build("Use B<bold> or I<italic>.\n")
        self.assertEqual(tree[0], "Use ")
        self.assertEqual(tree[1].name, "B")
        self.assertEqual(tree[2], " or ")
        self.assertEqual(tree[3].name, "I")
        self.assertEqual(tree[4], ".\n")
        self.assertEqual(tree.raw_text(), "Use B<bold> or I<italic>.\n")

    def test_callback_not_called(self) -> None:
        """Test that building a tree does not substitute."""
        def fail(name, argument, node):
            raise AssertionError("callback invoked")

        tree, rest = SequenceExpander(on_sequence=fail).build("B<x>")
        self.assertEqual(tree[0].name, "B")
        self.assertEqual(rest, "")

    def test_single_character_content(self) -> None:
        """Test that C<0> holds the single character 0."""
        tree = build("C<0>")
        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0].name, "C")
        self.assertEqual(tree[0].children.children, ["0"])

    def test_empty_sequence(self) -> None:
        """Test a sequence with no content."""
        tree = build("C<>")
        self.assertEqual(tree[0].name, "C")
        self.assertEqual(len(tree[0].children), 0)
        self.assertEqual(tree[0].raw_text(), "C<>")

    def test_spaceship_in_literal(self) -> None:
        """Test that <=> inside C<...> does not close the sequence."""
        tree = build("C<<=>>")
        self.assertEqual(len(tree), 1)
        self.assertEqual(tree[0].children.children, ["<=>"])

        tree = build("C<$a <=> $b>")
        self.assertEqual(tree[0].children.children, ["$a <=> $b"])

    def test_arrows_in_literal(self) -> None:
        """Test that -> and => survive inside C<...>."""
        tree = build("C<$obj->method> and C<a => 1>")
        self.assertEqual(tree[0].children.children, ["$obj->method"])
        self.assertEqual(tree[1], " and ")
        self.assertEqual(tree[2].children.children, ["a => 1"])

    def test_double_arrow_closes(self) -> None:
        """Test that --> and ==> still close the literal sequence."""
        tree = build("C<a-->b")
        self.assertEqual(tree[0].children.children, ["a--"])
        self.assertEqual(tree[1], "b")

    def test_arrow_outside_literal_closes(self) -> None:
        """Test that -> closes sequences other than C."""
        tree = build("B<a->b>")
        self.assertEqual(tree[0].children.children, ["a-"])
        self.assertEqual(tree[1], "b>")

    def test_arrow_in_nested_literal(self) -> None:
        """Test the arrow rule applies to the innermost open sequence."""
        tree = build("B<C<$x->y>>")
        literal = tree[0].children[0]
        self.assertEqual(literal.name, "C")
        self.assertEqual(literal.children.children, ["$x->y"])

    def test_arrow_after_nested_sequence(self) -> None:
        """Test that -> right after a nested sequence stays inside C<...>."""
        tree = build("C<B<x>-> y>\n")
        literal = tree[0]
        self.assertEqual(literal.text, "B<x>-> y")
        self.assertEqual(literal.children[0].name, "B")
        self.assertEqual(literal.children[1], "-> y")
        self.assertEqual(tree[1], "\n")

        flat, _ = SequenceExpander(on_sequence=bracket).expand("C<B<x>-> y>\n")
        self.assertEqual(flat, "[C:[B:x]-> y]\n")

    def test_stray_right_delimiter(self) -> None:
        """Test that '>' outside any sequence is text."""
        tree = build("a > b C<x> c >\n")
        self.assertEqual(tree.raw_text(), "a > b C<x> c >\n")
        self.assertEqual(tree[0], "a > b ")

    def test_unterminated_tree(self) -> None:
        """Test that an unterminated sequence runs to the end."""
        tree = build("x I<never closed\n")
        self.assertEqual(tree[0], "x ")
        self.assertEqual(tree[1].children.children, ["never closed\n"])
        self.assertEqual(tree[1].right, "")

    def test_line_numbers(self) -> None:
        """Test that nodes record the line they start on."""
        tree = build("first\nsecond B<x>\n", source="doc.pod", line=10)
        self.assertEqual(tree[1].line, 11)
        self.assertEqual(tree[1].source, "doc.pod")


class TestExtendedDelimiters(unittest.TestCase):
    """Test the C<< ... >> form."""

    def test_extended(self) -> None:
        """Test doubled delimiters with surrounding whitespace."""
        tree = build("C<< $x->{y} >>")
        node = tree[0]
        self.assertEqual(node.children.children, ["$x->{y}"])
        self.assertEqual(node.left, "<< ")
        self.assertEqual(node.right, " >>")
        self.assertEqual(node.raw_text(), "C<< $x->{y} >>")

    def test_extended_single_right_delimiter(self) -> None:
        """Test content that is just a right delimiter."""
        tree = build("C<< > >>")
        self.assertEqual(tree[0].children.children, [">"])

    def test_extended_empty(self) -> None:
        """Test an extended sequence with only whitespace inside."""
        tree = build("C<< >>")
        self.assertEqual(len(tree[0].children), 0)
        self.assertEqual(tree[0].raw_text(), "C<< >>")

    def test_triple_delimiters(self) -> None:
        """Test that the closing run must match the opening run."""
        tree = build("C<<< a >> b >>>")
        self.assertEqual(tree[0].children.children, ["a >> b"])
        self.assertEqual(tree[0].right, " >>>")

    def test_nested_in_extended(self) -> None:
        """Test simple sequences inside an extended one."""
        tree = build("B<< I<x> >>")
        outer = tree[0]
        self.assertEqual(outer.children[0].name, "I")
        self.assertIs(outer.children[0].nested(), outer)

    def test_doubled_without_whitespace(self) -> None:
        """Test that C<<x> is a simple sequence holding '<x'."""
        tree = build("C<<x>")
        self.assertEqual(tree[0].left, "<")
        self.assertEqual(tree[0].children.children, ["<x"])

    def test_extended_disabled(self) -> None:
        """Test classic parsing when extended delimiters are off."""
        tree = build("C<< x >>", options=ParseOptions(extended_delimiters=False))
        self.assertEqual(tree[0].children.children, ["< x "])
        self.assertEqual(tree[1], ">")


class TestSequencePattern(unittest.TestCase):
    """Test configurable sequence names."""

    def test_default_single_letter(self) -> None:
        """Test that only the letter before '<' names the sequence."""
        tree = build("LINK<x>")
        self.assertEqual(tree[0], "LIN")
        self.assertEqual(tree[1].name, "K")

    def test_multi_letter(self) -> None:
        """Test a pattern allowing longer names."""
        tree = build("see LINK<x>", options=ParseOptions(sequence_pattern=r"[A-Z]+"))
        self.assertEqual(tree[0], "see ")
        self.assertEqual(tree[1].name, "LINK")

    def test_lowercase_not_a_sequence(self) -> None:
        """Test that lowercase letters do not start sequences by default."""
        tree = build("a<b> x<y>")
        self.assertEqual(tree.children, ["a<b> x<y>"])

    def test_custom_literal_command(self) -> None:
        """Test moving the arrow rule to another sequence."""
        options = ParseOptions(literal_command="L")
        tree = build("L<a->b> C<a->b>", options=options)
        self.assertEqual(tree[0].children.children, ["a->b"])
        self.assertEqual(tree[2].children.children, ["a-"])


if __name__ == "__main__":
    unittest.main()
