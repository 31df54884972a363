"""Tests for cursor token context resolution."""

from __future__ import annotations

from querypad.domains.query.completion import CursorPosition, ReplaceRange, resolve_context, word_range_before


class TestResolveContext:
    """Tests for resolve_context."""

    def test_qualified_empty_word(self):
        """Right after alias. the qualifier is set and the range is empty."""
        context = resolve_context("SELECT c. FROM customers c", (0, 9))
        assert context.line_prefix == "SELECT c."
        assert context.preceding_token == "c."
        assert context.qualifier == "c"
        assert context.partial_word == ""
        assert context.replace_range == ReplaceRange(start_offset=9, end_offset=9, line=0)

    def test_qualified_partial_word(self):
        """The partial column after the dot is what gets replaced."""
        context = resolve_context("SELECT o.to FROM orders o", (0, 11))
        assert context.qualifier == "o"
        assert context.partial_word == "to"
        assert context.replace_range == ReplaceRange(start_offset=9, end_offset=11, line=0)

    def test_unqualified_word(self):
        """A bare word has no qualifier; its start is the range start."""
        context = resolve_context("SELECT na", CursorPosition(0, 9))
        assert context.preceding_token == "na"
        assert context.qualifier is None
        assert context.partial_word == "na"
        assert context.keyword_before == "SELECT"
        assert context.replace_range.length == 2

    def test_prefix_ending_in_whitespace(self):
        """After a space nothing is being typed."""
        context = resolve_context("SELECT ", (0, 7))
        assert context.preceding_token == ""
        assert context.qualifier is None
        assert context.partial_word == ""
        assert context.keyword_before == "SELECT"

    def test_blank_line(self):
        """An empty buffer resolves to an empty context at offset 0."""
        context = resolve_context("", (0, 0))
        assert context.preceding_token == ""
        assert context.keyword_before is None
        assert context.replace_range == ReplaceRange(start_offset=0, end_offset=0, line=0)

    def test_last_dot_wins(self):
        """The qualifier is the identifier right before the last dot."""
        context = resolve_context("SELECT main.users.na", (0, 20))
        assert context.qualifier == "users"
        assert context.partial_word == "na"

    def test_second_line_offsets(self):
        """Offsets are absolute positions into the whole buffer."""
        sql = "SELECT *\nFROM cus"
        context = resolve_context(sql, (1, 8))
        assert context.line_prefix == "FROM cus"
        assert context.keyword_before == "FROM"
        assert context.replace_range == ReplaceRange(start_offset=14, end_offset=17, line=1)
        assert sql[context.replace_range.start_offset : context.replace_range.end_offset] == "cus"

    def test_only_current_line_is_inspected(self):
        """A qualifier on a previous line is ignored."""
        context = resolve_context("SELECT c.\nna", (1, 2))
        assert context.qualifier is None
        assert context.preceding_token == "na"

    def test_cursor_in_middle_of_word(self):
        """The range ends at the cursor, not at the end of the word."""
        context = resolve_context("SELECT name", (0, 9))
        assert context.partial_word == "na"
        assert context.replace_range == ReplaceRange(start_offset=7, end_offset=9, line=0)

    def test_cursor_is_clamped(self):
        """Out-of-range cursors clamp to the end of the buffer."""
        context = resolve_context("SELECT\nFROM", (5, 100))
        assert context.line_prefix == "FROM"
        assert context.replace_range.line == 1
        assert context.replace_range.end_offset == len("SELECT\nFROM")

    def test_range_never_leaves_current_line(self):
        """For every cursor position, the range stays inside its line."""
        sql = "SELECT a.id,\n  b.name\nFROM t1 a\nJOIN t2 b ON a.id = b.id"
        lines = sql.split("\n")
        line_start = 0
        for line_no, line_text in enumerate(lines):
            for column in range(len(line_text) + 1):
                replace_range = resolve_context(sql, (line_no, column)).replace_range
                assert replace_range.line == line_no
                assert line_start <= replace_range.start_offset <= replace_range.end_offset
                assert replace_range.end_offset <= line_start + len(line_text)
            line_start += len(line_text) + 1


class TestWordRangeBefore:
    """Tests for word_range_before."""

    def test_word_characters(self):
        """Letters, digits and underscores form the word."""
        assert word_range_before("SELECT user_id2", 15) == (7, 15)

    def test_stops_at_punctuation(self):
        """Dots, parens and commas end the word."""
        assert word_range_before("COUNT(a.b", 9) == (8, 9)
        assert word_range_before("x,y", 3) == (2, 3)

    def test_empty_word(self):
        """No word before the cursor gives a zero-width range."""
        assert word_range_before("SELECT ", 7) == (7, 7)
