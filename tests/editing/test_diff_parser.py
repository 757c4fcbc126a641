"""Tests for the DiffParser."""

import pytest

from acmefmt.editing.diff_parser import (
    DiffParser, DiffScript, EditOp, OpKind, ParseError, parse_header, parse_range,
)


CHANGE_DIFF = """\
2c2
< line2
---
> CHANGED
"""

MULTI_HUNK_DIFF = """\
1a2
> NEW
3,4c4
< c
< d
---
> CD
7d5
< g
"""


class TestParseRange:
    def test_single_number(self):
        assert parse_range("12") == (12, 12)

    def test_pair(self):
        assert parse_range("12,14") == (12, 14)

    def test_zero(self):
        assert parse_range("0") == (0, 0)

    @pytest.mark.parametrize("text", ["", "x", "1,", ",2", "3,1", "-1"])
    def test_invalid(self, text):
        with pytest.raises(ParseError):
            parse_range(text)


class TestParseHeader:
    def test_change(self):
        op = parse_header("12,14c10,11")
        assert op == EditOp(OpKind.CHANGE, 12, 14, 10, 11)
        assert op.old_range == (12, 14)
        assert op.new_range == (10, 11)

    def test_add(self):
        assert parse_header("2a3") == EditOp(OpKind.ADD, 2, 2, 3, 3)

    def test_delete(self):
        assert parse_header("5,6d4") == EditOp(OpKind.DELETE, 5, 6, 4, 4)

    def test_add_at_top_of_file(self):
        assert parse_header("0a1,2") == EditOp(OpKind.ADD, 0, 0, 1, 2)

    def test_delete_leading_lines(self):
        assert parse_header("1,2d0") == EditOp(OpKind.DELETE, 1, 2, 0, 0)

    def test_missing_operator(self):
        with pytest.raises(ParseError):
            parse_header("12,14x10")

    @pytest.mark.parametrize("line", ["0c1", "2c0", "0d1", "2a0"])
    def test_zero_outside_insertion_point_rejected(self, line):
        with pytest.raises(ParseError):
            parse_header(line)


class TestParse:
    def test_single_change(self):
        script = DiffParser().parse(CHANGE_DIFF)

        assert isinstance(script, DiffScript)
        assert script.ops == [EditOp(OpKind.CHANGE, 2, 2, 2, 2)]
        assert script.errors == []

    def test_empty_text(self):
        script = DiffParser().parse("")
        assert not script
        assert len(script) == 0

    def test_preserves_file_order(self):
        script = DiffParser().parse(MULTI_HUNK_DIFF)

        assert [op.kind for op in script] == [
            OpKind.ADD, OpKind.CHANGE, OpKind.DELETE,
        ]
        starts = [op.old_start for op in script]
        assert starts == sorted(starts)

    def test_content_lines_are_ignored(self):
        # Body lines that look like headers must not be parsed as such
        text = "1c1\n< 2a3\n---\n> 4d4\n"
        script = DiffParser().parse(text)
        assert script.ops == [EditOp(OpKind.CHANGE, 1, 1, 1, 1)]

    def test_bad_header_is_skipped_and_recorded(self):
        text = "1x2\n3c3\n< a\n---\n> b\n"
        script = DiffParser().parse(text)

        assert script.ops == [EditOp(OpKind.CHANGE, 3, 3, 3, 3)]
        assert len(script.errors) == 1
        assert "1x2" in script.errors[0]

    def test_bad_range_is_skipped(self):
        script = DiffParser().parse("1,zc1\n< a\n---\n> b\n2a3\n> c\n")
        assert script.ops == [EditOp(OpKind.ADD, 2, 2, 3, 3)]
        assert len(script.errors) == 1

    def test_blank_lines_skipped(self):
        script = DiffParser().parse("\n\n2a3\n> c\n\n")
        assert len(script) == 1


class TestNoNewlineSentinel:
    def test_old_side_emits_eof_newline_after_hunk(self):
        text = "2c2\n< b\n\\ No newline at end of file\n---\n> b\n"
        script = DiffParser().parse(text)

        assert script.ops == [
            EditOp(OpKind.CHANGE, 2, 2, 2, 2),
            EditOp(OpKind.EOF_NEWLINE),
        ]
        assert script.ops[1].old_range == (0, 0)
        assert script.ops[1].new_range == (0, 0)

    def test_new_side_emits_nothing(self):
        text = "2c2\n< b\n---\n> b\n\\ No newline at end of file\n"
        script = DiffParser().parse(text)
        assert script.ops == [EditOp(OpKind.CHANGE, 2, 2, 2, 2)]

    def test_both_sides(self):
        text = (
            "2c2\n< b\n\\ No newline at end of file\n"
            "---\n> c\n\\ No newline at end of file\n"
        )
        script = DiffParser().parse(text)
        assert [op.kind for op in script] == [OpKind.CHANGE, OpKind.EOF_NEWLINE]

    def test_deleted_last_line(self):
        text = "2d1\n< b\n\\ No newline at end of file\n"
        script = DiffParser().parse(text)
        assert [op.kind for op in script] == [OpKind.DELETE, OpKind.EOF_NEWLINE]
