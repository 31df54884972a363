"""Tests for the shared text helpers."""

from __future__ import annotations

import pytest

from querypad.shared.core.utils import format_cell, format_duration_ms, offset_to_location


class TestOffsetToLocation:
    """Tests for offset_to_location."""

    @pytest.mark.parametrize(
        "offset, expected",
        [(0, (0, 0)), (3, (0, 3)), (4, (1, 0)), (6, (1, 2)), (99, (1, 2))],
    )
    def test_offsets(self, offset, expected):
        """Offsets map onto (line, column), clamping past the end."""
        assert offset_to_location("abc\nde", offset) == expected


class TestFormatting:
    """Tests for duration and cell formatting."""

    def test_durations(self):
        assert format_duration_ms(0.5) == "0.50ms"
        assert format_duration_ms(42.4) == "42ms"
        assert format_duration_ms(1500) == "1.50s"

    def test_cells(self):
        """NULL and binary values get readable placeholders."""
        assert format_cell(None) == "NULL"
        assert format_cell(b"\x00\x01") == "<2 bytes>"
        assert format_cell(3.5) == "3.5"
