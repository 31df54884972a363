"""Small text helpers shared by the UI and the CLI."""

from __future__ import annotations


def format_duration_ms(ms: float) -> str:
    """Format milliseconds into a human-readable duration string."""
    if ms >= 1000:
        return f"{ms / 1000:.2f}s"
    elif ms >= 1:
        return f"{ms:.0f}ms"
    else:
        return f"{ms:.2f}ms"


def offset_to_location(text: str, offset: int) -> tuple[int, int]:
    """Convert text offset to (row, col) location."""
    lines = text.split("\n")
    current_offset = 0
    for row, line in enumerate(lines):
        if current_offset + len(line) >= offset:
            return (row, offset - current_offset)
        current_offset += len(line) + 1
    return (len(lines) - 1, len(lines[-1]) if lines else 0)


def format_cell(value: object) -> str:
    """Render one result value for plain-text output."""
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        return f"<{len(value)} bytes>"
    return str(value)
