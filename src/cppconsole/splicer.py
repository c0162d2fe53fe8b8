"""
Line-oriented splicing of new fragments into generated source.

There is no parser here: the generated program carries fixed marker lines and
new code is inserted by partitioning the text around the first line that
starts with a marker (after stripping leading whitespace).
"""

from __future__ import annotations

from typing import List, Optional

# Opens the display helper; static declarations are spliced above it.
HELPER_MARKER = "template <typename T> void cpp_console_print("
# Opens the program entry point.
ENTRY_MARKER = "int main("
# Terminates the entry point body; statements are spliced above it.
EXIT_MARKER = "return EXIT_SUCCESS;"

STRUCTURAL_MARKERS = (HELPER_MARKER, ENTRY_MARKER, EXIT_MARKER)

DISPLAY_CALL_PREFIX = "cpp_console_print("


def _ltrim(line: str) -> str:
    return line.lstrip(" \t")


def find_marker(source: str, marker: str) -> Optional[int]:
    """Index of the first line whose left-trimmed content starts with ``marker``."""
    for index, line in enumerate(source.splitlines()):
        if _ltrim(line).startswith(marker):
            return index
    return None


def splice_preamble(source: str, marker: str) -> List[str]:
    """Lines strictly before the marker line; the whole source if it is absent."""
    lines = source.splitlines()
    index = find_marker(source, marker)
    if index is None:
        return lines
    return lines[:index]


def splice_postamble(source: str, marker: str) -> List[str]:
    """The marker line and everything after it; empty if the marker is absent."""
    index = find_marker(source, marker)
    if index is None:
        return []
    return source.splitlines()[index:]


def strip_display_calls(lines: List[str]) -> List[str]:
    """Drop persisted display-helper calls so they are not replayed every round."""
    return [line for line in lines if not _ltrim(line).startswith(DISPLAY_CALL_PREFIX)]


def join_lines(lines: List[str]) -> str:
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
