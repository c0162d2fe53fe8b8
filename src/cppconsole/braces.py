"""
Brace nesting tracker used to decide when a construct is complete.
"""

from __future__ import annotations


def count_braces(text: str) -> tuple[int, int]:
    return text.count("{"), text.count("}")


def update(depth: int, text: str) -> int:
    """
    Return the nesting depth after ``text``.

    Braces are counted literally, including those inside string literals and
    comments. Surplus closing braces clamp at zero instead of going negative.
    """
    opens, closes = count_braces(text)
    return max(0, depth + opens - closes)


def is_complete(depth: int) -> bool:
    return depth == 0
