"""
CSS selector algebra.

A selector may be a comma-separated list (an OR of simple selectors).
Both operations work branch by branch and never de-duplicate branches.
"""

from __future__ import annotations


def split_selector(selector: str) -> list[str]:
    """Split a selector list into its branches, keeping surrounding whitespace."""
    return selector.split(",")


def append_to_selector(selector: str, to_append: str) -> str:
    """
    Append a sub-selector to every branch of ``selector``.

    Examples:
        >>> append_to_selector("h1, h2, h3", ".some-class")
        'h1.some-class, h2.some-class, h3.some-class'
        >>> append_to_selector("", ".has-red-color")
        '.has-red-color'
    """
    return ",".join(branch + to_append for branch in split_selector(selector))


def scope_selector(scope: str, selector: str) -> str:
    """
    Scope ``selector`` under every branch of ``scope``.

    Works like SCSS nesting without support for ``&``.

    Examples:
        >>> scope_selector(".a, .b .c", "> .x, .y")
        '.a > .x, .a .y, .b .c > .x, .b .c .y'
    """
    scoped = [
        f"{outer.strip()} {inner.strip()}"
        for outer in split_selector(scope)
        for inner in split_selector(selector)
    ]
    return ", ".join(scoped)
