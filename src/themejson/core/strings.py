"""
String utility functions for themejson.

Slugs and custom property names are normalised to kebab-case using the
same word boundaries as lodash's ``kebabCase``, so slugs produced here
match the ones produced by the JavaScript editor tooling.
"""

from __future__ import annotations

import re
from typing import Any

# Letters include the Latin-1 supplement, minus the math signs × and ÷.
_LOWER = r"a-z\xdf-\xf6\xf8-\xff"
_UPPER = r"A-Z\xc0-\xd6\xd8-\xde"
_BREAK = rf"[^{_LOWER}{_UPPER}0-9]"
_LOWER_CONTRACTION = r"(?:’(?:d|ll|m|re|s|t|ve))?"
_UPPER_CONTRACTION = r"(?:’(?:D|LL|M|RE|S|T|VE))?"

# Alternatives are tried in order at every position, like the lodash regex.
_WORDS = re.compile(
    "|".join(
        [
            rf"[{_UPPER}]?[{_LOWER}]+{_LOWER_CONTRACTION}(?={_BREAK}|[{_UPPER}]|$)",
            rf"[{_UPPER}]+{_UPPER_CONTRACTION}(?={_BREAK}|[{_UPPER}][{_LOWER}]|$)",
            rf"[{_UPPER}]?[{_LOWER}]+{_LOWER_CONTRACTION}",
            rf"[{_UPPER}]+{_UPPER_CONTRACTION}",
            r"\d*(?:1ST|2ND|3RD|(?![123])\dTH)(?=\b|[a-z_])",
            r"\d*(?:1st|2nd|3rd|(?![123])\dth)(?=\b|[A-Z_])",
            r"\d+",
        ]
    )
)


def split_words(value: Any) -> list[str]:
    """
    Split a string into words the way lodash does.

    Examples:
        >>> split_words("sansSerif")
        ['sans', 'Serif']
        >>> split_words("white2nd")
        ['white', '2nd']
    """
    return _WORDS.findall(str(value).replace("'", ""))


def to_kebab_case(value: Any) -> str:
    """
    Convert a string (or number) to kebab-case.

    Args:
        value: Value to convert; non-strings are converted with ``str``.

    Returns:
        Lowercase words joined by ``-``.

    Examples:
        >>> to_kebab_case("Red One")
        'red-one'
        >>> to_kebab_case("whiteToWhite")
        'white-to-white'
        >>> to_kebab_case("font2xl")
        'font-2-xl'
        >>> to_kebab_case(42)
        '42'
    """
    return "-".join(split_words(value)).lower()
