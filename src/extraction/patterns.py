"""Catalog of numeric text shapes recognized by the number extractor.

Each pattern is an independent regular expression tagged with a priority
class. Patterns overlap freely; precedence is decided by the priority class
when candidates are merged, never by the position of a pattern in the
catalog.
"""

from dataclasses import dataclass
from enum import IntEnum


class PriorityClass(IntEnum):
    """Priority of a numeric shape. Lower values win conflicts."""

    CURRENCY = 1
    PERCENTAGE = 2
    TEMPERATURE = 3
    PARENTHESIZED = 4
    SIGNED = 5
    GROUPED = 6
    DECIMAL = 7
    LONG_WHOLE = 8
    SHORT_WHOLE = 9


@dataclass(frozen=True)
class NumberPattern:
    """A named numeric shape with its priority class."""

    name: str
    shape: str
    priority: PriorityClass
    flags: int = 0


CURRENCY_SYMBOLS = "$€£¥₹₩₽₺₦₱¢"
CURRENCY_CODES = ("USD", "EUR", "GBP", "JPY", "INR", "CAD", "AUD", "CHF")
DEGREE_MARKS = "°º"

_SYM = f"[{CURRENCY_SYMBOLS}]"
_CODE_NAMES = "(?:" + "|".join(CURRENCY_CODES) + ")"
_CODE = _CODE_NAMES + r"\b"
_GAP = r"[ \u00a0]?"

# A number may not start inside a word or right after "digit + separator",
# nor after a dot that opens a fraction such as ".5". It may not stop before
# a word character or "separator + digit".
_LEAD = r"(?<!\w)(?<!\d[.,])(?<!\W\.)(?<!^\.)"
_TAIL = r"(?!\w)(?![.,]\d)"
_NUM = r"(?:\d+(?:[.,]\d+)*|\.\d+)"

DEFAULT_CATALOG: tuple[NumberPattern, ...] = (
    NumberPattern(
        "currency",
        f"(?:{_SYM}{_GAP}[+-]?{_NUM}{_TAIL}"
        f"|{_LEAD}[+-]?{_NUM}{_GAP}{_SYM}"
        f"|(?<![A-Za-z]){_CODE_NAMES}{_GAP}[+-]?{_NUM}{_TAIL}"
        f"|{_LEAD}{_NUM}{_GAP}{_CODE})",
        PriorityClass.CURRENCY,
    ),
    NumberPattern(
        "percentage",
        f"{_LEAD}[+-]?{_NUM}{_GAP}%",
        PriorityClass.PERCENTAGE,
    ),
    NumberPattern(
        "temperature",
        f"{_LEAD}[+-]?{_NUM}{_GAP}[{DEGREE_MARKS}](?:{_GAP}[CFK](?![A-Za-z]))?",
        PriorityClass.TEMPERATURE,
    ),
    NumberPattern(
        "parenthesized",
        rf"\(\s*{_SYM}?\s*{_NUM}\s*\)",
        PriorityClass.PARENTHESIZED,
    ),
    NumberPattern(
        "signed",
        rf"(?<![\w+\-])(?<!\d[.,])[+-]{_NUM}{_TAIL}",
        PriorityClass.SIGNED,
    ),
    NumberPattern(
        "grouped_comma",
        _LEAD + r"[1-9]\d{0,2}(?:,\d{3})+(?:\.\d+)?" + _TAIL,
        PriorityClass.GROUPED,
    ),
    NumberPattern(
        "grouped_dot",
        _LEAD + r"[1-9]\d{0,2}(?:(?:\.\d{3})+,\d+|(?:\.\d{3}){2,})" + _TAIL,
        PriorityClass.GROUPED,
    ),
    NumberPattern(
        "decimal",
        _LEAD + r"(?:\d+[.,]|\.)\d+" + _TAIL,
        PriorityClass.DECIMAL,
    ),
    NumberPattern(
        "long_whole",
        _LEAD + r"\d{4,}" + _TAIL,
        PriorityClass.LONG_WHOLE,
    ),
    NumberPattern(
        "short_whole",
        _LEAD + r"\d{2,3}" + _TAIL,
        PriorityClass.SHORT_WHOLE,
    ),
)


def describe_catalog(
    catalog: tuple[NumberPattern, ...] = DEFAULT_CATALOG,
) -> list[tuple[str, int]]:
    """Return ``(name, priority)`` pairs for each pattern in catalog order."""
    return [(p.name, int(p.priority)) for p in catalog]
