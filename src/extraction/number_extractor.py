"""Numeric-token extraction from recognized text.

Turns noisy OCR output into a ranked, deduplicated list of numeric tokens.
Every pattern in the catalog is applied independently, each raw match is
normalized and validated, duplicates are merged keeping the best priority,
and the survivors are ranked and capped.
"""

import math
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from src.utils.config import ExtractionConfig
from src.utils.logger import get_logger

from .patterns import (
    CURRENCY_CODES,
    CURRENCY_SYMBOLS,
    DEFAULT_CATALOG,
    DEGREE_MARKS,
    NumberPattern,
)

logger = get_logger(__name__)

_SYMBOL_RE = re.compile(
    f"[{re.escape(CURRENCY_SYMBOLS)}%{DEGREE_MARKS}]"
    "|" + "|".join(CURRENCY_CODES)
)
_NON_NUMERIC_RE = re.compile(r"[^\d.,+\-]")


@dataclass
class Candidate:
    """A raw pattern match before validation."""

    raw_text: str
    source_index: int
    priority: int
    pattern_name: str


@dataclass
class CanonicalToken:
    """A validated numeric token eligible for output."""

    display_text: str
    priority: int
    first_index: int
    value: float
    pattern_name: str = ""


def collect_candidates(
    text: str, catalog: Sequence[NumberPattern] = DEFAULT_CATALOG
) -> list[Candidate]:
    """Apply every pattern to the text and collect the raw matches.

    Args:
        text: Recognized text to scan.
        catalog: Patterns to apply.

    Returns:
        Candidates in catalog order, then in order of position.
    """
    candidates: list[Candidate] = []
    for pattern in catalog:
        try:
            matches = list(re.finditer(pattern.shape, text, pattern.flags))
        except (re.error, TypeError) as exc:
            logger.warning("Skipping pattern %s: %s", pattern.name, exc)
            continue
        for match in matches:
            candidates.append(
                Candidate(
                    raw_text=match.group(0),
                    source_index=match.start(),
                    priority=int(pattern.priority),
                    pattern_name=pattern.name,
                )
            )
    return candidates


def canonical_number(core: str) -> str | None:
    """Rewrite a digits-and-separators string with a single ``.`` decimal mark.

    When both ``.`` and ``,`` occur the last one is the decimal mark. A
    repeated separator is grouping, as is a single comma followed by exactly
    three digits when a non-zero integer part precedes it. Any other single
    comma is a decimal comma. A leading dot is kept (``.5``).

    Args:
        core: String made only of digits, ``.``, ``,`` and an optional
            leading sign.

    Returns:
        Canonical numeric text, or ``None`` if it cannot be a number.
    """
    sign = ""
    if core[:1] in ("+", "-"):
        sign, core = core[0], core[1:]
    core = core.rstrip(".,")
    if not core or "+" in core or "-" in core or not any(c.isdigit() for c in core):
        return None

    if "." in core and "," in core:
        if core.rfind(".") > core.rfind(","):
            number = core.replace(",", "")
        else:
            number = core.replace(".", "").replace(",", ".")
    elif "," in core:
        # "0,001" and ",500" have no thousands to group
        head = core[: core.find(",")].lstrip("0")
        if core.count(",") > 1 or (head and len(core) - core.rfind(",") - 1 == 3):
            number = core.replace(",", "")
        else:
            number = core.replace(",", ".")
    elif core.count(".") > 1:
        number = core.replace(".", "")
    else:
        number = core

    return sign + number


def normalize_candidate(candidate: Candidate) -> CanonicalToken | None:
    """Validate a raw match and choose the text it is displayed as.

    Matches carrying a currency mark, ``%`` or a degree mark keep their raw
    text; everything else is displayed as its canonical number, with a
    parenthesized value rendered as negative.

    Args:
        candidate: Raw pattern match.

    Returns:
        The normalized token, or ``None`` if the match is not a finite number.
    """
    raw = candidate.raw_text.strip()
    negative = raw.startswith("(") and raw.endswith(")")
    inner = raw[1:-1] if negative else raw

    number = canonical_number(_NON_NUMERIC_RE.sub("", inner))
    if number is None:
        return None
    if negative:
        number = "-" + number.lstrip("+-")

    try:
        value = float(number)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None

    display = raw if _SYMBOL_RE.search(raw) else number
    return CanonicalToken(
        display_text=display,
        priority=candidate.priority,
        first_index=candidate.source_index,
        value=value,
        pattern_name=candidate.pattern_name,
    )


def token_value(display_text: str) -> float | None:
    """Parse the numeric value of an emitted token, symbols ignored."""
    token = normalize_candidate(Candidate(display_text, 0, 0, ""))
    return token.value if token is not None else None


def token_symbols(display_text: str) -> frozenset[str]:
    """Return the semantic symbols (currency, ``%``, degree) in a token."""
    return frozenset(_SYMBOL_RE.findall(display_text))


def merge_token(
    pool: dict[str, CanonicalToken],
    token: CanonicalToken,
    config: ExtractionConfig,
) -> bool:
    """Merge one token into the pool keyed by display text.

    Args:
        pool: Mapping being built for the current call.
        token: Token to merge.
        config: Supplies the noise threshold and the priority it applies from.

    Returns:
        ``False`` if the token was discarded as noise, ``True`` otherwise.
    """
    if (
        token.priority >= config.noise_priority
        and abs(token.value) <= config.noise_threshold
    ):
        return False

    existing = pool.get(token.display_text)
    if existing is None:
        pool[token.display_text] = token
        return True

    if token.priority < existing.priority:
        existing.priority = token.priority
        existing.pattern_name = token.pattern_name
    existing.first_index = min(existing.first_index, token.first_index)
    return True


def resolve_conflicts(
    tokens: Iterable[CanonicalToken], config: ExtractionConfig
) -> dict[str, CanonicalToken]:
    """Collapse tokens into a fresh mapping of display text to best token."""
    pool: dict[str, CanonicalToken] = {}
    for token in tokens:
        merge_token(pool, token, config)
    return pool


def rank_tokens(
    pool: Mapping[str, CanonicalToken], max_results: int
) -> list[CanonicalToken]:
    """Order resolved tokens and cap the result.

    Tokens are sorted by priority, then longest display text first, then by
    first position in the source text.
    """
    ranked = sorted(
        pool.values(),
        key=lambda t: (t.priority, -len(t.display_text), t.first_index),
    )
    return ranked[: max(max_results, 0)]


class NumberExtractor:
    """Extracts ranked numeric tokens from free text.

    Holds only immutable settings, so one instance can serve concurrent
    callers.

    Args:
        config: Extraction settings. Defaults are used when omitted.
        catalog: Patterns to apply.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        catalog: Sequence[NumberPattern] = DEFAULT_CATALOG,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.catalog = tuple(catalog)

    def extract_tokens(
        self, text: str | None, max_results: int | None = None
    ) -> list[CanonicalToken]:
        """Extract ranked tokens with their priority and position.

        Args:
            text: Recognized text. ``None`` and blank text yield no tokens.
            max_results: Overrides the configured cap for this call.

        Returns:
            At most ``max_results`` tokens in rank order.
        """
        if not text or not text.strip():
            return []

        limit = self.config.max_results if max_results is None else max_results
        candidates = collect_candidates(text, self.catalog)

        tokens: list[CanonicalToken] = []
        for candidate in candidates:
            token = normalize_candidate(candidate)
            if token is None:
                logger.debug("Rejected candidate %r", candidate.raw_text)
                continue
            tokens.append(token)

        pool = resolve_conflicts(tokens, self.config)
        ranked = rank_tokens(pool, limit)
        logger.debug(
            "Extracted %d numbers from %d candidates", len(ranked), len(candidates)
        )
        return ranked

    def extract(self, text: str | None, max_results: int | None = None) -> list[str]:
        """Extract ranked numeric tokens as display strings.

        Args:
            text: Recognized text.
            max_results: Overrides the configured cap for this call.

        Returns:
            Ordered display strings, possibly empty.
        """
        return [t.display_text for t in self.extract_tokens(text, max_results)]


def extract_numbers(text: str | None, max_results: int | None = None) -> list[str]:
    """Extract numeric tokens from text with the default configuration."""
    return NumberExtractor().extract(text, max_results)
