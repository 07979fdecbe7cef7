"""
Turn a raw event result payload into ordered, labelled rows for display.

Result payloads are free-form key/value mappings stored by the backend. The
rules below map keys to friendly labels, render placings as ordinals and put
the most important fields (place, mark, event) first.
"""

import math
import re
import unicodedata
from typing import Any, List, Mapping, NamedTuple, Optional, Tuple

HIDDEN_KEY = "hidden_id"
EMPTY_VALUE = "-"

LABEL_SYNONYMS = {
    "place_rank": "Place",
    "rank": "Place",
    "pos": "Place",
    "mark": "Mark",
    "discipline_clean": "Event",
    "event": "Event",
    "wind": "Wind",
    "venue": "Location",
    "date": "Date",
}

# Keys containing any of these render their value as an ordinal (3 -> "3rd").
ORDINAL_KEYWORDS: Tuple[str, ...] = ("rank", "place")

# Evaluated top to bottom, first match wins.
SORT_PRIORITY_RULES: Tuple[Tuple[int, Tuple[str, ...]], ...] = (
    (1, ("place", "rank", "pos")),
    (2, ("mark", "result", "time")),
    (3, ("discipline", "event")),
)
DEFAULT_PRIORITY = 4

_NON_DIGITS = re.compile(r"[^0-9]")
_WORD_START = re.compile(r"\b\w")


class DisplayField(NamedTuple):
    label: str
    value: str


def format_label(key: str) -> str:
    """Friendly label for a result key ("place_rank" -> "Place")."""
    if key in LABEL_SYNONYMS:
        return LABEL_SYNONYMS[key]
    return _WORD_START.sub(lambda match: match.group(0).upper(), key.replace("_", " "))


def ordinal(n: int) -> str:
    return _ordinal_text(str(n))


def _ordinal_text(digits: str) -> str:
    # Only the last two digits decide the suffix.
    number = digits.lstrip("0") or "0"
    tail = int(number[-2:])
    if tail in (11, 12, 13):
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(tail % 10, "th")
    return f"{number}{suffix}"


def format_value(key: str, value: Any) -> str:
    """Render a raw result value; placings become ordinals, blanks become "-"."""
    if not value or (isinstance(value, float) and math.isnan(value)):
        return EMPTY_VALUE

    text = _stringify(value)
    lowered = key.lower()
    if any(word in lowered for word in ORDINAL_KEYWORDS):
        digits = _NON_DIGITS.sub("", text)
        if digits:
            return _ordinal_text(digits)
    return text


def sort_priority(key: str) -> int:
    lowered = key.lower()
    for priority, keywords in SORT_PRIORITY_RULES:
        if any(word in lowered for word in keywords):
            return priority
    return DEFAULT_PRIORITY


def order_fields(record: Optional[Mapping[str, Any]]) -> List[DisplayField]:
    """Ordered display rows for a result record, without the hidden id."""
    if not record or not isinstance(record, Mapping):
        return []

    entries = [(str(key), value) for key, value in record.items() if key != HIDDEN_KEY]
    entries.sort(key=lambda entry: (sort_priority(entry[0]), _collation_key(entry[0])))
    return [DisplayField(format_label(key), format_value(key, value)) for key, value in entries]


def _stringify(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _char_class(ch: str) -> int:
    if ch.isspace():
        return 0
    if ch.isdigit():
        return 2
    if ch.isalpha():
        return 3
    return 1


def _collation_key(key: str) -> Tuple:
    """Dictionary order: accents and case only break ties, punctuation sorts before digits and letters."""
    base = "".join(ch for ch in unicodedata.normalize("NFKD", key) if not unicodedata.combining(ch))
    primary = tuple((_char_class(ch), ch) for ch in base.casefold())
    return primary, key.casefold(), key.swapcase()
