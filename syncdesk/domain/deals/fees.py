"""Ownership-split fee calculation for the publishing and recording chains"""

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float, str, Decimal]

CENT = Decimal("0.01")

# Ownership assumed when a splits note carries no usable percentage
DEFAULT_SPLIT_PERCENTAGE = Decimal("50")

# Tried in order, first match wins
SPLIT_PATTERNS = [
    re.compile(r"\bour\s*(?:share|split|percentage|%)?\s*:?\s*(\d+(?:\.\d+)?)\s*%?", re.IGNORECASE),
    re.compile(r"\bwe\s*(?:get|receive|own)?\s*:?\s*(\d+(?:\.\d+)?)\s*%?", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*%?\s*(?:ours|our|us)\b", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*%?\s*writer", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*%?\s*publisher", re.IGNORECASE),
]
BARE_PERCENT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*%")

# (ownership list, splits text, full fee, derived fee, ownership key) per chain
PUBLISHING_CHAIN = ("composer_publishers", "splits", "full_song_value", "our_fee", "publishingOwnership")
RECORDING_CHAIN = ("artist_labels", "artist_label_splits", "full_recording_fee", "our_recording_fee", "labelOwnership")
FEE_CHAINS = {"publishing": PUBLISHING_CHAIN, "recording": RECORDING_CHAIN}


def to_decimal(value: Optional[Number]) -> Optional[Decimal]:
    """Coerce a stored or typed number to Decimal; blanks and garbage become None."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None


def calculate_share(full_fee: Optional[Number], percentage: Optional[Number]) -> Decimal:
    """Return ``full_fee * percentage / 100`` rounded half-up to the cent."""
    fee = to_decimal(full_fee) or Decimal("0")
    pct = to_decimal(percentage) or Decimal("0")
    return (fee * pct / Decimal("100")).quantize(CENT, rounding=ROUND_HALF_UP)


def owned_percentage(entries: Optional[list[dict]], key: str) -> Decimal:
    """
    Sum ``key`` over the entries flagged ``isMine``.

    The sum is not capped at 100 and is never validated; entries with a
    blank ownership contribute nothing.
    """
    total = Decimal("0")
    for entry in entries or []:
        if not isinstance(entry, dict) or not entry.get("isMine"):
            continue
        total += to_decimal(entry.get(key)) or Decimal("0")
    return total


def parse_split_percentage(text: Optional[str]) -> Decimal:
    """
    Pull the business's ownership out of a free-text splits note.

    Falls back to DEFAULT_SPLIT_PERCENTAGE when nothing in the text yields a
    value between 0 and 100.
    """
    if not text:
        return DEFAULT_SPLIT_PERCENTAGE

    for pattern in SPLIT_PATTERNS:
        match = pattern.search(text)
        if match:
            value = Decimal(match.group(1))
            if 0 <= value <= 100:
                return value

    match = BARE_PERCENT_PATTERN.search(text)
    if match:
        value = Decimal(match.group(1))
        if 0 <= value <= 100:
            return value

    logger.debug(f"No ownership percentage found in splits text, using {DEFAULT_SPLIT_PERCENTAGE}%")
    return DEFAULT_SPLIT_PERCENTAGE


def has_ownership_data(entries: Optional[list[dict]], key: str) -> bool:
    """True when some entry is flagged ``isMine`` or carries an ownership value."""
    return any(
        isinstance(entry, dict) and (entry.get("isMine") or to_decimal(entry.get(key)) is not None)
        for entry in entries or []
    )


def resolve_our_percentage(entries: Optional[list[dict]], key: str, splits_text: Optional[str]) -> Decimal:
    """
    Structured ownership when the entries carry any, otherwise the splits note.

    Credit-only entries (zipped from legacy comma-joined names) hold no
    ownership, so they fall through to the note.
    """
    if has_ownership_data(entries, key):
        return owned_percentage(entries, key)
    return parse_split_percentage(splits_text)


def recompute_fees(values: dict, current=None, touched: Optional[set] = None) -> dict:
    """
    Recalculate ``our_fee`` and ``our_recording_fee`` in ``values``.

    A chain is recalculated when any of its driving fields (full fee,
    ownership list or splits text) is in ``touched``; the result overwrites
    whatever derived fee was already there. Missing inputs are read from
    ``current`` (the stored deal) when given.
    """
    touched = set(values) if touched is None else touched

    for entries_field, splits_field, full_field, derived_field, key in FEE_CHAINS.values():
        if not touched & {entries_field, splits_field, full_field}:
            continue

        def pick(field):
            if field in values:
                return values[field]
            return getattr(current, field, None) if current is not None else None

        full_fee = to_decimal(pick(full_field))
        if full_fee is None:
            continue

        pct = resolve_our_percentage(pick(entries_field), key, pick(splits_field))
        values[derived_field] = calculate_share(full_fee, pct)

    return values
