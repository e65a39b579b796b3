from decimal import Decimal
from types import SimpleNamespace

import pytest

from syncdesk.domain.deals.fees import (
    DEFAULT_SPLIT_PERCENTAGE,
    calculate_share,
    owned_percentage,
    parse_split_percentage,
    recompute_fees,
    resolve_our_percentage,
)

OWNERSHIP = [
    {"composer": "A", "publishingOwnership": 30, "isMine": True},
    {"composer": "B", "publishingOwnership": 20, "isMine": True},
    {"composer": "C", "publishingOwnership": 50, "isMine": False},
]


def test_calculate_share_rounds_to_cents():
    assert calculate_share(1000, 25) == Decimal("250.00")
    assert calculate_share("333.33", "33.333") == Decimal("111.11")


def test_calculate_share_rounds_half_up():
    assert calculate_share("0.05", 50) == Decimal("0.03")


@pytest.mark.parametrize("fee,pct", [(0, 50), (1000, 0), (None, 50), (1000, None)])
def test_calculate_share_zero_inputs(fee, pct):
    assert calculate_share(fee, pct) == Decimal("0")


def test_owned_percentage_sums_only_mine_entries():
    assert owned_percentage(OWNERSHIP, "publishingOwnership") == Decimal("50")


def test_summed_ownership_matches_individual_shares():
    combined = calculate_share(1000, owned_percentage(OWNERSHIP, "publishingOwnership"))
    individual = sum(calculate_share(1000, e["publishingOwnership"]) for e in OWNERSHIP if e["isMine"])
    assert combined == individual == Decimal("500.00")


def test_owned_percentage_is_not_capped():
    entries = [{"labelOwnership": 80, "isMine": True}, {"labelOwnership": 40, "isMine": True}]
    assert owned_percentage(entries, "labelOwnership") == Decimal("120")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Our: 60% / Their: 40%", Decimal("60")),
        ("our share 35%", Decimal("35")),
        ("We get 70%", Decimal("70")),
        ("25% ours, rest to the co-writer", Decimal("25")),
        ("40% writer / 60% publisher", Decimal("40")),
        ("Split 25%", Decimal("25")),
    ],
)
def test_parse_split_percentage(text, expected):
    assert parse_split_percentage(text) == expected


@pytest.mark.parametrize("text", [None, "", "split evenly with the band", "Our: 150%"])
def test_parse_split_percentage_defaults(text):
    assert parse_split_percentage(text) == DEFAULT_SPLIT_PERCENTAGE == Decimal("50")


def test_recompute_uses_structured_ownership():
    values = {"full_song_value": Decimal("1000"), "composer_publishers": OWNERSHIP}
    recompute_fees(values)
    assert values["our_fee"] == Decimal("500.00")
    assert "our_recording_fee" not in values


def test_recompute_falls_back_to_splits_text():
    values = {"full_song_value": Decimal("200"), "splits": "Our: 60% / Their: 40%", "composer_publishers": []}
    recompute_fees(values)
    assert values["our_fee"] == Decimal("120.00")


def test_recompute_recording_chain_default_split():
    values = {"full_recording_fee": Decimal("1000")}
    recompute_fees(values)
    assert values["our_recording_fee"] == Decimal("500.00")


def test_recompute_overwrites_stale_derived_fee():
    values = {"full_song_value": Decimal("1000"), "splits": "we 10%", "our_fee": Decimal("999")}
    recompute_fees(values)
    assert values["our_fee"] == Decimal("100.00")


def test_recompute_reads_missing_inputs_from_current_deal():
    current = SimpleNamespace(
        full_song_value=Decimal("1000"),
        composer_publishers=[{"publishingOwnership": 40, "isMine": True}],
        splits=None,
        full_recording_fee=None,
        artist_labels=None,
        artist_label_splits=None,
    )
    values = {"splits": "Our: 90%"}
    recompute_fees(values, current=current, touched={"splits"})
    assert values["our_fee"] == Decimal("400.00")


def test_recompute_skips_untouched_chains():
    current = SimpleNamespace(full_song_value=Decimal("1000"), composer_publishers=OWNERSHIP, splits=None)
    values = {"notes": "called back"}
    recompute_fees(values, current=current, touched={"notes"})
    assert "our_fee" not in values


def test_recompute_without_full_fee_leaves_derived_fee_alone():
    values = {"splits": "Our: 60%"}
    recompute_fees(values)
    assert "our_fee" not in values


def test_credit_only_entries_fall_back_to_splits_text():
    credits = [
        {"composer": "Ava Lane", "publisher": "Lane Songs", "publishingOwnership": None, "isMine": False},
        {"composer": "Jo Kim", "publisher": "", "publishingOwnership": None, "isMine": False},
    ]
    assert resolve_our_percentage(credits, "publishingOwnership", "Our: 60% / Their: 40%") == Decimal("60")
    assert resolve_our_percentage(credits, "publishingOwnership", None) == DEFAULT_SPLIT_PERCENTAGE


def test_entries_with_ownership_ignore_splits_text():
    not_ours = [{"composer": "C", "publishingOwnership": 100, "isMine": False}]
    assert resolve_our_percentage(not_ours, "publishingOwnership", "Our: 60%") == Decimal("0")

    ours_blank = [{"composer": "A", "publishingOwnership": None, "isMine": True}]
    assert resolve_our_percentage(ours_blank, "publishingOwnership", "Our: 60%") == Decimal("0")
