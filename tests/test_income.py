from decimal import Decimal
from types import SimpleNamespace

import pytest

from syncdesk.domain.deals.income import build_income_report, report_sheet, select_report_rows


def make_deal(**overrides):
    values = {
        "id": 1,
        "project_name": "Late Summer",
        "full_song_value": Decimal("1000.00"),
        "full_recording_fee": Decimal("600.00"),
        "composer_publishers": [],
        "artist_labels": [],
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_one_publishing_row_per_mine_entry():
    deal = make_deal(
        composer_publishers=[
            {"composer": "A", "publisher": "Pub A", "publishingOwnership": 30, "isMine": True},
            {"composer": "B", "publisher": "Pub B", "publishingOwnership": 50, "isMine": False},
            {"composer": "C", "publisher": "Pub C", "publishingOwnership": 20, "isMine": True},
        ]
    )

    report = build_income_report([deal])

    rows = report["publishing"]
    assert [row["party"] for row in rows] == ["A", "C"]
    assert [row["entryIndex"] for row in rows] == [0, 2]
    assert rows[0]["company"] == "Pub A"
    assert rows[0]["fullShareFee"] == Decimal("300.00")
    assert rows[1]["fullShareFee"] == Decimal("200.00")
    assert report["recording"] == []


def test_recording_rows_use_recording_fee():
    deal = make_deal(artist_labels=[{"artist": "Ava", "label": "North", "labelOwnership": 50, "isMine": True}])

    row = build_income_report([deal])["recording"][0]

    assert row["party"] == "Ava"
    assert row["company"] == "North"
    assert row["fullShareFee"] == Decimal("300.00")


def test_totals_count_only_tracked_shares():
    deals = [
        make_deal(
            id=1,
            composer_publishers=[
                {"composer": "A", "publishingOwnership": 50, "isMine": True, "jonasShare": 125.5},
                {"composer": "B", "publishingOwnership": 50, "isMine": True},
            ],
        ),
        make_deal(
            id=2,
            project_name="Night Drive",
            composer_publishers=[{"composer": "A", "publishingOwnership": 100, "isMine": True, "jonasShare": 74.5}],
            artist_labels=[{"artist": "Ava", "labelOwnership": 100, "isMine": True, "paymentDate": "2025-02-01"}],
        ),
    ]

    report = build_income_report(deals)

    assert len(report["publishing"]) == 3
    assert report["publishingTotal"] == Decimal("200.00")
    assert report["recordingTotal"] == Decimal("0.00")
    assert report["recording"][0]["paymentDate"] == "2025-02-01"
    assert report["recording"][0]["jonasShare"] is None


def test_deal_without_entries_contributes_nothing():
    report = build_income_report([make_deal(composer_publishers=None, artist_labels=None)])
    assert report["publishing"] == [] and report["recording"] == []
    assert report["publishingTotal"] == Decimal("0")


def _two_deal_report(report=None):
    deals = [
        make_deal(
            id=1,
            song=SimpleNamespace(title="Golden Hour"),
            composer_publishers=[
                {"composer": "zoe Park", "publishingOwnership": 50, "isMine": True, "jonasShare": 200, "paymentDate": "2025-03-01"},
                {"composer": "Ava Lane", "publishingOwnership": 50, "isMine": True, "jonasShare": 150},
            ],
            artist_labels=[{"artist": "Northbound", "labelOwnership": 100, "isMine": True}],
        ),
        make_deal(
            id=2,
            project_name="Night Drive",
            composer_publishers=[{"composer": "Mia Stone", "publishingOwnership": 100, "isMine": True}],
        ),
    ]
    return build_income_report(deals, report)


def test_rows_carry_song_title_and_chain():
    report = _two_deal_report()

    assert report["publishing"][0]["songTitle"] == "Golden Hour"
    assert report["publishing"][2]["songTitle"] == ""
    assert {row["chain"] for row in report["recording"]} == {"recording"}
    assert report["rows"] == []


def test_pending_view_lists_rows_without_payment_or_amount():
    rows = _two_deal_report("pending")["rows"]
    assert [(row["party"], row["chain"]) for row in rows] == [
        ("Ava Lane", "publishing"),
        ("Mia Stone", "publishing"),
        ("Northbound", "recording"),
    ]


def test_writer_and_artist_views_sort_by_name():
    income = _two_deal_report()

    assert [row["party"] for row in select_report_rows(income, "writers")] == ["Ava Lane", "Mia Stone", "zoe Park"]
    assert [row["party"] for row in select_report_rows(income, "artists")] == ["Northbound"]
    with pytest.raises(ValueError):
        select_report_rows(income, "labels")


def test_report_sheet_columns():
    income = _two_deal_report()

    headers, values = report_sheet("pending", select_report_rows(income, "pending"))
    assert headers == ["Project Title", "Song Title", "Writer/Artist", "Type", "Fees Owed"]
    assert values[0] == ["Late Summer", "Golden Hour", "Ava Lane", "Writer", "$150.00"]
    assert values[2][3:] == ["Artist", "TBD"]

    headers, values = report_sheet("writers", select_report_rows(income, "writers"))
    assert headers == ["Writer", "Song Title", "Project Title", "Fees Owed", "Payment Date"]
    assert values[-1] == ["zoe Park", "Golden Hour", "Late Summer", "$200.00", "2025-03-01"]
    assert values[0][-1] == "Pending"
