import io
from datetime import date
from decimal import Decimal

from openpyxl import load_workbook


def create_deal(client, **fields):
    payload = {"projectName": "Late Summer", "projectType": "tv_show"}
    payload.update(fields)
    response = client.post("/api/deals", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


def test_new_deal_defaults_and_stamps_pitched_date(client):
    deal = create_deal(client)

    assert deal["status"] == "new_request"
    assert deal["pitchedDate"] == date.today().isoformat()
    assert deal["territory"] == "worldwide"
    assert deal["exclusivity"] is False


def test_status_change_stamps_only_empty_dates(client):
    deal = create_deal(client, status="quoted", quotedDate="2024-11-02")
    assert deal["quotedDate"] == "2024-11-02"

    updated = client.patch(f"/api/deals/{deal['id']}", json={"status": "use_confirmed"}).json()
    assert updated["useConfirmedDate"] == date.today().isoformat()
    assert updated["quotedDate"] == "2024-11-02"

    again = client.patch(f"/api/deals/{deal['id']}", json={"status": "quoted"}).json()
    assert again["quotedDate"] == "2024-11-02"


def test_explicit_null_clears_a_stamped_date(client):
    deal = create_deal(client, status="quoted", fullSongValue=1000, splits="we 40%")
    assert deal["quotedDate"] == date.today().isoformat()

    cleared = client.patch(f"/api/deals/{deal['id']}", json={"quotedDate": None, "fullSongValue": None}).json()
    assert cleared["quotedDate"] is None
    assert Decimal(cleared["fullSongValue"]) == Decimal("1000")

    kept_clear = client.patch(f"/api/deals/{deal['id']}", json={"status": "quoted", "quotedDate": None}).json()
    assert kept_clear["quotedDate"] is None

    restamped = client.patch(f"/api/deals/{deal['id']}", json={"status": "quoted"}).json()
    assert restamped["quotedDate"] == date.today().isoformat()


def test_explicit_date_with_status_change_wins(client):
    deal = create_deal(client)
    updated = client.patch(
        f"/api/deals/{deal['id']}", json={"status": "completed", "completedDate": "2025-01-15"}
    ).json()
    assert updated["completedDate"] == "2025-01-15"


def test_legacy_status_spelling_is_normalized(client):
    deal = create_deal(client, status="pitched")
    assert deal["status"] == "new_request"


def test_unknown_status_is_rejected(client):
    response = client.post("/api/deals", json={"projectName": "X", "projectType": "film", "status": "negotiating"})

    assert response.status_code == 400
    errors = response.json()["error"]
    assert errors[0]["field"] == "status"
    assert "Invalid status" in errors[0]["message"]


def test_missing_required_fields_are_listed(client):
    response = client.post("/api/deals", json={})

    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["error"]}
    assert {"projectName", "projectType"} <= fields


def test_fee_from_structured_ownership(client):
    deal = create_deal(
        client,
        fullSongValue=1000,
        composerPublishers=[
            {"composer": "A", "publisher": "PA", "publishingOwnership": 30, "isMine": True},
            {"composer": "B", "publisher": "PB", "publishingOwnership": 20, "isMine": True},
            {"composer": "C", "publisher": "PC", "publishingOwnership": 50, "isMine": False},
        ],
    )
    assert Decimal(deal["ourFee"]) == Decimal("500")


def test_fee_from_splits_text_and_default_split(client):
    deal = create_deal(
        client,
        fullSongValue="200",
        splits="Our: 60% / Their: 40%",
        fullRecordingFee="1,000",
        artistLabelSplits="TBD",
    )
    assert Decimal(deal["ourFee"]) == Decimal("120")
    assert Decimal(deal["ourRecordingFee"]) == Decimal("500")


def test_updating_full_fee_recomputes_derived_fee(client):
    deal = create_deal(client, fullSongValue=1000, splits="we 25%")
    assert Decimal(deal["ourFee"]) == Decimal("250")

    updated = client.put(f"/api/deals/{deal['id']}", json={"fullSongValue": 2000}).json()
    assert Decimal(updated["ourFee"]) == Decimal("500")


def test_deal_copies_song_ownership_on_create(client, song):
    deal = create_deal(client, songId=song["id"], fullSongValue=800)

    assert [e["composer"] for e in deal["composerPublishers"]] == ["Ava Lane", "Sam Ortiz"]
    assert deal["artistLabels"][0]["label"] == "Northbound"
    assert Decimal(deal["ourFee"]) == Decimal("400")
    assert deal["song"]["title"] == "Golden Hour"


def test_legacy_song_credits_are_zipped_into_entries(client):
    song = client.post(
        "/api/songs",
        json={"title": "Old Tape", "artist": "Ava Lane, Jo Kim", "composer": "Ava Lane, Jo Kim", "publisher": "Lane Songs"},
    ).json()

    deal = create_deal(client, songId=song["id"])

    entries = deal["composerPublishers"]
    assert [(e["composer"], e["publisher"]) for e in entries] == [("Ava Lane", "Lane Songs"), ("Jo Kim", "")]
    assert all(e["isMine"] is False for e in entries)
    assert [e["artist"] for e in deal["artistLabels"]] == ["Ava Lane", "Jo Kim"]


def test_legacy_credit_song_uses_splits_text_for_fees(client):
    song = client.post(
        "/api/songs",
        json={"title": "Old Tape", "artist": "Ava Lane", "composer": "Ava Lane, Jo Kim", "label": "Tape Co"},
    ).json()

    deal = create_deal(
        client,
        songId=song["id"],
        fullSongValue=1000,
        splits="Our: 60% / Their: 40%",
        fullRecordingFee=500,
        artistLabelSplits="we 20%",
    )

    assert len(deal["composerPublishers"]) == 2
    assert Decimal(deal["ourFee"]) == Decimal("600")
    assert Decimal(deal["ourRecordingFee"]) == Decimal("100")


def test_song_edits_do_not_touch_existing_deals_until_reload(client, song):
    deal = create_deal(client, songId=song["id"], fullSongValue=1000)

    client.patch(
        f"/api/songs/{song['id']}",
        json={"composerPublishers": [{"composer": "Ava Lane", "publisher": "Lane Songs", "publishingOwnership": 100, "isMine": True}]},
    )
    unchanged = client.get(f"/api/deals/{deal['id']}").json()
    assert len(unchanged["composerPublishers"]) == 2
    assert Decimal(unchanged["ourFee"]) == Decimal("500")

    reloaded = client.post(f"/api/deals/{deal['id']}/reload-splits").json()
    assert len(reloaded["composerPublishers"]) == 1
    assert Decimal(reloaded["ourFee"]) == Decimal("1000")


def test_reload_without_song_is_rejected(client):
    deal = create_deal(client)
    response = client.post(f"/api/deals/{deal['id']}/reload-splits")
    assert response.status_code == 400
    assert response.json() == {"error": "Deal has no linked song"}


def test_unknown_song_is_404(client):
    response = client.post("/api/deals", json={"projectName": "X", "projectType": "film", "songId": 4242})
    assert response.status_code == 404
    assert response.json() == {"error": "Song not found"}


def test_air_date_creates_calendar_event(client):
    deal = create_deal(client, airDate="2025-06-01")

    events = client.get("/api/calendar-events", params={"entityType": "deal", "entityId": deal["id"]}).json()

    assert len(events) == 1
    assert events[0]["title"] == "Air Date: Late Summer"
    assert events[0]["allDay"] is True
    assert events[0]["reminderMinutes"] == 1440
    assert events[0]["startDate"].startswith("2025-06-01")


def test_counterparty_contacts_are_extracted_once(client):
    fields = {
        "licenseeCompanyName": "Brightside Films",
        "licenseeContactName": "Dana Ruiz",
        "licenseeContactEmail": "Dana@Brightside.example",
        "musicSupervisorContactName": "Lee Park",
        "musicSupervisorContactEmail": "lee@sup.example",
    }
    create_deal(client, **fields)
    create_deal(client, projectName="Second Season", **fields)

    contacts = client.get("/api/contacts").json()

    assert sorted(c["email"] for c in contacts) == ["dana@brightside.example", "lee@sup.example"]
    dana = next(c for c in contacts if c["name"] == "Dana Ruiz")
    assert dana["role"] == "Licensee/Production Company Contact"
    assert dana["company"] == "Brightside Films"


def test_income_share_tracking_feeds_report(client, song):
    deal = create_deal(client, songId=song["id"], fullSongValue=1000, fullRecordingFee=400)

    response = client.put(
        f"/api/deals/{deal['id']}/income-shares",
        json={"chain": "publishing", "index": 0, "jonasShare": "480", "paymentDate": "2025-02-01"},
    )
    assert response.status_code == 200
    assert response.json()["composerPublishers"][0]["jonasShare"] == 480

    report = client.get("/api/income").json()
    assert report == client.get("/api/deals/income").json()
    assert len(report["publishing"]) == 1
    assert Decimal(report["publishing"][0]["fullShareFee"]) == Decimal("500")
    assert Decimal(report["publishingTotal"]) == Decimal("480")
    assert Decimal(report["recording"][0]["fullShareFee"]) == Decimal("400")
    assert Decimal(report["recordingTotal"]) == Decimal("0")


def test_income_report_views_and_export(client, song):
    create_deal(client, songId=song["id"], fullSongValue=1000, fullRecordingFee=400)

    writers = client.get("/api/income", params={"report": "writers"}).json()
    assert writers["report"] == "writers"
    assert [(r["party"], r["songTitle"]) for r in writers["rows"]] == [("Ava Lane", "Golden Hour")]
    assert len(client.get("/api/deals/income", params={"report": "pending"}).json()["rows"]) == 2
    assert client.get("/api/income", params={"report": "labels"}).status_code == 400

    export = client.get("/api/income/export", params={"report": "artists"})
    assert export.status_code == 200
    assert export.headers["content-disposition"] == 'attachment; filename="Artist_Income_Report.xlsx"'
    sheet = load_workbook(io.BytesIO(export.content)).active
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0] == ("Artist", "Song Title", "Project Title", "Fees Owed", "Payment Date")
    assert rows[1] == ("Ava Lane", "Golden Hour", "Late Summer", "TBD", "Pending")


def test_income_export_without_rows_is_404(client):
    response = client.get("/api/deals/income/export")
    assert response.status_code == 404
    assert response.json() == {"error": "No data available for this report"}


def test_income_share_for_missing_entry_is_404(client):
    deal = create_deal(client)
    response = client.put(f"/api/deals/{deal['id']}/income-shares", json={"chain": "recording", "index": 3})
    assert response.status_code == 404
    assert response.json() == {"error": "Ownership entry not found"}


def test_list_filters_and_delete(client):
    first = create_deal(client, status="quoted")
    create_deal(client, projectName="Other Show")

    quoted = client.get("/api/deals", params={"status": "quoted"}).json()
    assert [d["id"] for d in quoted] == [first["id"]]
    assert len(client.get("/api/deals", params={"search": "other"}).json()) == 1

    assert client.delete(f"/api/deals/{first['id']}").json() == {"success": True}
    missing = client.get(f"/api/deals/{first['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Deal not found"}


def test_notes_are_html_escaped(client):
    deal = create_deal(client, notes="<b>rush</b>")
    assert deal["notes"] == "&lt;b&gt;rush&lt;/b&gt;"
