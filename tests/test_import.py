import io
from datetime import datetime
from decimal import Decimal

from openpyxl import Workbook
from sqlalchemy.exc import DataError

from syncdesk.domain.deals.service import DealService

MAPPING = {
    "projectName": "Project",
    "projectType": "Type",
    "status": "Stage",
    "songTitle": "Song",
    "songArtist": "Artist",
    "contactEmail": "Email",
    "contactName": "Contact",
    "publishingFee": "Pub Fee",
    "exclusivity": "Exclusive",
    "airDate": "Air",
}


def _xlsx_bytes(rows):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_parse_csv_returns_headers_and_preview(client):
    lines = ["Project,Type,Stage"] + [f"Show {i},tv_show,quoted" for i in range(7)] + [",,"]
    content = "\n".join(lines).encode()

    response = client.post("/api/deals/import/parse", files={"file": ("deals.csv", content, "text/csv")})

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["headers"] == ["Project", "Type", "Stage"]
    assert body["totalRows"] == 7
    assert len(body["preview"]) == 5
    assert body["data"][0] == {"Project": "Show 0", "Type": "tv_show", "Stage": "quoted"}


def test_parse_xlsx_reads_first_sheet(client):
    content = _xlsx_bytes(
        [
            ["Project", "Air"],
            ["Late Summer", datetime(2025, 6, 1)],
            [None, None],
            ["Night Drive", None],
        ]
    )

    response = client.post(
        "/api/deals/import/parse",
        files={"file": ("deals.xlsx", content, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
    )

    body = response.json()
    assert body["totalRows"] == 2
    assert body["data"][0]["Air"].startswith("2025-06-01")
    assert body["data"][1]["Project"] == "Night Drive"


def test_parse_rejects_other_formats(client):
    response = client.post("/api/deals/import/parse", files={"file": ("deals.xls", b"junk", "application/vnd.ms-excel")})
    assert response.status_code == 400
    assert response.json() == {"error": "Only .xlsx and .csv files are supported"}


def test_create_imports_rows_and_reports_failures(client, song):
    rows = [
        {
            "Project": "Late Summer",
            "Type": "tv_show",
            "Stage": "Out for signature",
            "Song": "golden hour",
            "Email": "Dana@Brightside.example",
            "Contact": "Dana Ruiz",
            "Pub Fee": "$1,000",
            "Exclusive": "Yes",
            "Air": "06/01/2025",
        },
        {"Project": "Fresh Song Spot", "Song": "Brand New", "Artist": "Jo Kim", "Stage": "whatever"},
        {"Project": "", "Type": "film"},
        {"Project": "Bad Date", "Air": "sometime soon"},
    ]

    response = client.post("/api/deals/import/create", json={"data": rows, "mapping": MAPPING})

    assert response.status_code == 200, response.text
    result = response.json()
    assert result["created"] == 2
    assert result["failed"] == 2
    assert [e["row"] for e in result["errors"]] == [3, 4]
    assert result["createdSongs"] == 1
    assert result["createdContacts"] == 1

    deals = {d["projectName"]: d for d in client.get("/api/deals").json()}
    first = deals["Late Summer"]
    assert first["status"] == "out_for_signature"
    assert first["songId"] == song["id"]
    assert first["exclusivity"] is True
    assert first["airDate"] == "2025-06-01"
    assert first["outForSignatureDate"] is not None
    assert Decimal(first["ourFee"]) == Decimal("500")
    assert first["contact"]["email"] == "dana@brightside.example"

    second = deals["Fresh Song Spot"]
    assert second["status"] == "new_request"
    assert second["projectType"] == "other"


def test_create_requires_project_name_mapping(client):
    response = client.post("/api/deals/import/create", json={"data": [], "mapping": {"projectType": "Type"}})
    assert response.status_code == 400
    assert response.json()["error"][0]["field"] == "mapping"


def test_auto_create_can_be_disabled(client):
    rows = [{"Project": "Solo", "Song": "Unknown Song", "Email": "x@y.example"}]
    result = client.post(
        "/api/deals/import/create",
        json={"data": rows, "mapping": MAPPING, "autoCreateSongs": False, "autoCreateContacts": False},
    ).json()

    assert result["created"] == 1
    assert result["createdSongs"] == 0 and result["createdContacts"] == 0
    deal = client.get("/api/deals").json()[0]
    assert deal["songId"] is None and deal["contactId"] is None


def test_database_failure_on_one_row_is_tallied(client, monkeypatch):
    original_create = DealService.create_deal

    def create_deal(self, data):
        if data.project_name == "Overflow":
            raise DataError("INSERT INTO deals", {}, Exception("numeric field overflow"))
        return original_create(self, data)

    monkeypatch.setattr(DealService, "create_deal", create_deal)
    rows = [{"Project": "First"}, {"Project": "Overflow"}, {"Project": "Third"}]

    response = client.post("/api/deals/import/create", json={"data": rows, "mapping": MAPPING})

    assert response.status_code == 200, response.text
    result = response.json()
    assert result["created"] == 2
    assert result["failed"] == 1
    assert result["errors"] == [{"row": 2, "error": "Database error: DataError"}]
    assert sorted(d["projectName"] for d in client.get("/api/deals").json()) == ["First", "Third"]
