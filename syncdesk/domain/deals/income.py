"""Income report: the business's payable shares across every deal"""

import io
from decimal import Decimal
from typing import Iterable, Optional

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from .fees import CENT, calculate_share, to_decimal

# Report views: rows still awaiting payment, publishing rows by writer,
# recording rows by artist
REPORT_KINDS = ("pending", "writers", "artists")

EXPORT_FILENAMES = {
    "pending": "Pending_Payment_Deals_Report.xlsx",
    "writers": "Writer_Income_Report.xlsx",
    "artists": "Artist_Income_Report.xlsx",
}

MIN_COLUMN_WIDTH = 20


def _income_rows(deal, chain: str, entries_field: str, full_fee_field: str, party_key: str, company_key: str, ownership_key: str) -> list[dict]:
    rows = []
    full_fee = getattr(deal, full_fee_field, None)
    song = getattr(deal, "song", None)
    for index, entry in enumerate(getattr(deal, entries_field, None) or []):
        if not isinstance(entry, dict) or not entry.get("isMine"):
            continue
        ownership = to_decimal(entry.get(ownership_key))
        rows.append(
            {
                "dealId": deal.id,
                "entryIndex": index,
                "chain": chain,
                "projectName": deal.project_name,
                "songTitle": song.title if song is not None else "",
                "party": entry.get(party_key) or "",
                "company": entry.get(company_key) or "",
                "ownership": ownership,
                "fullShareFee": calculate_share(full_fee, ownership),
                "jonasShare": to_decimal(entry.get("jonasShare")),
                "paymentDate": entry.get("paymentDate") or None,
            }
        )
    return rows


def _tracked_total(rows: list[dict]) -> Decimal:
    # Only manually tracked amounts count; the computed fee never does
    total = sum((row["jonasShare"] or Decimal("0") for row in rows), Decimal("0"))
    return total.quantize(CENT)


def build_income_report(deals: Iterable, report: Optional[str] = None) -> dict:
    """
    Flatten every deal's ownership snapshots into income rows.

    One publishing row per ``isMine`` composer/publisher entry (fee against
    ``full_song_value``) and one recording row per ``isMine`` artist/label
    entry (fee against ``full_recording_fee``). When ``report`` names a view,
    its rows are returned under ``rows``.
    """
    publishing: list[dict] = []
    recording: list[dict] = []

    for deal in deals:
        publishing.extend(
            _income_rows(deal, "publishing", "composer_publishers", "full_song_value", "composer", "publisher", "publishingOwnership")
        )
        recording.extend(
            _income_rows(deal, "recording", "artist_labels", "full_recording_fee", "artist", "label", "labelOwnership")
        )

    result = {
        "publishing": publishing,
        "recording": recording,
        "publishingTotal": _tracked_total(publishing),
        "recordingTotal": _tracked_total(recording),
        "report": report,
        "rows": [],
    }
    if report is not None:
        result["rows"] = select_report_rows(result, report)
    return result


def is_pending(row: dict) -> bool:
    return not row["paymentDate"] or row["jonasShare"] is None


def select_report_rows(income: dict, report: str) -> list[dict]:
    """Rows of one report view, in the order the view lists them."""
    if report == "pending":
        return [row for row in income["publishing"] + income["recording"] if is_pending(row)]
    if report == "writers":
        return sorted(income["publishing"], key=lambda row: row["party"].casefold())
    if report == "artists":
        return sorted(income["recording"], key=lambda row: row["party"].casefold())
    raise ValueError(f"Invalid report '{report}'. Expected one of: {', '.join(REPORT_KINDS)}")


def _fees_owed(row: dict) -> str:
    return f"${row['jonasShare']:,.2f}" if row["jonasShare"] is not None else "TBD"


def report_sheet(report: str, rows: list[dict]) -> tuple[list[str], list[list[str]]]:
    """Column headings and cell values for an exported report view."""
    if report == "pending":
        headers = ["Project Title", "Song Title", "Writer/Artist", "Type", "Fees Owed"]
        values = [
            [
                row["projectName"],
                row["songTitle"],
                row["party"],
                "Writer" if row["chain"] == "publishing" else "Artist",
                _fees_owed(row),
            ]
            for row in rows
        ]
        return headers, values

    party_heading = "Writer" if report == "writers" else "Artist"
    headers = [party_heading, "Song Title", "Project Title", "Fees Owed", "Payment Date"]
    values = [
        [row["party"], row["songTitle"], row["projectName"], _fees_owed(row), row["paymentDate"] or "Pending"]
        for row in rows
    ]
    return headers, values


def build_report_workbook(report: str, rows: list[dict]) -> bytes:
    """Write one report view to a single-sheet .xlsx workbook."""
    headers, values = report_sheet(report, rows)

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Report"
    sheet.append(headers)
    for row in values:
        sheet.append(row)
    for column, heading in enumerate(headers, start=1):
        sheet.column_dimensions[get_column_letter(column)].width = max(len(heading), MIN_COLUMN_WIDTH)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
