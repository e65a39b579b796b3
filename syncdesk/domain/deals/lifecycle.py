"""Deal status lifecycle and the status -> date stamping rule"""

from datetime import date
from enum import Enum
from typing import Optional


class DealStatus(str, Enum):
    NEW_REQUEST = "new_request"
    PENDING_APPROVAL = "pending_approval"
    QUOTED = "quoted"
    USE_CONFIRMED = "use_confirmed"
    BEING_DRAFTED = "being_drafted"
    OUT_FOR_SIGNATURE = "out_for_signature"
    PAYMENT_RECEIVED = "payment_received"
    COMPLETED = "completed"


STATUS_ORDER: list[DealStatus] = list(DealStatus)

STATUS_DATE_FIELDS: dict[DealStatus, str] = {
    DealStatus.NEW_REQUEST: "pitched_date",
    DealStatus.PENDING_APPROVAL: "pending_approval_date",
    DealStatus.QUOTED: "quoted_date",
    DealStatus.USE_CONFIRMED: "use_confirmed_date",
    DealStatus.BEING_DRAFTED: "being_drafted_date",
    DealStatus.OUT_FOR_SIGNATURE: "out_for_signature_date",
    DealStatus.PAYMENT_RECEIVED: "payment_received_date",
    DealStatus.COMPLETED: "completed_date",
}

# Spellings that older clients and spreadsheets still send
STATUS_ALIASES: dict[str, DealStatus] = {
    "pitched": DealStatus.NEW_REQUEST,
    "new request": DealStatus.NEW_REQUEST,
    "pending approval": DealStatus.PENDING_APPROVAL,
    "under_review": DealStatus.PENDING_APPROVAL,
    "under review": DealStatus.PENDING_APPROVAL,
    "confirmed": DealStatus.USE_CONFIRMED,
    "use confirmed": DealStatus.USE_CONFIRMED,
    "being drafted": DealStatus.BEING_DRAFTED,
    "out for signature": DealStatus.OUT_FOR_SIGNATURE,
    "paid": DealStatus.PAYMENT_RECEIVED,
    "payment received": DealStatus.PAYMENT_RECEIVED,
}

# Statuses that count as an open deal on the dashboard
ACTIVE_STATUSES: list[DealStatus] = STATUS_ORDER[: STATUS_ORDER.index(DealStatus.PAYMENT_RECEIVED)]


def normalize_status(value: Optional[str]) -> Optional[DealStatus]:
    """Map a canonical value or a known legacy spelling to a DealStatus, else None."""
    if value is None:
        return None
    if isinstance(value, DealStatus):
        return value
    key = str(value).strip().lower()
    try:
        return DealStatus(key)
    except ValueError:
        pass
    return STATUS_ALIASES.get(key) or STATUS_ALIASES.get(key.replace("-", " "))


def stamp_status_date(values: dict, status: Optional[str], today: Optional[date] = None) -> dict:
    """
    Record the day a deal entered ``status``.

    Sets the status's date field in ``values`` to ``today`` only when that field
    is currently empty. Unknown statuses leave ``values`` untouched, and running
    it twice for the same status changes nothing the second time.
    """
    canonical = normalize_status(status)
    if canonical is None:
        return values

    field = STATUS_DATE_FIELDS[canonical]
    if not values.get(field):
        values[field] = today or date.today()
    return values
