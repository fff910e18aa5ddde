"""
Reservation status taxonomy.

Six canonical statuses, their reporting category, tooltip descriptions and the
payment wording shown beside them. Only exact (trimmed) status strings are
accepted at runtime; migrate_legacy_status exists solely for rewriting
historical rows whose status text was stored with inconsistent casing.
"""

from __future__ import annotations

from enum import Enum

from hotel_backoffice.errors import UnknownStatus


class ReservationStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED_PENDING_PAYMENT = "Confirmed_Pending_Payment"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"


ALL_STATUSES: frozenset[ReservationStatus] = frozenset(ReservationStatus)

# No further staff-initiated transitions once a reservation lands here
SETTLED_STATUSES: frozenset[ReservationStatus] = frozenset(
    {
        ReservationStatus.ACCEPTED,
        ReservationStatus.CANCELLED,
        ReservationStatus.REJECTED,
        ReservationStatus.EXPIRED,
    }
)

# Statuses that release the room
NON_BLOCKING_STATUSES: frozenset[ReservationStatus] = frozenset(
    {ReservationStatus.CANCELLED, ReservationStatus.REJECTED}
)

# Statuses whose nights count as booked in occupancy figures
OCCUPYING_STATUSES: frozenset[ReservationStatus] = frozenset(
    {ReservationStatus.CONFIRMED_PENDING_PAYMENT, ReservationStatus.ACCEPTED}
)

STATUS_DESCRIPTIONS: dict[ReservationStatus, str] = {
    ReservationStatus.PENDING: "Submitted by customer",
    ReservationStatus.CANCELLED: "Set by customer only while status is still Pending",
    ReservationStatus.CONFIRMED_PENDING_PAYMENT: "Set by staff/admin upon approval",
    ReservationStatus.ACCEPTED: "Set manually by staff after verifying downpayment",
    ReservationStatus.REJECTED: "Set by staff/admin upon rejection",
    ReservationStatus.EXPIRED: "Automatically set by the system after 48 hours without payment",
}

PAYMENT_LABELS: dict[ReservationStatus, str] = {
    ReservationStatus.PENDING: "Payment Pending",
    ReservationStatus.CONFIRMED_PENDING_PAYMENT: "Awaiting Downpayment",
    ReservationStatus.ACCEPTED: "Downpayment Paid",
    ReservationStatus.EXPIRED: "Not Applicable",
    ReservationStatus.CANCELLED: "Not Applicable",
    ReservationStatus.REJECTED: "Rejected – No Payment Recorded",
}

_BY_VALUE: dict[str, ReservationStatus] = {status.value: status for status in ReservationStatus}


def parse_status(raw: str) -> ReservationStatus:
    """
    Resolve a stored status string to its canonical status.

    Args:
        raw: Status text as stored or submitted (surrounding whitespace ignored)

    Returns:
        ReservationStatus: The exactly matching status

    Raises:
        UnknownStatus: If the text is not one of the six canonical values
    """
    status = _BY_VALUE.get(raw.strip())
    if status is None:
        raise UnknownStatus(raw)
    return status


def status_category(status: ReservationStatus) -> ReservationStatus:
    """Reporting category of a status; each canonical status is its own category."""
    return status


def describe_status(status: ReservationStatus) -> str:
    return STATUS_DESCRIPTIONS[status]


def payment_label(status: ReservationStatus) -> str:
    return PAYMENT_LABELS[status]


def is_settled(status: ReservationStatus) -> bool:
    return status in SETTLED_STATUSES


def is_blocking(status: ReservationStatus) -> bool:
    """True when a reservation in this status still holds its room."""
    return status not in NON_BLOCKING_STATUSES


def is_occupying(status: ReservationStatus) -> bool:
    """True when a reservation in this status counts toward booked room-nights."""
    return status in OCCUPYING_STATUSES


def display_status(status: ReservationStatus) -> str:
    """Lowercase, space-separated status text used by free-text search."""
    return status.value.lower().replace("_", " ")


def migrate_legacy_status(raw: str) -> ReservationStatus:
    """
    Map free-text historical status values onto the canonical statuses.

    Exact matches win; otherwise a case-insensitive substring match is tried in
    a fixed order, and anything unrecognised becomes Pending. Data migration use
    only: request handling goes through parse_status.

    Example:
        >>> migrate_legacy_status("confirmed - pending payment")
        <ReservationStatus.CONFIRMED_PENDING_PAYMENT: 'Confirmed_Pending_Payment'>
    """
    exact = _BY_VALUE.get(raw.strip())
    if exact is not None:
        return exact

    upper = raw.strip().upper()
    if "ACCEPTED" in upper:
        return ReservationStatus.ACCEPTED
    if "CONFIRMED" in upper and "PENDING" in upper:
        return ReservationStatus.CONFIRMED_PENDING_PAYMENT
    if "PENDING" in upper:
        return ReservationStatus.PENDING
    if "CANCELLED" in upper:
        return ReservationStatus.CANCELLED
    if "REJECTED" in upper:
        return ReservationStatus.REJECTED
    if "EXPIRED" in upper:
        return ReservationStatus.EXPIRED
    return ReservationStatus.PENDING
