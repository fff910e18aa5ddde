"""
Reservation status transition policy.

Every reachable (status, origin) pair has an explicit rule below. Settled
statuses expose no further transitions; a pair with no rule is an error
rather than an invitation to move anywhere.

Status changes are planned here and committed elsewhere: plan_status_change
validates the move and returns a StatusChange carrying the side effects
(payment flag, confirmation time) the commit sink must persist.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from hotel_backoffice.errors import InvalidTransition, MissingTransitionRule
from hotel_backoffice.lifecycle.statuses import ReservationStatus, is_settled
from hotel_backoffice.schemas.reservations import Origin, Reservation
from hotel_backoffice.utils.datetime import ensure_utc

_STAFF_EDITABLE: frozenset[ReservationStatus] = frozenset(
    {
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED_PENDING_PAYMENT,
        ReservationStatus.ACCEPTED,
        ReservationStatus.CANCELLED,
    }
)

TRANSITION_RULES: dict[tuple[ReservationStatus, Origin], frozenset[ReservationStatus]] = {
    (ReservationStatus.PENDING, Origin.STAFF_MANUAL): _STAFF_EDITABLE
    - {ReservationStatus.PENDING},
    (ReservationStatus.CONFIRMED_PENDING_PAYMENT, Origin.STAFF_MANUAL): _STAFF_EDITABLE
    - {ReservationStatus.CONFIRMED_PENDING_PAYMENT},
    (ReservationStatus.PENDING, Origin.MOBILE): frozenset(
        {
            ReservationStatus.CONFIRMED_PENDING_PAYMENT,
            ReservationStatus.REJECTED,
            ReservationStatus.CANCELLED,
        }
    ),
    # Payment verification or cancellation, as for any confirmed booking
    (ReservationStatus.CONFIRMED_PENDING_PAYMENT, Origin.MOBILE): frozenset(
        {ReservationStatus.ACCEPTED, ReservationStatus.CANCELLED}
    ),
}


class StatusChange(BaseModel):
    """
    Update intent produced by a validated transition.

    Carries the full set of fields the commit sink must write so that the
    status, payment flag and confirmation time always move together.
    """

    model_config = ConfigDict(frozen=True)

    reservation_id: str
    from_status: ReservationStatus
    to_status: ReservationStatus
    payment_received: bool
    confirmation_time: Optional[datetime]
    audited_by: Optional[str]
    changed_at: datetime

    def apply(self, reservation: Reservation) -> Reservation:
        """Return the reservation as it looks once this change is committed."""
        return reservation.model_copy(
            update={
                "status": self.to_status,
                "payment_received": self.payment_received,
                "confirmation_time": self.confirmation_time,
                "audited_by": self.audited_by,
            }
        )


def allowed_next_statuses(
    current: ReservationStatus, origin: Origin
) -> frozenset[ReservationStatus]:
    """
    Statuses staff may move a reservation to from its current status.

    Args:
        current: Current reservation status
        origin: Channel the reservation was created through

    Returns:
        frozenset[ReservationStatus]: Legal next statuses; empty once settled.
            The current status is never a member.

    Raises:
        MissingTransitionRule: If the pair has no explicit rule (an InvalidTransition)
    """
    if is_settled(current):
        return frozenset()

    rule = TRANSITION_RULES.get((current, origin))
    if rule is None:
        raise MissingTransitionRule(current, origin)
    return rule


def validate_transition(
    current: ReservationStatus, proposed: ReservationStatus, origin: Origin
) -> None:
    """
    Check a proposed status change against the transition rules.

    Raises:
        InvalidTransition: If proposed is not an allowed next status
    """
    if proposed not in allowed_next_statuses(current, origin):
        raise InvalidTransition(current, proposed, origin)


def plan_status_change(
    reservation: Reservation,
    proposed: ReservationStatus,
    now: datetime,
    audited_by: Optional[str] = None,
) -> StatusChange:
    """
    Validate a staff status change and compute its side effects.

    Side effects:
        - Confirmed_Pending_Payment: confirmation_time = now, payment_received = False
        - Accepted: payment_received = True, existing confirmation_time kept (else now)
        - anything else: confirmation_time cleared, payment_received = False

    Args:
        reservation: Reservation snapshot the change applies to
        proposed: Requested next status
        now: Instant supplied by the caller's clock
        audited_by: Staff member making the change

    Returns:
        StatusChange: Update intent for the commit sink

    Raises:
        InvalidTransition: If the move is not allowed for this origin/status
    """
    validate_transition(reservation.status, proposed, reservation.origin)
    now = ensure_utc(now)

    if proposed is ReservationStatus.CONFIRMED_PENDING_PAYMENT:
        payment_received = False
        confirmation_time: Optional[datetime] = now
    elif proposed is ReservationStatus.ACCEPTED:
        payment_received = True
        confirmation_time = reservation.confirmation_time or now
    else:
        payment_received = False
        confirmation_time = None

    return StatusChange(
        reservation_id=reservation.id,
        from_status=reservation.status,
        to_status=proposed,
        payment_received=payment_received,
        confirmation_time=confirmation_time,
        audited_by=audited_by if audited_by is not None else reservation.audited_by,
        changed_at=now,
    )


def is_expirable(reservation: Reservation, now: datetime, timeout: timedelta) -> bool:
    """
    True when an unpaid Pending reservation has waited at least `timeout` since booking.

    Reservations without a booking timestamp never expire automatically.
    """
    if reservation.status is not ReservationStatus.PENDING or reservation.payment_received:
        return False
    if reservation.created_at is None:
        return False
    return reservation.created_at + timeout <= ensure_utc(now)


def plan_expiry(reservation: Reservation, now: datetime, timeout: timedelta) -> StatusChange:
    """
    Plan the system-initiated Pending -> Expired transition.

    Raises:
        InvalidTransition: If the reservation is not eligible to expire yet
    """
    if not is_expirable(reservation, now, timeout):
        raise InvalidTransition(
            reservation.status,
            ReservationStatus.EXPIRED,
            reservation.origin,
            reason="only unpaid Pending reservations past the payment window expire",
        )

    return StatusChange(
        reservation_id=reservation.id,
        from_status=reservation.status,
        to_status=ReservationStatus.EXPIRED,
        payment_received=False,
        confirmation_time=None,
        audited_by=None,
        changed_at=ensure_utc(now),
    )


def find_expired(
    reservations: Iterable[Reservation], now: datetime, timeout: timedelta
) -> list[StatusChange]:
    """Expiry intents for every reservation whose payment window has lapsed."""
    return [
        plan_expiry(reservation, now, timeout)
        for reservation in reservations
        if is_expirable(reservation, now, timeout)
    ]
