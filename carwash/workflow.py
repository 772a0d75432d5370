# carwash/workflow.py
"""
Booking status workflow.

PENDING -> CONFIRMED -> IN_PROGRESS -> COMPLETED, with cancellation and
no-show exits. Each transition lists the roles allowed to perform it.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from carwash.config import settings
from carwash.models import Booking, BookingStatusHistory
from carwash.schemas import BookingStatus

logger = logging.getLogger(__name__)

ROLES = ("customer", "staff", "admin", "system")


class WorkflowError(Exception):
    pass


class TransitionNotAllowed(WorkflowError):
    pass


class ReasonRequired(WorkflowError):
    pass


def _outside_cancellation_window(booking: Booking, now: datetime) -> bool:
    hours_until = (booking.starts_at - now).total_seconds() / 3600
    return hours_until >= settings.cancellation_notice_hours


@dataclass
class Transition:
    from_status: Optional[BookingStatus]  # None: booking creation
    to_status: BookingStatus
    label: str
    allowed_by: tuple
    requires_reason: bool = False
    # role -> extra condition on the booking
    conditions: dict = field(default_factory=dict)

    def permits(self, role: str, booking: Optional[Booking], now: datetime) -> bool:
        if role not in self.allowed_by:
            return False
        condition: Optional[Callable] = self.conditions.get(role)
        if condition is not None and booking is not None:
            return condition(booking, now)
        return True


S = BookingStatus

STATUS_WORKFLOW: List[Transition] = [
    Transition(None, S.PENDING, "Create Booking", ("customer", "admin", "system")),
    Transition(S.PENDING, S.CONFIRMED, "Confirm Booking", ("admin", "staff", "system")),
    Transition(S.CONFIRMED, S.IN_PROGRESS, "Start Service", ("staff", "admin", "system")),
    Transition(S.IN_PROGRESS, S.COMPLETED, "Complete Service", ("staff", "admin", "system")),
    Transition(S.CONFIRMED, S.COMPLETED, "Complete Service", ("admin", "system")),
    Transition(S.PENDING, S.CANCELLED, "Cancel Booking", ("customer", "admin", "system"), requires_reason=True),
    Transition(
        S.CONFIRMED, S.CANCELLED, "Cancel Booking", ("customer", "admin", "system"),
        requires_reason=True,
        conditions={"customer": _outside_cancellation_window},
    ),
    Transition(S.CONFIRMED, S.NO_SHOW, "Mark as No Show", ("staff", "admin", "system")),
    Transition(S.IN_PROGRESS, S.NO_SHOW, "Mark as No Show", ("staff", "admin", "system")),
]

STATUS_LABELS = {
    S.PENDING: "Pending Confirmation",
    S.CONFIRMED: "Confirmed",
    S.IN_PROGRESS: "Service in Progress",
    S.COMPLETED: "Completed",
    S.CANCELLED: "Cancelled",
    S.NO_SHOW: "No Show",
}

STATUS_COLORS = {
    S.PENDING: "yellow",
    S.CONFIRMED: "blue",
    S.IN_PROGRESS: "purple",
    S.COMPLETED: "green",
    S.CANCELLED: "red",
    S.NO_SHOW: "gray",
}


def _status(value) -> Optional[BookingStatus]:
    if value is None:
        return None
    return BookingStatus(value)


def find_transition(current, new) -> Optional[Transition]:
    current, new = _status(current), _status(new)
    for t in STATUS_WORKFLOW:
        if t.from_status == current and t.to_status == new:
            return t
    return None


def is_transition_allowed(current, new, role: str, booking: Optional[Booking] = None, now: Optional[datetime] = None) -> bool:
    transition = find_transition(current, new)
    if transition is None:
        return False
    return transition.permits(role, booking, now or datetime.now())


def available_transitions(current, role: str, booking: Optional[Booking] = None, now: Optional[datetime] = None) -> List[Transition]:
    current = _status(current)
    now = now or datetime.now()
    return [
        t for t in STATUS_WORKFLOW
        if t.from_status == current and t.permits(role, booking, now)
    ]


def record_history(session: Session, booking: Booking, from_status, to_status, changed_by: str,
                   reason: Optional[str] = None, notes: Optional[str] = None) -> BookingStatusHistory:
    entry = BookingStatusHistory(
        booking_id=booking.id,
        from_status=_status(from_status).value if from_status is not None else None,
        to_status=_status(to_status).value,
        changed_by=changed_by,
        reason=reason,
        notes=notes,
    )
    session.add(entry)
    return entry


def execute_transition(
    session: Session,
    booking: Booking,
    new_status,
    role: str,
    changed_by: str = "system",
    reason: Optional[str] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Booking:
    """Validate and apply a status change, writing a history row. Commits."""
    now = now or datetime.now()
    current = _status(booking.status)
    new_status = _status(new_status)

    transition = find_transition(current, new_status)
    if transition is None or not transition.permits(role, booking, now):
        raise TransitionNotAllowed(
            f"Status transition from {current.value} to {new_status.value} is not allowed for {role}"
        )
    if transition.requires_reason and not reason:
        raise ReasonRequired("Reason is required for this status transition")

    booking.status = new_status.value
    if new_status == S.CANCELLED:
        booking.cancelled_at = now
        booking.cancellation_reason = reason
    elif new_status == S.COMPLETED:
        booking.completed_at = now
    if notes:
        booking.admin_notes = notes

    session.add(booking)
    record_history(session, booking, current, new_status, changed_by, reason, notes)
    session.commit()
    session.refresh(booking)

    logger.info(f"Booking {booking.id} transitioned: {current.value} -> {new_status.value} by {changed_by} ({role})")
    return booking


def status_label(status) -> str:
    status = _status(status)
    return STATUS_LABELS.get(status, status.value)


def status_color(status) -> str:
    return STATUS_COLORS.get(_status(status), "gray")


def transition_to_dict(t: Transition) -> dict:
    return {
        "from_status": t.from_status.value if t.from_status else None,
        "to_status": t.to_status.value,
        "label": t.label,
        "requires_reason": t.requires_reason,
        "allowed_by": list(t.allowed_by),
    }


def workflow_config() -> dict:
    return {
        "statuses": [s.value for s in BookingStatus],
        "transitions": [transition_to_dict(t) for t in STATUS_WORKFLOW],
    }


def validate_history(booking: Booking, history: List[BookingStatusHistory]) -> dict:
    """Replay a booking's history (oldest first) against the workflow table."""
    errors = []
    warnings = []

    previous = None
    for entry in history:
        transition = find_transition(previous, entry.to_status)
        if transition is None:
            errors.append(
                f"Invalid transition from {previous or 'none'} to {entry.to_status} at {entry.created_at.isoformat()}"
            )
        elif transition.requires_reason and not entry.reason:
            warnings.append(f"Missing reason for transition to {entry.to_status} at {entry.created_at.isoformat()}")
        previous = entry.to_status

    if previous is not None and previous != booking.status:
        warnings.append(f"Current status ({booking.status}) doesn't match last history entry ({previous})")

    return {"is_valid": not errors, "errors": errors, "warnings": warnings}


def auto_progress_bookings(session: Session, now: Optional[datetime] = None) -> dict:
    """
    Mark confirmed bookings as NO_SHOW once their start time has passed by
    more than the grace period. Meant to run periodically.

    Returns:
        dict: counts of processed, updated and failed bookings
    """
    now = now or datetime.now()
    cutoff = now - timedelta(minutes=settings.no_show_grace_minutes)

    candidates = session.exec(
        select(Booking)
        .where(Booking.status == S.CONFIRMED.value)
        .where(Booking.date <= cutoff.date())
    ).all()
    missed = [b for b in candidates if b.starts_at <= cutoff]

    summary = {"processed_bookings": len(missed), "marked_no_show": 0, "failed": 0}
    for booking in missed:
        booking_id = booking.id
        try:
            execute_transition(
                session, booking, S.NO_SHOW, "system",
                changed_by="system",
                reason="Customer did not show up for appointment",
                now=now,
            )
            summary["marked_no_show"] += 1
        except WorkflowError as e:
            session.rollback()
            summary["failed"] += 1
            logger.error(f"Failed to mark booking {booking_id} as NO_SHOW: {e}")
        except SQLAlchemyError:
            session.rollback()
            summary["failed"] += 1
            logger.exception(f"Database error while marking booking {booking_id} as NO_SHOW")

    if missed:
        logger.info(f"No-show sweep summary: {summary}")
    else:
        logger.debug("No-show sweep found nothing to update")
    return summary
