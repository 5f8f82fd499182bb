"""Reservation lifecycle rules.

The transition table is the single source of truth for which events are legal
from which status. ``ReservationStateMachine.transition`` applies one event:
it moves the reservation, syncs the vehicle status that follows from the new
state and appends exactly one ``ReservationHistory`` row. It never commits;
the caller owns the transaction.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from motorpool.models.reservation import Reservation, ReservationHistory, ReservationStatus
from motorpool.models.vehicle import Vehicle, VehicleStatus
from motorpool.utils.exceptions import StatusTransitionError


class ReservationEvent(str, enum.Enum):
    CREATE = "create"
    SAVE_DRAFT = "save_draft"
    SUBMIT = "submit"
    MODIFY = "modify"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


S = ReservationStatus
E = ReservationEvent

# (current status or None for a new reservation, event) -> next status
TRANSITIONS: dict[tuple[Optional[ReservationStatus], ReservationEvent], ReservationStatus] = {
    (None, E.CREATE): S.PENDING,
    (None, E.SAVE_DRAFT): S.DRAFT,
    (S.DRAFT, E.SUBMIT): S.PENDING,
    (S.DRAFT, E.MODIFY): S.DRAFT,
    (S.PENDING, E.MODIFY): S.PENDING,
    (S.PENDING, E.APPROVE): S.APPROVED,
    (S.PENDING, E.REJECT): S.REJECTED,
    (S.DRAFT, E.CANCEL): S.CANCELLED,
    (S.PENDING, E.CANCEL): S.CANCELLED,
    (S.APPROVED, E.CANCEL): S.CANCELLED,
    (S.APPROVED, E.CHECK_IN): S.IN_PROGRESS,
    (S.IN_PROGRESS, E.CHECK_OUT): S.COMPLETED,
}

# Vehicle status the catalog must hold once a reservation enters a state
VEHICLE_STATUS_ON_ENTER = {
    S.IN_PROGRESS: VehicleStatus.IN_USE,
    S.COMPLETED: VehicleStatus.AVAILABLE,
}

GUARD_MESSAGES = {
    E.SUBMIT: "Only draft reservations can be submitted",
    E.MODIFY: "Cannot modify reservation that is already approved or in progress",
    E.APPROVE: "Only pending reservations can be approved",
    E.REJECT: "Only pending reservations can be rejected",
    E.CANCEL: "Reservation cannot be cancelled",
    E.CHECK_IN: "Only approved reservations can be checked in",
    E.CHECK_OUT: "Only in-progress reservations can be checked out",
}


def _as_status(value) -> Optional[ReservationStatus]:
    if value is None:
        return None
    return ReservationStatus(value)


class ReservationStateMachine:
    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def can_transition(current: Optional[ReservationStatus], event: ReservationEvent) -> bool:
        return (_as_status(current), ReservationEvent(event)) in TRANSITIONS

    @staticmethod
    def next_status(current: Optional[ReservationStatus], event: ReservationEvent) -> ReservationStatus:
        """Return the status ``event`` leads to, or raise StatusTransitionError."""
        current = _as_status(current)
        event = ReservationEvent(event)
        target = TRANSITIONS.get((current, event))
        if target is not None:
            return target

        current_label = current.value if current else "NEW"
        if current is not None and current.is_terminal:
            reason = f"reservation is already {current.value.lower()}"
        else:
            reason = GUARD_MESSAGES.get(event)
        raise StatusTransitionError(current_label, event.value, reason)

    def transition(
        self,
        reservation: Reservation,
        event: ReservationEvent,
        changed_by: Optional[str],
        comment: Optional[str] = None,
        vehicle: Optional[Vehicle] = None,
        now: Optional[datetime] = None,
    ) -> ReservationHistory:
        event = ReservationEvent(event)
        if event in (E.CREATE, E.SAVE_DRAFT):
            previous = None
        else:
            previous = _as_status(reservation.status)
        target = self.next_status(previous, event)
        timestamp = now or datetime.utcnow()

        reservation.status = target.value
        reservation.updated_at = timestamp

        vehicle_status = VEHICLE_STATUS_ON_ENTER.get(target)
        if vehicle is not None and vehicle_status is not None:
            vehicle.status = vehicle_status.value
            vehicle.updated_at = timestamp

        entry = ReservationHistory(
            reservation_id=reservation.id,
            previous_status=previous.value if previous else None,
            new_status=target.value,
            changed_by=changed_by,
            comment=comment,
            created_at=timestamp,
        )
        self.db.add(entry)
        return entry
