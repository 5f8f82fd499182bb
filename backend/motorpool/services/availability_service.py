from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from motorpool.models.reservation import ACTIVE_STATUSES, Reservation, ReservationStatus


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Return True when two closed intervals share at least one instant.

    Touching boundaries (one ends at 10:00, the next starts at 10:00) count as
    an overlap, so back-to-back bookings always conflict.
    """
    return a_start <= b_end and a_end >= b_start


class AvailabilityService:
    """Detects reservations that collide with a requested window.

    Read-only: safe to call repeatedly inside an open transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def _conflict_query(
        self,
        vehicle_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str],
        blocking_statuses: Iterable[ReservationStatus],
    ):
        statuses = [ReservationStatus(s).value for s in blocking_statuses]
        query = self.db.query(Reservation).filter(
            and_(
                Reservation.vehicle_id == vehicle_id,
                Reservation.status.in_(statuses),
                Reservation.start_time <= end,
                Reservation.end_time >= start,
            )
        )
        if exclude_reservation_id:
            query = query.filter(Reservation.id != exclude_reservation_id)
        return query

    def find_conflicts(
        self,
        vehicle_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        blocking_statuses: Iterable[ReservationStatus] = ACTIVE_STATUSES,
    ) -> list[Reservation]:
        return (
            self._conflict_query(vehicle_id, start, end, exclude_reservation_id, blocking_statuses)
            .order_by(Reservation.start_time.asc())
            .all()
        )

    def is_available(
        self,
        vehicle_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        blocking_statuses: Iterable[ReservationStatus] = ACTIVE_STATUSES,
    ) -> bool:
        conflicting = self._conflict_query(
            vehicle_id, start, end, exclude_reservation_id, blocking_statuses
        ).first()
        return conflicting is None
