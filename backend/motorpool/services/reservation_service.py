from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, selectinload

from motorpool.config import settings
from motorpool.database import begin_write
from motorpool.models.notification import NotificationType
from motorpool.models.reservation import (
    ACTIVE_STATUSES,
    CONFIRMED_STATUSES,
    Reservation,
    ReservationStatus,
)
from motorpool.models.user import Role, User
from motorpool.models.vehicle import Vehicle, VehicleStatus
from motorpool.schemas.reservation import CreateReservationRequest, UpdateReservationRequest
from motorpool.services.audit_service import AuditService
from motorpool.services.availability_service import AvailabilityService
from motorpool.services.notification_service import NotificationService
from motorpool.services.reservation_state import ReservationEvent, ReservationStateMachine
from motorpool.services.settlement import calculate_cost, estimate_cost
from motorpool.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    ReservationNotFoundError,
    StatusTransitionError,
    ValidationError,
    VehicleNotFoundError,
)
from motorpool.utils.helpers import clean_text, generate_reference_number, normalize_pagination
from motorpool.utils.locks import VehicleLockRegistry, vehicle_locks
from motorpool.utils.principal import Principal

logger = logging.getLogger(__name__)

# Vehicle statuses from which a vehicle can be handed over at check-in
HANDOVER_STATUSES = (VehicleStatus.AVAILABLE.value, VehicleStatus.RESERVED.value)


@dataclass
class ReservationFilter:
    """Optional list filters; every field set adds one predicate."""
    status: Optional[ReservationStatus] = None
    vehicle_id: Optional[str] = None
    requester_id: Optional[str] = None
    driver_id: Optional[str] = None
    window_start: Optional[datetime] = None
    window_end: Optional[datetime] = None
    search: Optional[str] = None

    def predicates(self) -> list:
        clauses = []
        if self.status is not None:
            clauses.append(Reservation.status == ReservationStatus(self.status).value)
        if self.vehicle_id:
            clauses.append(Reservation.vehicle_id == self.vehicle_id)
        if self.requester_id:
            clauses.append(Reservation.requester_id == self.requester_id)
        if self.driver_id:
            clauses.append(Reservation.driver_id == self.driver_id)
        if self.window_start is not None:
            clauses.append(Reservation.start_time >= self.window_start)
        if self.window_end is not None:
            clauses.append(Reservation.end_time <= self.window_end)
        if self.search:
            pattern = f"%{self.search}%"
            clauses.append(
                or_(
                    Reservation.reference_number.ilike(pattern),
                    Reservation.purpose.ilike(pattern),
                    Reservation.destination.ilike(pattern),
                )
            )
        return clauses


def _snapshot(reservation: Reservation) -> dict:
    def _iso(value):
        return value.isoformat() if value else None

    return {
        "status": reservation.status,
        "vehicle_id": reservation.vehicle_id,
        "start_time": _iso(reservation.start_time),
        "end_time": _iso(reservation.end_time),
        "passenger_count": reservation.passenger_count,
        "driver_id": reservation.driver_id,
    }


class ReservationService:
    """Orchestrates the reservation lifecycle.

    Every guarded transition runs as one unit: take the vehicle lock, re-read
    the reservation, validate, write, commit. Notifications and audit entries
    are recorded after the commit and never undo it.
    """

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        audit: Optional[AuditService] = None,
        clock: Optional[Callable[[], datetime]] = None,
        locks: Optional[VehicleLockRegistry] = None,
    ):
        self.db = db
        self.availability = AvailabilityService(db)
        self.state_machine = ReservationStateMachine(db)
        self.notifier = notifier if notifier is not None else NotificationService(db)
        self.audit = audit if audit is not None else AuditService(db)
        self.clock = clock or datetime.utcnow
        self.locks = locks or vehicle_locks

    # ------------------------------------------------------------------
    # Loading and guards
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self, vehicle_id: str, require_active: bool = False):
        """Serialize writers on ``vehicle_id`` and yield its locked row."""
        with self.locks.hold(vehicle_id):
            try:
                begin_write(self.db)
                yield self._get_vehicle(vehicle_id, lock=True, require_active=require_active)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    def _get_reservation(self, reservation_id: str, lock: bool = False) -> Reservation:
        query = self.db.query(Reservation).filter(Reservation.id == reservation_id)
        if lock:
            query = query.with_for_update().populate_existing()
        reservation = query.first()
        if not reservation:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    def _reload_locked(self, reservation_id: str, vehicle_id: str) -> Reservation:
        """Re-read the reservation, which must still belong to the locked vehicle."""
        reservation = self._get_reservation(reservation_id, lock=True)
        if reservation.vehicle_id != vehicle_id:
            raise ConflictError(
                "Reservation was moved to another vehicle, retry the request",
                details={"expected_vehicle_id": vehicle_id, "vehicle_id": reservation.vehicle_id},
            )
        return reservation

    def _get_vehicle(self, vehicle_id: str, lock: bool = False, require_active: bool = False) -> Vehicle:
        query = self.db.query(Vehicle).filter(Vehicle.id == vehicle_id)
        if lock:
            query = query.with_for_update().populate_existing()
        vehicle = query.first()
        if not vehicle or (require_active and not vehicle.is_active):
            raise VehicleNotFoundError(vehicle_id)
        return vehicle

    def _ensure_user(self, actor: Principal) -> User:
        """Load the acting user, provisioning a row for first-time principals."""
        user = self.db.query(User).filter(User.id == actor.id).first()
        if user is None:
            user = User(
                id=actor.id,
                email=actor.email or f"{actor.id}@unknown.local",
                role=actor.role.value,
            )
            self.db.add(user)
            self.db.flush()
        elif not user.is_active:
            raise ForbiddenError("Your account is deactivated")
        return user

    def _require_approver(self, actor: Principal) -> None:
        if not actor.is_approver:
            raise ForbiddenError(details={"required_role": Role.MANAGER.value, "role": actor.role.value})

    def _require_owner_or_approver(self, actor: Principal, reservation: Reservation, message: str) -> None:
        if actor.is_approver or reservation.requester_id == actor.id:
            return
        raise ForbiddenError(message)

    def _require_operator(self, actor: Principal, reservation: Reservation) -> None:
        if actor.is_approver or (reservation.driver_id and reservation.driver_id == actor.id):
            return
        raise ForbiddenError("Only managers or the assigned driver can record vehicle handovers")

    def _validate_window(self, start: datetime, end: datetime, now: datetime, check_past: bool = True) -> None:
        if start >= end:
            raise ValidationError(
                "End time must be after start time",
                field="end_time",
                details={"start_time": start.isoformat(), "end_time": end.isoformat()},
            )
        if check_past and start < now:
            raise ValidationError("Start time cannot be in the past", field="start_time")

    def _validate_passengers(self, passenger_count: int) -> None:
        if passenger_count < 1 or passenger_count > settings.max_passengers:
            raise ValidationError(
                f"Passenger count must be between 1 and {settings.max_passengers}",
                field="passenger_count",
            )

    def _validate_driver(self, driver_id: Optional[str]) -> None:
        if not driver_id:
            return
        driver = self.db.query(User).filter(User.id == driver_id).first()
        if not driver or not driver.is_active:
            raise ValidationError("Assigned driver does not exist or is inactive", field="driver_id")

    def _ensure_no_conflict(
        self,
        vehicle_id: str,
        start: datetime,
        end: datetime,
        exclude_reservation_id: Optional[str] = None,
        blocking_statuses=ACTIVE_STATUSES,
        message: str = "Vehicle is not available for the selected dates",
    ) -> None:
        conflicts = self.availability.find_conflicts(
            vehicle_id, start, end, exclude_reservation_id, blocking_statuses
        )
        if conflicts:
            raise ConflictError(
                message,
                details={
                    "vehicle_id": vehicle_id,
                    "conflicting_reservations": [c.reference_number for c in conflicts],
                },
            )

    def _ensure_vehicle_bookable(self, vehicle: Vehicle) -> None:
        if vehicle.status != VehicleStatus.AVAILABLE.value:
            raise ConflictError(
                f"Vehicle is currently {vehicle.status.lower()}",
                details={"vehicle_id": vehicle.id, "vehicle_status": vehicle.status},
            )

    # ------------------------------------------------------------------
    # Best-effort side channels
    # ------------------------------------------------------------------

    def _best_effort(self, description: str, task: Callable, *args, **kwargs) -> None:
        try:
            task(*args, **kwargs)
        except Exception as e:
            self.db.rollback()
            logger.error(f"{description} failed: {e}", exc_info=True)

    def _record_audit(self, reservation: Reservation, action: str, actor: Principal, **kwargs) -> None:
        def _write():
            self.audit.log_reservation_action(
                reservation.id, action, user_id=actor.id, user_role=actor.role.value, **kwargs
            )
            self.db.commit()

        self._best_effort(f"Audit {action} for {reservation.reference_number}", _write)

    def _notify_requester(
        self,
        reservation: Reservation,
        notification_type: NotificationType,
        title: str,
        message: str,
        email_reason: Optional[str] = None,
        send_email: bool = True,
    ) -> None:
        self._best_effort(
            f"Notification {notification_type.value} for {reservation.reference_number}",
            self.notifier.notify,
            reservation.requester_id,
            notification_type,
            title,
            message,
            entity_id=reservation.id,
        )
        if send_email:
            self._best_effort(
                f"Status email for {reservation.reference_number}",
                self.notifier.email_status,
                reservation,
                reason=email_reason,
            )

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def create(self, actor: Principal, data: CreateReservationRequest) -> Reservation:
        now = self.clock()
        self._validate_window(data.start_time, data.end_time, now)
        self._validate_passengers(data.passenger_count)

        with self._transaction(data.vehicle_id, require_active=True) as vehicle:
            self._ensure_user(actor)
            self._validate_driver(data.driver_id)
            self._ensure_vehicle_bookable(vehicle)
            self._ensure_no_conflict(vehicle.id, data.start_time, data.end_time)

            reservation = Reservation(
                id=str(uuid.uuid4()),
                reference_number=generate_reference_number(),
                vehicle_id=vehicle.id,
                requester_id=actor.id,
                driver_id=data.driver_id,
                start_time=data.start_time,
                end_time=data.end_time,
                purpose=data.purpose,
                destination=data.destination,
                passenger_count=data.passenger_count,
                needs_driver=data.needs_driver,
                estimated_distance=data.estimated_distance,
                notes=data.notes,
                estimated_cost=estimate_cost(vehicle.daily_rate, data.start_time, data.end_time),
                created_at=now,
            )
            self.db.add(reservation)
            event = ReservationEvent.SAVE_DRAFT if data.save_as_draft else ReservationEvent.CREATE
            self.state_machine.transition(reservation, event, actor.id, "Reservation created", now=now)

        logger.info(f"Reservation created: {reservation.reference_number} ({reservation.status})")

        self._record_audit(
            reservation, "CREATE", actor, new_value={"reference_number": reservation.reference_number}
        )
        if reservation.status == ReservationStatus.PENDING.value:
            self._announce_pending(reservation)
        return reservation

    def _announce_pending(self, reservation: Reservation) -> None:
        self._best_effort(
            f"Approver notifications for {reservation.reference_number}",
            self.notifier.notify_approvers,
            reservation,
        )
        self._best_effort(
            f"Confirmation email for {reservation.reference_number}",
            self.notifier.email_confirmation,
            reservation,
        )

    def modify(self, actor: Principal, reservation_id: str, data: UpdateReservationRequest) -> Reservation:
        now = self.clock()
        current = self._get_reservation(reservation_id)
        self._require_owner_or_approver(actor, current, "You can only modify your own reservations")
        current_vehicle_id = current.vehicle_id
        target_vehicle_id = data.vehicle_id or current_vehicle_id

        with self._transaction(target_vehicle_id, require_active=True) as vehicle:
            reservation = self._reload_locked(reservation_id, current_vehicle_id)
            self.state_machine.next_status(reservation.status, ReservationEvent.MODIFY)

            start = data.start_time or reservation.start_time
            end = data.end_time or reservation.end_time
            self._validate_window(start, end, now, check_past=data.start_time is not None)
            if data.passenger_count is not None:
                self._validate_passengers(data.passenger_count)
            if data.driver_id is not None:
                self._validate_driver(data.driver_id)

            vehicle_changed = vehicle.id != reservation.vehicle_id
            window_changed = start != reservation.start_time or end != reservation.end_time
            if vehicle_changed:
                self._ensure_vehicle_bookable(vehicle)
            if vehicle_changed or window_changed:
                self._ensure_no_conflict(vehicle.id, start, end, exclude_reservation_id=reservation.id)

            old_value = _snapshot(reservation)
            reservation.vehicle_id = vehicle.id
            reservation.start_time = start
            reservation.end_time = end
            for field in ("purpose", "destination", "passenger_count", "needs_driver",
                          "driver_id", "estimated_distance", "notes"):
                value = getattr(data, field)
                if value is not None:
                    setattr(reservation, field, value)
            reservation.estimated_cost = estimate_cost(vehicle.daily_rate, start, end)
            self.state_machine.transition(
                reservation, ReservationEvent.MODIFY, actor.id, "Reservation updated", now=now
            )

        logger.info(f"Reservation updated: {reservation.reference_number}")

        self._record_audit(
            reservation, "UPDATE", actor,
            old_value=old_value, new_value=data.model_dump(mode="json", exclude_none=True),
        )
        self._notify_requester(
            reservation,
            NotificationType.RESERVATION_UPDATED,
            "Reservation Updated",
            f"Your reservation {reservation.reference_number} has been updated",
            send_email=False,
        )
        return reservation

    def submit(self, actor: Principal, reservation_id: str) -> Reservation:
        """Move a draft into the approval queue."""
        now = self.clock()
        current = self._get_reservation(reservation_id)
        self._require_owner_or_approver(actor, current, "You can only submit your own reservations")
        vehicle_id = current.vehicle_id

        with self._transaction(vehicle_id, require_active=True) as vehicle:
            reservation = self._reload_locked(reservation_id, vehicle_id)
            self.state_machine.next_status(reservation.status, ReservationEvent.SUBMIT)
            self._validate_window(reservation.start_time, reservation.end_time, now)
            self._ensure_vehicle_bookable(vehicle)
            self._ensure_no_conflict(
                vehicle.id, reservation.start_time, reservation.end_time, exclude_reservation_id=reservation.id
            )
            self.state_machine.transition(
                reservation, ReservationEvent.SUBMIT, actor.id, "Reservation submitted", now=now
            )

        logger.info(f"Reservation submitted: {reservation.reference_number}")

        self._record_audit(reservation, "SUBMIT", actor, new_value={"status": reservation.status})
        self._announce_pending(reservation)
        return reservation

    def approve(self, actor: Principal, reservation_id: str, comment: Optional[str] = None) -> Reservation:
        self._require_approver(actor)
        now = self.clock()
        comment = clean_text(comment)
        vehicle_id = self._get_reservation(reservation_id).vehicle_id

        with self._transaction(vehicle_id):
            self._ensure_user(actor)
            reservation = self._reload_locked(reservation_id, vehicle_id)
            self.state_machine.next_status(reservation.status, ReservationEvent.APPROVE)

            # Another request for the same window may have been approved since
            # this one was queued.
            self._ensure_no_conflict(
                reservation.vehicle_id,
                reservation.start_time,
                reservation.end_time,
                exclude_reservation_id=reservation.id,
                blocking_statuses=CONFIRMED_STATUSES,
                message="Vehicle is no longer available",
            )

            reservation.approver_id = actor.id
            reservation.approved_at = now
            self.state_machine.transition(reservation, ReservationEvent.APPROVE, actor.id, comment, now=now)

        logger.info(f"Reservation approved: {reservation.reference_number}")

        self._record_audit(
            reservation, "APPROVAL", actor, new_value={"status": reservation.status, "comment": comment}
        )
        self._notify_requester(
            reservation,
            NotificationType.RESERVATION_APPROVED,
            "Reservation Approved",
            f"Your reservation {reservation.reference_number} has been approved",
        )
        return reservation

    def reject(self, actor: Principal, reservation_id: str, reason: Optional[str]) -> Reservation:
        self._require_approver(actor)
        reason = clean_text(reason)
        if not reason:
            raise ValidationError("Rejection reason is required", field="reason")
        now = self.clock()
        vehicle_id = self._get_reservation(reservation_id).vehicle_id

        with self._transaction(vehicle_id):
            self._ensure_user(actor)
            reservation = self._reload_locked(reservation_id, vehicle_id)
            self.state_machine.next_status(reservation.status, ReservationEvent.REJECT)

            reservation.rejection_reason = reason
            reservation.approver_id = actor.id
            reservation.approved_at = now
            self.state_machine.transition(reservation, ReservationEvent.REJECT, actor.id, reason, now=now)

        logger.info(f"Reservation rejected: {reservation.reference_number}")

        self._record_audit(
            reservation, "REJECTION", actor, new_value={"status": reservation.status, "reason": reason}
        )
        self._notify_requester(
            reservation,
            NotificationType.RESERVATION_REJECTED,
            "Reservation Rejected",
            f"Your reservation {reservation.reference_number} has been rejected: {reason}",
            email_reason=reason,
        )
        return reservation

    def cancel(self, actor: Principal, reservation_id: str, reason: Optional[str]) -> Reservation:
        reason = clean_text(reason)
        if not reason:
            raise ValidationError("Cancellation reason is required", field="reason")
        now = self.clock()
        current = self._get_reservation(reservation_id)
        self._require_owner_or_approver(actor, current, "You can only cancel your own reservations")
        vehicle_id = current.vehicle_id

        with self._transaction(vehicle_id):
            reservation = self._reload_locked(reservation_id, vehicle_id)
            previous_status = reservation.status
            if previous_status == ReservationStatus.IN_PROGRESS.value:
                raise StatusTransitionError(
                    previous_status,
                    ReservationEvent.CANCEL.value,
                    "reservation is in progress; check the vehicle out instead",
                )
            self.state_machine.next_status(previous_status, ReservationEvent.CANCEL)

            reservation.cancellation_reason = reason
            self.state_machine.transition(reservation, ReservationEvent.CANCEL, actor.id, reason, now=now)

        logger.info(f"Reservation cancelled: {reservation.reference_number}")

        self._record_audit(
            reservation,
            "STATUS_CHANGE",
            actor,
            old_value={"status": previous_status},
            new_value={"status": reservation.status, "reason": reason},
        )
        self._notify_requester(
            reservation,
            NotificationType.RESERVATION_CANCELLED,
            "Reservation Cancelled",
            f"Your reservation {reservation.reference_number} has been cancelled",
            email_reason=reason,
        )
        return reservation

    def check_in(
        self,
        actor: Principal,
        reservation_id: str,
        distance: Optional[int],
        notes: Optional[str] = None,
    ) -> Reservation:
        if distance is None:
            raise ValidationError("Check-in distance is required", field="distance")
        if distance < 0:
            raise ValidationError("Distance cannot be negative", field="distance")
        now = self.clock()
        current = self._get_reservation(reservation_id)
        self._require_operator(actor, current)
        vehicle_id = current.vehicle_id

        with self._transaction(vehicle_id) as vehicle:
            reservation = self._reload_locked(reservation_id, vehicle_id)
            self.state_machine.next_status(reservation.status, ReservationEvent.CHECK_IN)

            if vehicle.status not in HANDOVER_STATUSES:
                raise ConflictError(
                    f"Vehicle is currently {vehicle.status.lower()}",
                    details={"vehicle_id": vehicle.id, "vehicle_status": vehicle.status},
                )
            if distance < (vehicle.current_distance or 0):
                raise ValidationError(
                    "Check-in distance cannot be lower than the vehicle odometer",
                    field="distance",
                    details={"current_distance": vehicle.current_distance, "provided": distance},
                )

            reservation.actual_start_time = now
            reservation.check_in_distance = distance
            reservation.check_in_notes = clean_text(notes)
            self.state_machine.transition(
                reservation,
                ReservationEvent.CHECK_IN,
                actor.id,
                f"Check-in at {distance} km",
                vehicle=vehicle,
                now=now,
            )

        logger.info(f"Reservation checked in: {reservation.reference_number}")

        self._record_audit(
            reservation, "CHECK_IN", actor, new_value={"status": reservation.status, "distance": distance}
        )
        self._best_effort(
            f"Start notifications for {reservation.reference_number}",
            self.notifier.notify_many,
            [reservation.requester_id, reservation.driver_id],
            NotificationType.RESERVATION_STARTED,
            "Reservation Started",
            f"Your reservation {reservation.reference_number} has started",
            entity_id=reservation.id,
        )
        return reservation

    def check_out(
        self,
        actor: Principal,
        reservation_id: str,
        distance: Optional[int],
        notes: Optional[str] = None,
        rating: Optional[int] = None,
        feedback: Optional[str] = None,
    ) -> Reservation:
        if distance is None:
            raise ValidationError("Check-out distance is required", field="distance")
        if rating is not None and not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", field="rating")
        now = self.clock()
        current = self._get_reservation(reservation_id)
        self._require_operator(actor, current)
        vehicle_id = current.vehicle_id

        with self._transaction(vehicle_id) as vehicle:
            reservation = self._reload_locked(reservation_id, vehicle_id)
            self.state_machine.next_status(reservation.status, ReservationEvent.CHECK_OUT)

            check_in_distance = reservation.check_in_distance or 0
            if distance < check_in_distance:
                raise ValidationError(
                    "Check-out distance cannot be less than check-in",
                    field="distance",
                    details={"check_in_distance": check_in_distance, "provided": distance},
                )

            travelled = distance - check_in_distance
            started_at = reservation.actual_start_time or reservation.start_time
            actual_cost = calculate_cost(vehicle.daily_rate, vehicle.distance_rate, started_at, now, travelled)

            reservation.actual_end_time = now
            reservation.check_out_distance = distance
            reservation.check_out_notes = clean_text(notes)
            reservation.actual_distance = travelled
            reservation.actual_cost = actual_cost
            reservation.rating = rating
            reservation.feedback = clean_text(feedback)
            vehicle.current_distance = distance
            self.state_machine.transition(
                reservation,
                ReservationEvent.CHECK_OUT,
                actor.id,
                f"Check-out at {distance} km. Distance: {travelled} km",
                vehicle=vehicle,
                now=now,
            )

        logger.info(f"Reservation checked out: {reservation.reference_number}")

        self._record_audit(
            reservation,
            "CHECK_OUT",
            actor,
            new_value={
                "status": reservation.status,
                "distance": distance,
                "travelled": travelled,
                "actual_cost": str(actual_cost),
            },
        )
        self._best_effort(
            f"Completion notifications for {reservation.reference_number}",
            self.notifier.notify_many,
            [reservation.requester_id, reservation.driver_id],
            NotificationType.RESERVATION_ENDED,
            "Reservation Completed",
            f"Your reservation {reservation.reference_number} has been completed",
            entity_id=reservation.id,
        )
        return reservation

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, actor: Principal, reservation_id: str) -> Reservation:
        reservation = (
            self.db.query(Reservation)
            .options(selectinload(Reservation.history))
            .filter(Reservation.id == reservation_id)
            .first()
        )
        if not reservation:
            raise ReservationNotFoundError(reservation_id)
        if not (actor.is_approver or actor.id in (reservation.requester_id, reservation.driver_id)):
            raise ForbiddenError("You can only view your own reservations")
        return reservation

    def list(
        self,
        actor: Principal,
        filters: Optional[ReservationFilter] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> tuple[list[Reservation], int, int, int]:
        filters = filters or ReservationFilter()
        page, page_size = normalize_pagination(page, page_size)

        query = self.db.query(Reservation)
        if actor.role == Role.EMPLOYEE:
            query = query.filter(Reservation.requester_id == actor.id)
        elif actor.role == Role.DRIVER:
            query = query.filter(or_(Reservation.requester_id == actor.id, Reservation.driver_id == actor.id))
        for clause in filters.predicates():
            query = query.filter(clause)

        total = query.count()
        items = (
            query.order_by(Reservation.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return items, total, page, page_size

    def upcoming(self, actor: Principal, limit: int = 5) -> list[Reservation]:
        return (
            self.db.query(Reservation)
            .filter(
                and_(
                    Reservation.requester_id == actor.id,
                    Reservation.status.in_([ReservationStatus.APPROVED.value, ReservationStatus.PENDING.value]),
                    Reservation.start_time > self.clock(),
                )
            )
            .order_by(Reservation.start_time.asc())
            .limit(limit)
            .all()
        )

    def active(self, requester_id: Optional[str] = None) -> list[Reservation]:
        query = self.db.query(Reservation).filter(Reservation.status == ReservationStatus.IN_PROGRESS.value)
        if requester_id:
            query = query.filter(Reservation.requester_id == requester_id)
        return query.order_by(Reservation.start_time.asc()).all()

    def calendar(self, start: datetime, end: datetime, vehicle_id: Optional[str] = None) -> list[Reservation]:
        if start >= end:
            raise ValidationError("End of the calendar window must be after its start", field="end")
        query = self.db.query(Reservation).filter(
            and_(
                Reservation.status.in_([s.value for s in ACTIVE_STATUSES]),
                Reservation.start_time <= end,
                Reservation.end_time >= start,
            )
        )
        if vehicle_id:
            query = query.filter(Reservation.vehicle_id == vehicle_id)
        return query.order_by(Reservation.start_time.asc()).all()

    def is_available(self, vehicle_id: str, start: datetime, end: datetime) -> bool:
        if start >= end:
            raise ValidationError("End time must be after start time", field="end_time")
        self._get_vehicle(vehicle_id, require_active=True)
        return self.availability.is_available(vehicle_id, start, end)
