from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from motorpool.models.notification import (
    Notification,
    NotificationPreference,
    NotificationPriority,
    NotificationType,
)
from motorpool.models.reservation import Reservation
from motorpool.models.user import APPROVER_ROLES, User
from motorpool.services.background_tasks import send_email_in_background
from motorpool.services.email_service import EmailService, email_service

logger = logging.getLogger(__name__)

# NotificationPreference attribute consulted for each notification type
PREFERENCE_FIELDS = {
    NotificationType.RESERVATION_CREATED: "in_app_reservation",
    NotificationType.RESERVATION_UPDATED: "in_app_reservation",
    NotificationType.RESERVATION_APPROVED: "in_app_approval",
    NotificationType.RESERVATION_REJECTED: "in_app_approval",
    NotificationType.RESERVATION_CANCELLED: "in_app_reservation",
    NotificationType.RESERVATION_REMINDER: "in_app_reminder",
    NotificationType.RESERVATION_STARTED: "in_app_reservation",
    NotificationType.RESERVATION_ENDED: "in_app_reservation",
    NotificationType.SYSTEM: "in_app_system",
}


def should_notify(preferences: Optional[NotificationPreference], event_type: NotificationType) -> bool:
    """Return False only when the user explicitly turned this kind of notification off."""
    if preferences is None:
        return True
    field = PREFERENCE_FIELDS.get(NotificationType(event_type))
    if field is None:
        return True
    return getattr(preferences, field, True) is not False


def should_email(preferences: Optional[NotificationPreference]) -> bool:
    if preferences is None:
        return True
    return preferences.email_enabled is not False


class NotificationService:
    """In-app notifications plus optional emails for reservation events.

    Each call commits on its own. Callers treat any exception raised here as
    a delivery failure, not as a failure of the reservation operation.
    """

    def __init__(self, db: Session, email: Optional[EmailService] = None, send_in_background: bool = True):
        self.db = db
        self.email = email or email_service
        self.send_in_background = send_in_background

    def _preferences(self, user_id: str) -> Optional[NotificationPreference]:
        return self.db.query(NotificationPreference).filter(NotificationPreference.user_id == user_id).first()

    def notify(
        self,
        user_id: str,
        notification_type: NotificationType,
        title: str,
        message: str,
        entity_id: Optional[str] = None,
        entity_type: str = "reservation",
        priority: NotificationPriority = NotificationPriority.MEDIUM,
    ) -> Optional[Notification]:
        if not should_notify(self._preferences(user_id), notification_type):
            logger.debug(f"Notification skipped for user {user_id} based on preferences")
            return None

        notification = Notification(
            user_id=user_id,
            type=NotificationType(notification_type).value,
            priority=NotificationPriority(priority).value,
            title=title,
            message=message,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        self.db.add(notification)
        self.db.commit()
        logger.debug(f"Notification created for user {user_id}: {title}")
        return notification

    def notify_approvers(self, reservation: Reservation) -> int:
        """Ask every active manager/admin to review a new request."""
        approvers = (
            self.db.query(User)
            .filter(User.role.in_([r.value for r in APPROVER_ROLES]), User.is_active.is_(True))
            .all()
        )
        sent = 0
        for approver in approvers:
            created = self.notify(
                user_id=approver.id,
                notification_type=NotificationType.RESERVATION_CREATED,
                title="New Reservation Request",
                message=f"New reservation request {reservation.reference_number} requires approval",
                entity_id=reservation.id,
            )
            if created is not None:
                sent += 1
        return sent

    def _dispatch_email(self, send, kind: str, reservation: Reservation, **fields) -> None:
        if not self.email.is_configured():
            return
        if self.send_in_background:
            send_email_in_background(send, kind, reservation.reference_number, **fields)
        else:
            send(reference_number=reservation.reference_number, **fields)

    def email_confirmation(self, reservation: Reservation) -> None:
        user = self.db.query(User).filter(User.id == reservation.requester_id).first()
        if not user or not should_email(self._preferences(user.id)):
            return
        vehicle = reservation.vehicle
        self._dispatch_email(
            self.email.send_reservation_confirmation_email,
            "confirmation",
            reservation,
            to_address=user.email,
            recipient_name=user.display_name or user.email,
            vehicle_name=vehicle.display_name if vehicle else reservation.vehicle_id,
            start_time=reservation.start_time,
            end_time=reservation.end_time,
            destination=reservation.destination,
        )

    def email_status(self, reservation: Reservation, reason: Optional[str] = None) -> None:
        user = self.db.query(User).filter(User.id == reservation.requester_id).first()
        if not user or not should_email(self._preferences(user.id)):
            return
        self._dispatch_email(
            self.email.send_reservation_status_email,
            "status",
            reservation,
            to_address=user.email,
            recipient_name=user.display_name or user.email,
            status=reservation.status,
            reason=reason,
        )

    def notify_many(self, user_ids: Iterable[str], notification_type: NotificationType, title: str, message: str,
                    entity_id: Optional[str] = None) -> int:
        sent = 0
        for user_id in dict.fromkeys(u for u in user_ids if u):
            if self.notify(user_id, notification_type, title, message, entity_id=entity_id) is not None:
                sent += 1
        return sent
