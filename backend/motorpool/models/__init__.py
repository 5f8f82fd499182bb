from motorpool.models.user import User, Role
from motorpool.models.vehicle import Vehicle, VehicleStatus
from motorpool.models.reservation import (
    Reservation,
    ReservationHistory,
    ReservationStatus,
    ACTIVE_STATUSES,
    CONFIRMED_STATUSES,
    TERMINAL_STATUSES,
)
from motorpool.models.notification import (
    Notification,
    NotificationPreference,
    NotificationPriority,
    NotificationType,
)
from motorpool.models.audit_log import SystemAuditLog

__all__ = [
    "User",
    "Role",
    "Vehicle",
    "VehicleStatus",
    "Reservation",
    "ReservationHistory",
    "ReservationStatus",
    "ACTIVE_STATUSES",
    "CONFIRMED_STATUSES",
    "TERMINAL_STATUSES",
    "Notification",
    "NotificationPreference",
    "NotificationPriority",
    "NotificationType",
    "SystemAuditLog",
]
