from datetime import datetime
from typing import Dict, Any, Optional
from sqlalchemy.orm import Session

from motorpool.models.audit_log import SystemAuditLog


class AuditService:
    """Append-only audit sink for reservation operations.

    Entries are added to the caller's session and committed with it.
    """

    def __init__(self, db: Session):
        self.db = db

    def log_action(self,
                   entity_type: str,
                   entity_id: str,
                   action: str,
                   user_id: Optional[str] = None,
                   user_role: Optional[str] = None,
                   old_value: Optional[Dict[str, Any]] = None,
                   new_value: Optional[Dict[str, Any]] = None,
                   description: Optional[str] = None,
                   audit_metadata: Optional[Dict[str, Any]] = None,
                   ip_address: Optional[str] = None,
                   user_agent: Optional[str] = None) -> SystemAuditLog:
        """
        Log an action to the audit trail

        Args:
            entity_type: Type of entity ("reservation", "vehicle", ...)
            entity_id: ID of the entity (as string)
            action: Action performed ("CREATE", "APPROVAL", "STATUS_CHANGE", ...)
            user_id: ID of user who performed the action
            user_role: Role of the user
            old_value: Previous state of the entity
            new_value: New state of the entity
            description: Human-readable description
            audit_metadata: Additional context data
            ip_address: Client IP address
            user_agent: Client user agent string

        Returns:
            The created audit log entry
        """

        audit_log = SystemAuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            user_id=user_id,
            user_role=user_role,
            old_value=old_value,
            new_value=new_value,
            description=description,
            audit_metadata=audit_metadata,
            ip_address=ip_address,
            user_agent=user_agent,
            timestamp=datetime.utcnow()
        )

        self.db.add(audit_log)
        return audit_log

    def log_reservation_action(self,
                               reservation_id: str,
                               action: str,
                               user_id: Optional[str] = None,
                               user_role: Optional[str] = None,
                               **kwargs) -> SystemAuditLog:
        """Log a reservation-related action"""
        return self.log_action("reservation", reservation_id, action, user_id, user_role, **kwargs)

    def get_entity_trail(self, entity_type: str, entity_id: str) -> list[SystemAuditLog]:
        return (
            self.db.query(SystemAuditLog)
            .filter(SystemAuditLog.entity_type == entity_type, SystemAuditLog.entity_id == entity_id)
            .order_by(SystemAuditLog.timestamp.asc())
            .all()
        )
