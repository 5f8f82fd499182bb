import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime, JSON

from motorpool.database import Base


class SystemAuditLog(Base):
    """Append-only audit trail for reservation operations"""
    __tablename__ = "system_audit_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Entity tracking
    entity_type = Column(String(50), nullable=False, index=True)  # "reservation", "vehicle", ...
    entity_id = Column(String(36), nullable=False, index=True)

    # Action details
    action = Column(String(50), nullable=False)                   # "CREATE", "APPROVAL", ...
    description = Column(Text, nullable=True)

    # User tracking
    user_id = Column(String(36), nullable=True)
    user_role = Column(String(20), nullable=True)

    # State changes
    old_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)

    # Context and metadata
    audit_metadata = Column(JSON, nullable=True, name="metadata")
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)

    # Timestamps
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
