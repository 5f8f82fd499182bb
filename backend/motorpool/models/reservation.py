import uuid
from datetime import datetime
import enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from motorpool.database import Base


class ReservationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


# Statuses that occupy the vehicle's calendar
ACTIVE_STATUSES = (
    ReservationStatus.PENDING,
    ReservationStatus.APPROVED,
    ReservationStatus.IN_PROGRESS,
)

# Statuses that block an approval
CONFIRMED_STATUSES = (
    ReservationStatus.APPROVED,
    ReservationStatus.IN_PROGRESS,
)

TERMINAL_STATUSES = frozenset({
    ReservationStatus.REJECTED,
    ReservationStatus.COMPLETED,
    ReservationStatus.CANCELLED,
})


class Reservation(Base):
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    reference_number = Column(String(50), unique=True, nullable=False, index=True)

    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    requester_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    approver_id = Column(String(36), ForeignKey("users.id"), nullable=True)

    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False, index=True)
    actual_start_time = Column(DateTime, nullable=True)
    actual_end_time = Column(DateTime, nullable=True)

    status = Column(String(20), nullable=False, default=ReservationStatus.PENDING.value, index=True)

    purpose = Column(String(500), nullable=True)
    destination = Column(String(255), nullable=True)
    passenger_count = Column(Integer, nullable=False, default=1)
    needs_driver = Column(Boolean, nullable=False, default=False)
    estimated_distance = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    check_in_distance = Column(Integer, nullable=True)
    check_in_notes = Column(Text, nullable=True)
    check_out_distance = Column(Integer, nullable=True)
    check_out_notes = Column(Text, nullable=True)
    actual_distance = Column(Integer, nullable=True)

    estimated_cost = Column(Numeric(12, 2), nullable=True)
    actual_cost = Column(Numeric(12, 2), nullable=True)

    rejection_reason = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    approved_at = Column(DateTime, nullable=True)

    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    vehicle = relationship("Vehicle")
    history = relationship(
        "ReservationHistory",
        back_populates="reservation",
        order_by="ReservationHistory.created_at",
    )

    def __repr__(self):
        return f"<Reservation {self.reference_number} {self.status}>"


class ReservationHistory(Base):
    """Append-only record of a reservation status change."""
    __tablename__ = "reservation_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    reservation_id = Column(String(36), ForeignKey("reservations.id"), nullable=False, index=True)
    previous_status = Column(String(20), nullable=True)
    new_status = Column(String(20), nullable=False)
    changed_by = Column(String(36), nullable=True)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    reservation = relationship("Reservation", back_populates="history")
