import uuid
from datetime import datetime
import enum

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String

from motorpool.database import Base


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    IN_USE = "IN_USE"
    MAINTENANCE = "MAINTENANCE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"


class Vehicle(Base):
    """Catalog record for a bookable vehicle.

    The reservation engine only reads ``daily_rate`` / ``distance_rate`` and
    writes ``status`` / ``current_distance`` while committing a check-in or
    check-out.
    """
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    registration_number = Column(String(50), unique=True, nullable=False, index=True)
    brand = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default=VehicleStatus.AVAILABLE.value, index=True)
    current_distance = Column(Integer, nullable=False, default=0)  # odometer, never decreases
    daily_rate = Column(Numeric(12, 2), nullable=True)
    distance_rate = Column(Numeric(12, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.brand, self.model) if part)
        return name or self.registration_number

    def __repr__(self):
        return f"<Vehicle {self.registration_number} {self.status}>"
