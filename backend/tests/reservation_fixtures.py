"""Shared setup for reservation tests.

Plain helpers rather than pytest fixtures so every test module also runs as
a standalone script.
"""

import os
import sys
from datetime import datetime, timedelta
from decimal import Decimal

# Ensure motorpool imports work when running from backend/
sys.path.append(".")

# Settings are loaded at import time, so this must happen before motorpool imports.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

BASE_TIME = datetime(2030, 1, 1, 8, 0)
DAY1 = datetime(2030, 1, 2, 9, 0)


class TickingClock:
    """Deterministic clock: every call moves forward by one second."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


def setup_in_memory_db():
    """Patch motorpool.database to use a fresh in-memory SQLite DB."""
    import motorpool.database as database
    from motorpool.database import Base

    # Import models so they are registered on Base.metadata.
    from motorpool import models  # noqa: F401

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    database.engine = engine
    database.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    return database.SessionLocal


def add_user(db, user_id: str, role: str = "EMPLOYEE", is_active: bool = True):
    from motorpool.models.user import User

    user = User(id=user_id, email=f"{user_id}@example.com", display_name=user_id.title(), role=role,
                is_active=is_active)
    db.add(user)
    db.commit()
    return user


def add_vehicle(db, vehicle_id: str = "veh-1", daily_rate="50.00", distance_rate="0.30",
                current_distance: int = 1000, status: str = "AVAILABLE", is_active: bool = True):
    from motorpool.models.vehicle import Vehicle

    vehicle = Vehicle(
        id=vehicle_id,
        registration_number=f"REG-{vehicle_id}",
        brand="Toyota",
        model="Hilux",
        status=status,
        current_distance=current_distance,
        daily_rate=Decimal(daily_rate) if daily_rate is not None else None,
        distance_rate=Decimal(distance_rate) if distance_rate is not None else None,
        is_active=is_active,
    )
    db.add(vehicle)
    db.commit()
    return vehicle


def add_reservation(db, reservation_id: str, start: datetime, end: datetime, status: str = "PENDING",
                    vehicle_id: str = "veh-1", requester_id: str = "alice"):
    """Insert a reservation directly, bypassing the booking guards."""
    from motorpool.models.reservation import Reservation

    reservation = Reservation(
        id=reservation_id,
        reference_number=f"RES-{reservation_id}",
        vehicle_id=vehicle_id,
        requester_id=requester_id,
        start_time=start,
        end_time=end,
        status=status,
    )
    db.add(reservation)
    db.commit()
    return reservation


def seed_fleet(db):
    """Standard cast: employee alice, employee bob, driver dave, manager maria, one vehicle."""
    add_user(db, "alice", "EMPLOYEE")
    add_user(db, "bob", "EMPLOYEE")
    add_user(db, "dave", "DRIVER")
    add_user(db, "maria", "MANAGER")
    return add_vehicle(db)
