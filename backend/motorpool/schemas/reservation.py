from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from motorpool.models.reservation import ReservationStatus


def _to_naive_utc(value: datetime) -> datetime:
    # Stored datetimes are naive UTC.
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class CreateReservationRequest(BaseModel):
    vehicle_id: str
    start_time: datetime
    end_time: datetime
    purpose: Optional[str] = None
    destination: Optional[str] = None
    passenger_count: int = 1
    needs_driver: bool = False
    driver_id: Optional[str] = None
    estimated_distance: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None
    save_as_draft: bool = False

    @field_validator("vehicle_id")
    @classmethod
    def validate_vehicle_id(cls, v: str) -> str:
        v_norm = (v or "").strip()
        if not v_norm:
            raise ValueError("vehicle_id is required")
        return v_norm

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return _to_naive_utc(v)

    @field_validator("purpose", "destination", "driver_id", "notes")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class UpdateReservationRequest(BaseModel):
    vehicle_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    purpose: Optional[str] = None
    destination: Optional[str] = None
    passenger_count: Optional[int] = None
    needs_driver: Optional[bool] = None
    driver_id: Optional[str] = None
    estimated_distance: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return None
        return _to_naive_utc(v)

    @field_validator("vehicle_id", "purpose", "destination", "driver_id", "notes")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class ApproveRequest(BaseModel):
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def normalize_comment(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class ReasonRequest(BaseModel):
    """Body for reject and cancel. Emptiness is checked by the service."""
    reason: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class CheckInRequest(BaseModel):
    distance: int
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class CheckOutRequest(BaseModel):
    distance: int
    notes: Optional[str] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None

    @field_validator("notes", "feedback")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class ReservationHistoryResponse(BaseModel):
    previous_status: Optional[ReservationStatus] = None
    new_status: ReservationStatus
    changed_by: Optional[str] = None
    comment: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ReservationResponse(BaseModel):
    id: str
    reference_number: str
    vehicle_id: str
    requester_id: str
    driver_id: Optional[str] = None
    approver_id: Optional[str] = None
    status: ReservationStatus
    start_time: datetime
    end_time: datetime
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    purpose: Optional[str] = None
    destination: Optional[str] = None
    passenger_count: int
    needs_driver: bool
    estimated_distance: Optional[int] = None
    check_in_distance: Optional[int] = None
    check_out_distance: Optional[int] = None
    actual_distance: Optional[int] = None
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    rejection_reason: Optional[str] = None
    cancellation_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    rating: Optional[int] = None
    feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReservationDetailResponse(ReservationResponse):
    history: List[ReservationHistoryResponse] = Field(default_factory=list)


class AvailabilityResponse(BaseModel):
    vehicle_id: str
    start_time: datetime
    end_time: datetime
    available: bool


class ReservationListQuery(BaseModel):
    status: Optional[ReservationStatus] = None
    vehicle_id: Optional[str] = None
    requester_id: Optional[str] = None
    driver_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_times(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is None:
            return None
        return _to_naive_utc(v)

    @field_validator("vehicle_id", "requester_id", "driver_id", "search")
    @classmethod
    def normalize_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_optional(v)


class WindowQuery(BaseModel):
    """Time window taken from query parameters (availability, calendar)."""
    start_time: datetime
    end_time: datetime
    vehicle_id: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_times(cls, v: datetime) -> datetime:
        return _to_naive_utc(v)
