from __future__ import annotations

from flask import Blueprint, jsonify, request

from motorpool.api.auth_middleware import current_principal, require_auth
from motorpool.database import get_db
from motorpool.schemas.reservation import (
    ApproveRequest,
    AvailabilityResponse,
    CheckInRequest,
    CheckOutRequest,
    CreateReservationRequest,
    ReasonRequest,
    ReservationDetailResponse,
    ReservationListQuery,
    ReservationResponse,
    UpdateReservationRequest,
    WindowQuery,
)
from motorpool.services.reservation_service import ReservationFilter, ReservationService
from motorpool.utils.helpers import paginated_response


reservations_bp = Blueprint("reservations", __name__, url_prefix="/api/reservations")
vehicles_bp = Blueprint("vehicles", __name__, url_prefix="/api/vehicles")


def _body() -> dict:
    return request.get_json(silent=True) or {}


def _dump(reservation) -> dict:
    return ReservationResponse.model_validate(reservation).model_dump(mode="json")


@reservations_bp.route("", methods=["POST"])
@require_auth
def create_reservation():
    req = CreateReservationRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).create(current_principal(), req)
        return jsonify(_dump(reservation)), 201


@reservations_bp.route("", methods=["GET"])
@require_auth
def list_reservations():
    """List reservations visible to the caller (paged)."""
    query = ReservationListQuery(**request.args.to_dict())
    filters = ReservationFilter(
        status=query.status,
        vehicle_id=query.vehicle_id,
        requester_id=query.requester_id,
        driver_id=query.driver_id,
        window_start=query.start_date,
        window_end=query.end_date,
        search=query.search,
    )
    with get_db() as db:
        items, total, page, page_size = ReservationService(db).list(
            current_principal(), filters, page=query.page, page_size=query.page_size
        )
        return jsonify(paginated_response([_dump(r) for r in items], total, page, page_size))


@reservations_bp.route("/upcoming", methods=["GET"])
@require_auth
def upcoming_reservations():
    limit = request.args.get("limit", type=int) or 5
    with get_db() as db:
        items = ReservationService(db).upcoming(current_principal(), limit=max(1, min(limit, 50)))
        return jsonify([_dump(r) for r in items])


@reservations_bp.route("/active", methods=["GET"])
@require_auth
def active_reservations():
    principal = current_principal()
    # Non-approvers only see their own trips
    requester_id = None if principal.is_approver else principal.id
    with get_db() as db:
        items = ReservationService(db).active(requester_id=requester_id)
        return jsonify([_dump(r) for r in items])


@reservations_bp.route("/calendar", methods=["GET"])
@require_auth
def reservation_calendar():
    args = request.args.to_dict()
    query = WindowQuery(
        start_time=args.get("start"),
        end_time=args.get("end"),
        vehicle_id=args.get("vehicle_id"),
    )
    with get_db() as db:
        items = ReservationService(db).calendar(query.start_time, query.end_time, vehicle_id=query.vehicle_id)
        return jsonify([_dump(r) for r in items])


@reservations_bp.route("/<reservation_id>", methods=["GET"])
@require_auth
def get_reservation(reservation_id: str):
    with get_db() as db:
        reservation = ReservationService(db).get(current_principal(), reservation_id)
        response = ReservationDetailResponse.model_validate(reservation)
        return jsonify(response.model_dump(mode="json"))


@reservations_bp.route("/<reservation_id>", methods=["PATCH"])
@require_auth
def update_reservation(reservation_id: str):
    req = UpdateReservationRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).modify(current_principal(), reservation_id, req)
        return jsonify(_dump(reservation))


@reservations_bp.route("/<reservation_id>/submit", methods=["POST"])
@require_auth
def submit_reservation(reservation_id: str):
    with get_db() as db:
        reservation = ReservationService(db).submit(current_principal(), reservation_id)
        return jsonify(_dump(reservation))


@reservations_bp.route("/<reservation_id>/approve", methods=["POST"])
@require_auth
def approve_reservation(reservation_id: str):
    req = ApproveRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).approve(current_principal(), reservation_id, req.comment)
        return jsonify(_dump(reservation))


@reservations_bp.route("/<reservation_id>/reject", methods=["POST"])
@require_auth
def reject_reservation(reservation_id: str):
    req = ReasonRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).reject(current_principal(), reservation_id, req.reason)
        return jsonify(_dump(reservation))


@reservations_bp.route("/<reservation_id>/cancel", methods=["POST"])
@require_auth
def cancel_reservation(reservation_id: str):
    req = ReasonRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).cancel(current_principal(), reservation_id, req.reason)
        return jsonify(_dump(reservation))


@reservations_bp.route("/<reservation_id>/check-in", methods=["POST"])
@require_auth
def check_in_reservation(reservation_id: str):
    req = CheckInRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).check_in(
            current_principal(), reservation_id, req.distance, notes=req.notes
        )
        return jsonify(_dump(reservation))


@reservations_bp.route("/<reservation_id>/check-out", methods=["POST"])
@require_auth
def check_out_reservation(reservation_id: str):
    req = CheckOutRequest(**_body())
    with get_db() as db:
        reservation = ReservationService(db).check_out(
            current_principal(),
            reservation_id,
            req.distance,
            notes=req.notes,
            rating=req.rating,
            feedback=req.feedback,
        )
        return jsonify(_dump(reservation))


@vehicles_bp.route("/<vehicle_id>/availability", methods=["GET"])
@require_auth
def vehicle_availability(vehicle_id: str):
    query = WindowQuery(
        start_time=request.args.get("start"),
        end_time=request.args.get("end"),
    )
    with get_db() as db:
        available = ReservationService(db).is_available(vehicle_id, query.start_time, query.end_time)
    response = AvailabilityResponse(
        vehicle_id=vehicle_id,
        start_time=query.start_time,
        end_time=query.end_time,
        available=available,
    )
    return jsonify(response.model_dump(mode="json"))
