class ReservationApiError(Exception):
    """Base exception for reservation API errors"""
    def __init__(self, code: str, message: str, status_code: int = 400, field: str = None, details: dict = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.field = field
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ReservationApiError):
    """Malformed input or a violated input rule (BadRequest)."""
    def __init__(self, message: str, field: str = None, details: dict = None):
        super().__init__("VALIDATION_ERROR", message, 400, field, details)


class NotFoundError(ReservationApiError):
    def __init__(self, resource: str, resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message += f": {resource_id}"
        super().__init__("NOT_FOUND", message, 404, details={"resource": resource, "resource_id": resource_id})


class ConflictError(ReservationApiError):
    """State-guard violation or double-booking."""
    def __init__(self, message: str, details: dict = None, code: str = "CONFLICT"):
        super().__init__(code, message, 409, details=details)


class StatusTransitionError(ConflictError):
    def __init__(self, current_status: str, requested_status: str, reason: str = None):
        message = f"Invalid status transition from {current_status} to {requested_status}"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            details={"current_status": current_status, "requested_status": requested_status},
            code="INVALID_STATUS_TRANSITION",
        )


class ForbiddenError(ReservationApiError):
    def __init__(self, message: str = "You do not have permission to perform this action", details: dict = None):
        super().__init__("FORBIDDEN", message, 403, details=details)


class AuthenticationRequiredError(ReservationApiError):
    def __init__(self, message: str = "Authentication required"):
        super().__init__("AUTHENTICATION_REQUIRED", message, 401)


# Aliases matching the error taxonomy used by callers
BadRequestError = ValidationError


class ReservationNotFoundError(NotFoundError):
    """Reservation not found"""
    def __init__(self, reservation_id: str = None):
        super().__init__("Reservation", reservation_id)


class VehicleNotFoundError(NotFoundError):
    """Vehicle not found"""
    def __init__(self, vehicle_id: str = None):
        super().__init__("Vehicle", vehicle_id)
