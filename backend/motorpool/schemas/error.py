import uuid
from pydantic import BaseModel
from typing import Optional, Dict, Any


class ErrorDetail(BaseModel):
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
    request_id: Optional[str] = None

    @classmethod
    def build(cls, code: str, message: str, field: Optional[str] = None,
              details: Optional[Dict[str, Any]] = None) -> "ErrorResponse":
        """Envelope with a fresh request id."""
        return cls(
            error=ErrorDetail(code=code, message=message, field=field, details=details),
            request_id=str(uuid.uuid4()),
        )
