from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from storefront.backend.errors import BackendError, CartBusy, StorefrontError, TransportError, ValidationError


@dataclass
class ApiError(Exception):
    """Raise to return a consistent JSON error response."""

    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self, request_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details or {},
                "request_id": request_id,
            }
        }
        return payload


def abort_json(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Convenience wrapper."""
    raise ApiError(status_code=status_code, code=code, message=message, details=details)


def api_error_from(err: StorefrontError) -> ApiError:
    """Map a client-side failure onto the JSON error envelope."""
    if isinstance(err, ValidationError):
        return ApiError(400, err.code, str(err))
    if isinstance(err, CartBusy):
        return ApiError(409, err.code, str(err))
    if isinstance(err, BackendError):
        return ApiError(502, err.code, err.message, {"backend_status": err.status_code})
    if isinstance(err, TransportError):
        return ApiError(504, err.code, err.message)
    return ApiError(500, err.code, str(err))
