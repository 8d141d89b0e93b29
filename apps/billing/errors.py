from typing import Any, Dict, Optional


class BillingError(Exception):
    """Base class for errors that are turned into a structured HTTP response.

    Subclasses set `status_code`; the handler registered in `main.py` renders
    `{"message": ...}` for client errors and `{"error": ...}` for server errors.
    """

    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> Dict[str, Any]:
        key = "message" if self.status_code < 500 else "error"
        payload: Dict[str, Any] = {key: self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(BillingError):
    status_code = 400


class NotFoundError(BillingError):
    status_code = 404


class ConflictError(BillingError):
    status_code = 409


class StoreUnavailableError(BillingError):
    status_code = 503

    def __init__(self, message: str = "Store unavailable", **kwargs):
        super().__init__(message, **kwargs)


class InvariantViolation(BillingError):
    # raised when a persisted invoice breaks left == total - paid
    status_code = 500
