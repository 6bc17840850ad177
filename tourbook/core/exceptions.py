from typing import Any, Optional, Dict


class BaseError(Exception):
    """Base exception class for the application"""

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(BaseError):
    """Exception raised when an entity is not found"""

    def __init__(self, entity: str, id: Any):
        super().__init__(
            message=f"{entity} with id {id} not found",
            status_code=404,
            details={"entity": entity, "id": id}
        )


class ValidationError(BaseError):
    """Exception raised for validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class AuthenticationError(BaseError):
    """Exception raised for authentication errors"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message=message, status_code=401)


class AuthorizationError(BaseError):
    """Exception raised for authorization errors"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message=message, status_code=403)


class ConflictError(BaseError):
    """Exception raised for conflict errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=409, details=details)


class BusinessLogicError(BaseError):
    """Exception raised for business logic violations"""

    def __init__(self, message: str, rule: Optional[str] = None):
        details = {"rule": rule} if rule else {}
        super().__init__(
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(BaseError):
    """Exception raised when external service fails"""

    def __init__(self, service: str, message: str):
        super().__init__(
            message=f"External service error: {message}",
            status_code=503,
            details={"service": service}
        )


# ---------- Seat ledger errors ----------

class TourDateInactiveError(ConflictError):
    """Raised when booking against a tour date that is not ACTIVE"""

    def __init__(self, tour_date_id: Any):
        self.tour_date_id = tour_date_id
        super().__init__(
            f"Tour date {tour_date_id} is not open for booking",
            details={"tour_date_id": tour_date_id, "rule": "tour_date_active"}
        )


class CapacityExceededError(ConflictError):
    """Raised when a party does not fit in the remaining seats.

    Recoverable: ``available`` tells the caller how many seats are left, so
    the request can be retried with a smaller party.
    """

    def __init__(self, available: int):
        self.available = max(available, 0)
        super().__init__(
            "Not enough seats available",
            details={"available": self.available}
        )


class ConcurrencyConflictError(ConflictError):
    """Raised when the database aborts a reservation because of contention"""

    def __init__(self, message: str = "Concurrent booking conflict, please retry"):
        super().__init__(message, details={"retryable": True})


class InvalidStatusTransitionError(BusinessLogicError):
    """Raised for a payment status change outside the transition table"""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot change payment status from {current} to {requested}",
            rule="payment_status_transition"
        )
