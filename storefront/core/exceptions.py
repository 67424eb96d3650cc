from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Each subclass carries the HTTP status and a machine-readable ``kind`` so
    the API boundary can map it to a stable response without string matching.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    kind: str = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation_error"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class InsufficientStockError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    kind = "insufficient_stock"

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock: requested {requested}, available {available}"
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Access denied"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
