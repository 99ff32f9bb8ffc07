from fastapi import HTTPException, status
from typing import Any, List, Optional


class ProductNotFound(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found"
        )


class SavedCartNotFound(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cart not found"
        )


class EmptyBag(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Your bag is empty"
        )


class APIError(Exception):
    def __init__(self, status_code: int, message: str, errors: Optional[List[Any]] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class OrderSubmissionFailed(APIError):
    """Order could not be recorded; the bag is left as it was so the shopper can retry."""

    def __init__(self, reason: str = ""):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            message="Order processing failed. Please try again.",
            errors=[{"reason": reason, "retryable": True}] if reason else [{"retryable": True}],
        )
