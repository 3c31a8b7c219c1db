from typing import Optional, Any

class CartServiceError(Exception):
    """
    Base exception for the auth and cart service.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ValidationError(CartServiceError):
    """
    Raised when request input is missing or malformed.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)

class InvalidCredentialsError(CartServiceError):
    """
    Raised when a login code does not match, has expired or the email is unknown.
    """
    def __init__(self, message: str = "Invalid OTP", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_CREDENTIALS", status_code=400, details=details)

class UnauthorizedError(CartServiceError):
    """
    Raised when no session token was presented.
    """
    def __init__(self, message: str = "Access denied, no token provided", details: Optional[Any] = None):
        super().__init__(message, code="UNAUTHORIZED", status_code=401, details=details)

class InvalidTokenError(CartServiceError):
    """
    Raised when a session token fails signature, expiry or claim checks.
    """
    def __init__(self, message: str = "Invalid token", details: Optional[Any] = None):
        super().__init__(message, code="INVALID_TOKEN", status_code=400, details=details)

class NotFoundError(CartServiceError):
    """
    Raised when a user record or cart entry is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class ConflictError(CartServiceError):
    """
    Raised when a product is already present in the cart.
    """
    def __init__(self, message: str = "Product already in cart", details: Optional[Any] = None):
        super().__init__(message, code="CONFLICT", status_code=400, details=details)

class DependencyFailureError(CartServiceError):
    """
    Raised when the document store or the notifier is unreachable.
    """
    def __init__(self, message: str = "Dependency unavailable", details: Optional[Any] = None, code: str = "DEPENDENCY_FAILURE", status_code: int = 503):
        super().__init__(message, code=code, status_code=status_code, details=details)

class NotificationDeliveryError(DependencyFailureError):
    """
    Raised when a login code could not be delivered. The code stays stored.
    """
    def __init__(self, message: str = "Failed to send OTP", details: Optional[Any] = None):
        super().__init__(message, details=details, code="DELIVERY_FAILED", status_code=500)
