from typing import Optional, Any

class StorefrontError(Exception):
    """
    Base exception for the storefront application.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class BadRequestError(StorefrontError):
    """
    Raised when a request breaks a business rule (empty cart, expired coupon, ...).
    """
    def __init__(self, message: str = "Bad request", details: Optional[Any] = None):
        super().__init__(message, code="BAD_REQUEST", status_code=400, details=details)

class AuthenticationError(StorefrontError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)

class PermissionDeniedError(StorefrontError):
    """
    Raised when an authenticated user lacks the required role or ownership.
    """
    def __init__(self, message: str = "Forbidden", details: Optional[Any] = None):
        super().__init__(message, code="FORBIDDEN", status_code=403, details=details)

class ResourceNotFoundError(StorefrontError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)

class ExternalServiceError(StorefrontError):
    """
    Raised when an external service (e-mail, image CDN, OAuth) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)

class PaymentGatewayError(ExternalServiceError):
    """
    Raised when the payment gateway rejects or fails a request.
    """
    def __init__(self, message: str = "Payment gateway error", details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.code = "PAYMENT_GATEWAY_ERROR"
