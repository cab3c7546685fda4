class StorefrontError(Exception):
    """Base exception for the storefront backend."""

    pass


class ContentBackendError(StorefrontError):
    """Raised when the content backend rejects a request or is unreachable."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PaymentGatewayError(StorefrontError):
    """Raised when a payment processor API call fails."""

    pass


class WebhookError(StorefrontError):
    """Base for errors returned to the payment processor as ``{"error": ...}``."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidSignature(WebhookError):
    """Raised when the signature header is missing or does not match the body."""

    pass


class ConfigurationError(WebhookError):
    """Raised when the webhook signing secret is not configured."""

    pass


class MalformedMetadata(WebhookError):
    """Raised when a checkout session or its metadata fails schema validation."""

    def __init__(self, message: str, errors: list | None = None):
        self.errors = errors or []
        super().__init__(message)


class MaterializationFailure(WebhookError):
    """Raised when an order document could not be created for a session."""

    status_code = 500

    def __init__(self, session_id: str, cause: Exception):
        self.session_id = session_id
        self.cause = cause
        super().__init__("error creating order")
