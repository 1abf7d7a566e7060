"""
Billing Exceptions

Custom exception classes for billing-related errors.
These provide structured error handling across the billing module and
carry the HTTP status the endpoint layer answers with.

Client errors (4xx) report their own message. Server errors (5xx) answer
with a generic ``public_message`` and keep the detail for the logs.
"""

from typing import Iterable, Optional


class BillingError(Exception):
    """
    Base exception for all billing-related errors.

    All billing exceptions inherit from this class, allowing for
    broad exception handling when needed.
    """

    status_code: int = 500
    public_message: Optional[str] = None

    def __init__(self, message: str, code: str = "BILLING_ERROR", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        if self.is_client_error or not self.public_message:
            message = self.message
        else:
            message = self.public_message
        return {
            'error': message,
            'code': self.code,
        }


# =============================================================================
# CLIENT ERRORS
# =============================================================================

class BillingValidationError(BillingError):
    """
    Raised when a client request cannot be accepted as sent.

    Never retried by the service itself.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request",
        code: str = "VALIDATION_ERROR",
        details: dict = None
    ):
        super().__init__(message=message, code=code, details=details)


class InvalidSelectionError(BillingValidationError):
    """
    Raised for an unknown plan, billing cycle or add-on.

    Attributes:
        field: Request field that failed
        value: Value as received
    """

    def __init__(
        self,
        message: str = "Invalid plan or billing option.",
        field: str = None,
        value: object = None
    ):
        details = {}
        if field:
            details['field'] = field
            details['value'] = value
        super().__init__(message=message, code="INVALID_SELECTION", details=details)
        self.field = field
        self.value = value


class IneligibleRegionError(BillingValidationError):
    """Raised when the customer is outside the serviceable regions."""

    def __init__(self, region: Optional[str], service_regions: Iterable[str]):
        regions = sorted(service_regions)
        super().__init__(
            message=f"Care is currently provided only in {' and '.join(regions)}.",
            code="INELIGIBLE_REGION",
            details={'region': region, 'service_regions': regions}
        )
        self.region = region


class WebhookAuthenticationError(BillingError):
    """
    Raised when a webhook delivery cannot be proven to come from Stripe.

    Examples:
        - Missing Stripe-Signature header
        - Signature mismatch
        - Timestamp outside the tolerance window
    """

    status_code = 400

    def __init__(self, message: str = "Invalid webhook signature", reason: str = None):
        super().__init__(
            message=message,
            code="WEBHOOK_AUTHENTICATION_FAILED",
            details={'reason': reason} if reason else {}
        )
        self.reason = reason


# =============================================================================
# SERVER ERRORS
# =============================================================================

class ConfigurationError(BillingError):
    """
    Raised when required configuration is missing or incomplete.

    Operator-fixable. Raised at startup wherever possible so that a
    misconfigured service never accepts traffic.
    """

    public_message = "Server misconfigured"

    def __init__(self, message: str = "Billing configuration error", missing: Iterable[str] = ()):
        missing = list(missing)
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={'missing': missing} if missing else {}
        )
        self.missing = missing


class UpstreamError(BillingError):
    """
    Raised when a Stripe API call fails or times out.

    Not retried internally; the caller (browser or Stripe's webhook
    delivery) owns the retry.
    """

    public_message = "Payment processor error"

    def __init__(
        self,
        message: str = "Stripe request failed",
        operation: str = None,
        stripe_error: str = None,
        http_status: int = None
    ):
        details = {}
        if operation:
            details['operation'] = operation
        if stripe_error:
            details['stripe_error'] = stripe_error
        if http_status:
            details['http_status'] = http_status

        super().__init__(message=message, code="UPSTREAM_ERROR", details=details)
        self.operation = operation
        self.stripe_error = stripe_error
        self.http_status = http_status


class NoPaymentMethodError(BillingError):
    """Raised when no reusable payment method can be found for a customer."""

    public_message = "No default payment method available for add-on subscription."

    def __init__(self, customer_id: str, subscription_id: str = None):
        super().__init__(
            message=f"No default payment method found for customer {customer_id}",
            code="NO_PAYMENT_METHOD",
            details={'customer_id': customer_id, 'subscription_id': subscription_id}
        )
        self.customer_id = customer_id
        self.subscription_id = subscription_id
