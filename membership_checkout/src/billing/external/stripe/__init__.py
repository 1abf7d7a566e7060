"""
Stripe Integration Module

Provides the Stripe integration for membership billing:
- API wrapper returning plain dicts and raising UpstreamError
- Deterministic idempotency key generation
- Payment method resolution for off-session charges
- Webhook verification and event handlers

Usage:
    from membership_checkout.src.billing.external.stripe import (
        StripeAPIWrapper,
        WebhookService,
    )

    session = await StripeAPIWrapper.create_checkout_session(
        mode='subscription',
        line_items=[{'price': 'price_xxx', 'quantity': 1}],
        success_url='https://example.com/success',
        cancel_url='https://example.com/cancel',
    )
"""

from .client import (
    StripeAPIWrapper,
    configure_stripe,
    to_plain,
)

from .idempotency import (
    generate_idempotency_key,
    generate_deferred_addons_idempotency_key,
)

from .payment_methods import (
    DEFAULT_RESOLVERS,
    PaymentMethodContext,
    from_expanded_customer,
    from_fetched_customer,
    from_subscription_default,
    object_id,
    resolve_payment_method,
)

from .webhooks import (
    CHECKOUT_COMPLETED,
    WebhookService,
)

from .handlers import DeferredAddonHandler

__all__ = [
    # API Client
    'StripeAPIWrapper',
    'configure_stripe',
    'to_plain',
    # Idempotency
    'generate_idempotency_key',
    'generate_deferred_addons_idempotency_key',
    # Payment methods
    'DEFAULT_RESOLVERS',
    'PaymentMethodContext',
    'from_expanded_customer',
    'from_fetched_customer',
    'from_subscription_default',
    'object_id',
    'resolve_payment_method',
    # Webhook Service
    'CHECKOUT_COMPLETED',
    'WebhookService',
    # Handlers
    'DeferredAddonHandler',
]
