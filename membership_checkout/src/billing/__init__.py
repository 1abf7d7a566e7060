"""
Billing Module

Membership billing for the storefront, integrated with Stripe.

Submodules:
- shared: Catalog enums, price catalog, configuration, exceptions
- domain: Purchase intent, checkout metadata contract, webhook outcomes
- external: Stripe integration (API wrapper, webhooks, handlers)
- subscriptions: Checkout session creation
- endpoints: API routes

Usage:
    from membership_checkout.src.billing import (
        BillingConfig,
        CheckoutSessionBuilder,
        WebhookService,
    )
"""

# Shared configuration and exceptions
from .shared import (
    AddOn,
    BillingConfig,
    BillingCycle,
    Plan,
    PriceCatalog,
    BillingError,
    BillingValidationError,
    ConfigurationError,
    IneligibleRegionError,
    InvalidSelectionError,
    NoPaymentMethodError,
    UpstreamError,
    WebhookAuthenticationError,
)

# Domain entities
from .domain import (
    CheckoutMetadata,
    PurchaseIntent,
    SkipReason,
    WebhookOutcome,
)

# External integrations (Stripe)
from .external import (
    DeferredAddonHandler,
    StripeAPIWrapper,
    WebhookService,
    configure_stripe,
)

# Checkout
from .subscriptions import CheckoutDraft, CheckoutSessionBuilder

__all__ = [
    # Catalog / configuration
    'AddOn',
    'BillingConfig',
    'BillingCycle',
    'Plan',
    'PriceCatalog',
    # Exceptions
    'BillingError',
    'BillingValidationError',
    'ConfigurationError',
    'IneligibleRegionError',
    'InvalidSelectionError',
    'NoPaymentMethodError',
    'UpstreamError',
    'WebhookAuthenticationError',
    # Domain
    'CheckoutMetadata',
    'PurchaseIntent',
    'SkipReason',
    'WebhookOutcome',
    # Stripe
    'DeferredAddonHandler',
    'StripeAPIWrapper',
    'WebhookService',
    'configure_stripe',
    # Checkout
    'CheckoutDraft',
    'CheckoutSessionBuilder',
]
