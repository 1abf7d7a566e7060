"""
External payment provider integrations.
"""

from .stripe import (
    DeferredAddonHandler,
    StripeAPIWrapper,
    WebhookService,
    configure_stripe,
)

__all__ = [
    'DeferredAddonHandler',
    'StripeAPIWrapper',
    'WebhookService',
    'configure_stripe',
]
