"""
Billing domain entities.
"""

from .outcome import SkipReason, WebhookOutcome
from .purchase import (
    DEFERRED_ADDONS_SOURCE,
    CheckoutMetadata,
    PurchaseIntent,
    decode_addons,
    encode_addons,
    is_deferred_addon_subscription_for,
)

__all__ = [
    'CheckoutMetadata',
    'DEFERRED_ADDONS_SOURCE',
    'PurchaseIntent',
    'SkipReason',
    'WebhookOutcome',
    'decode_addons',
    'encode_addons',
    'is_deferred_addon_subscription_for',
]
