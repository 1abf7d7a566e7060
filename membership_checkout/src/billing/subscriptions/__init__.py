"""
Subscription management: checkout session creation.
"""

from .handlers import CheckoutDraft, CheckoutSessionBuilder

__all__ = [
    'CheckoutDraft',
    'CheckoutSessionBuilder',
]
