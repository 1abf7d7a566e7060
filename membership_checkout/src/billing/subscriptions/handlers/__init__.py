"""
Subscription Handlers
"""

from .checkout import CheckoutDraft, CheckoutSessionBuilder

__all__ = [
    'CheckoutDraft',
    'CheckoutSessionBuilder',
]
