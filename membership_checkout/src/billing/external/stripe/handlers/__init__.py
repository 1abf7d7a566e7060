"""
Stripe Webhook Event Handlers
"""

from .checkout import DeferredAddonHandler

__all__ = [
    'DeferredAddonHandler',
]
