"""
Billing Endpoints Module

API routes for billing operations.

Routers:
- subscriptions: Membership checkout sessions
- webhooks: Stripe webhook processing
- config: Publishable Stripe configuration

Usage:
    from membership_checkout.src.billing.endpoints import billing_router

    app.include_router(billing_router, prefix="/api")
"""

from fastapi import APIRouter

from .config import router as config_router
from .dependencies import get_billing_config, get_checkout_builder, get_webhook_service
from .subscriptions import router as subscriptions_router
from .webhooks import router as webhooks_router

# Create main billing router
billing_router = APIRouter()

# Include all sub-routers
billing_router.include_router(subscriptions_router)
billing_router.include_router(webhooks_router)
billing_router.include_router(config_router)

__all__ = [
    'billing_router',
    'config_router',
    'subscriptions_router',
    'webhooks_router',
    'get_billing_config',
    'get_checkout_builder',
    'get_webhook_service',
]
