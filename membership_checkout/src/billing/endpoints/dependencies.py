"""
Endpoint Dependencies

Shared dependencies for billing API endpoints.
"""

import logging

from fastapi import Depends, Request

from membership_checkout.src.billing.external.stripe import WebhookService
from membership_checkout.src.billing.shared.config import BillingConfig
from membership_checkout.src.billing.shared.exceptions import ConfigurationError
from membership_checkout.src.billing.subscriptions import CheckoutSessionBuilder

logger = logging.getLogger(__name__)


def get_billing_config(request: Request) -> BillingConfig:
    """
    Billing configuration validated by ``register_app``.

    This is a dependency that can be overridden in tests.
    """
    config = getattr(request.app.state, 'billing_config', None)
    if config is None:
        logger.error("[BILLING] Billing configuration was not loaded at startup")
        raise ConfigurationError("Billing configuration not loaded")
    return config


def get_checkout_builder(config: BillingConfig = Depends(get_billing_config)) -> CheckoutSessionBuilder:
    return CheckoutSessionBuilder(config)


def get_webhook_service(config: BillingConfig = Depends(get_billing_config)) -> WebhookService:
    return WebhookService(config)
