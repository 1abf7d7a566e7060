"""
Config Endpoints

Public Stripe configuration for the storefront.
"""

from typing import Dict

from fastapi import APIRouter, Depends

from membership_checkout.src.billing.shared.config import BillingConfig
from membership_checkout.src.billing.shared.exceptions import ConfigurationError
from .dependencies import get_billing_config

router = APIRouter(tags=["billing-config"])


@router.get("/config")
async def stripe_config(config: BillingConfig = Depends(get_billing_config)) -> Dict:
    """Publishable key for Stripe.js."""
    if not config.publishable_key:
        raise ConfigurationError("Missing STRIPE_PUBLISHABLE_KEY", missing=['STRIPE_PUBLISHABLE_KEY'])
    return {'publishableKey': config.publishable_key}
