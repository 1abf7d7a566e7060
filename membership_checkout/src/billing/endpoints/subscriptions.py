"""
Subscription Endpoints

API endpoints for membership checkout.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from membership_checkout.src.billing.subscriptions import CheckoutSessionBuilder
from .dependencies import get_checkout_builder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["billing-subscriptions"])


# ============================================================================
# Request Models
# ============================================================================

class CreateCheckoutRequest(BaseModel):
    """
    Request for checkout session creation.

    Values stay loose strings here: the region gate has to run before plan
    validation, so enum parsing happens in the builder.
    """
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    plan: Optional[str] = None
    billing_cycle: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('billingCycle', 'billing'),
    )
    addons: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices('addOns', 'addons'),
    )
    region: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices('region', 'service_state'),
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/create-checkout-session")
async def create_checkout_session(
    request: CreateCheckoutRequest,
    builder: CheckoutSessionBuilder = Depends(get_checkout_builder),
) -> Dict:
    """
    Create Stripe checkout session for a membership.

    Annual plans with add-ons are sold without the add-ons; the
    checkout-completed webhook provisions them afterwards.
    """
    return await builder.create_checkout_session(
        plan=request.plan,
        billing_cycle=request.billing_cycle,
        addons=request.addons,
        region=request.region,
    )
