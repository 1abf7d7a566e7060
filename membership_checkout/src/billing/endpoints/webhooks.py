"""
Webhook Endpoints

Stripe webhook endpoint for processing billing events.
"""

import logging

from fastapi import APIRouter, Depends, Request

from membership_checkout.src.billing.external.stripe import WebhookService
from .dependencies import get_webhook_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["billing-webhooks"])


@router.post("/webhooks")
async def stripe_webhook(
    request: Request,
    webhook_service: WebhookService = Depends(get_webhook_service),
):
    """
    Process Stripe webhook events.

    Handles:
    - checkout.session.completed (deferred add-on provisioning)

    Other event types are acknowledged and ignored.
    """
    # Raw bytes: parsing first would break the signature
    payload = await request.body()
    return await webhook_service.process_stripe_webhook(
        payload, request.headers.get('stripe-signature')
    )
