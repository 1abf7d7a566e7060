"""
Stripe Webhook Service

Central dispatcher for Stripe webhook events.
Handles signature verification and routing to handlers.

The signature is the only trust boundary: nothing in a delivery is read
before ``stripe.Webhook.construct_event`` has verified the raw bytes.
"""

import logging
from typing import Any, Dict, Optional

import stripe

from membership_checkout.src.billing.shared.config import BillingConfig
from membership_checkout.src.billing.shared.exceptions import (
    BillingValidationError,
    ConfigurationError,
    WebhookAuthenticationError,
)
from .client import to_plain
from .handlers.checkout import DeferredAddonHandler

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = 'checkout.session.completed'


class WebhookService:
    """
    Central service for processing Stripe webhooks.

    Responsibilities:
    - Verify webhook signatures
    - Route events to appropriate handlers
    - Acknowledge event types we do not act on

    Errors are not swallowed: any failure after verification propagates so
    the endpoint answers 5xx and Stripe redelivers the event.

    Usage:
        webhook_service = WebhookService(config)
        result = await webhook_service.process_stripe_webhook(payload, sig_header)
    """

    def __init__(self, config: BillingConfig, checkout_handler: DeferredAddonHandler = None):
        self.config = config
        self.checkout_handler = checkout_handler or DeferredAddonHandler(config)

    def construct_event(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Verify a delivery and parse it into a plain event dict.

        Raises:
            ConfigurationError: Signing secret not configured
            WebhookAuthenticationError: Signature missing or invalid
            BillingValidationError: Signed body is not a valid event
        """
        if not self.config.webhook_secret:
            logger.error("[WEBHOOK] STRIPE_WEBHOOK_SECRET not configured")
            raise ConfigurationError("Webhook secret not configured", missing=['STRIPE_WEBHOOK_SECRET'])

        if not sig_header:
            logger.warning("[WEBHOOK] Missing stripe-signature header")
            raise WebhookAuthenticationError("Missing stripe-signature header", reason='missing_signature')

        try:
            event = stripe.Webhook.construct_event(
                payload,
                sig_header,
                self.config.webhook_secret,
                tolerance=self.config.webhook_tolerance,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"[WEBHOOK] Invalid signature: {e.user_message or e}")
            raise WebhookAuthenticationError("Invalid webhook signature", reason='invalid_signature')
        except ValueError as e:
            logger.warning(f"[WEBHOOK] Invalid payload: {e}")
            raise BillingValidationError("Invalid payload", code="INVALID_PAYLOAD")

        return to_plain(event)

    async def process_stripe_webhook(self, payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
        """
        Process an incoming Stripe webhook.

        Args:
            payload: Raw, unparsed request body
            sig_header: Stripe-Signature header value

        Returns:
            Dict with ``received`` and the classification
        """
        event = self.construct_event(payload, sig_header)
        event_id = event.get('id')
        event_type = event.get('type')

        logger.info(f"[WEBHOOK] Processing event type: {event_type} (ID: {event_id})")

        if event_type == CHECKOUT_COMPLETED:
            session = (event.get('data') or {}).get('object') or {}
            outcome = await self.checkout_handler.handle_checkout_completed(session)
            return outcome.to_response()

        logger.info(f"[WEBHOOK] Unhandled event type: {event_type}")
        return {'received': True, 'ignored': event_type}
