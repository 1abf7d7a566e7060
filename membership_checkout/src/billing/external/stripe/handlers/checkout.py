"""
Checkout Session Webhook Handler

Handles checkout.session.completed for membership purchases.

Annual memberships are sold without their add-ons (an annual price cannot
share a subscription with monthly add-on prices). When such a checkout
completes, this handler creates a second, monthly subscription for the
deferred add-ons, charged to the payment method the customer just used.

Stripe delivers webhooks at least once, and redeliveries may arrive
concurrently. Two mechanisms keep the add-on subscription unique:

1. A scan of the customer's subscriptions for one already linked to this
   checkout. This is only a fast path, since two deliveries can both pass
   it before either creates anything.
2. A deterministic idempotency key on the create call. This is the actual
   guarantee: Stripe answers every repeat of the key with the first
   subscription instead of creating another.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from membership_checkout.src.billing.domain import (
    CheckoutMetadata,
    SkipReason,
    WebhookOutcome,
    is_deferred_addon_subscription_for,
)
from membership_checkout.src.billing.shared.config import BillingConfig
from ..client import StripeAPIWrapper
from ..idempotency import generate_deferred_addons_idempotency_key
from ..payment_methods import (
    DEFAULT_RESOLVERS,
    PaymentMethodContext,
    PaymentMethodResolver,
    object_id,
    resolve_payment_method,
)

logger = logging.getLogger(__name__)


class DeferredAddonHandler:
    """
    Provisions deferred add-ons after a checkout completes.

    Usage:
        handler = DeferredAddonHandler(config)
        outcome = await handler.handle_checkout_completed(session)
    """

    def __init__(
        self,
        config: BillingConfig,
        payment_method_resolvers: Sequence[PaymentMethodResolver] = DEFAULT_RESOLVERS,
    ):
        self.config = config
        self.payment_method_resolvers = payment_method_resolvers

    async def handle_checkout_completed(self, session: Dict[str, Any]) -> WebhookOutcome:
        """
        Handle checkout.session.completed event data.

        Args:
            session: The completed Checkout Session (``event.data.object``)

        Returns:
            Terminal classification of the delivery

        Raises:
            ConfigurationError: Add-on price missing from the catalog
            NoPaymentMethodError: Nothing to charge the add-ons to
            UpstreamError: A Stripe call failed
        """
        session_id = session.get('id')
        subscription_id = object_id(session.get('subscription'))
        customer_id = object_id(session.get('customer'))

        if not subscription_id or not customer_id:
            logger.info(f"[DEFERRED ADDONS] Session {session_id} has no subscription/customer, skipping")
            return WebhookOutcome.skip(SkipReason.NOT_A_SUBSCRIPTION)

        # Session metadata in the event may be stale or abbreviated; the
        # subscription carries the authoritative copy.
        base_subscription = await StripeAPIWrapper.retrieve_subscription(
            subscription_id,
            expand=['default_payment_method', 'customer'],
        )
        metadata = CheckoutMetadata.from_stripe(base_subscription.get('metadata'))
        addons = metadata.pending_addons

        if not addons:
            logger.info(f"[DEFERRED ADDONS] Nothing deferred on {subscription_id}")
            return WebhookOutcome.skip(SkipReason.NOTHING_DEFERRED)

        # Resolve prices before touching anything else
        items = [
            {'price': self.config.catalog.addon_price(addon), 'quantity': 1}
            for addon in addons
        ]

        customer_id = object_id(base_subscription.get('customer')) or customer_id

        existing_id = await self._find_existing_addon_subscription(
            customer_id, session_id, subscription_id
        )
        if existing_id:
            logger.info(
                f"[DEFERRED ADDONS] Add-on subscription {existing_id} already exists for {subscription_id}"
            )
            return WebhookOutcome.skip(SkipReason.ALREADY_PROVISIONED, existing_id)

        payment_method_id = await resolve_payment_method(
            PaymentMethodContext(subscription=base_subscription, customer_id=customer_id),
            self.payment_method_resolvers,
        )

        addon_subscription = await StripeAPIWrapper.create_subscription(
            customer=customer_id,
            default_payment_method=payment_method_id,
            items=items,
            metadata=metadata.to_addon_subscription(
                parent_transaction_id=session_id,
                parent_subscription_id=subscription_id,
            ),
            idempotency_key=generate_deferred_addons_idempotency_key(session_id),
        )

        logger.info(
            f"[DEFERRED ADDONS] Created add-on subscription {addon_subscription['id']} "
            f"({', '.join(a.value for a in addons)}) for {subscription_id}"
        )
        return WebhookOutcome.provisioned(addon_subscription['id'])

    async def _find_existing_addon_subscription(
        self,
        customer_id: str,
        session_id: str,
        subscription_id: str
    ) -> Optional[str]:
        """ID of an add-on subscription already linked to this checkout, if any."""
        subscriptions = await StripeAPIWrapper.list_customer_subscriptions(
            customer_id,
            status='all',
            page_size=self.config.list_page_size,
        )
        for candidate in subscriptions:
            if is_deferred_addon_subscription_for(
                candidate.get('metadata'),
                transaction_id=session_id,
                subscription_id=subscription_id,
            ):
                return candidate.get('id')
        return None
