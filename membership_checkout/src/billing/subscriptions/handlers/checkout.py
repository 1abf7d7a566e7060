"""
Checkout Handler

Builds Stripe checkout sessions for membership purchases.

Steps, in order:
- Service-region gate (before any catalog access)
- Plan, billing cycle and add-on validation
- Price resolution from the startup-validated catalog
- Deferral decision for add-ons on annual plans
- Session creation with metadata on the subscription for the webhook
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from membership_checkout.src.billing.domain import CheckoutMetadata, PurchaseIntent
from membership_checkout.src.billing.external.stripe import StripeAPIWrapper
from membership_checkout.src.billing.shared.config import AddOn, BillingConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutDraft:
    """
    Everything needed to create a checkout session.

    Attributes:
        intent: Validated purchase intent
        line_items: Stripe line items for the immediate subscription
        metadata: Metadata for the subscription the session creates
        deferred_addons: Add-ons left for the checkout-completed webhook
    """
    intent: PurchaseIntent
    line_items: List[Dict[str, object]]
    metadata: CheckoutMetadata
    deferred_addons: Tuple[AddOn, ...]

    @property
    def price_ids(self) -> List[str]:
        return [item['price'] for item in self.line_items]


class CheckoutSessionBuilder:
    """
    Turns a purchase request into a Stripe checkout session.

    Usage:
        builder = CheckoutSessionBuilder(config)
        result = await builder.create_checkout_session(
            plan='essence', billing_cycle='annual', addons=['nutrition'], region='WA'
        )
    """

    def __init__(self, config: BillingConfig):
        self.config = config

    def build(
        self,
        *,
        plan: Optional[str],
        billing_cycle: Optional[str],
        addons: Optional[Sequence[str]],
        region: Optional[str],
    ) -> CheckoutDraft:
        """
        Validate a request and decide what goes into the session.

        Raises:
            IneligibleRegionError: Region missing or not serviceable
            InvalidSelectionError: Unknown plan, cycle or add-on
            ConfigurationError: Catalog has no price for the selection
        """
        intent = PurchaseIntent.parse(
            plan=plan,
            billing_cycle=billing_cycle,
            addons=addons,
            region=region,
            service_regions=self.config.service_regions,
        )
        catalog = self.config.catalog

        # Resolve every price up front so a partial catalog can never
        # produce a session with missing items.
        base_price = catalog.plan_price(intent.plan, intent.cycle)
        selected = AddOn.canonical(intent.addons)
        addon_prices = [catalog.addon_price(addon) for addon in selected]

        line_items = [{'price': base_price, 'quantity': 1}]
        if intent.defers_addons:
            deferred = tuple(selected)
        else:
            deferred = ()
            line_items.extend({'price': price, 'quantity': 1} for price in addon_prices)

        return CheckoutDraft(
            intent=intent,
            line_items=line_items,
            metadata=CheckoutMetadata.for_intent(intent),
            deferred_addons=deferred,
        )

    async def create_checkout_session(
        self,
        *,
        plan: Optional[str],
        billing_cycle: Optional[str],
        addons: Optional[Sequence[str]],
        region: Optional[str],
    ) -> Dict[str, Optional[str]]:
        """
        Create Stripe checkout session for a membership.

        Returns:
            Dict with ``transactionId`` (session ID) and ``url``

        Raises:
            BillingValidationError: Request rejected
            ConfigurationError: Catalog incomplete
            UpstreamError: Stripe refused or failed
        """
        draft = self.build(plan=plan, billing_cycle=billing_cycle, addons=addons, region=region)
        intent = draft.intent

        logger.info(
            f"[CHECKOUT] plan={intent.plan.value} billing={intent.cycle.value} "
            f"region={intent.region} items={len(draft.line_items)} "
            f"deferred={','.join(a.value for a in draft.deferred_addons) or 'none'}"
        )

        session = await StripeAPIWrapper.create_checkout_session(
            mode='subscription',
            line_items=draft.line_items,
            success_url=self.config.success_url,
            cancel_url=self.config.cancel_url,
            billing_address_collection='required',
            allow_promotion_codes=True,
            subscription_data={'metadata': draft.metadata.to_stripe()},
        )

        logger.info(f"[CHECKOUT] Created checkout session {session['id']}")
        return {'transactionId': session['id'], 'url': session.get('url')}
