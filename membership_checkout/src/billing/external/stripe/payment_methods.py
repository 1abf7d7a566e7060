"""
Payment Method Resolution

Finds a payment method that an add-on subscription can be charged to
without sending the customer through checkout again.

Resolution is an ordered list of strategies; the first one that yields a
payment method wins. Each strategy is a small async callable so the policy
can be tested and reordered independently.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from membership_checkout.src.billing.shared.exceptions import NoPaymentMethodError
from .client import StripeAPIWrapper

logger = logging.getLogger(__name__)


def object_id(value: Any) -> Optional[str]:
    """ID of a Stripe reference that may be a bare ID or an expanded object."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get('id') or None
    return None


def _invoice_default(customer: Any) -> Optional[str]:
    if not isinstance(customer, dict):
        return None
    invoice_settings = customer.get('invoice_settings') or {}
    return object_id(invoice_settings.get('default_payment_method'))


@dataclass(frozen=True)
class PaymentMethodContext:
    """
    What the resolvers may look at.

    Attributes:
        subscription: Base subscription, ideally retrieved with
            ``default_payment_method`` and ``customer`` expanded
        customer_id: Stripe customer ID
    """
    subscription: Dict[str, Any]
    customer_id: str


PaymentMethodResolver = Callable[[PaymentMethodContext], Awaitable[Optional[str]]]


async def from_subscription_default(ctx: PaymentMethodContext) -> Optional[str]:
    """The payment method attached to the base subscription itself."""
    return object_id(ctx.subscription.get('default_payment_method'))


async def from_expanded_customer(ctx: PaymentMethodContext) -> Optional[str]:
    """The customer's invoice default, when the customer came back expanded."""
    return _invoice_default(ctx.subscription.get('customer'))


async def from_fetched_customer(ctx: PaymentMethodContext) -> Optional[str]:
    """The customer's invoice default from a fresh customer fetch."""
    customer = await StripeAPIWrapper.retrieve_customer(ctx.customer_id)
    return _invoice_default(customer)


DEFAULT_RESOLVERS: Sequence[PaymentMethodResolver] = (
    from_subscription_default,
    from_expanded_customer,
    from_fetched_customer,
)


async def resolve_payment_method(
    ctx: PaymentMethodContext,
    resolvers: Sequence[PaymentMethodResolver] = DEFAULT_RESOLVERS,
) -> str:
    """
    Try each resolver in order and return the first payment method found.

    Raises:
        NoPaymentMethodError: If no resolver finds one
    """
    for resolver in resolvers:
        payment_method_id = await resolver(ctx)
        if payment_method_id:
            logger.debug(f"[PAYMENT METHOD] {resolver.__name__} -> {payment_method_id}")
            return payment_method_id

    logger.error(f"[PAYMENT METHOD] No default payment method for customer {ctx.customer_id}")
    raise NoPaymentMethodError(ctx.customer_id, subscription_id=ctx.subscription.get('id'))
