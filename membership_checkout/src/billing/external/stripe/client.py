"""
Stripe API Client Wrapper

Provides a single interface to the Stripe API for the billing flows.
All Stripe API calls should go through this wrapper so failures surface
as ``UpstreamError`` and responses come back as plain dicts.

Calls are never retried here. A failed call fails the request, and the
caller (the browser, or Stripe's webhook delivery) decides whether to try
again.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

import stripe

from membership_checkout.src.billing.shared.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def configure_stripe(secret_key: str, api_version: Optional[str] = None) -> None:
    """Set the process-wide Stripe credentials. Called once at startup."""
    stripe.api_key = secret_key
    if api_version:
        stripe.api_version = api_version


def to_plain(obj: Any) -> Any:
    """Convert a StripeObject (and anything nested in it) to plain dicts."""
    if isinstance(obj, stripe.StripeObject):
        return obj.to_dict()
    return obj


class StripeAPIWrapper:
    """
    Safe wrapper for Stripe API calls.

    All methods are async class methods that can be called directly:
        subscription = await StripeAPIWrapper.retrieve_subscription("sub_123")
    """

    @classmethod
    async def safe_stripe_call(cls, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a Stripe API call and normalize its result.

        Args:
            func: Async Stripe API function
            *args: Positional arguments
            **kwargs: Keyword arguments (request options such as
                ``idempotency_key`` included)

        Returns:
            Result from Stripe API as plain dicts

        Raises:
            UpstreamError: If Stripe rejects the request or cannot be reached
        """
        operation = getattr(func, '__qualname__', getattr(func, '__name__', 'stripe_call'))
        try:
            result = await func(*args, **kwargs)
        except stripe.StripeError as e:
            logger.error(
                f"[STRIPE CLIENT] {operation} failed: {type(e).__name__}: {e.user_message or e}"
                f" (request_id={e.request_id})"
            )
            raise UpstreamError(
                message=f"Stripe {operation} failed",
                operation=operation,
                stripe_error=str(e.user_message or e),
                http_status=e.http_status,
            ) from e
        return to_plain(result)

    # -------------------------------------------------------------------------
    # Customer Operations
    # -------------------------------------------------------------------------

    @classmethod
    async def retrieve_customer(cls, customer_id: str, **kwargs) -> Dict:
        """Retrieve a Stripe customer by ID."""
        return await cls.safe_stripe_call(stripe.Customer.retrieve_async, customer_id, **kwargs)

    # -------------------------------------------------------------------------
    # Subscription Operations
    # -------------------------------------------------------------------------

    @classmethod
    async def create_subscription(cls, **kwargs) -> Dict:
        """
        Create a new subscription.

        Pass ``idempotency_key`` to make the creation safe to repeat.
        """
        return await cls.safe_stripe_call(stripe.Subscription.create_async, **kwargs)

    @classmethod
    async def retrieve_subscription(cls, subscription_id: str, **kwargs) -> Dict:
        """Retrieve a subscription by ID."""
        return await cls.safe_stripe_call(stripe.Subscription.retrieve_async, subscription_id, **kwargs)

    @classmethod
    async def list_subscriptions(cls, **kwargs) -> Dict:
        """List subscriptions with optional filters (one page)."""
        return await cls.safe_stripe_call(stripe.Subscription.list_async, **kwargs)

    @classmethod
    async def list_customer_subscriptions(
        cls,
        customer_id: str,
        status: str = 'all',
        page_size: int = 100
    ) -> List[Dict]:
        """
        Every subscription of a customer, following pagination.

        Args:
            customer_id: Stripe customer ID
            status: Status filter ('all' includes canceled subscriptions)
            page_size: Page size (Stripe maximum is 100)
        """
        subscriptions: List[Dict] = []
        params = {'customer': customer_id, 'status': status, 'limit': page_size}

        while True:
            page = await cls.list_subscriptions(**params)
            data = page.get('data') or []
            subscriptions.extend(data)
            if not page.get('has_more') or not data:
                return subscriptions
            params['starting_after'] = data[-1]['id']

    # -------------------------------------------------------------------------
    # Checkout Session Operations
    # -------------------------------------------------------------------------

    @classmethod
    async def create_checkout_session(cls, **kwargs) -> Dict:
        """
        Create a Stripe Checkout session.

        Args:
            mode: 'subscription' or 'payment'
            line_items: List of items
            success_url: Redirect URL on success
            cancel_url: Redirect URL on cancel
            subscription_data: Settings for the created subscription (metadata)

        Returns:
            Checkout Session as a dict
        """
        return await cls.safe_stripe_call(stripe.checkout.Session.create_async, **kwargs)
