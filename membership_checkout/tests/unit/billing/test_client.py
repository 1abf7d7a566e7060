"""Tests for the Stripe API wrapper and idempotency keys."""

import pytest
import stripe

from membership_checkout.src.billing.external.stripe import (
    StripeAPIWrapper,
    generate_deferred_addons_idempotency_key,
    generate_idempotency_key,
    to_plain,
)
from membership_checkout.src.billing.shared.exceptions import UpstreamError


class TestSafeStripeCall:
    @pytest.mark.asyncio
    async def test_stripe_error_becomes_upstream_error(self):
        async def retrieve(subscription_id):
            raise stripe.InvalidRequestError(
                "No such subscription: 'sub_x'", 'id', http_status=404, headers={'request-id': 'req_1'}
            )

        with pytest.raises(UpstreamError) as exc_info:
            await StripeAPIWrapper.safe_stripe_call(retrieve, 'sub_x')

        error = exc_info.value
        assert error.http_status == 404
        assert error.stripe_error == "No such subscription: 'sub_x'"
        assert 'retrieve' in error.operation
        assert isinstance(error.__cause__, stripe.InvalidRequestError)

    @pytest.mark.asyncio
    async def test_other_errors_propagate_unchanged(self):
        async def broken():
            raise RuntimeError('bug')

        with pytest.raises(RuntimeError):
            await StripeAPIWrapper.safe_stripe_call(broken)

    @pytest.mark.asyncio
    async def test_result_converted_to_plain_dict(self):
        async def retrieve(subscription_id):
            return stripe.StripeObject.construct_from(
                {'id': subscription_id, 'metadata': {'plan': 'Essence'}}, 'sk_test_123'
            )

        result = await StripeAPIWrapper.safe_stripe_call(retrieve, 'sub_1')

        assert result == {'id': 'sub_1', 'metadata': {'plan': 'Essence'}}
        assert isinstance(result['metadata'], dict)


def test_to_plain_passes_through_plain_values():
    assert to_plain({'id': 'x'}) == {'id': 'x'}
    assert to_plain(None) is None


class TestListCustomerSubscriptions:
    @pytest.mark.asyncio
    async def test_follows_pagination(self, fake_stripe):
        for i in range(5):
            fake_stripe.add_subscription(f'sub_{i}', 'cus_1', status='canceled' if i % 2 else 'active')
        fake_stripe.add_subscription('sub_someone_else', 'cus_2')

        subscriptions = await StripeAPIWrapper.list_customer_subscriptions('cus_1', page_size=2)

        assert [s['id'] for s in subscriptions] == ['sub_0', 'sub_1', 'sub_2', 'sub_3', 'sub_4']
        pages = fake_stripe.calls_to('subscription.list')
        assert len(pages) == 3
        assert pages[0] == {'customer': 'cus_1', 'status': 'all', 'limit': 2}
        assert pages[1]['starting_after'] == 'sub_1'

    @pytest.mark.asyncio
    async def test_no_subscriptions(self, fake_stripe):
        assert await StripeAPIWrapper.list_customer_subscriptions('cus_none') == []


class TestIdempotencyKeys:
    def test_deterministic(self):
        assert generate_deferred_addons_idempotency_key('cs_123') == 'deferred-addons-cs_123'
        assert generate_deferred_addons_idempotency_key('cs_123') == generate_deferred_addons_idempotency_key('cs_123')

    def test_oversized_key_hashed(self):
        key = generate_idempotency_key('deferred-addons', 'cs_' + 'x' * 300)

        assert len(key) <= 255
        assert key == generate_idempotency_key('deferred-addons', 'cs_' + 'x' * 300)
        assert key != generate_idempotency_key('deferred-addons', 'cs_' + 'y' * 300)

    def test_requires_object_id(self):
        with pytest.raises(ValueError):
            generate_idempotency_key('deferred-addons', '')
