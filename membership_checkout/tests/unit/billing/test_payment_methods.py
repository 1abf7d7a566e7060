"""Tests for payment method resolution."""

import pytest

from membership_checkout.src.billing.external.stripe import (
    PaymentMethodContext,
    object_id,
    resolve_payment_method,
)
from membership_checkout.src.billing.shared.exceptions import NoPaymentMethodError


def test_object_id():
    assert object_id('pm_1') == 'pm_1'
    assert object_id({'id': 'pm_2', 'object': 'payment_method'}) == 'pm_2'
    assert object_id('') is None
    assert object_id(None) is None


class TestResolvePaymentMethod:
    @pytest.mark.asyncio
    async def test_subscription_default_wins(self, fake_stripe):
        ctx = PaymentMethodContext(
            subscription={
                'id': 'sub_1',
                'default_payment_method': {'id': 'pm_sub'},
                'customer': {'id': 'cus_1', 'invoice_settings': {'default_payment_method': 'pm_customer'}},
            },
            customer_id='cus_1',
        )

        assert await resolve_payment_method(ctx) == 'pm_sub'
        assert fake_stripe.calls == []

    @pytest.mark.asyncio
    async def test_expanded_customer_default(self, fake_stripe):
        ctx = PaymentMethodContext(
            subscription={
                'id': 'sub_1',
                'default_payment_method': None,
                'customer': {'id': 'cus_1', 'invoice_settings': {'default_payment_method': {'id': 'pm_customer'}}},
            },
            customer_id='cus_1',
        )

        assert await resolve_payment_method(ctx) == 'pm_customer'
        assert fake_stripe.calls == []

    @pytest.mark.asyncio
    async def test_fetches_customer_last(self, fake_stripe):
        fake_stripe.add_customer('cus_1', invoice_default='pm_fetched')
        ctx = PaymentMethodContext(
            subscription={'id': 'sub_1', 'default_payment_method': None, 'customer': 'cus_1'},
            customer_id='cus_1',
        )

        assert await resolve_payment_method(ctx) == 'pm_fetched'
        assert fake_stripe.calls_to('customer.retrieve') == [{'id': 'cus_1'}]

    @pytest.mark.asyncio
    async def test_nothing_found(self, fake_stripe):
        fake_stripe.add_customer('cus_1')
        ctx = PaymentMethodContext(subscription={'id': 'sub_1', 'customer': 'cus_1'}, customer_id='cus_1')

        with pytest.raises(NoPaymentMethodError) as exc_info:
            await resolve_payment_method(ctx)

        assert exc_info.value.customer_id == 'cus_1'
        assert exc_info.value.subscription_id == 'sub_1'
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_custom_resolver_order(self):
        called = []

        async def first(ctx):
            called.append('first')
            return None

        async def second(ctx):
            called.append('second')
            return 'pm_second'

        async def third(ctx):
            called.append('third')
            return 'pm_third'

        ctx = PaymentMethodContext(subscription={'id': 'sub_1'}, customer_id='cus_1')

        assert await resolve_payment_method(ctx, [first, second, third]) == 'pm_second'
        assert called == ['first', 'second']
