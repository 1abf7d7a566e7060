"""Tests for checkout session building.

Tests cover:
- Region gate before catalog access
- Line items for monthly and annual plans
- Deferral of add-ons on annual plans
- Metadata on the created subscription
"""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest
import stripe

from membership_checkout.src.billing.shared.config import AddOn
from membership_checkout.src.billing.shared.exceptions import (
    ConfigurationError,
    IneligibleRegionError,
    InvalidSelectionError,
    UpstreamError,
)
from membership_checkout.src.billing.subscriptions import CheckoutSessionBuilder


class TestCheckoutDraft:
    """Tests for CheckoutSessionBuilder.build (no Stripe calls)."""

    def test_monthly_with_addons_single_subscription(self, billing_config):
        draft = CheckoutSessionBuilder(billing_config).build(
            plan='radiance', billing_cycle='monthly', addons=['skinhair', 'nutrition'], region='OR'
        )

        assert draft.price_ids == ['price_radiance_monthly', 'price_addon_nutrition', 'price_addon_skinhair']
        assert draft.deferred_addons == ()
        assert draft.metadata.to_stripe()['addons_deferred'] == 'false'
        assert draft.metadata.to_stripe()['addons'] == 'nutrition,skinhair'

    def test_annual_with_addons_defers_all(self, billing_config):
        draft = CheckoutSessionBuilder(billing_config).build(
            plan='essence', billing_cycle='annual', addons=['metabolic', 'nutrition'], region='WA'
        )

        assert draft.price_ids == ['price_essence_annual']
        assert draft.deferred_addons == (AddOn.NUTRITION, AddOn.METABOLIC)
        assert draft.metadata.to_stripe()['addons_deferred'] == 'true'

    def test_annual_without_addons(self, billing_config):
        draft = CheckoutSessionBuilder(billing_config).build(
            plan='essence', billing_cycle='annual', addons=None, region='WA'
        )

        assert draft.price_ids == ['price_essence_annual']
        assert draft.metadata.to_stripe()['addons'] == 'none'
        assert draft.metadata.to_stripe()['addons_deferred'] == 'false'

    def test_ineligible_region_touches_no_catalog(self, billing_config):
        catalog = MagicMock()
        builder = CheckoutSessionBuilder(replace(billing_config, catalog=catalog))

        with pytest.raises(IneligibleRegionError):
            builder.build(plan='essence', billing_cycle='monthly', addons=['nutrition'], region='CA')

        assert catalog.mock_calls == []

    def test_invalid_plan(self, billing_config):
        with pytest.raises(InvalidSelectionError):
            CheckoutSessionBuilder(billing_config).build(
                plan='gold', billing_cycle='monthly', addons=[], region='WA'
            )

    def test_missing_addon_price_fails_even_when_deferred(self, billing_config):
        addon_prices = dict(billing_config.catalog.addon_prices)
        del addon_prices[AddOn.SEXUAL]
        catalog = replace(billing_config.catalog, addon_prices=addon_prices)
        builder = CheckoutSessionBuilder(replace(billing_config, catalog=catalog))

        with pytest.raises(ConfigurationError):
            builder.build(plan='essence', billing_cycle='annual', addons=['sexual'], region='WA')


class TestCreateCheckoutSession:
    """Tests for CheckoutSessionBuilder.create_checkout_session."""

    @pytest.mark.asyncio
    async def test_creates_subscription_session(self, billing_config, fake_stripe):
        result = await CheckoutSessionBuilder(billing_config).create_checkout_session(
            plan='essence', billing_cycle='annual', addons=['nutrition'], region='wa'
        )

        [params] = fake_stripe.calls_to('checkout.create')
        assert result == {'transactionId': 'cs_test_0001', 'url': 'https://checkout.stripe.com/c/pay/cs_test_0001'}
        assert params['mode'] == 'subscription'
        assert params['line_items'] == [{'price': 'price_essence_annual', 'quantity': 1}]
        assert params['success_url'] == 'https://shop.example.com/success.html?session_id={CHECKOUT_SESSION_ID}'
        assert params['cancel_url'] == 'https://shop.example.com/cancel.html'
        assert params['billing_address_collection'] == 'required'
        assert params['allow_promotion_codes'] is True
        assert params['subscription_data']['metadata'] == {
            'plan': 'Essence',
            'billing': 'Annual',
            'addons': 'nutrition',
            'addons_deferred': 'true',
            'service_state': 'WA',
            'state_attestation': 'true',
        }

    @pytest.mark.asyncio
    async def test_rejected_request_makes_no_stripe_call(self, billing_config, fake_stripe):
        with pytest.raises(IneligibleRegionError):
            await CheckoutSessionBuilder(billing_config).create_checkout_session(
                plan='essence', billing_cycle='annual', addons=[], region='NY'
            )

        assert fake_stripe.calls == []

    @pytest.mark.asyncio
    async def test_stripe_failure_surfaces_as_upstream_error(self, billing_config, fake_stripe):
        fake_stripe.fail('checkout.create', stripe.APIConnectionError('Network down'))

        with pytest.raises(UpstreamError) as exc_info:
            await CheckoutSessionBuilder(billing_config).create_checkout_session(
                plan='essence', billing_cycle='monthly', addons=[], region='WA'
            )

        assert exc_info.value.status_code == 500
        assert exc_info.value.to_dict() == {'error': 'Payment processor error', 'code': 'UPSTREAM_ERROR'}
