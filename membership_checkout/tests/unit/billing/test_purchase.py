"""Tests for purchase intents and the checkout metadata contract."""

import pytest

from membership_checkout.src.billing.domain import (
    CheckoutMetadata,
    PurchaseIntent,
    SkipReason,
    WebhookOutcome,
    decode_addons,
    encode_addons,
    is_deferred_addon_subscription_for,
)
from membership_checkout.src.billing.shared.config import AddOn, BillingCycle, Plan
from membership_checkout.src.billing.shared.exceptions import (
    ConfigurationError,
    IneligibleRegionError,
    InvalidSelectionError,
)

REGIONS = frozenset({'WA', 'OR'})


def parse(**kwargs) -> PurchaseIntent:
    values = {'plan': 'essence', 'billing_cycle': 'annual', 'addons': [], 'region': 'WA'}
    values.update(kwargs)
    return PurchaseIntent.parse(service_regions=REGIONS, **values)


class TestPurchaseIntent:
    def test_parse(self):
        intent = parse(plan='Radiance', billing_cycle='monthly', addons=['sexual', 'nutrition'], region='or')

        assert intent.plan is Plan.RADIANCE
        assert intent.cycle is BillingCycle.MONTHLY
        assert intent.addons == frozenset({AddOn.SEXUAL, AddOn.NUTRITION})
        assert intent.region == 'OR'

    @pytest.mark.parametrize('region', [None, '', 'CA', 'washington'])
    def test_region_gate(self, region):
        with pytest.raises(IneligibleRegionError) as exc_info:
            parse(region=region)
        assert exc_info.value.message == 'Care is currently provided only in OR and WA.'

    def test_region_gate_runs_before_plan_validation(self):
        with pytest.raises(IneligibleRegionError):
            parse(plan='platinum', region='TX')

    def test_unknown_addon(self):
        with pytest.raises(InvalidSelectionError) as exc_info:
            parse(addons=['nutrition', 'yoga'])
        assert exc_info.value.field == 'addOns'

    @pytest.mark.parametrize(
        ('cycle', 'addons', 'expected'),
        [
            ('annual', ['nutrition'], True),
            ('annual', [], False),
            ('monthly', ['nutrition'], False),
            ('monthly', [], False),
        ],
    )
    def test_defers_addons(self, cycle, addons, expected):
        assert parse(billing_cycle=cycle, addons=addons).defers_addons is expected


class TestAddonEncoding:
    def test_encode(self):
        assert encode_addons([AddOn.SKINHAIR, AddOn.NUTRITION]) == 'nutrition,skinhair'
        assert encode_addons([]) == 'none'

    def test_decode_is_tolerant(self):
        assert decode_addons(' Metabolic , nutrition,,metabolic ') == (AddOn.NUTRITION, AddOn.METABOLIC)
        assert decode_addons('none') == ()
        assert decode_addons(None) == ()

    def test_decode_unknown_key(self):
        with pytest.raises(ConfigurationError):
            decode_addons('nutrition,yoga')


class TestCheckoutMetadata:
    def test_annual_with_addons(self):
        intent = parse(addons=['metabolic', 'nutrition'])
        metadata = CheckoutMetadata.for_intent(intent).to_stripe()

        assert metadata == {
            'plan': 'Essence',
            'billing': 'Annual',
            'addons': 'nutrition,metabolic',
            'addons_deferred': 'true',
            'service_state': 'WA',
            'state_attestation': 'true',
        }

    def test_round_trip(self):
        original = CheckoutMetadata.for_intent(parse(addons=['skinhair', 'sexual']))
        restored = CheckoutMetadata.from_stripe(original.to_stripe())

        assert restored == original
        assert restored.pending_addons == (AddOn.SEXUAL, AddOn.SKINHAIR)

    def test_monthly_has_nothing_pending(self):
        metadata = CheckoutMetadata.for_intent(parse(billing_cycle='monthly', addons=['nutrition']))

        assert metadata.to_stripe()['addons_deferred'] == 'false'
        assert metadata.pending_addons == ()

    def test_from_empty_metadata(self):
        metadata = CheckoutMetadata.from_stripe(None)
        assert metadata.pending_addons == ()
        assert metadata.state_attestation is False

    def test_addon_subscription_metadata(self):
        metadata = CheckoutMetadata.for_intent(parse(addons=['nutrition']))
        child = metadata.to_addon_subscription(parent_transaction_id='cs_1', parent_subscription_id='sub_1')

        assert child['source'] == 'deferred-addons'
        assert child['parent_transaction_id'] == 'cs_1'
        assert child['parent_subscription_id'] == 'sub_1'
        assert child['addons'] == 'nutrition'
        assert 'addons_deferred' not in child
        assert is_deferred_addon_subscription_for(child, transaction_id='cs_1', subscription_id='sub_other')
        assert is_deferred_addon_subscription_for(child, transaction_id='cs_other', subscription_id='sub_1')
        assert not is_deferred_addon_subscription_for(child, transaction_id='cs_2', subscription_id='sub_2')

    def test_linkage_requires_source(self):
        assert not is_deferred_addon_subscription_for(
            {'parent_transaction_id': 'cs_1'}, transaction_id='cs_1', subscription_id='sub_1'
        )


class TestWebhookOutcome:
    def test_skip_response(self):
        outcome = WebhookOutcome.skip(SkipReason.ALREADY_PROVISIONED, 'sub_addon')
        assert not outcome.created
        assert outcome.to_response() == {
            'received': True,
            'skipped': 'already-provisioned',
            'addon_subscription_id': 'sub_addon',
        }

    def test_provisioned_response(self):
        outcome = WebhookOutcome.provisioned('sub_addon')
        assert outcome.created
        assert outcome.to_response() == {'received': True, 'created': True, 'addon_subscription_id': 'sub_addon'}
