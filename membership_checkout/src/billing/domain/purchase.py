"""
Purchase Domain Entities

A validated purchase intent and the metadata contract shared by the
checkout builder and the checkout-completed webhook.

Stripe metadata is the only channel between the two flows, so both read
and write it through ``CheckoutMetadata``; the key names live here and
nowhere else.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Sequence, Tuple

from membership_checkout.src.billing.shared.config import AddOn, BillingCycle, Plan
from membership_checkout.src.billing.shared.exceptions import (
    ConfigurationError,
    IneligibleRegionError,
    InvalidSelectionError,
)

# Metadata keys
PLAN_KEY = 'plan'
BILLING_KEY = 'billing'
ADDONS_KEY = 'addons'
ADDONS_DEFERRED_KEY = 'addons_deferred'
SERVICE_STATE_KEY = 'service_state'
STATE_ATTESTATION_KEY = 'state_attestation'
SOURCE_KEY = 'source'
PARENT_TRANSACTION_KEY = 'parent_transaction_id'
PARENT_SUBSCRIPTION_KEY = 'parent_subscription_id'

NO_ADDONS = 'none'
DEFERRED_ADDONS_SOURCE = 'deferred-addons'


def encode_addons(addons: Iterable[AddOn]) -> str:
    """Comma-joined add-on keys in canonical order, or ``none``."""
    ordered = AddOn.canonical(addons)
    if not ordered:
        return NO_ADDONS
    return ','.join(addon.value for addon in ordered)


def decode_addons(raw: Optional[str]) -> Tuple[AddOn, ...]:
    """
    Inverse of ``encode_addons``.

    Tolerates whitespace, case and duplicates. Keys this service never
    writes mean the catalog and the metadata drifted apart, which is an
    operator problem rather than a client one.
    """
    text = (raw or '').strip()
    if not text or text.lower() == NO_ADDONS:
        return ()

    addons = []
    for key in (part.strip() for part in text.split(',')):
        if not key:
            continue
        try:
            addons.append(AddOn.parse(key))
        except InvalidSelectionError:
            raise ConfigurationError(
                f"Unknown add-on key in subscription metadata: {key!r}",
                missing=[key],
            )
    return tuple(AddOn.canonical(addons))


@dataclass(frozen=True)
class PurchaseIntent:
    """
    A customer's validated selection.

    Only ``parse`` should build one; past it plans, cycles and add-ons are
    enums and the region is known to be serviceable.
    """
    plan: Plan
    cycle: BillingCycle
    addons: FrozenSet[AddOn]
    region: str

    @classmethod
    def parse(
        cls,
        *,
        plan: Optional[str],
        billing_cycle: Optional[str],
        addons: Optional[Sequence[str]],
        region: Optional[str],
        service_regions: Iterable[str],
    ) -> "PurchaseIntent":
        """
        Validate raw request values.

        The region gate runs first and unconditionally.

        Raises:
            IneligibleRegionError: Region missing or not serviceable
            InvalidSelectionError: Unknown plan, cycle or add-on
        """
        allowed = {r.upper() for r in service_regions}
        region_code = str(region).strip().upper() if region else ''
        if not region_code or region_code not in allowed:
            raise IneligibleRegionError(region, allowed)

        return cls(
            plan=Plan.parse(plan),
            cycle=BillingCycle.parse(billing_cycle),
            addons=frozenset(AddOn.parse(key) for key in (addons or ())),
            region=region_code,
        )

    @property
    def defers_addons(self) -> bool:
        """
        Annual plans cannot share a subscription with monthly add-on prices,
        so every selected add-on is provisioned later as one unit.
        """
        return self.cycle is BillingCycle.ANNUAL and bool(self.addons)


@dataclass(frozen=True)
class CheckoutMetadata:
    """
    Metadata written to the base subscription at checkout.

    Attributes:
        plan: Plan label ("Essence")
        billing: Billing cycle label ("Annual")
        addons: Every selected add-on, deferred or not
        addons_deferred: Whether the add-ons still have to be provisioned
        service_state: Region code
        state_attestation: Customer attested to living in the region
    """
    plan: str
    billing: str
    addons: Tuple[AddOn, ...]
    addons_deferred: bool
    service_state: str
    state_attestation: bool = True

    @classmethod
    def for_intent(cls, intent: PurchaseIntent) -> "CheckoutMetadata":
        return cls(
            plan=intent.plan.label,
            billing=intent.cycle.label,
            addons=tuple(AddOn.canonical(intent.addons)),
            addons_deferred=intent.defers_addons,
            service_state=intent.region,
        )

    @classmethod
    def from_stripe(cls, metadata: Optional[Mapping[str, str]]) -> "CheckoutMetadata":
        metadata = metadata or {}
        return cls(
            plan=metadata.get(PLAN_KEY, ''),
            billing=metadata.get(BILLING_KEY, ''),
            addons=decode_addons(metadata.get(ADDONS_KEY)),
            addons_deferred=str(metadata.get(ADDONS_DEFERRED_KEY, '')).strip().lower() == 'true',
            service_state=metadata.get(SERVICE_STATE_KEY, ''),
            state_attestation=str(metadata.get(STATE_ATTESTATION_KEY, '')).strip().lower() == 'true',
        )

    @property
    def pending_addons(self) -> Tuple[AddOn, ...]:
        """Add-ons that still need their own subscription."""
        return self.addons if self.addons_deferred else ()

    def to_stripe(self) -> Dict[str, str]:
        return {
            PLAN_KEY: self.plan,
            BILLING_KEY: self.billing,
            ADDONS_KEY: encode_addons(self.addons),
            ADDONS_DEFERRED_KEY: 'true' if self.addons_deferred else 'false',
            SERVICE_STATE_KEY: self.service_state,
            STATE_ATTESTATION_KEY: 'true' if self.state_attestation else 'false',
        }

    def to_addon_subscription(
        self,
        *,
        parent_transaction_id: str,
        parent_subscription_id: str,
    ) -> Dict[str, str]:
        """Metadata for the add-on subscription: parent linkage plus reporting context."""
        return {
            SOURCE_KEY: DEFERRED_ADDONS_SOURCE,
            PARENT_TRANSACTION_KEY: parent_transaction_id,
            PARENT_SUBSCRIPTION_KEY: parent_subscription_id,
            PLAN_KEY: self.plan,
            BILLING_KEY: self.billing,
            ADDONS_KEY: encode_addons(self.addons),
            SERVICE_STATE_KEY: self.service_state,
            STATE_ATTESTATION_KEY: 'true' if self.state_attestation else 'false',
        }


def is_deferred_addon_subscription_for(
    metadata: Optional[Mapping[str, str]],
    *,
    transaction_id: str,
    subscription_id: str,
) -> bool:
    """Whether a subscription's metadata marks it as the add-on child of this purchase."""
    if not metadata or metadata.get(SOURCE_KEY) != DEFERRED_ADDONS_SOURCE:
        return False
    return (
        metadata.get(PARENT_TRANSACTION_KEY) == transaction_id
        or metadata.get(PARENT_SUBSCRIPTION_KEY) == subscription_id
    )
