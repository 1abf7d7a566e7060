"""
Billing Configuration

Membership plans, add-ons, the Stripe price catalog and the validated
billing configuration used by the checkout and webhook flows.

The catalog is built once from settings at startup. Every price a valid
purchase can need must be present, otherwise ``BillingConfig.from_settings``
raises ``ConfigurationError`` and the app refuses to start.

Usage:
    from membership_checkout.src.billing.shared.config import BillingConfig, Plan, BillingCycle

    config = BillingConfig.from_settings(settings)
    price_id = config.catalog.plan_price(Plan.ESSENCE, BillingCycle.ANNUAL)
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from membership_checkout.src.billing.shared.exceptions import (
    ConfigurationError,
    InvalidSelectionError,
)


# =============================================================================
# CATALOG ENUMERATIONS
# =============================================================================
class Plan(Enum):
    """Membership plans offered at checkout."""
    ESSENCE = "essence"
    RADIANCE = "radiance"

    @property
    def label(self) -> str:
        """Human-readable label stored in Stripe metadata."""
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Optional[str]) -> "Plan":
        return _parse_enum(cls, value, field='plan')


class BillingCycle(Enum):
    """How often the membership plan is billed."""
    MONTHLY = "monthly"
    ANNUAL = "annual"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Optional[str]) -> "BillingCycle":
        return _parse_enum(cls, value, field='billingCycle')


class AddOn(Enum):
    """
    Recurring add-on programs.

    Add-ons are always priced monthly. Declaration order is the canonical
    order used when add-on sets are written to metadata.
    """
    NUTRITION = "nutrition"
    METABOLIC = "metabolic"
    SEXUAL = "sexual"
    SKINHAIR = "skinhair"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AddOn":
        return _parse_enum(cls, value, field='addOns')

    @classmethod
    def canonical(cls, addons: Iterable["AddOn"]) -> List["AddOn"]:
        """Deduplicate and sort add-ons into declaration order."""
        selected = set(addons)
        return [addon for addon in cls if addon in selected]


def _parse_enum(enum_cls, value, field: str):
    key = str(value).strip().lower() if value is not None else ''
    for member in enum_cls:
        if member.value == key:
            return member
    raise InvalidSelectionError(
        message=f"Invalid {field}: {value!r}." if value else f"Missing {field}.",
        field=field,
        value=value,
    )


# =============================================================================
# PRICE CATALOG
# =============================================================================
def plan_setting_name(plan: Plan, cycle: BillingCycle) -> str:
    """Settings key holding the Stripe price for a plan and cycle."""
    return f"PRICE_{plan.name}_{cycle.name}"


def addon_setting_name(addon: AddOn) -> str:
    """Settings key holding the Stripe price for an add-on."""
    return f"PRICE_ADDON_{addon.name}"


@dataclass(frozen=True)
class PriceCatalog:
    """
    Read-only mapping from catalog selections to Stripe price IDs.

    Attributes:
        plan_prices: Price ID per (plan, billing cycle)
        addon_prices: Price ID per add-on
    """
    plan_prices: Mapping[Tuple[Plan, BillingCycle], str]
    addon_prices: Mapping[AddOn, str]

    @classmethod
    def from_mapping(
        cls,
        plan_prices: Dict[Tuple[Plan, BillingCycle], str],
        addon_prices: Dict[AddOn, str],
    ) -> "PriceCatalog":
        return cls(
            plan_prices=MappingProxyType(dict(plan_prices)),
            addon_prices=MappingProxyType(dict(addon_prices)),
        )

    @classmethod
    def from_settings(cls, settings) -> "PriceCatalog":
        """Read every catalog entry from settings; empty values are kept as missing."""
        plan_prices = {}
        for plan in Plan:
            for cycle in BillingCycle:
                price_id = getattr(settings, plan_setting_name(plan, cycle), '') or ''
                if price_id.strip():
                    plan_prices[(plan, cycle)] = price_id.strip()

        addon_prices = {}
        for addon in AddOn:
            price_id = getattr(settings, addon_setting_name(addon), '') or ''
            if price_id.strip():
                addon_prices[addon] = price_id.strip()

        return cls.from_mapping(plan_prices, addon_prices)

    def missing_entries(self) -> List[str]:
        """Settings keys with no price configured."""
        missing = [
            plan_setting_name(plan, cycle)
            for plan in Plan
            for cycle in BillingCycle
            if not self.plan_prices.get((plan, cycle))
        ]
        missing.extend(
            addon_setting_name(addon)
            for addon in AddOn
            if not self.addon_prices.get(addon)
        )
        return missing

    def plan_price(self, plan: Plan, cycle: BillingCycle) -> str:
        price_id = self.plan_prices.get((plan, cycle))
        if not price_id:
            name = plan_setting_name(plan, cycle)
            raise ConfigurationError(f"Missing env var: {name}", missing=[name])
        return price_id

    def addon_price(self, addon: AddOn) -> str:
        price_id = self.addon_prices.get(addon)
        if not price_id:
            name = addon_setting_name(addon)
            raise ConfigurationError(f"Missing env var for add-on price: {name}", missing=[name])
        return price_id


# =============================================================================
# BILLING CONFIGURATION
# =============================================================================
@dataclass(frozen=True)
class BillingConfig:
    """
    Validated, immutable configuration shared by the billing endpoints.

    Attributes:
        catalog: Stripe price catalog
        service_regions: Upper-cased region codes customers may buy from
        webhook_secret: Stripe webhook signing secret
        success_url: Checkout success redirect (may contain {CHECKOUT_SESSION_ID})
        cancel_url: Checkout cancel redirect
        publishable_key: Stripe publishable key for the storefront (optional)
        webhook_tolerance: Maximum webhook signature age in seconds
        list_page_size: Page size for subscription listings
    """
    catalog: PriceCatalog
    service_regions: FrozenSet[str]
    webhook_secret: str
    success_url: str
    cancel_url: str
    publishable_key: str = ''
    webhook_tolerance: int = 300
    list_page_size: int = 100

    @classmethod
    def from_settings(cls, settings) -> "BillingConfig":
        """
        Validate settings once and freeze them.

        Raises:
            ConfigurationError: Listing every missing setting
        """
        missing = []
        if not settings.STRIPE_SECRET_KEY:
            missing.append('STRIPE_SECRET_KEY')
        if not settings.STRIPE_WEBHOOK_SECRET:
            missing.append('STRIPE_WEBHOOK_SECRET')
        if not settings.FRONTEND_URL:
            missing.append('FRONTEND_URL')
        if not settings.SERVICE_REGIONS:
            missing.append('SERVICE_REGIONS')

        catalog = PriceCatalog.from_settings(settings)
        missing.extend(catalog.missing_entries())

        if missing:
            raise ConfigurationError(
                f"Missing required billing configuration: {', '.join(missing)}",
                missing=missing,
            )

        return cls(
            catalog=catalog,
            service_regions=frozenset(r.upper() for r in settings.SERVICE_REGIONS),
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            success_url=f"{settings.FRONTEND_URL}{settings.CHECKOUT_SUCCESS_PATH}",
            cancel_url=f"{settings.FRONTEND_URL}{settings.CHECKOUT_CANCEL_PATH}",
            publishable_key=settings.STRIPE_PUBLISHABLE_KEY,
            webhook_tolerance=settings.STRIPE_WEBHOOK_TOLERANCE,
            list_page_size=settings.SUBSCRIPTION_LIST_PAGE_SIZE,
        )
