"""
Shared billing configuration and exceptions.
"""

from .config import (
    AddOn,
    BillingConfig,
    BillingCycle,
    Plan,
    PriceCatalog,
    addon_setting_name,
    plan_setting_name,
)
from .exceptions import (
    BillingError,
    BillingValidationError,
    ConfigurationError,
    IneligibleRegionError,
    InvalidSelectionError,
    NoPaymentMethodError,
    UpstreamError,
    WebhookAuthenticationError,
)

__all__ = [
    # Catalog
    'AddOn',
    'BillingConfig',
    'BillingCycle',
    'Plan',
    'PriceCatalog',
    'addon_setting_name',
    'plan_setting_name',
    # Exceptions
    'BillingError',
    'BillingValidationError',
    'ConfigurationError',
    'IneligibleRegionError',
    'InvalidSelectionError',
    'NoPaymentMethodError',
    'UpstreamError',
    'WebhookAuthenticationError',
]
