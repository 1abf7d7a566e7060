"""
Webhook Outcome

Terminal classification of a checkout-completed delivery. Skips are
successful outcomes, not errors: Stripe gets a 200 and stops retrying.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class SkipReason(Enum):
    """Why a delivery required no provisioning."""
    NOT_A_SUBSCRIPTION = "not-a-subscription"
    NOTHING_DEFERRED = "nothing-deferred"
    ALREADY_PROVISIONED = "already-provisioned"


@dataclass(frozen=True)
class WebhookOutcome:
    """
    Result of handling one checkout.session.completed event.

    Attributes:
        skipped: Reason when nothing was created
        addon_subscription_id: Created (or previously created) add-on subscription
    """
    skipped: Optional[SkipReason] = None
    addon_subscription_id: Optional[str] = None

    @classmethod
    def skip(cls, reason: SkipReason, addon_subscription_id: str = None) -> "WebhookOutcome":
        return cls(skipped=reason, addon_subscription_id=addon_subscription_id)

    @classmethod
    def provisioned(cls, addon_subscription_id: str) -> "WebhookOutcome":
        return cls(addon_subscription_id=addon_subscription_id)

    @property
    def created(self) -> bool:
        return self.skipped is None

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {'received': True}
        if self.skipped is not None:
            body['skipped'] = self.skipped.value
        else:
            body['created'] = True
        if self.addon_subscription_id:
            body['addon_subscription_id'] = self.addon_subscription_id
        return body
