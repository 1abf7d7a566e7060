"""
Stripe Idempotency Keys

Deterministic idempotency keys for Stripe write calls.

A key depends only on the operation and the object it acts for, never on
the clock. Every redelivery of the same webhook therefore sends the same
key, and Stripe returns the first result instead of creating a second
object.
"""

import hashlib
import logging

logger = logging.getLogger(__name__)

# Stripe rejects idempotency keys longer than this
MAX_KEY_LENGTH = 255

DEFERRED_ADDONS_OPERATION = 'deferred-addons'


def generate_idempotency_key(operation: str, object_id: str) -> str:
    """
    Generate a deterministic idempotency key.

    Args:
        operation: Operation type (e.g., 'deferred-addons')
        object_id: Identifier of the object the operation is performed for

    Returns:
        ``"<operation>-<object_id>"``, hashed when it would exceed Stripe's limit
    """
    if not object_id:
        raise ValueError("object_id is required for an idempotency key")

    key = f"{operation}-{object_id}"
    if len(key) <= MAX_KEY_LENGTH:
        return key

    digest = hashlib.sha256(object_id.encode()).hexdigest()
    logger.debug(f"[IDEMPOTENCY] Hashed oversized key for {operation}")
    return f"{operation}-{digest}"


def generate_deferred_addons_idempotency_key(checkout_session_id: str) -> str:
    """Idempotency key for the add-on subscription created after a checkout."""
    return generate_idempotency_key(DEFERRED_ADDONS_OPERATION, checkout_session_id)
