"""Membership checkout service.

Builds Stripe checkout sessions for membership plans and provisions add-on
subscriptions that could not ride along with an annual purchase.
"""

__version__ = '0.3.0'
