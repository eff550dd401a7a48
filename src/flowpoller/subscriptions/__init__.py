"""Subscription registry for type-based event routing."""

from flowpoller.subscriptions.registry import SubscriptionRegistry, new_subscription_id

__all__ = [
    "SubscriptionRegistry",
    "new_subscription_id",
]
