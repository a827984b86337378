"""
CMS Webhooks

Fire-and-forget revalidation notifications from the CMS to the storefront.
"""

from .notifier import (
    WebhookNotifier,
    WebhookPayload,
    WebhookEventType,
    DispatchOutcome,
    product_path,
)

__all__ = [
    "WebhookNotifier",
    "WebhookPayload",
    "WebhookEventType",
    "DispatchOutcome",
    "product_path",
]
