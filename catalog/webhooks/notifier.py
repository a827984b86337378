"""
Revalidation Webhook Notifier

Tells the storefront that a product page changed by POSTing to
{endpoint}/api/revalidate after the CMS commits a product write.

Each trigger goes Idle -> Triggered -> Fired | Skipped:
- Skipped for autosaves (automated intermediate saves)
- Skipped when no endpoint is configured
- Skipped when there is no running event loop to dispatch on
- Fired otherwise: the POST runs on a detached asyncio task

Delivery is at-most-once and best-effort. The trigger never waits for the
response, there is no retry, and a failed delivery is only logged here.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional, Set

import httpx
from pydantic import BaseModel

logger = logging.getLogger(__name__)

REVALIDATE_ROUTE = "/api/revalidate"


class WebhookEventType(str, Enum):
    """Kind of product change carried in the payload."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class DispatchOutcome(Enum):
    """Terminal state of one trigger."""
    FIRED = "fired"
    SKIPPED = "skipped"


class WebhookPayload(BaseModel):
    """Body of the revalidation request."""
    secret: str
    path: str
    type: WebhookEventType


def product_path(product_id: int) -> str:
    """Storefront path of a product detail page."""
    return f"/products/{product_id}"


class WebhookNotifier:
    """
    Fire-and-forget notifier for product changes.

    Usage:
        notifier = WebhookNotifier(endpoint="https://shop.example.com", secret="s3cret")

        # Inside a request handler, after the write is committed
        notifier.trigger_save(product.id, update=True)

        # At shutdown
        await notifier.aclose()
    """

    def __init__(
        self,
        endpoint: Optional[str],
        secret: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize notifier.

        Args:
            endpoint: Storefront base URL; None or "" disables the webhook
            secret: Shared secret sent in the payload
            timeout: Per-request timeout for the detached POST
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.endpoint = endpoint.rstrip("/") if endpoint else None
        self.secret = secret
        self.timeout = timeout
        self._transport = transport
        self._pending: Set[asyncio.Task] = set()

    @property
    def is_enabled(self) -> bool:
        return bool(self.endpoint)

    @property
    def pending(self) -> int:
        """Number of dispatches still in flight."""
        return len(self._pending)

    # =========================================================================
    # Triggers
    # =========================================================================

    def trigger_save(
        self,
        product_id: int,
        update: bool,
        autosave: bool = False,
    ) -> DispatchOutcome:
        """Product was created (update=False) or updated (update=True)."""
        if autosave:
            logger.debug(f"Webhook skipped for autosave of product {product_id}")
            return DispatchOutcome.SKIPPED

        event_type = WebhookEventType.UPDATE if update else WebhookEventType.CREATE
        return self._dispatch(product_id, event_type)

    def trigger_delete(self, product_id: int) -> DispatchOutcome:
        """Product was permanently deleted."""
        return self._dispatch(product_id, WebhookEventType.DELETE)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _dispatch(self, product_id: int, event_type: WebhookEventType) -> DispatchOutcome:
        if not self.is_enabled:
            logger.debug(f"Webhook skipped for product {product_id}: no endpoint configured")
            return DispatchOutcome.SKIPPED

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"Webhook skipped for product {product_id}: no running event loop")
            return DispatchOutcome.SKIPPED

        payload = WebhookPayload(
            secret=self.secret,
            path=product_path(product_id),
            type=event_type,
        )

        task = loop.create_task(self._post(payload))
        self._pending.add(task)
        task.add_done_callback(self._on_done)

        logger.info(f"Webhook dispatched: {event_type.value} {payload.path}")
        return DispatchOutcome.FIRED

    async def _post(self, payload: WebhookPayload) -> None:
        url = f"{self.endpoint}{REVALIDATE_ROUTE}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                await client.post(
                    url,
                    json=payload.model_dump(mode="json"),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.warning(f"Webhook delivery to {url} failed: {e}")

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Webhook task failed: {task.exception()}")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def drain(self) -> None:
        """Wait for every in-flight dispatch to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self, timeout: float = 5.0) -> None:
        """Give in-flight dispatches a bounded grace period, then cancel them."""
        if not self._pending:
            return

        _, still_running = await asyncio.wait(list(self._pending), timeout=timeout)
        for task in still_running:
            task.cancel()

        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"Cancelled {len(still_running)} webhook dispatches at shutdown")
