"""
Webhook Dispatcher

Delivers an EventPayload to the configured endpoint with a single POST.

Delivery is best-effort: no retries, no queue. Every failure is logged and
absorbed here so a broken endpoint never fails the update being reported.
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

logger = logging.getLogger("notifier.relay.dispatcher")


class WebhookDispatcher:
    """
    One-shot JSON POST to a fixed webhook URL.

    Usage:
        dispatcher = WebhookDispatcher("http://hooks:3000/log-post-request")
        delivered = dispatcher.dispatch(payload)
    """

    def __init__(
        self,
        url: str,
        timeout_ms: int = 2000,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize dispatcher.

        Args:
            url: Webhook endpoint
            timeout_ms: Connect and response timeout in milliseconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.url = url
        self.timeout_ms = timeout_ms
        self._transport = transport

    @staticmethod
    def serialize(payload: Any) -> str:
        """Encode a payload (pydantic model or plain data) as JSON"""
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", by_alias=True)
        return json.dumps(payload, ensure_ascii=False)

    def dispatch(self, payload: Any) -> bool:
        """
        POST the payload once.

        Args:
            payload: EventPayload or JSON-serializable data

        Returns:
            True if the endpoint answered with a success status
        """
        body = None
        try:
            body = self.serialize(payload)
            with httpx.Client(
                timeout=httpx.Timeout(self.timeout_ms / 1000),
                transport=self._transport,
            ) as client:
                response = client.post(
                    self.url,
                    content=body.encode("utf-8"),
                    headers={"Content-Type": "application/json"},
                )

            if not response.is_success:
                logger.warning("Webhook failed: %s, payload: %s", response.status_code, body)
                return False

            logger.debug("Webhook delivered: %s", response.status_code)
            return True

        except Exception as e:
            logger.error("Webhook delivery error: %s, payload: %s", e, body if body is not None else repr(payload))
            return False
