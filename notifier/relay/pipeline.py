"""
Change Notification Rule

Runs once per committed issue update:
1. Detect field-level changes
2. Build the EventPayload
3. Dispatch it, only if anything changed
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..common.config import NotifierConfig
from ..common.schemas import EventPayload, FieldName
from .detector import ChangeDetector
from .dispatcher import WebhookDispatcher
from .handlers.base import ChangeContext
from .payload_builder import PayloadBuilder

logger = logging.getLogger("notifier.relay.pipeline")


@dataclass(frozen=True)
class FieldRequirement:
    """A field the host must track for this rule"""
    field: FieldName
    type: str  # "enum" or "user"


class ChangeNotificationRule:
    """
    Issue on-change rule wiring detector, builder and dispatcher together.

    The host calls on_change() once per committed update. Nothing raised
    inside the pipeline reaches the host for dispatch failures; those are
    absorbed by the dispatcher.
    """

    TITLE = "Send Task Notifications to Webhook"

    REQUIREMENTS: Tuple[FieldRequirement, ...] = (
        FieldRequirement(FieldName.STATE, "enum"),
        FieldRequirement(FieldName.PRIORITY, "enum"),
        FieldRequirement(FieldName.ASSIGNEE, "user"),
    )

    def __init__(
        self,
        detector: ChangeDetector,
        builder: PayloadBuilder,
        dispatcher: WebhookDispatcher,
    ):
        self._detector = detector
        self._builder = builder
        self._dispatcher = dispatcher

    @classmethod
    def from_config(cls, config: NotifierConfig) -> "ChangeNotificationRule":
        """Wire a rule from NotifierConfig"""
        return cls(
            detector=ChangeDetector(policy=config.policy),
            builder=PayloadBuilder(default_base_url=config.relay.base_url),
            dispatcher=WebhookDispatcher(
                url=config.webhook.url,
                timeout_ms=config.webhook.timeout_ms,
            ),
        )

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    @classmethod
    def describe(cls) -> dict:
        """Title and field requirements, for the host's rule registration"""
        return {
            "title": cls.TITLE,
            "requirements": {req.field.value: {"type": req.type} for req in cls.REQUIREMENTS},
        }

    def on_change(self, ctx: ChangeContext) -> Optional[EventPayload]:
        """
        Handle one committed update.

        Args:
            ctx: The update as exposed by the host

        Returns:
            The payload handed to the dispatcher, or None if nothing changed
        """
        changes = self._detector.detect(ctx)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(self._detector.explain(changes))
        payload = self._builder.build(ctx, changes)

        if not payload.changes:
            logger.debug("No reportable changes for %s", payload.issue.id_readable)
            return None

        logger.info("Notifying %s: %s", payload.issue.id_readable, ", ".join(payload.changed_fields))
        self._dispatcher.dispatch(payload)
        return payload
