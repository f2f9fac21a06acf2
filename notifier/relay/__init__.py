"""
Relay - Issue Change Notifications

Turns committed issue updates into normalized change events and posts them
to a webhook endpoint.

Key Components:
- ChangeDetector: Field-level change detection (State, Priority, Assignee, Comment)
- extract_mentions: Structured and bare @mentions in comment text
- PayloadBuilder: Fixed-shape EventPayload assembly
- WebhookDispatcher: Single best-effort JSON POST
- ChangeNotificationRule: The on-change rule wiring them together
- Handlers: Host-specific adapters to ChangeContext

Rules for the Relay:
1. Only report real transitions, not touched-but-unchanged fields
2. A transition from an unknown State/Priority is not reported
3. Mentions resolve best-effort; a failed lookup drops the mention
4. Nothing is dispatched when there are no changes
5. Delivery never fails the update being reported
"""

from .users import sanitize_user
from .mentions import extract_mentions
from .detector import ChangeDetector
from .payload_builder import PayloadBuilder, build_issue_url
from .dispatcher import WebhookDispatcher
from .pipeline import ChangeNotificationRule, FieldRequirement

__all__ = [
    "sanitize_user",
    "extract_mentions",
    "ChangeDetector",
    "PayloadBuilder",
    "build_issue_url",
    "WebhookDispatcher",
    "ChangeNotificationRule",
    "FieldRequirement",
]
