"""
Issue Change Notifier

Relays issue updates from a tracker's workflow engine to a webhook as
normalized, versioned change events.

Philosophy:
- Fixed payload shape: every key present, null when unknown
- Report transitions, not touches
- Fire-and-forget delivery that never blocks the update

Usage:
    from notifier.common import load_config
    from notifier.common.schemas import EventPayload, ChangeRecord
    from notifier.relay import ChangeNotificationRule
"""

__version__ = "0.1.0"
