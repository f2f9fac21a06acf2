"""
Notifier Event Schemas

Wire shape of the change events posted to the webhook endpoint.
"""

from .change_event import (
    FieldName,
    EmissionPolicy,
    UserRef,
    FieldSnapshot,
    CommentValue,
    ChangeRecord,
    ProjectRef,
    IssueRef,
    EventPayload,
)

__all__ = [
    "FieldName",
    "EmissionPolicy",
    "UserRef",
    "FieldSnapshot",
    "CommentValue",
    "ChangeRecord",
    "ProjectRef",
    "IssueRef",
    "EventPayload",
]
