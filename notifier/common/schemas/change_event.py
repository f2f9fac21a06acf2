"""
Change Event Schema

Normalized description of a single issue update as delivered to the webhook.

Core principle: the shape is fixed. Every key is always present on the wire,
degrading to null (or an empty string for the summary) when the host has no
value, so downstream consumers never have to probe for missing keys.
"""

from typing import List, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Enums
# ============================================================================

class FieldName(str, Enum):
    """Fields a change record can describe"""
    STATE = "State"
    PRIORITY = "Priority"
    ASSIGNEE = "Assignee"
    COMMENT = "Comment"


class EmissionPolicy(str, Enum):
    """How many change records a single update produces"""
    FIRST_MATCH = "first-match"
    ACCUMULATE_ALL = "accumulate-all"


# ============================================================================
# Sub-models
# ============================================================================

class _WireModel(BaseModel):
    """Frozen model with camelCase aliases on the wire"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class UserRef(_WireModel):
    """Minimal public view of a user"""
    full_name: Optional[str] = Field(default=None, alias="fullName")
    login: Optional[str] = None
    email: Optional[str] = None


class FieldSnapshot(_WireModel):
    """Value of an enumerated field (State, Priority) at one point in time"""
    name: Optional[str] = None
    presentation: Optional[str] = None


class CommentValue(_WireModel):
    """
    A newly added comment.

    mentioned_users is None rather than an empty list when nobody is mentioned.
    """
    text: str
    mentioned_users: Optional[List[UserRef]] = Field(default=None, alias="mentionedUsers")


class ChangeRecord(_WireModel):
    """One field-level change"""
    field: FieldName
    old_value: Optional[Union[FieldSnapshot, UserRef]] = Field(default=None, alias="oldValue")
    new_value: Optional[Union[FieldSnapshot, UserRef, CommentValue]] = Field(default=None, alias="newValue")


class ProjectRef(_WireModel):
    """Project the issue belongs to"""
    name: Optional[str] = None
    presentation: Optional[str] = None


class IssueRef(_WireModel):
    """Current state of the issue after the update"""
    id_readable: Optional[str] = Field(default=None, alias="idReadable")
    summary: str = ""
    url: Optional[str] = None
    state: Optional[FieldSnapshot] = None
    priority: Optional[FieldSnapshot] = None
    assignee: Optional[UserRef] = None


# ============================================================================
# Main Schema
# ============================================================================

class EventPayload(_WireModel):
    """
    Event delivered to the webhook endpoint.

    Only dispatched when `changes` is non-empty; the gate lives in the
    notification rule, not here.
    """
    project: ProjectRef = Field(default_factory=ProjectRef)
    issue: IssueRef = Field(default_factory=IssueRef)
    updater: Optional[UserRef] = None
    changes: List[ChangeRecord] = Field(default_factory=list)

    def to_wire(self) -> dict:
        """JSON-ready dict using the camelCase wire names"""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def changed_fields(self) -> List[str]:
        return [change.field.value for change in self.changes]
