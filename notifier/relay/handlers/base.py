"""
Base Handler

Abstract contract between the host workflow engine and the relay.
A host adapter exposes one issue update through a ChangeContext; the relay
never touches the host's own objects directly.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional, Any, List


def read_attr(obj: Any, name: str) -> Any:
    """
    Read an attribute from a mapping or an object.

    Returns None when the object is absent or has no such attribute.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def text_or_none(value: Any) -> Optional[str]:
    """Non-empty strings pass through; anything else becomes None"""
    if isinstance(value, str) and value:
        return value
    return None


@dataclass
class IssueInfo:
    """Identifying metadata of the updated issue"""
    id: Optional[str] = None
    id_readable: Optional[str] = None
    summary: Optional[str] = None
    permalink: Optional[str] = None
    base_url: Optional[str] = None
    project_name: Optional[str] = None
    project_presentation: Optional[str] = None


@dataclass
class Comment:
    """A comment added during the update"""
    text: Optional[str] = None
    id: Optional[str] = None
    created: Optional[int] = None  # epoch millis, as reported by the host
    author: Any = None


class ChangeContext(ABC):
    """
    One committed issue update, as seen by the relay.

    Each host adapter must implement:
    - current_value / prior_value: field values after and before the update
    - is_dirty: whether the host touched a field during the update
    - added_comments: comments added in this update
    - find_user_by_login: directory lookup for bare mentions
    """

    @property
    @abstractmethod
    def issue(self) -> IssueInfo:
        pass

    @property
    @abstractmethod
    def current_user(self) -> Any:
        """The user who made the update (user-like record or None)"""
        pass

    @abstractmethod
    def current_value(self, field: str) -> Any:
        pass

    @abstractmethod
    def prior_value(self, field: str) -> Any:
        """
        Value of a field before the update.

        Returns None when the host does not know the old value.
        """
        pass

    @abstractmethod
    def is_dirty(self, field: str) -> bool:
        pass

    @abstractmethod
    def added_comments(self) -> List[Comment]:
        pass

    def find_user_by_login(self, login: str) -> Any:
        """
        Resolve a login to a user-like record.

        Default implementation knows no users. May return None or raise;
        callers treat both as not-found.
        """
        return None
