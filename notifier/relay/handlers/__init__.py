"""
Host Handlers

Adapters from a host workflow engine to the relay's ChangeContext.

Available Handlers:
- SnapshotHandler: JSON snapshots posted by a host-side hook
"""

from .base import ChangeContext, IssueInfo, Comment, read_attr, text_or_none
from .snapshot import SnapshotHandler, SnapshotContext

__all__ = [
    "ChangeContext",
    "IssueInfo",
    "Comment",
    "read_attr",
    "text_or_none",
    "SnapshotHandler",
    "SnapshotContext",
]
