"""
Change Detector

Decides which watched fields actually changed in an issue update.
Core component of the relay pipeline.

Per-field rules:
- State / Priority: dirty, old name known, and old name != new name.
  A transition from an unknown value is initialization noise.
- Assignee: the dirty flag alone is authoritative.
- Comment: the last added comment has non-empty text. Always an addition.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

from ..common.schemas import (
    ChangeRecord,
    CommentValue,
    EmissionPolicy,
    FieldName,
    FieldSnapshot,
)
from .handlers.base import ChangeContext, read_attr, text_or_none
from .mentions import extract_mentions
from .users import sanitize_user

logger = logging.getLogger("notifier.relay.detector")


def snapshot_of(value: Any) -> Optional[FieldSnapshot]:
    """Project an enumerated field value onto {name, presentation}"""
    if value is None:
        return None
    if isinstance(value, str):
        return FieldSnapshot(name=text_or_none(value), presentation=text_or_none(value))
    return FieldSnapshot(
        name=text_or_none(read_attr(value, "name")),
        presentation=text_or_none(read_attr(value, "presentation")),
    )


class ChangeDetector:
    """
    Detects field-level changes in a single issue update.

    Checks run in the fixed order State, Priority, Assignee, Comment and the
    output keeps that order. The emission policy decides whether every
    detected change is reported (accumulate-all) or only the first one
    (first-match).
    """

    def __init__(self, policy: EmissionPolicy = EmissionPolicy.ACCUMULATE_ALL):
        """
        Initialize change detector.

        Args:
            policy: accumulate-all or first-match
        """
        self._policy = EmissionPolicy(policy)
        self._checks: List[Tuple[FieldName, Callable[[ChangeContext], Optional[ChangeRecord]]]] = [
            (FieldName.STATE, lambda ctx: self._detect_enum_field(ctx, FieldName.STATE)),
            (FieldName.PRIORITY, lambda ctx: self._detect_enum_field(ctx, FieldName.PRIORITY)),
            (FieldName.ASSIGNEE, self._detect_assignee),
            (FieldName.COMMENT, self._detect_comment),
        ]

    @property
    def policy(self) -> EmissionPolicy:
        return self._policy

    def detect(self, ctx: ChangeContext) -> List[ChangeRecord]:
        """
        Detect changes in an update.

        Args:
            ctx: The update as exposed by the host

        Returns:
            Ordered ChangeRecords (at most one under first-match)
        """
        changes: List[ChangeRecord] = []

        for field, check in self._checks:
            record = check(ctx)
            if record is None:
                continue
            changes.append(record)
            if self._policy == EmissionPolicy.FIRST_MATCH:
                break

        logger.debug("Detected %d change(s) under %s", len(changes), self._policy.value)
        return changes

    def _detect_enum_field(self, ctx: ChangeContext, field: FieldName) -> Optional[ChangeRecord]:
        """State and Priority"""
        if not ctx.is_dirty(field.value):
            return None

        old = snapshot_of(ctx.prior_value(field.value))
        new = snapshot_of(ctx.current_value(field.value))

        old_name = old.name if old else None
        new_name = new.name if new else None

        if old_name is None:
            return None
        if old_name == new_name:
            return None

        return ChangeRecord(field=field, old_value=old, new_value=new)

    def _detect_assignee(self, ctx: ChangeContext) -> Optional[ChangeRecord]:
        if not ctx.is_dirty(FieldName.ASSIGNEE.value):
            return None

        return ChangeRecord(
            field=FieldName.ASSIGNEE,
            old_value=sanitize_user(ctx.prior_value(FieldName.ASSIGNEE.value)),
            new_value=sanitize_user(ctx.current_value(FieldName.ASSIGNEE.value)),
        )

    def _detect_comment(self, ctx: ChangeContext) -> Optional[ChangeRecord]:
        comments = ctx.added_comments()
        if not comments:
            return None

        text = read_attr(comments[-1], "text")
        if not isinstance(text, str) or not text:
            return None

        mentioned = extract_mentions(text, ctx.find_user_by_login)

        return ChangeRecord(
            field=FieldName.COMMENT,
            old_value=None,
            new_value=CommentValue(text=text, mentioned_users=mentioned or None),
        )

    def explain(self, changes: List[ChangeRecord]) -> str:
        """
        Generate human-readable summary of detected changes.

        Args:
            changes: Output of detect()

        Returns:
            Explanation string
        """
        if not changes:
            return f"No changes detected (policy: {self._policy.value})"

        lines = [f"{len(changes)} change(s) detected (policy: {self._policy.value})"]
        for change in changes:
            lines.append(f"  {change.field.value}: {_describe(change.old_value)} -> {_describe(change.new_value)}")
        return "\n".join(lines)


def _describe(value: Any) -> str:
    if value is None:
        return "none"
    if isinstance(value, FieldSnapshot):
        return value.name or "none"
    if isinstance(value, CommentValue):
        mentions = len(value.mentioned_users or [])
        return f"\"{value.text[:50]}\" ({mentions} mention(s))"
    return value.login or value.full_name or "unknown"
