"""
Payload Builder

Builds the EventPayload posted to the webhook from an update and its
detected changes.

Key Rules:
- Every issue key is always present; missing values become null
  (summary becomes an empty string)
- The builder never drops a payload, even with no changes;
  the dispatch gate belongs to the caller
"""

from typing import List, Optional

from ..common.config import DEFAULT_BASE_URL
from ..common.schemas import (
    ChangeRecord,
    EventPayload,
    FieldName,
    IssueRef,
    ProjectRef,
)
from .detector import snapshot_of
from .handlers.base import ChangeContext, IssueInfo, text_or_none
from .users import sanitize_user


def build_issue_url(issue: IssueInfo, default_base_url: str = DEFAULT_BASE_URL) -> Optional[str]:
    """
    Resolve the issue's URL.

    A host permalink wins (made root-relative unless absolute); otherwise the
    URL is built from the base URL and the readable id, falling back to the
    internal id.
    """
    permalink = text_or_none(issue.permalink)
    if permalink:
        if permalink.startswith("http"):
            return permalink
        return "/" + permalink

    base = (text_or_none(issue.base_url) or default_base_url).rstrip("/")
    issue_id = text_or_none(issue.id_readable) or text_or_none(issue.id)
    if issue_id:
        return f"{base}/issue/{issue_id}"
    return None


class PayloadBuilder:
    """
    Builds EventPayloads from ChangeContexts.

    Pipeline:
    1. Project metadata
    2. Issue view after the update (state, priority, assignee)
    3. Updater
    4. Changes, in detector order
    """

    def __init__(self, default_base_url: str = DEFAULT_BASE_URL):
        """
        Initialize payload builder.

        Args:
            default_base_url: Tracker URL used when the host supplies none
        """
        self._default_base_url = default_base_url

    def build(self, ctx: ChangeContext, changes: List[ChangeRecord]) -> EventPayload:
        """
        Build an EventPayload.

        Args:
            ctx: The update as exposed by the host
            changes: Output of ChangeDetector.detect()

        Returns:
            EventPayload with a fixed shape
        """
        info = ctx.issue

        return EventPayload(
            project=ProjectRef(
                name=text_or_none(info.project_name),
                presentation=text_or_none(info.project_presentation),
            ),
            issue=IssueRef(
                id_readable=text_or_none(info.id_readable),
                summary=text_or_none(info.summary) or "",
                url=build_issue_url(info, self._default_base_url),
                state=snapshot_of(ctx.current_value(FieldName.STATE.value)),
                priority=snapshot_of(ctx.current_value(FieldName.PRIORITY.value)),
                assignee=sanitize_user(ctx.current_value(FieldName.ASSIGNEE.value)),
            ),
            updater=sanitize_user(ctx.current_user),
            changes=list(changes),
        )
