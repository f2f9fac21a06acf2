"""
Snapshot Handler

Handles JSON snapshots of an issue update posted by a host-side hook
and converts them to a ChangeContext.
"""

import hmac
import hashlib
import logging
from collections.abc import Mapping
from typing import Optional, Dict, Any, List

from ..directory import UserDirectory
from .base import ChangeContext, IssueInfo, Comment, read_attr, text_or_none

logger = logging.getLogger("notifier.relay.snapshot")

# Optional snapshot keys and the JSON shape each must have when present
MAPPING_KEYS = ("fields", "oldValues")
LIST_KEYS = ("dirty", "addedComments")


def _mapping_or_empty(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _list_or_empty(value: Any) -> List[Any]:
    return value if isinstance(value, (list, tuple)) else []


def snapshot_problem(raw_data: Any) -> Optional[str]:
    """
    Check the top-level shape of a snapshot.

    Returns:
        Description of the first malformed key, or None if the shape is usable
    """
    if not isinstance(raw_data, dict):
        return "snapshot is not an object"
    issue = raw_data.get("issue")
    if not isinstance(issue, dict):
        return "snapshot has no issue object"
    for key in MAPPING_KEYS:
        if raw_data.get(key) is not None and not isinstance(raw_data[key], dict):
            return f"{key} must be an object"
    for key in LIST_KEYS:
        if raw_data.get(key) is not None and not isinstance(raw_data[key], list):
            return f"{key} must be a list"
    if issue.get("project") is not None and not isinstance(issue["project"], dict):
        return "issue.project must be an object"
    return None


class SnapshotContext(ChangeContext):
    """
    ChangeContext backed by a host snapshot dict.

    Expected keys (all optional):
        issue:         {id, idReadable, summary, permalink, baseUrl,
                        project: {name, presentation, shortName}}
        fields:        current values by field name
        oldValues:     pre-update values by field name
        dirty:         names of fields touched by the update
        addedComments: [{id, text, created, author}]
        currentUser:   {fullName, login, email}
    """

    def __init__(self, raw_data: Dict[str, Any], directory: Optional[UserDirectory] = None):
        self._raw = raw_data
        self._directory = directory or UserDirectory()
        self._fields = _mapping_or_empty(raw_data.get("fields"))
        self._old_values = _mapping_or_empty(raw_data.get("oldValues"))
        self._dirty = {name for name in _list_or_empty(raw_data.get("dirty")) if isinstance(name, str)}
        self._issue = self._parse_issue(_mapping_or_empty(raw_data.get("issue")))
        self._comments = self._parse_comments(_list_or_empty(raw_data.get("addedComments")))

    @staticmethod
    def _parse_issue(issue_data: Mapping) -> IssueInfo:
        project = _mapping_or_empty(issue_data.get("project"))
        short_name = text_or_none(project.get("shortName"))
        return IssueInfo(
            id=text_or_none(issue_data.get("id")),
            id_readable=text_or_none(issue_data.get("idReadable")),
            summary=text_or_none(issue_data.get("summary")),
            permalink=text_or_none(issue_data.get("permalink")),
            base_url=text_or_none(issue_data.get("baseUrl")),
            project_name=text_or_none(project.get("name")) or short_name,
            project_presentation=text_or_none(project.get("presentation")) or short_name,
        )

    @staticmethod
    def _parse_comments(comments_data: List[Any]) -> List[Comment]:
        comments = []
        for item in comments_data:
            if isinstance(item, str):
                comments.append(Comment(text=item))
                continue
            if not isinstance(item, Mapping):
                continue
            comments.append(Comment(
                text=read_attr(item, "text"),
                id=read_attr(item, "id"),
                created=read_attr(item, "created"),
                author=read_attr(item, "author"),
            ))
        return comments

    @property
    def issue(self) -> IssueInfo:
        return self._issue

    @property
    def current_user(self) -> Any:
        user = self._raw.get("currentUser")
        return user if isinstance(user, Mapping) else None

    def current_value(self, field: str) -> Any:
        return self._fields.get(field)

    def prior_value(self, field: str) -> Any:
        return self._old_values.get(field)

    def is_dirty(self, field: str) -> bool:
        return field in self._dirty

    def added_comments(self) -> List[Comment]:
        return list(self._comments)

    def find_user_by_login(self, login: str) -> Any:
        return self._directory.find_by_login(login)


class SnapshotHandler:
    """
    Handler for host snapshot webhooks.

    Verifies the optional shared-secret signature and builds a
    SnapshotContext with user lookup backed by the configured directory.
    """

    SIGNATURE_PREFIX = "sha256="

    def __init__(self, directory: Optional[UserDirectory] = None, signing_secret: str = ""):
        """
        Initialize snapshot handler.

        Args:
            directory: Users known for bare @login mentions
            signing_secret: Shared secret for HMAC-SHA256 verification
        """
        self._directory = directory or UserDirectory()
        self._signing_secret = signing_secret

    def parse_event(self, raw_data: Dict[str, Any]) -> Optional[SnapshotContext]:
        """
        Parse a snapshot into a ChangeContext.

        Returns:
            SnapshotContext, or None if the body is not a well-formed snapshot
        """
        problem = snapshot_problem(raw_data)
        if problem:
            logger.debug("Ignoring snapshot: %s", problem)
            return None
        return SnapshotContext(raw_data, directory=self._directory)

    def verify_signature(self, body: bytes, signature: str) -> bool:
        """
        Verify request signature.

        Args:
            body: Raw request body
            signature: X-Notifier-Signature header ("sha256=<hex>")

        Returns:
            True if signature is valid
        """
        if not self._signing_secret:
            # Skip verification if no secret configured
            return True

        if not signature:
            return False

        expected_sig = self.SIGNATURE_PREFIX + hmac.new(
            self._signing_secret.encode('utf-8'),
            body,
            hashlib.sha256
        ).hexdigest()

        return hmac.compare_digest(expected_sig, signature)
