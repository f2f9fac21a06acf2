"""
Mention Extractor

Finds people mentioned in comment text.

Two syntaxes are recognized:
- Structured: @{fullName,login,displayLogin,email} carries the display data
  inline, so it is trusted as-is without a directory lookup.
- Bare: @login, resolved through the host's user lookup.

Each scan starts fresh from the beginning of the text; no scan state is
kept between calls.
"""

import re
import logging
from typing import Any, Callable, List, Optional, Set

from ..common.schemas import UserRef
from .users import sanitize_user

logger = logging.getLogger("notifier.relay.mentions")

STRUCTURED_MENTION = re.compile(r'@\{([^,]+),([^,]+),([^,]+),([^}]+)\}')
BARE_MENTION = re.compile(r'@([a-zA-Z0-9._-]+)')

UserLookup = Callable[[str], Any]


def _lookup(find_by_login: Optional[UserLookup], login: str) -> Any:
    """Best-effort lookup; a failing backend counts as not-found"""
    if find_by_login is None:
        return None
    try:
        return find_by_login(login)
    except Exception as e:
        logger.debug("User lookup failed for %s: %s", login, e)
        return None


def extract_mentions(text: Optional[str], find_by_login: Optional[UserLookup] = None) -> List[UserRef]:
    """
    Extract mentioned users from text.

    Args:
        text: Comment text (may be empty or None)
        find_by_login: Lookup returning a user-like record or None

    Returns:
        UserRefs in order of first appearance, one per login.
        Structured mentions come first and shadow bare mentions of the same login.
    """
    if not isinstance(text, str) or not text:
        return []

    users: List[UserRef] = []
    seen: Set[str] = set()

    for match in STRUCTURED_MENTION.finditer(text):
        full_name, login, _display_login, email = match.groups()
        if login in seen:
            continue
        seen.add(login)
        users.append(UserRef(full_name=full_name, login=login, email=email))

    # Blank out structured mentions so their emails are not read as bare mentions
    remaining = STRUCTURED_MENTION.sub(" ", text)

    for match in BARE_MENTION.finditer(remaining):
        login = match.group(1)
        if login in seen:
            continue
        seen.add(login)
        user = _lookup(find_by_login, login)
        if user is not None:
            users.append(sanitize_user(user))

    return users
