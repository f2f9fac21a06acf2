"""
User Sanitizer

Projects user-like records onto the minimal public UserRef shape.
"""

from typing import Any, Optional

from ..common.schemas import UserRef
from .handlers.base import read_attr, text_or_none


def sanitize_user(user: Any) -> Optional[UserRef]:
    """
    Build a UserRef from a user-like record.

    Args:
        user: Mapping or object exposing fullName/login/email, or None

    Returns:
        UserRef with empty or missing attributes set to None,
        or None if the user is absent
    """
    if user is None:
        return None

    full_name = read_attr(user, "fullName")
    if full_name is None:
        full_name = read_attr(user, "full_name")

    return UserRef(
        full_name=text_or_none(full_name),
        login=text_or_none(read_attr(user, "login")),
        email=text_or_none(read_attr(user, "email")),
    )
