"""
User Directory

Login-keyed lookup used to resolve bare @login mentions.
"""

from typing import Optional, Dict, Any, Iterable


class UserDirectory:
    """
    In-memory user directory.

    Users are plain dicts with at least a "login" key; entries without a
    login are ignored. Lookup is case-sensitive, as logins are.
    """

    def __init__(self, users: Optional[Iterable[Dict[str, Any]]] = None):
        self._by_login: Dict[str, Dict[str, Any]] = {}
        for user in users or []:
            login = user.get("login")
            if login:
                self._by_login[login] = dict(user)

    def __len__(self) -> int:
        return len(self._by_login)

    def find_by_login(self, login: str) -> Optional[Dict[str, Any]]:
        return self._by_login.get(login)
