"""
Tests for User Sanitizer

Tests projection of user-like records onto UserRef.
"""

from types import SimpleNamespace


class TestSanitizeUser:
    """Tests for sanitize_user"""

    def test_none_user(self):
        from notifier.relay.users import sanitize_user

        assert sanitize_user(None) is None

    def test_mapping_user(self):
        from notifier.relay.users import sanitize_user

        user = sanitize_user({
            "fullName": "Alice Smith",
            "login": "alice",
            "email": "alice@example.com",
            "ringId": "internal-id",
        })

        assert user.full_name == "Alice Smith"
        assert user.login == "alice"
        assert user.email == "alice@example.com"

    def test_object_user(self):
        """Host entities expose attributes rather than keys"""
        from notifier.relay.users import sanitize_user

        host_user = SimpleNamespace(fullName="Bob", login="bob", email=None)

        user = sanitize_user(host_user)

        assert user.full_name == "Bob"
        assert user.login == "bob"
        assert user.email is None

    def test_empty_attributes_become_none(self):
        from notifier.relay.users import sanitize_user

        user = sanitize_user({"fullName": "", "login": "carol"})

        assert user.full_name is None
        assert user.login == "carol"
        assert user.email is None

    def test_non_string_attributes_become_none(self):
        from notifier.relay.users import sanitize_user

        user = sanitize_user({"fullName": ["not", "a", "name"], "login": 42})

        assert user.full_name is None
        assert user.login is None

    def test_no_reference_to_source(self):
        """Mutating the source after sanitizing does not leak into the result"""
        from notifier.relay.users import sanitize_user

        source = {"fullName": "Dana", "login": "dana", "email": "dana@example.com"}
        user = sanitize_user(source)
        source["login"] = "someone-else"

        assert user.login == "dana"
        assert set(user.model_dump(by_alias=True)) == {
            "fullName", "login", "email",
        }

    def test_sanitize_user_ref(self):
        """An already-sanitized UserRef round-trips"""
        from notifier.common.schemas import UserRef
        from notifier.relay.users import sanitize_user

        ref = UserRef(full_name="Eve", login="eve", email="eve@example.com")

        assert sanitize_user(ref) == ref
