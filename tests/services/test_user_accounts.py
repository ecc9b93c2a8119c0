"""
Tests for user accounts, password hashing and login.
"""

from uuid import uuid4

import pytest

from clm_kernel.domain.contract import UserRole
from clm_kernel.exceptions import (
    AccessDeniedError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidUserError,
    UserNotFoundError,
)
from clm_kernel.models.user import User
from clm_kernel.selectors.user_selector import UserSelector
from clm_kernel.services.auth_service import AuthService
from clm_kernel.services.user_service import UserService
from clm_kernel.utils.passwords import hash_password, verify_password


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("s3cret")

        assert hashed != "s3cret"
        assert verify_password("s3cret", hashed)
        assert not verify_password("wrong", hashed)

    def test_fresh_salt_per_hash(self):
        assert hash_password("same") != hash_password("same")

    def test_malformed_hash_is_false(self):
        assert not verify_password("x", "not-a-bcrypt-hash")
        assert not verify_password("x", "")


class TestUserService:
    """Tests for UserService."""

    def test_create_normalizes_email(self, session):
        user = UserService(session).create_user(" Gestor@Example.COM ", "Gestor", "GESTOR", "pw")

        assert user.email == "gestor@example.com"
        assert user.role == UserRole.MANAGER
        assert user.client_name is None

    def test_password_stored_hashed(self, session):
        user = UserService(session).create_user("a@example.com", "A", UserRole.ANALYST, "pw")

        stored = session.get(User, user.id)

        assert stored.password_hash != "pw"
        assert verify_password("pw", stored.password_hash)

    def test_client_requires_client_name(self, session):
        with pytest.raises(InvalidUserError):
            UserService(session).create_user("c@example.com", "C", UserRole.CLIENT, "pw")

    def test_client_name_ignored_for_other_roles(self, session):
        user = UserService(session).create_user(
            "a@example.com", "A", UserRole.ANALYST, "pw", client_name="Cliente A"
        )

        assert user.client_name is None

    def test_duplicate_email(self, session):
        service = UserService(session)
        service.create_user("a@example.com", "A", UserRole.ANALYST, "pw")

        with pytest.raises(DuplicateEmailError):
            service.create_user("A@EXAMPLE.COM", "B", UserRole.ANALYST, "pw")

    def test_unknown_role(self, session):
        with pytest.raises(InvalidUserError):
            UserService(session).create_user("a@example.com", "A", "ADMIN", "pw")

    def test_update_role_to_client(self, session):
        service = UserService(session)
        user = service.create_user("a@example.com", "A", UserRole.ANALYST, "pw")

        updated = service.update_user(user.id, role=UserRole.CLIENT, client_name="Cliente A")

        assert updated.role == UserRole.CLIENT
        assert updated.client_name == "Cliente A"

    def test_update_role_away_from_client_clears_name(self, session):
        service = UserService(session)
        user = service.create_user("c@example.com", "C", UserRole.CLIENT, "pw", client_name="Cliente A")

        updated = service.update_user(user.id, role=UserRole.MANAGER)

        assert updated.client_name is None

    def test_update_password(self, session):
        service = UserService(session)
        user = service.create_user("a@example.com", "A", UserRole.ANALYST, "old")

        service.update_user(user.id, password="new")

        ctx = AuthService(session).login("a@example.com", "new")
        assert ctx.user_id == user.id

    def test_delete(self, session):
        service = UserService(session)
        user = service.create_user("a@example.com", "A", UserRole.ANALYST, "pw")

        service.delete_user(user.id)

        with pytest.raises(UserNotFoundError):
            service.get_by_id(user.id)

    def test_find_by_email(self, session):
        UserService(session).create_user("a@example.com", "A", UserRole.ANALYST, "pw")

        assert UserSelector(session).find_by_email(" A@example.com ").full_name == "A"
        assert UserSelector(session).find_by_email("b@example.com") is None

    def test_get_missing(self, session):
        with pytest.raises(UserNotFoundError):
            UserSelector(session).get(uuid4())


class TestUserManagementPermissions:
    """Account writes are reserved for managers when a session is given."""

    def test_manager_creates_account(self, session, manager_ctx):
        user = UserService(session).create_user(
            "ana@example.com", "Ana Silva", UserRole.ANALYST, "pw", ctx=manager_ctx
        )

        assert user.role == UserRole.ANALYST

    @pytest.mark.parametrize("ctx_fixture", ["analyst_ctx", "client_ctx"])
    def test_non_manager_cannot_create(self, session, request, ctx_fixture):
        ctx = request.getfixturevalue(ctx_fixture)

        with pytest.raises(AccessDeniedError) as exc_info:
            UserService(session).create_user(
                "x@example.com", "X", UserRole.MANAGER, "pw", ctx=ctx
            )

        assert exc_info.value.operation == "manage users"
        assert UserSelector(session).find_by_email("x@example.com") is None

    def test_non_manager_cannot_update_or_delete(self, session, analyst_ctx):
        service = UserService(session)
        user = service.create_user("b@example.com", "B", UserRole.ANALYST, "pw")

        with pytest.raises(AccessDeniedError):
            service.update_user(user.id, role=UserRole.MANAGER, ctx=analyst_ctx)
        with pytest.raises(AccessDeniedError):
            service.delete_user(user.id, analyst_ctx)

        assert UserSelector(session).get(user.id).role == UserRole.ANALYST

    def test_manager_updates_and_deletes(self, session, manager_ctx):
        service = UserService(session)
        user = service.create_user("b@example.com", "B", UserRole.ANALYST, "pw")

        service.update_user(user.id, full_name="Bruno", ctx=manager_ctx)
        service.delete_user(user.id, manager_ctx)

        assert UserSelector(session).find_by_email("b@example.com") is None


class TestAuthService:
    """Tests for login."""

    def test_login_builds_context(self, session, captured_logs):
        UserService(session).create_user(
            "c@example.com", "Contato", UserRole.CLIENT, "pw", client_name="Cliente A"
        )

        ctx = AuthService(session).login("C@example.com", "pw")

        assert ctx.email == "c@example.com"
        assert ctx.role == UserRole.CLIENT
        assert ctx.client_name == "Cliente A"
        assert any(r["message"] == "login_succeeded" for r in captured_logs())

    def test_wrong_password(self, session):
        UserService(session).create_user("a@example.com", "A", UserRole.ANALYST, "pw")

        with pytest.raises(InvalidCredentialsError):
            AuthService(session).login("a@example.com", "nope")

    def test_unknown_email(self, session):
        with pytest.raises(InvalidCredentialsError):
            AuthService(session).login("ghost@example.com", "pw")
