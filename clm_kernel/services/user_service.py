"""
Service layer for user accounts.

Responsibility:
    Create, update and delete accounts while holding the account
    invariants: unique lower-case email, a role from the closed set, a
    client name exactly when the role is CLIENT, and a bcrypt password
    hash in place of the password itself.

Architecture position:
    Kernel > Services.

Failure modes:
    - InvalidUserError for a blank email/name/password, an unknown role,
      or a CLIENT without a client name.
    - DuplicateEmailError when the email is taken.
    - UserNotFoundError for unknown ids.
    - AccessDeniedError when a non-manager session manages accounts.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from clm_kernel.domain.contract import UserRecord, UserRole
from clm_kernel.domain.mapping import parse_role, user_from_row
from clm_kernel.domain.session import SessionContext, require_role
from clm_kernel.domain.values import to_text
from clm_kernel.exceptions import DuplicateEmailError, InvalidUserError, UserNotFoundError
from clm_kernel.logging_config import get_logger
from clm_kernel.models.user import User
from clm_kernel.services.base import BaseService
from clm_kernel.utils.passwords import hash_password

logger = get_logger("services.user")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _require_manager(ctx: SessionContext | None) -> None:
    if ctx is not None:
        require_role(ctx, (UserRole.MANAGER,), "manage users")


class UserService(BaseService[User]):
    """
    Service for managing user accounts.

    Guarantees:
        - Returned ``UserRecord`` objects never carry password material.
        - ``client_name`` is stored only for CLIENT accounts.
    """

    def _to_dto(self, user: User) -> UserRecord:
        return user_from_row(user.to_row())

    def _get_by_id(self, user_id: UUID) -> User:
        user = self.session.get(User, user_id)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    def _email_taken(self, email: str, exclude_id: UUID | None = None) -> bool:
        stmt = select(User.id).where(User.email == email)
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return self.session.execute(stmt).first() is not None

    @staticmethod
    def _resolve_role(email: str, role: UserRole | str) -> UserRole:
        resolved = parse_role(role)
        if resolved is None:
            raise InvalidUserError(email, f"unknown role {role!r}")
        return resolved

    @staticmethod
    def _resolve_client(email: str, role: UserRole, client_name: str | None) -> str | None:
        if role != UserRole.CLIENT:
            return None
        client = to_text(client_name)
        if client is None:
            raise InvalidUserError(email, "client accounts require a client name")
        return client

    def get_by_id(self, user_id: UUID) -> UserRecord:
        """
        Raises:
            UserNotFoundError: If the user doesn't exist.
        """
        return self._to_dto(self._get_by_id(user_id))

    def create_user(
        self,
        email: str,
        full_name: str,
        role: UserRole | str,
        password: str,
        client_name: str | None = None,
        ctx: SessionContext | None = None,
    ) -> UserRecord:
        """
        Create an account.

        Args:
            email: Login email; stored trimmed and lower-case.
            full_name: Display name; analysts are matched to contracts by it.
            role: A ``UserRole`` or its stored value (``"GESTOR"``...).
            password: Clear-text password, hashed before storage.
            client_name: Required for CLIENT accounts, ignored otherwise.
            ctx: Acting session; must be a manager when given.  Omitted
                only when bootstrapping the first account.

        Raises:
            AccessDeniedError: ``ctx`` is not a manager.
            InvalidUserError: Invalid field combination.
            DuplicateEmailError: Email already registered.
        """
        _require_manager(ctx)
        email = normalize_email(email)
        if not email or "@" not in email:
            raise InvalidUserError(email, "a valid email is required")
        name = to_text(full_name)
        if name is None:
            raise InvalidUserError(email, "full name is required")
        if not password:
            raise InvalidUserError(email, "password is required")
        resolved = self._resolve_role(email, role)
        client = self._resolve_client(email, resolved, client_name)
        if self._email_taken(email):
            raise DuplicateEmailError(email)

        user = User(
            email=email,
            full_name=name,
            role=resolved.value,
            client_name=client,
            password_hash=hash_password(password),
        )
        self.session.add(user)
        self.session.flush()

        logger.info(
            "user_created",
            extra={"user_id": str(user.id), "email": email, "role": resolved.value},
        )
        return self._to_dto(user)

    def update_user(
        self,
        user_id: UUID,
        *,
        email: str | None = None,
        full_name: str | None = None,
        role: UserRole | str | None = None,
        client_name: str | None = None,
        password: str | None = None,
        ctx: SessionContext | None = None,
    ) -> UserRecord:
        """
        Update an account.  ``None`` leaves a field unchanged, except that
        ``client_name`` is re-derived from the resulting role.

        Raises:
            UserNotFoundError: Unknown id.
            InvalidUserError: Invalid field combination.
            AccessDeniedError: ``ctx`` is not a manager.
            DuplicateEmailError: New email belongs to another account.
        """
        _require_manager(ctx)
        user = self._get_by_id(user_id)

        if email is not None:
            new_email = normalize_email(email)
            if not new_email or "@" not in new_email:
                raise InvalidUserError(new_email, "a valid email is required")
            if self._email_taken(new_email, exclude_id=user.id):
                raise DuplicateEmailError(new_email)
            user.email = new_email
        if full_name is not None:
            name = to_text(full_name)
            if name is None:
                raise InvalidUserError(user.email, "full name is required")
            user.full_name = name

        resolved = self._resolve_role(user.email, role if role is not None else user.role)
        user.role = resolved.value
        user.client_name = self._resolve_client(
            user.email,
            resolved,
            client_name if client_name is not None else user.client_name,
        )
        if password:
            user.password_hash = hash_password(password)

        self.session.flush()
        logger.info(
            "user_updated",
            extra={
                "user_id": str(user_id),
                "role": resolved.value,
                "password_changed": bool(password),
            },
        )
        return self._to_dto(user)

    def delete_user(self, user_id: UUID, ctx: SessionContext | None = None) -> None:
        """
        Raises:
            UserNotFoundError: Unknown id.
            AccessDeniedError: ``ctx`` is not a manager.
        """
        _require_manager(ctx)
        user = self._get_by_id(user_id)
        self.session.delete(user)
        self.session.flush()
        logger.info("user_deleted", extra={"user_id": str(user_id)})
