"""
Read-only queries over user accounts.

Returned ``UserRecord`` objects never carry the password hash.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select

from clm_kernel.domain.contract import UserRecord
from clm_kernel.domain.mapping import user_from_row
from clm_kernel.exceptions import UserNotFoundError
from clm_kernel.models.user import User
from clm_kernel.selectors.base import BaseSelector


class UserSelector(BaseSelector[User]):
    """Read access to users."""

    model = User

    def _to_dto(self, row: User) -> UserRecord:
        return user_from_row(row.to_row())

    def get(self, user_id: UUID) -> UserRecord:
        """
        Raises:
            UserNotFoundError: If no user has this id.
        """
        row = self.session.get(User, user_id)
        if row is None:
            raise UserNotFoundError(str(user_id))
        return self._to_dto(row)

    def find_by_email(self, email: str) -> UserRecord | None:
        """Look up a user by email (trimmed, case-insensitive)."""
        stmt = select(User).where(User.email == email.strip().lower())
        row = self.session.execute(stmt).scalar_one_or_none()
        return self._to_dto(row) if row else None
