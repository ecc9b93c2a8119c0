"""
Authentication service.

Turns an email/password pair into an explicit ``SessionContext``.  No
ambient "current user" exists anywhere in the kernel; callers hold the
returned context and pass it to selectors and services.
"""

from __future__ import annotations

from sqlalchemy import select

from clm_kernel.domain.mapping import user_from_row
from clm_kernel.domain.session import SessionContext
from clm_kernel.exceptions import InvalidCredentialsError
from clm_kernel.logging_config import get_logger
from clm_kernel.models.user import User
from clm_kernel.services.base import BaseService
from clm_kernel.services.user_service import normalize_email
from clm_kernel.utils.passwords import verify_password

logger = get_logger("services.auth")


class AuthService(BaseService[User]):
    """Password login against stored bcrypt hashes."""

    def login(self, email: str, password: str) -> SessionContext:
        """
        Authenticate and build the session context.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password (the
                two are indistinguishable to the caller).
        """
        email = normalize_email(email)
        user = self.session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("login_failed", extra={"email": email})
            raise InvalidCredentialsError(email)

        ctx = SessionContext.for_user(user_from_row(user.to_row()))
        logger.info(
            "login_succeeded",
            extra={"user_id": str(ctx.user_id), "role": ctx.role.value},
        )
        return ctx
