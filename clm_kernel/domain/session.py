"""
Session context and role-based contract visibility.

Responsibility:
    ``SessionContext`` is the explicit authenticated-user object passed to
    every query/analysis call. ``visible_contracts`` applies the role rules
    that decide which contracts a session may see.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Nothing in the kernel reads ambient
    session state; callers always pass the context in.

Visibility rules:
    - MANAGER: every contract.
    - ANALYST: contracts whose analyst name equals the user's full name, or
      whose ``created_by`` equals the user's email (trimmed, case-insensitive).
    - CLIENT: contracts whose client name equals the user's client name
      (trimmed, case-insensitive). A client without a client name sees nothing.

Operation permissions (``require_role``):
    - Contract create/update and stage control: MANAGER, ANALYST.
    - Contract delete, import, export, clear, portfolio analysis and user
      management: MANAGER only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable
from uuid import UUID

from clm_kernel.domain.contract import ContractRecord, UserRecord, UserRole
from clm_kernel.exceptions import AccessDeniedError


def _norm(value: str | None) -> str:
    return (value or "").strip().casefold()


@dataclass(frozen=True)
class SessionContext:
    """The authenticated user on whose behalf a call runs."""

    user_id: UUID | None
    email: str
    full_name: str
    role: UserRole
    client_name: str | None = None

    @classmethod
    def for_user(cls, user: UserRecord) -> SessionContext:
        return cls(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            client_name=user.client_name,
        )

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER

    def can_see(self, contract: ContractRecord) -> bool:
        """True if the contract is within this session's view."""
        if self.role == UserRole.MANAGER:
            return True
        if self.role == UserRole.ANALYST:
            name = _norm(self.full_name)
            email = _norm(self.email)
            return (bool(name) and _norm(contract.analyst_name) == name) or (
                bool(email) and _norm(contract.created_by) == email
            )
        if self.role == UserRole.CLIENT:
            client = _norm(self.client_name)
            return bool(client) and _norm(contract.client_name) == client
        return False


def visible_contracts(
    contracts: Iterable[ContractRecord],
    ctx: SessionContext,
) -> list[ContractRecord]:
    """Filter contracts down to the session's view, preserving order."""
    return [c for c in contracts if ctx.can_see(c)]


def require_role(
    ctx: SessionContext,
    allowed: Iterable[UserRole],
    operation: str,
) -> None:
    """
    Raise unless the session's role is one of ``allowed``.

    Raises:
        AccessDeniedError: The role may not perform ``operation``.
    """
    if ctx.role not in tuple(allowed):
        raise AccessDeniedError(ctx.role.value, operation)
