"""
Module: clm_kernel.models.user
Responsibility: ORM persistence for user accounts.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - email is unique (uq_user_email) and stored lower-case.
    - password_hash holds a bcrypt hash; clear-text passwords are never
      persisted.
    - nome_cliente is populated iff perfil = CLIENTE (service layer).
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from clm_kernel.db.base import TrackedBase


class User(TrackedBase):
    """User account for authentication and role-based views."""

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column("perfil", String(20), nullable=False)
    client_name: Mapped[str | None] = mapped_column("nome_cliente", String(255))
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
