"""
ORM models for the record store.

Importing this package registers every table on ``Base.metadata``.
"""

from clm_kernel.models.confirmation_term import ConfirmationTerm
from clm_kernel.models.contract import Contract
from clm_kernel.models.user import User

__all__ = [
    "ConfirmationTerm",
    "Contract",
    "User",
]
