"""Write services over the record store (flush-only; callers commit)."""

from clm_kernel.services.auth_service import AuthService
from clm_kernel.services.base import BaseService
from clm_kernel.services.confirmation_term_service import ConfirmationTermService
from clm_kernel.services.contract_service import (
    EDITABLE_FIELDS,
    REQUIRED_FIELDS,
    ContractService,
)
from clm_kernel.services.user_service import UserService

__all__ = [
    "AuthService",
    "BaseService",
    "ConfirmationTermService",
    "ContractService",
    "EDITABLE_FIELDS",
    "REQUIRED_FIELDS",
    "UserService",
]
