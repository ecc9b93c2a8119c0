"""Read-only selectors over the record store."""

from clm_kernel.selectors.base import BaseSelector, order_clause
from clm_kernel.selectors.confirmation_term_selector import ConfirmationTermSelector
from clm_kernel.selectors.contract_selector import ContractSelector
from clm_kernel.selectors.user_selector import UserSelector

__all__ = [
    "BaseSelector",
    "ConfirmationTermSelector",
    "ContractSelector",
    "UserSelector",
    "order_clause",
]
