"""Utility modules for the contract lifecycle kernel."""

from clm_kernel.utils.passwords import hash_password, verify_password

__all__ = [
    "hash_password",
    "verify_password",
]
