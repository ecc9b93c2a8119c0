"""
Contract Lifecycle Kernel

Record store and domain core for contract-lifecycle management:
- Typed contract, confirmation-term and user records
- Role-scoped views (manager, analyst, client)
- Post-creation edit lock and stage validation
- bcrypt-hashed accounts with explicit session contexts
"""

__version__ = "0.1.0"
