"""
Typed exception hierarchy for the contract lifecycle kernel.

Every error carries a machine-readable ``code`` class attribute and keeps
its context as structured attributes, so callers catch by type and log or
serialize the fields instead of parsing messages.

    ClmKernelError (base)
    |
    +-- RecordError
    |   +-- RecordNotFoundError
    |   |   +-- ContractNotFoundError
    |   |   +-- ConfirmationTermNotFoundError
    |   |   +-- UserNotFoundError
    |   +-- InvalidContractError
    |   +-- LockedFieldError
    |   +-- InvalidStageError
    |
    +-- UserError
    |   +-- InvalidUserError
    |   +-- DuplicateEmailError
    |
    +-- AuthError
    |   +-- AuthenticationError
    |   |   +-- InvalidCredentialsError
    |   +-- AccessDeniedError
    |
    +-- IngestionError
        +-- UnsupportedSourceError
        +-- MissingColumnsError
        +-- NoValidRowsError

Category   | Code                     | When Raised
-----------|--------------------------|------------------------------------------
Record     | RECORD_NOT_FOUND         | id does not exist in the store
           | CONTRACT_NOT_FOUND       | contract id does not exist
           | TERM_NOT_FOUND           | confirmation term id does not exist
           | USER_NOT_FOUND           | user id/email does not exist
           | INVALID_CONTRACT         | required contract field blank or unknown value
           | LOCKED_FIELD             | update touches a field locked after create
           | INVALID_STAGE            | stage not in the negotiation-type table
-----------|--------------------------|------------------------------------------
User       | INVALID_USER             | bad role / client-name combination
           | DUPLICATE_EMAIL          | email already registered
-----------|--------------------------|------------------------------------------
Auth       | INVALID_CREDENTIALS      | unknown email or wrong password
           | ACCESS_DENIED            | role may not perform the operation
-----------|--------------------------|------------------------------------------
Ingestion  | UNSUPPORTED_SOURCE       | file extension has no adapter
           | MISSING_COLUMNS          | required columns absent from header
           | NO_VALID_ROWS            | every row failed required-field checks

The derivation engines never raise for malformed amounts or dates; those
coerce to ``0`` / ``None`` at the mapping boundary.
"""


class ClmKernelError(Exception):
    """Base exception for all contract lifecycle kernel errors."""

    code: str = "CLM_KERNEL_ERROR"


# Record store exceptions


class RecordError(ClmKernelError):
    """Base exception for record store errors."""

    code: str = "RECORD_ERROR"


class RecordNotFoundError(RecordError):
    """Record with the given identifier was not found."""

    code: str = "RECORD_NOT_FOUND"
    entity: str = "record"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"{self.entity.capitalize()} not found: {record_id}")


class ContractNotFoundError(RecordNotFoundError):
    """Contract with the given id was not found."""

    code: str = "CONTRACT_NOT_FOUND"
    entity: str = "contract"


class ConfirmationTermNotFoundError(RecordNotFoundError):
    """Confirmation term with the given id was not found."""

    code: str = "TERM_NOT_FOUND"
    entity: str = "confirmation term"


class UserNotFoundError(RecordNotFoundError):
    """User with the given id or email was not found."""

    code: str = "USER_NOT_FOUND"
    entity: str = "user"


class InvalidContractError(RecordError):
    """Contract data is missing a required field or holds an unknown value."""

    code: str = "INVALID_CONTRACT"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid contract field {field}: {reason}")


class LockedFieldError(RecordError):
    """
    Update touches fields that are locked once a contract exists.

    Only negotiation, financial, additional-info and observation fields
    stay editable after creation.
    """

    code: str = "LOCKED_FIELD"

    def __init__(self, record_id: str, fields: list[str]):
        self.record_id = record_id
        self.fields = fields
        super().__init__(
            f"Fields locked after creation on {record_id}: {', '.join(fields)}"
        )


class InvalidStageError(RecordError):
    """Workflow stage is not part of the negotiation type's stage table."""

    code: str = "INVALID_STAGE"

    def __init__(self, negotiation_type: str, stage: str):
        self.negotiation_type = negotiation_type
        self.stage = stage
        super().__init__(
            f"Stage {stage!r} is not valid for negotiation type {negotiation_type}"
        )


# User exceptions


class UserError(ClmKernelError):
    """Base exception for user account errors."""

    code: str = "USER_ERROR"


class InvalidUserError(UserError):
    """User data violates the role / client-name invariant."""

    code: str = "INVALID_USER"

    def __init__(self, email: str, reason: str):
        self.email = email
        self.reason = reason
        super().__init__(f"Invalid user {email}: {reason}")


class DuplicateEmailError(UserError):
    """Email is already registered."""

    code: str = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email already registered: {email}")


# Authentication / authorization exceptions


class AuthError(ClmKernelError):
    """Base exception for authentication and authorization errors."""

    code: str = "AUTH_ERROR"


class AuthenticationError(AuthError):
    """Authentication failed."""

    code: str = "AUTHENTICATION_FAILED"


class InvalidCredentialsError(AuthenticationError):
    """
    Unknown email or wrong password.

    Both cases share one error so callers cannot tell which emails exist.
    """

    code: str = "INVALID_CREDENTIALS"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Invalid credentials for {email}")


class AccessDeniedError(AuthError):
    """The session's role may not perform the requested operation."""

    code: str = "ACCESS_DENIED"

    def __init__(self, role: str, operation: str):
        self.role = role
        self.operation = operation
        super().__init__(f"Role {role} may not {operation}")


# Ingestion exceptions


class IngestionError(ClmKernelError):
    """Base exception for import/export errors."""

    code: str = "INGESTION_ERROR"


class UnsupportedSourceError(IngestionError):
    """No adapter is registered for the source file type."""

    code: str = "UNSUPPORTED_SOURCE"

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Unsupported import source: {source}")


class MissingColumnsError(IngestionError):
    """The source header lacks required columns."""

    code: str = "MISSING_COLUMNS"

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


class NoValidRowsError(IngestionError):
    """Every source row failed the required-field check."""

    code: str = "NO_VALID_ROWS"

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        super().__init__(
            f"No valid contracts found in {total_rows} row(s); "
            "contract number, client and analyst are required"
        )
