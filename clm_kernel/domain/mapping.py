"""
Mapping boundary between raw store rows and domain records.

Responsibility:
    Translate rows keyed by the hosted database's column names (the same
    names CSV imports and exports use) into typed ``ContractRecord`` /
    ``ConfirmationTermRecord`` / ``UserRecord`` objects and back.

Architecture position:
    Kernel > Domain -- pure, zero I/O. The only module that knows store
    column names; engines consume records exclusively.

Invariants enforced:
    - Amount columns pass through ``to_amount`` (never NaN, default 0).
    - Date columns pass through ``to_date`` (unparseable -> None).
    - ``amendment_type`` survives only when the negotiation type is
      AMENDMENT.
    - Unknown status -> None; unknown negotiation type -> NONE.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping
from uuid import UUID

from clm_kernel.domain.contract import (
    ConfirmationTermRecord,
    ContractRecord,
    ContractStatus,
    NegotiationType,
    UserRecord,
    UserRole,
)
from clm_kernel.domain.values import to_amount, to_date, to_text

# Python field -> store column
CONTRACT_COLUMNS: dict[str, str] = {
    "analyst_name": "analista_responsavel",
    "client_name": "cliente",
    "client_group": "grupo_cliente",
    "contract_number": "contrato",
    "term_number": "termo",
    "status": "status",
    "negotiation_type": "tipo_tratativa",
    "amendment_type": "tipo_aditamento",
    "stage": "etapa",
    "object_description": "objeto",
    "responsible_section": "secao_responsavel",
    "start_date": "data_inicio_efetividade",
    "end_date": "data_fim_efetividade",
    "progress_deadline": "data_limite_andamento",
    "contract_value": "valor_contrato",
    "billed_value": "valor_faturado",
    "canceled_value": "valor_cancelado",
    "to_bill_value": "valor_a_faturar",
    "new_contract_value": "valor_novo_contrato",
    "our_process_number": "numero_processo_sei_nosso",
    "client_process_number": "numero_processo_sei_cliente",
    "client_contract_number": "contrato_cliente",
    "previous_contract": "contrato_anterior",
    "crm_number": "numero_pnpp_crm",
    "sei_number": "sei",
    "new_contract_number": "contrato_novo",
    "new_term_number": "termo_novo",
    "observation": "observacao",
    "created_by": "created_by",
}

CONTRACT_AMOUNT_FIELDS: tuple[str, ...] = (
    "contract_value",
    "billed_value",
    "canceled_value",
    "to_bill_value",
    "new_contract_value",
)

CONTRACT_DATE_FIELDS: tuple[str, ...] = (
    "start_date",
    "end_date",
    "progress_deadline",
)

TERM_COLUMNS: dict[str, str] = {
    "term_number": "numero_tc",
    "associated_contract": "contrato_associado_pd",
    "process_number": "numero_processo",
    "validity_start": "data_inicio_vigencia",
    "validity_end": "data_fim_vigencia",
    "total_value": "valor_total",
    "object_description": "objeto",
    "requesting_area": "area_demandante",
    "contract_inspector": "fiscal_contrato",
    "contract_manager": "gestor_contrato",
    "created_by": "created_by",
}

USER_COLUMNS: dict[str, str] = {
    "email": "email",
    "full_name": "full_name",
    "role": "perfil",
    "client_name": "nome_cliente",
}


def parse_date(value: Any) -> date | None:
    """Parse a stored or imported date; anything unparseable is None."""
    return to_date(value)


def parse_status(value: Any) -> ContractStatus | None:
    """Map a stored status string onto the closed set, or None."""
    if isinstance(value, ContractStatus):
        return value
    text = to_text(value)
    if text is None:
        return None
    for status in ContractStatus:
        if text.casefold() in (status.value.casefold(), status.name.casefold()):
            return status
    return None


def parse_negotiation_type(value: Any) -> NegotiationType:
    """Map a stored negotiation type onto the closed set, defaulting to NONE."""
    if isinstance(value, NegotiationType):
        return value
    text = to_text(value)
    if text is None:
        return NegotiationType.NONE
    for kind in NegotiationType:
        if text.casefold() in (kind.value.casefold(), kind.name.casefold()):
            return kind
    return NegotiationType.NONE


def parse_role(value: Any) -> UserRole | None:
    """Map a stored role onto the closed set, or None."""
    if isinstance(value, UserRole):
        return value
    text = to_text(value)
    if text is None:
        return None
    for role in UserRole:
        if text.casefold() in (role.value.casefold(), role.name.casefold()):
            return role
    return None


def _parse_id(value: Any) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


def contract_fields_from_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """
    Coerce the store columns present in ``row`` into record field values.

    Only columns present in the row appear in the result, which lets
    partial updates reuse the same coercion rules.
    """
    fields: dict[str, Any] = {}
    for field, column in CONTRACT_COLUMNS.items():
        if column not in row:
            continue
        raw = row[column]
        if field in CONTRACT_AMOUNT_FIELDS:
            fields[field] = to_amount(raw)
        elif field in CONTRACT_DATE_FIELDS:
            fields[field] = to_date(raw)
        elif field == "status":
            fields[field] = parse_status(raw)
        elif field == "negotiation_type":
            fields[field] = parse_negotiation_type(raw)
        else:
            fields[field] = to_text(raw)
    return fields


def contract_from_row(row: Mapping[str, Any]) -> ContractRecord:
    """Build a ``ContractRecord`` from a raw store row."""
    fields = contract_fields_from_row(row)
    fields.setdefault("contract_number", "")
    fields.setdefault("client_name", None)
    fields.setdefault("analyst_name", None)
    if "status" not in row:
        fields["status"] = ContractStatus.ACTIVE
    if fields.get("negotiation_type") != NegotiationType.AMENDMENT:
        fields["amendment_type"] = None
    return ContractRecord(
        id=_parse_id(row.get("id")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        **fields,
    )


def contract_to_row(record: ContractRecord) -> dict[str, Any]:
    """Flatten a ``ContractRecord`` into store columns (enums as values)."""
    row: dict[str, Any] = {}
    for field, column in CONTRACT_COLUMNS.items():
        value = getattr(record, field)
        if isinstance(value, (ContractStatus, NegotiationType)):
            value = value.value
        row[column] = value
    return row


def term_from_row(row: Mapping[str, Any]) -> ConfirmationTermRecord:
    """Build a ``ConfirmationTermRecord`` from a raw store row."""
    fields: dict[str, Any] = {}
    for field, column in TERM_COLUMNS.items():
        raw = row.get(column)
        if field == "total_value":
            fields[field] = to_amount(raw)
        elif field in ("validity_start", "validity_end"):
            fields[field] = to_date(raw)
        else:
            fields[field] = to_text(raw)
    fields["term_number"] = fields["term_number"] or ""
    return ConfirmationTermRecord(
        id=_parse_id(row.get("id")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        **fields,
    )


def term_to_row(record: ConfirmationTermRecord) -> dict[str, Any]:
    """Flatten a ``ConfirmationTermRecord`` into store columns."""
    return {column: getattr(record, field) for field, column in TERM_COLUMNS.items()}


def user_from_row(row: Mapping[str, Any]) -> UserRecord:
    """
    Build a ``UserRecord`` from a raw store row.

    Any password column in the row is ignored.

    Raises:
        ValueError: If the role is outside the closed set.
    """
    role = parse_role(row.get(USER_COLUMNS["role"]))
    if role is None:
        raise ValueError(f"Unknown role: {row.get(USER_COLUMNS['role'])!r}")
    return UserRecord(
        id=_parse_id(row.get("id")),
        email=(to_text(row.get("email")) or "").lower(),
        full_name=to_text(row.get("full_name")) or "",
        role=role,
        client_name=to_text(row.get("nome_cliente")) if role == UserRole.CLIENT else None,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
