"""
Tests for the mapping boundary between store rows and domain records.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from clm_kernel.domain.contract import ContractStatus, NegotiationType, UserRole
from clm_kernel.domain.mapping import (
    contract_fields_from_row,
    contract_from_row,
    contract_to_row,
    parse_negotiation_type,
    parse_status,
    term_from_row,
    user_from_row,
)


class TestContractFromRow:
    """Tests for contract_from_row."""

    def test_full_row(self):
        contract_id = uuid4()
        row = {
            "id": str(contract_id),
            "contrato": "CT-001",
            "cliente": "Cliente A",
            "analista_responsavel": "Ana Silva",
            "status": "Ativo",
            "tipo_tratativa": "PRORROGAÇÃO",
            "etapa": "1. Abordagem do Cliente (120 a 90)",
            "data_fim_efetividade": "31/12/2026",
            "valor_contrato": "R$ 10.000,00",
            "valor_faturado": 2500,
        }

        contract = contract_from_row(row)

        assert contract.id == contract_id
        assert contract.contract_number == "CT-001"
        assert contract.status == ContractStatus.ACTIVE
        assert contract.negotiation_type == NegotiationType.EXTENSION
        assert contract.end_date == date(2026, 12, 31)
        assert contract.contract_value == Decimal("10000.00")
        assert contract.billed_value == Decimal("2500")
        assert contract.canceled_value == Decimal("0")

    def test_missing_status_defaults_active(self):
        assert contract_from_row({"contrato": "X"}).status == ContractStatus.ACTIVE

    def test_unknown_status_is_none(self):
        contract = contract_from_row({"contrato": "X", "status": "Suspenso"})

        assert contract.status is None
        assert not contract.is_active

    def test_amendment_type_cleared_unless_amendment(self):
        row = {"contrato": "X", "tipo_tratativa": "RENOVAÇÃO", "tipo_aditamento": "Valor"}

        assert contract_from_row(row).amendment_type is None

        row["tipo_tratativa"] = "ADITAMENTO"
        assert contract_from_row(row).amendment_type == "Valor"

    def test_partial_fields(self):
        assert contract_fields_from_row({"valor_contrato": "5"}) == {"contract_value": Decimal("5")}

    def test_round_trip_columns(self, make_contract):
        contract = make_contract(value="10", end_in_days=5)

        row = contract_to_row(contract)

        assert row["valor_contrato"] == Decimal("10")
        assert row["status"] == "Ativo"
        assert row["tipo_tratativa"] == "SEM TRATATIVA"
        assert contract_from_row(row).end_date == contract.end_date


class TestEnumParsing:
    @pytest.mark.parametrize("raw", ["Ativo", "ativo", "ACTIVE", ContractStatus.ACTIVE])
    def test_status(self, raw):
        assert parse_status(raw) == ContractStatus.ACTIVE

    def test_unknown_negotiation_type_defaults_none(self):
        assert parse_negotiation_type("qualquer") == NegotiationType.NONE
        assert parse_negotiation_type(None) == NegotiationType.NONE


class TestOtherRecords:
    def test_term_from_row(self):
        term = term_from_row({"numero_tc": "TC-1", "valor_total": "1.000,50", "data_fim_vigencia": "2026-06-30"})

        assert term.term_number == "TC-1"
        assert term.total_value == Decimal("1000.50")
        assert term.validity_end == date(2026, 6, 30)

    def test_user_from_row_drops_client_for_non_client(self):
        user = user_from_row(
            {"email": " A@B.COM ", "full_name": "A", "perfil": "ANALISTA", "nome_cliente": "X"}
        )

        assert user.email == "a@b.com"
        assert user.role == UserRole.ANALYST
        assert user.client_name is None

    def test_user_from_row_unknown_role(self):
        with pytest.raises(ValueError):
            user_from_row({"email": "a@b.com", "perfil": "ADMIN"})
