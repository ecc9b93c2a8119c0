"""
Tests for confirmation term CRUD.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from clm_kernel.domain.contract import ConfirmationTermRecord
from clm_kernel.exceptions import ConfirmationTermNotFoundError, InvalidContractError
from clm_kernel.selectors.confirmation_term_selector import ConfirmationTermSelector
from clm_kernel.services.confirmation_term_service import ConfirmationTermService


def _term(number="TC-001", **kwargs):
    return ConfirmationTermRecord(id=None, term_number=number, **kwargs)


class TestConfirmationTermService:
    """Tests for ConfirmationTermService."""

    def test_create_and_get(self, session, manager_ctx):
        service = ConfirmationTermService(session)

        created = service.create(
            _term(total_value=Decimal("1500.50"), validity_end=date(2026, 6, 30)),
            manager_ctx,
        )

        fetched = ConfirmationTermSelector(session).get(created.id)
        assert fetched.term_number == "TC-001"
        assert fetched.total_value == Decimal("1500.50")
        assert fetched.validity_end == date(2026, 6, 30)
        assert fetched.created_by == manager_ctx.email

    def test_term_number_required(self, session):
        with pytest.raises(InvalidContractError):
            ConfirmationTermService(session).create(_term("  "))

    def test_update_any_field(self, session):
        service = ConfirmationTermService(session)
        term = service.create(_term())

        updated = service.update(
            term.id,
            {"term_number": "TC-002", "total_value": "2.000,00", "validity_start": "01/01/2026"},
        )

        assert updated.term_number == "TC-002"
        assert updated.total_value == Decimal("2000.00")
        assert updated.validity_start == date(2026, 1, 1)

    def test_update_cannot_blank_number(self, session):
        service = ConfirmationTermService(session)
        term = service.create(_term())

        with pytest.raises(InvalidContractError):
            service.update(term.id, {"term_number": ""})

    def test_delete_and_clear(self, session):
        service = ConfirmationTermService(session)
        term = service.create(_term())
        service.bulk_create([_term("TC-A"), _term("TC-B")])

        service.delete(term.id)
        with pytest.raises(ConfirmationTermNotFoundError):
            service.get_by_id(term.id)

        assert service.clear() == 2

    def test_missing(self, session):
        with pytest.raises(ConfirmationTermNotFoundError):
            ConfirmationTermService(session).update(uuid4(), {"objeto": "x"})
