"""
Module: clm_kernel.models.confirmation_term
Responsibility: ORM persistence for confirmation terms (TCs), a peer entity
    of contracts with its own CRUD lifecycle.  Not an input to any engine.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clm_kernel.db.base import TrackedBase


class ConfirmationTerm(TrackedBase):
    """A confirmation term issued under a contract."""

    __tablename__ = "termos_confirmacao"

    term_number: Mapped[str] = mapped_column("numero_tc", String(100), nullable=False)
    associated_contract: Mapped[str | None] = mapped_column(
        "contrato_associado_pd", String(100)
    )
    process_number: Mapped[str | None] = mapped_column("numero_processo", String(100))
    validity_start: Mapped[date | None] = mapped_column("data_inicio_vigencia", Date)
    validity_end: Mapped[date | None] = mapped_column("data_fim_vigencia", Date)
    total_value: Mapped[Decimal] = mapped_column(
        "valor_total", Numeric(18, 2, asdecimal=True), nullable=False, default=Decimal("0")
    )
    object_description: Mapped[str | None] = mapped_column("objeto", Text)
    requesting_area: Mapped[str | None] = mapped_column("area_demandante", String(255))
    contract_inspector: Mapped[str | None] = mapped_column("fiscal_contrato", String(255))
    contract_manager: Mapped[str | None] = mapped_column("gestor_contrato", String(255))

    def __repr__(self) -> str:
        return f"<ConfirmationTerm {self.term_number}>"
