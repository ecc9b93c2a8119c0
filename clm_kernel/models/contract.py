"""
Module: clm_kernel.models.contract
Responsibility: ORM persistence for managed contracts.  Python attribute
    names are the domain's; column names are the hosted database's
    (``contrato``, ``cliente``, ``valor_contrato``, ...), so existing tables
    and CSV exports line up with this model.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - All five amount columns default to 0 and are NOT NULL.
    - status / negotiation_type hold the enum *values* of
      ``clm_kernel.domain.contract`` (validated at the service layer).
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clm_kernel.db.base import TrackedBase

_AMOUNT = Numeric(18, 2, asdecimal=True)


class Contract(TrackedBase):
    """
    One commercial agreement under management.

    Non-goals:
        - Derived fields (days until expiry, expiry bucket, expected stage)
          are never stored; the engines compute them on read.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        Index("idx_contract_status", "status"),
        Index("idx_contract_client", "cliente"),
        Index("idx_contract_analyst", "analista_responsavel"),
        Index("idx_contract_end_date", "data_fim_efetividade"),
    )

    # Identification
    contract_number: Mapped[str] = mapped_column("contrato", String(100), nullable=False)
    term_number: Mapped[str | None] = mapped_column("termo", String(100))
    client_name: Mapped[str] = mapped_column("cliente", String(255), nullable=False)
    client_group: Mapped[str | None] = mapped_column("grupo_cliente", String(255))
    analyst_name: Mapped[str] = mapped_column(
        "analista_responsavel", String(255), nullable=False
    )
    responsible_section: Mapped[str | None] = mapped_column("secao_responsavel", String(255))
    object_description: Mapped[str | None] = mapped_column("objeto", Text)

    # Classification
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Ativo")
    negotiation_type: Mapped[str] = mapped_column(
        "tipo_tratativa", String(30), nullable=False, default="SEM TRATATIVA"
    )
    amendment_type: Mapped[str | None] = mapped_column("tipo_aditamento", String(100))
    stage: Mapped[str | None] = mapped_column("etapa", Text)

    # Dates
    start_date: Mapped[date | None] = mapped_column("data_inicio_efetividade", Date)
    end_date: Mapped[date | None] = mapped_column("data_fim_efetividade", Date)
    progress_deadline: Mapped[date | None] = mapped_column("data_limite_andamento", Date)

    # Financials
    contract_value: Mapped[Decimal] = mapped_column(
        "valor_contrato", _AMOUNT, nullable=False, default=Decimal("0")
    )
    billed_value: Mapped[Decimal] = mapped_column(
        "valor_faturado", _AMOUNT, nullable=False, default=Decimal("0")
    )
    canceled_value: Mapped[Decimal] = mapped_column(
        "valor_cancelado", _AMOUNT, nullable=False, default=Decimal("0")
    )
    to_bill_value: Mapped[Decimal] = mapped_column(
        "valor_a_faturar", _AMOUNT, nullable=False, default=Decimal("0")
    )
    new_contract_value: Mapped[Decimal] = mapped_column(
        "valor_novo_contrato", _AMOUNT, nullable=False, default=Decimal("0")
    )

    # Additional information
    our_process_number: Mapped[str | None] = mapped_column(
        "numero_processo_sei_nosso", String(100)
    )
    client_process_number: Mapped[str | None] = mapped_column(
        "numero_processo_sei_cliente", String(100)
    )
    client_contract_number: Mapped[str | None] = mapped_column("contrato_cliente", String(100))
    previous_contract: Mapped[str | None] = mapped_column("contrato_anterior", String(100))
    crm_number: Mapped[str | None] = mapped_column("numero_pnpp_crm", String(100))
    sei_number: Mapped[str | None] = mapped_column("sei", String(100))
    new_contract_number: Mapped[str | None] = mapped_column("contrato_novo", String(100))
    new_term_number: Mapped[str | None] = mapped_column("termo_novo", String(100))
    observation: Mapped[str | None] = mapped_column("observacao", Text)

    def __repr__(self) -> str:
        return f"<Contract {self.contract_number} ({self.client_name})>"
