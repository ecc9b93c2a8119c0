"""
Workflow stage tables for Extension and Renewal negotiations.

Responsibility:
    The ordered stage labels an analyst may select for a contract, and the
    days-until-expiry window in which each stage is expected.  The record
    store validates ``stage`` against ``stage_options``; the stage
    conformance engine matches day counts against the windows.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.

Invariants enforced:
    - Windows of one table are contiguous and non-overlapping: exactly one
      window matches any integer day count.
    - Labels are the literal strings persisted in the ``etapa`` column.
    - Negotiation types without a table have no selectable stages.
"""

from __future__ import annotations

from dataclasses import dataclass

from clm_kernel.domain.contract import NegotiationType


@dataclass(frozen=True)
class StageWindow:
    """
    A stage label and the day range in which it is expected.

    A day count ``d`` matches when ``(above is None or d > above)`` and
    ``(up_to is None or d <= up_to)``.
    """

    label: str
    above: int | None
    up_to: int | None

    def matches(self, days: int) -> bool:
        if self.above is not None and days <= self.above:
            return False
        if self.up_to is not None and days > self.up_to:
            return False
        return True


EXTENSION_STAGES: tuple[StageWindow, ...] = (
    StageWindow("0. Sem Status (<120)", 120, None),
    StageWindow("1. Abordagem do Cliente (120 a 90)", 90, 120),
    StageWindow("2. Abertura de Demanda (PNPP/CRM) (90 a 87)", 87, 90),
    StageWindow("3. Elaboração do Kit Proposta (87 a 80)", 80, 87),
    StageWindow(
        "4. Assinatura da ESP / Solicitação de Alçada / "
        "Entrega da Proposta ao Cliente (80 a 75)",
        75,
        80,
    ),
    StageWindow('5. Aguardando "De Acordo" do Cliente (75 a 60)', 60, 75),
    StageWindow("6. Aguardo Recebimento da Minuta Contratual do Cliente (60 a 30)", 30, 60),
    StageWindow("7. Análise Jurídica da Prodesp da Minuta do Cliente (30 a 15)", 15, 30),
    StageWindow("8. Solicitação de Atualização da Minuta Contratual (15 a 5)", 5, 15),
    StageWindow("9. Assinatura do Contrato (5 a 3)", 3, 5),
    StageWindow("10. Cadastro no ERP (3 a 2)", 2, 3),
    StageWindow("11. Reunião de Kickoff (2 a 0)", 0, 2),
    StageWindow("12. Finalizado (0)", None, 0),
)

RENEWAL_STAGES: tuple[StageWindow, ...] = (
    StageWindow("0. Sem Status (<190)", 190, None),
    StageWindow("1. Notificação a equipe de vendas (190 a 180)", 180, 190),
    StageWindow(
        "2. Abordagem do Cliente e Retorno para COCR "
        "(Renovação ou Prorrogação)(180 a 120)",
        120,
        180,
    ),
    StageWindow("3. Tratativas comerciais (120 a 90)", 90, 120),
    StageWindow("4. Recebimento do TR / Abertura de Demanda (PNPP/CRM) (90 a 87)", 87, 90),
    StageWindow("5. Elaboração do Kit Proposta (87 a 80)", 80, 87),
    StageWindow(
        "6. Assinatura da ESP / Solicitação de Alçada / "
        "Entrega da Proposta ao Cliente (80 a 75)",
        75,
        80,
    ),
    StageWindow('7. Aguardando "De Acordo" do Cliente (75 a 65)', 65, 75),
    StageWindow(
        '8. Aguardando o "De Acordo" do TR do Cliente pelo Delivery (65 a 60)', 60, 65
    ),
    StageWindow("9. Aguardo Recebimento da Minuta Contratual do Cliente (60 a 30)", 30, 60),
    StageWindow("10. Análise Jurídica da Prodesp da Minuta do Cliente (30 a 15)", 15, 30),
    StageWindow("11. Solicitação de Atualização da Minuta Contratual (15 a 5)", 5, 15),
    StageWindow("12. Assinatura do Contrato (5 a 3)", 3, 5),
    StageWindow("13. Cadastro no ERP (3 a 2)", 2, 3),
    StageWindow("14. Reunião de Kickoff (2 a 0)", 0, 2),
    StageWindow("15. Finalizado (0)", None, 0),
)

STAGE_TABLES: dict[NegotiationType, tuple[StageWindow, ...]] = {
    NegotiationType.EXTENSION: EXTENSION_STAGES,
    NegotiationType.RENEWAL: RENEWAL_STAGES,
}


def stage_table(negotiation_type: NegotiationType | None) -> tuple[StageWindow, ...]:
    """The stage windows for a negotiation type (empty if it has none)."""
    if negotiation_type is None:
        return ()
    return STAGE_TABLES.get(negotiation_type, ())


def stage_options(negotiation_type: NegotiationType | None) -> list[str]:
    """Ordered stage labels selectable for a negotiation type."""
    return [window.label for window in stage_table(negotiation_type)]
