"""Benefit description resolution.

Benefit summary rows carry only ids; their labels live in two independently
maintained catalogs. Resolvers are tried in order. A resolver returns None
when it does not apply to the line, otherwise the description it settled on,
which ends the search even when empty:

    1. Disease-procedure master (only for the disease/procedure benefit with a
       sub-benefit id and a non-empty master): the matching entry's code, or
       '' when the sub-benefit id is unknown
    2. Benefits catalog: main coverage text for top-level entries, sub
       coverage text for children
    3. Nothing matched: empty string
"""

from collections.abc import Callable, Iterable, Sequence

from preauth_calculators.claim_cost_calculator.models import (
    BenefitCostSummaryLine,
    BenefitMasterEntry,
    DiseaseProcedureCode,
    ResolvedBenefitLine,
)

# Product benefit id of the "Disease Procedure" benefit
DISEASE_PROCEDURE_BENEFIT_ID = 14

DescriptionResolver = Callable[[BenefitCostSummaryLine], str | None]


def disease_procedure_resolver(
    disease_procedure_codes: Sequence[DiseaseProcedureCode],
    disease_procedure_benefit_id: int = DISEASE_PROCEDURE_BENEFIT_ID,
) -> DescriptionResolver:
    """Build a resolver that labels disease/procedure benefits by their code.

    An unknown sub-benefit id resolves to '' so the benefits catalog is not
    consulted for it.
    """

    def resolve(line: BenefitCostSummaryLine) -> str | None:
        if line.benefit_id != disease_procedure_benefit_id:
            return None
        if line.sub_benefit_id is None or not disease_procedure_codes:
            return None
        entry = next((e for e in disease_procedure_codes if e.id == line.sub_benefit_id), None)
        if entry is None:
            return ""
        # A blank code leaves the description empty for the catalog lookup
        return entry.code or None

    return resolve


def benefit_master_resolver(benefit_master: Sequence[BenefitMasterEntry]) -> DescriptionResolver:
    """Build a resolver that labels benefits from the benefits catalog."""

    def resolve(line: BenefitCostSummaryLine) -> str | None:
        if not benefit_master:
            return None
        entry = next((e for e in benefit_master if e.id == line.benefit_id), None)
        if entry is None:
            return None
        if entry.parent_id is None:
            return entry.main_coverage or ""
        return entry.sub_coverage or ""

    return resolve


def default_resolvers(
    disease_procedure_codes: Sequence[DiseaseProcedureCode],
    benefit_master: Sequence[BenefitMasterEntry],
    disease_procedure_benefit_id: int = DISEASE_PROCEDURE_BENEFIT_ID,
) -> tuple[DescriptionResolver, ...]:
    return (
        disease_procedure_resolver(disease_procedure_codes, disease_procedure_benefit_id),
        benefit_master_resolver(benefit_master),
    )


def resolve_description(
    line: BenefitCostSummaryLine,
    resolvers: Iterable[DescriptionResolver],
) -> str:
    """Return the first applicable resolver's description, or '' when none applies.

    A line without a benefit id is never looked up.
    """
    if line.benefit_id is None:
        return ""
    for resolver in resolvers:
        description = resolver(line)
        if description is not None:
            return description
    return ""


def _amount(value: float | None) -> float:
    return value if value is not None else 0.0


def resolve_benefit_lines(
    lines: Iterable[BenefitCostSummaryLine] | None,
    disease_procedure_codes: Sequence[DiseaseProcedureCode] | None,
    benefit_master: Sequence[BenefitMasterEntry] | None,
    *,
    disease_procedure_benefit_id: int = DISEASE_PROCEDURE_BENEFIT_ID,
) -> list[ResolvedBenefitLine]:
    """Resolve descriptions and figures for each surviving benefit line.

    Args:
        lines: Benefit cost summary lines for one cost detail
        disease_procedure_codes: Disease-procedure master snapshot
        benefit_master: Benefits catalog snapshot
        disease_procedure_benefit_id: Benefit id that marks disease/procedure benefits

    Returns:
        Resolved lines for non-deleted input lines, in input order
    """
    resolvers = default_resolvers(
        list(disease_procedure_codes or []),
        list(benefit_master or []),
        disease_procedure_benefit_id,
    )

    resolved: list[ResolvedBenefitLine] = []
    for line in lines or []:
        if line.is_deleted:
            continue

        requested = _amount(line.requested_amount)
        gsa = _amount(line.gsa)
        resolved.append(
            ResolvedBenefitLine(
                benefit_id=line.benefit_id,
                sub_benefit_id=line.sub_benefit_id,
                description=resolve_description(line, resolvers),
                requested_amount=requested,
                gsa=gsa,
                copay=_amount(line.copay),
                discount=_amount(line.discount),
                nsa=_amount(line.nsa),
                disallowed=requested - gsa,
            )
        )

    return resolved
