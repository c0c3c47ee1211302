"""Claim cost view calculator.

This module combines the two reconciliation components into the cost view
shown to a claims handler:
1. Selects the approval phase from the claim status code
2. Aggregates bill lines into a cumulative summary (bill_aggregator)
3. Resolves benefit descriptions and figures (benefit_resolver)

Master data (disease-procedure codes, benefits catalog) are passed in per call
as read-only snapshots.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from preauth_calculators.claim_cost_calculator.benefit_resolver import (
    DISEASE_PROCEDURE_BENEFIT_ID,
    resolve_benefit_lines,
)
from preauth_calculators.claim_cost_calculator.bill_aggregator import aggregate_bills
from preauth_calculators.claim_cost_calculator.models import (
    BenefitCostSummaryLine,
    BenefitMasterEntry,
    CostBillLine,
    CostView,
    CumulativeCopayDiscountOverride,
    CumulativeSummary,
    DiseaseProcedureCode,
    ResolvedBenefitLine,
)
from preauth_calculators.claim_cost_calculator.phases import ApprovalPhase


@dataclass(frozen=True)
class CostDetailInput:
    """Everything the calculator needs for one cost detail."""

    cost_detail_id: int
    claim_status_code: int
    bill_lines: list[CostBillLine] = field(default_factory=list)
    override: CumulativeCopayDiscountOverride | None = None
    benefit_lines: list[BenefitCostSummaryLine] = field(default_factory=list)


class ClaimCostCalculator:
    """Cost reconciliation calculator for pre-authorization claims.

    Example:
        >>> calculator = ClaimCostCalculator()
        >>> lines = [
        ...     CostBillLine(cost_detail_id=1, claim_amount=1000, approved_gsa=800),
        ...     CostBillLine(cost_detail_id=1, claim_amount=200, approved_gsa=150),
        ... ]
        >>> summary = calculator.summarize_bills(lines, None, claim_status_code=110)
        >>> summary.disallowed
        250.0
    """

    def __init__(self, disease_procedure_benefit_id: int = DISEASE_PROCEDURE_BENEFIT_ID):
        """Initialize calculator.

        Args:
            disease_procedure_benefit_id: Product benefit id whose sub-benefits
                are labelled from the disease-procedure master
        """
        self.disease_procedure_benefit_id = disease_procedure_benefit_id

    def summarize_bills(
        self,
        bill_lines: Iterable[CostBillLine] | None,
        override: CumulativeCopayDiscountOverride | None,
        claim_status_code: int,
    ) -> CumulativeSummary:
        return aggregate_bills(bill_lines, override, claim_status_code)

    def resolve_benefits(
        self,
        benefit_lines: Iterable[BenefitCostSummaryLine] | None,
        disease_procedure_codes: Sequence[DiseaseProcedureCode] | None,
        benefit_master: Sequence[BenefitMasterEntry] | None,
    ) -> list[ResolvedBenefitLine]:
        return resolve_benefit_lines(
            benefit_lines,
            disease_procedure_codes,
            benefit_master,
            disease_procedure_benefit_id=self.disease_procedure_benefit_id,
        )

    def build_cost_view(
        self,
        detail: CostDetailInput,
        disease_procedure_codes: Sequence[DiseaseProcedureCode] | None = None,
        benefit_master: Sequence[BenefitMasterEntry] | None = None,
    ) -> CostView:
        """Build the cost view for a single cost detail.

        Args:
            detail: Bill lines, override, benefit lines and status for the cost detail
            disease_procedure_codes: Disease-procedure master snapshot
            benefit_master: Benefits catalog snapshot

        Returns:
            CostView with the cumulative summary and resolved benefit lines
        """
        phase = ApprovalPhase.from_status_code(detail.claim_status_code)
        summary = self.summarize_bills(detail.bill_lines, detail.override, detail.claim_status_code)
        benefits = self.resolve_benefits(detail.benefit_lines, disease_procedure_codes, benefit_master)

        return CostView(
            cost_detail_id=detail.cost_detail_id,
            claim_status_code=detail.claim_status_code,
            approval_phase=phase.value,
            summary=summary,
            benefits=benefits,
        )

    def build_cost_views(
        self,
        details: Iterable[CostDetailInput],
        disease_procedure_codes: Sequence[DiseaseProcedureCode] | None = None,
        benefit_master: Sequence[BenefitMasterEntry] | None = None,
    ) -> list[CostView]:
        """Build cost views for multiple cost details, preserving input order."""
        return [
            self.build_cost_view(detail, disease_procedure_codes, benefit_master)
            for detail in details
        ]
