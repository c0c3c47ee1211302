"""Pre-authorization claim cost reconciliation calculator.

Aggregates itemized cost-bill lines into the cumulative figures shown on the
cost detail view, and resolves benefit descriptions from the disease-procedure
and benefits master catalogs.
"""

from preauth_calculators.claim_cost_calculator.calculator import (
    ClaimCostCalculator,
    CostDetailInput,
)
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

__all__ = [
    "ApprovalPhase",
    "BenefitCostSummaryLine",
    "BenefitMasterEntry",
    "ClaimCostCalculator",
    "CostBillLine",
    "CostDetailInput",
    "CostView",
    "CumulativeCopayDiscountOverride",
    "CumulativeSummary",
    "DiseaseProcedureCode",
    "ResolvedBenefitLine",
]
