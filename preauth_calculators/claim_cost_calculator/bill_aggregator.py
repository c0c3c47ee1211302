"""Cumulative bill aggregation for a single cost detail.

Bill lines are summed under one of two strategies, selected by the claim's
approval phase:

    - Approved: requested, GSA, NSA, copay and discount are summed from the
      bill lines; disallowed is accumulated per line as (claim - GSA)
    - Executive: only the requested total is reported, every approved figure
      is zero

Example: copay override
    - Bill lines sum to copay 0 and NSA 900
    - A cumulative override record carries copay 50
    - Result: copay 50, NSA 850
"""

from collections.abc import Callable, Iterable

from preauth_calculators.claim_cost_calculator.models import (
    CostBillLine,
    CumulativeCopayDiscountOverride,
    CumulativeSummary,
)
from preauth_calculators.claim_cost_calculator.phases import ApprovalPhase


def _amount(value: float | None) -> float:
    return value if value is not None else 0.0


def _line_disallowed(line: CostBillLine) -> float:
    """Disallowed contribution of one line; 0 unless both claim and GSA are present."""
    if line.claim_amount is None or line.approved_gsa is None:
        return 0.0
    return line.claim_amount - line.approved_gsa


def active_lines(lines: Iterable[CostBillLine]) -> list[CostBillLine]:
    """Drop deleted bill lines."""
    return [line for line in lines if not line.is_deleted]


def _approved_summary(
    lines: list[CostBillLine],
    override: CumulativeCopayDiscountOverride | None,
) -> CumulativeSummary:
    requested = sum(_amount(line.claim_amount) for line in lines)
    gsa = sum(_amount(line.approved_gsa) for line in lines)
    copay = sum(_amount(line.approved_copay) for line in lines)
    discount = sum(_amount(line.approved_discount) for line in lines)
    nsa = sum(_amount(line.approved_nsa) for line in lines)
    disallowed = sum(_line_disallowed(line) for line in lines)

    if override is not None and not override.is_deleted:
        # Only a zero computed figure is replaced; nonzero sums always win
        override_copay = _amount(override.copay_amount)
        if override_copay > 0 and copay == 0:
            nsa -= override_copay
            copay = override_copay

        override_discount = _amount(override.discount_amount)
        if override_discount > 0 and discount == 0:
            nsa -= override_discount
            discount = override_discount

    return CumulativeSummary(
        total=requested,
        requested_total=requested,
        gsa=gsa,
        nsa=nsa,
        copay=copay,
        discount=discount,
        disallowed=disallowed,
    )


def _executive_summary(
    lines: list[CostBillLine],
    override: CumulativeCopayDiscountOverride | None,
) -> CumulativeSummary:
    requested = sum(_amount(line.claim_amount) for line in lines)
    return CumulativeSummary(total=requested, requested_total=requested)


PHASE_STRATEGIES: dict[
    ApprovalPhase,
    Callable[[list[CostBillLine], CumulativeCopayDiscountOverride | None], CumulativeSummary],
] = {
    ApprovalPhase.approved: _approved_summary,
    ApprovalPhase.executive: _executive_summary,
}


def aggregate_bills(
    lines: Iterable[CostBillLine] | None,
    override: CumulativeCopayDiscountOverride | None,
    claim_status_code: int,
) -> CumulativeSummary:
    """Aggregate bill lines into a cumulative summary.

    Args:
        lines: Bill lines already scoped to one cost detail (may be empty)
        override: Cumulative copay/discount record for the cost detail, if any
        claim_status_code: Claim workflow status code

    Returns:
        CumulativeSummary for the surviving (non-deleted) lines

    Raises:
        ValueError: If claim_status_code is not a small non-negative integer
    """
    phase = ApprovalPhase.from_status_code(claim_status_code)
    return PHASE_STRATEGIES[phase](active_lines(lines or []), override)
