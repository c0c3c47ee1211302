"""Preauth calculators - Claim cost reconciliation implementations.

Available calculators:
    - ClaimCostCalculator: cumulative bill summary and benefit labels for
      pre-authorization cost details
"""

from preauth_calculators.claim_cost_calculator import ClaimCostCalculator, CostBillLine, CostView

__all__ = ["ClaimCostCalculator", "CostBillLine", "CostView"]
