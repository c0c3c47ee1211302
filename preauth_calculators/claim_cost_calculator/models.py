"""Data models for the claim cost reconciliation engine."""

from pydantic import BaseModel, Field


class CostBillLine(BaseModel):
    """One itemized bill entry for a cost detail.

    Attributes:
        bill_line_id: Bill line identifier
        cost_detail_id: Owning cost detail (required)
        claim_amount: Requested amount
        approved_gsa: Approved gross sanctioned amount
        approved_nsa: Approved net sanctioned amount
        approved_copay: Approved copay
        approved_discount: Approved discount
        is_deleted: Deleted lines are excluded from every aggregation
    """

    bill_line_id: int | None = None
    cost_detail_id: int
    claim_amount: float | None = None
    approved_gsa: float | None = None
    approved_nsa: float | None = None
    approved_copay: float | None = None
    approved_discount: float | None = None
    is_deleted: bool = False


class CumulativeCopayDiscountOverride(BaseModel):
    """Previously recorded cumulative copay/discount for a cost detail."""

    copay_amount: float | None = None
    discount_amount: float | None = None
    is_deleted: bool = False


class CumulativeSummary(BaseModel):
    """Cumulative financial figures for one cost detail."""

    total: float = 0.0
    requested_total: float = 0.0
    gsa: float = 0.0
    nsa: float = 0.0
    copay: float = 0.0
    discount: float = 0.0
    disallowed: float = 0.0


class BenefitCostSummaryLine(BaseModel):
    """One benefit-level cost entry.

    Attributes:
        benefit_id: Product benefit identifier (may be absent)
        sub_benefit_id: Sub-benefit identifier; for disease/procedure
            benefits this is the disease-procedure master id
        requested_amount: Requested amount for the benefit
        gsa: Gross sanctioned amount
        copay: Copay
        discount: Discount
        nsa: Net sanctioned amount
        is_deleted: Deleted lines are excluded from the resolved output
    """

    benefit_id: int | None = None
    sub_benefit_id: int | None = None
    requested_amount: float | None = None
    gsa: float | None = None
    copay: float | None = None
    discount: float | None = None
    nsa: float | None = None
    is_deleted: bool = False


class DiseaseProcedureCode(BaseModel):
    """Disease-procedure master entry."""

    id: int
    code: str | None = None
    description: str | None = None


class BenefitMasterEntry(BaseModel):
    """Benefits catalog entry.

    A null ``parent_id`` marks a top-level (main coverage) entry; otherwise the
    entry is a child and ``sub_coverage`` is its label.
    """

    id: int
    parent_id: int | None = None
    main_coverage: str | None = None
    sub_coverage: str | None = None


class ResolvedBenefitLine(BaseModel):
    """Benefit line with its resolved description and figures."""

    benefit_id: int | None = None
    sub_benefit_id: int | None = None
    description: str = ""
    requested_amount: float = 0.0
    gsa: float = 0.0
    copay: float = 0.0
    discount: float = 0.0
    nsa: float = 0.0
    disallowed: float = 0.0


class CostView(BaseModel):
    """Combined cost view for one cost detail.

    Attributes:
        cost_detail_id: Cost detail identifier
        claim_status_code: Workflow status the figures were computed under
        approval_phase: 'approved' or 'executive'
        summary: Bill-level cumulative summary
        benefits: Resolved benefit lines in input order
    """

    cost_detail_id: int | None = None
    claim_status_code: int
    approval_phase: str = Field(..., pattern="^(approved|executive)$")
    summary: CumulativeSummary
    benefits: list[ResolvedBenefitLine] = Field(default_factory=list)
