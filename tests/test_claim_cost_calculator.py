"""Tests for the claim cost reconciliation calculator."""

import pytest
from pydantic import ValidationError

from preauth_calculators.claim_cost_calculator import (
    ApprovalPhase,
    BenefitCostSummaryLine,
    BenefitMasterEntry,
    ClaimCostCalculator,
    CostBillLine,
    CostDetailInput,
    CostView,
    CumulativeCopayDiscountOverride,
    DiseaseProcedureCode,
)
from preauth_calculators.claim_cost_calculator.benefit_resolver import (
    DISEASE_PROCEDURE_BENEFIT_ID,
    resolve_benefit_lines,
)
from preauth_calculators.claim_cost_calculator.bill_aggregator import aggregate_bills


def _three_lines() -> list[CostBillLine]:
    return [
        CostBillLine(bill_line_id=1, cost_detail_id=7, claim_amount=1000, approved_gsa=800),
        CostBillLine(bill_line_id=2, cost_detail_id=7, claim_amount=500, approved_gsa=500, is_deleted=True),
        CostBillLine(bill_line_id=3, cost_detail_id=7, claim_amount=200, approved_gsa=150),
    ]


class TestCostBillLine:
    """Tests for CostBillLine model."""

    def test_defaults(self):
        line = CostBillLine(cost_detail_id=1)
        assert line.claim_amount is None
        assert line.approved_gsa is None
        assert line.is_deleted is False

    def test_missing_cost_detail_id_fails(self):
        """A bill line without its owning cost detail is a caller error."""
        with pytest.raises(ValidationError):
            CostBillLine(bill_line_id=1, claim_amount=100)


class TestApprovalPhase:
    """Tests for status code to phase selection."""

    @pytest.mark.parametrize("code", [110, 111, 120, 140])
    def test_approved_codes(self, code):
        assert ApprovalPhase.from_status_code(code) is ApprovalPhase.approved

    @pytest.mark.parametrize("code", [0, 100, 112, 130, 999])
    def test_executive_codes(self, code):
        assert ApprovalPhase.from_status_code(code) is ApprovalPhase.executive

    @pytest.mark.parametrize("code", [-1, 40000, True, "110", 110.0, None])
    def test_invalid_codes_raise(self, code):
        with pytest.raises(ValueError):
            ApprovalPhase.from_status_code(code)


class TestBillAggregator:
    """Tests for cumulative bill aggregation."""

    def test_approved_scenario_excludes_deleted(self):
        summary = aggregate_bills(_three_lines(), None, 110)

        assert summary.requested_total == pytest.approx(1200.0)
        assert summary.total == pytest.approx(1200.0)
        assert summary.gsa == pytest.approx(950.0)
        assert summary.disallowed == pytest.approx(250.0)

    def test_executive_scenario_zeroes_approved_figures(self):
        lines = [
            CostBillLine(
                cost_detail_id=7,
                claim_amount=1000,
                approved_gsa=800,
                approved_nsa=700,
                approved_copay=50,
                approved_discount=50,
            ),
            CostBillLine(cost_detail_id=7, claim_amount=500, approved_gsa=500, is_deleted=True),
            CostBillLine(cost_detail_id=7, claim_amount=200, approved_gsa=150),
        ]
        override = CumulativeCopayDiscountOverride(copay_amount=50, discount_amount=20)

        summary = aggregate_bills(lines, override, 999)

        assert summary.total == pytest.approx(1200.0)
        assert summary.requested_total == pytest.approx(1200.0)
        assert summary.gsa == 0
        assert summary.nsa == 0
        assert summary.copay == 0
        assert summary.discount == 0
        assert summary.disallowed == 0

    def test_all_deleted_yields_zeros(self):
        lines = [CostBillLine(cost_detail_id=1, claim_amount=100, approved_gsa=90, is_deleted=True)]
        for code in (110, 999):
            summary = aggregate_bills(lines, None, code)
            assert summary.model_dump() == {
                "total": 0.0,
                "requested_total": 0.0,
                "gsa": 0.0,
                "nsa": 0.0,
                "copay": 0.0,
                "discount": 0.0,
                "disallowed": 0.0,
            }

    def test_empty_and_none_inputs(self):
        assert aggregate_bills([], None, 110).total == 0
        assert aggregate_bills(None, None, 999).total == 0

    def test_null_gsa_contributes_nothing_to_disallowed(self):
        lines = [
            CostBillLine(cost_detail_id=1, claim_amount=1000, approved_gsa=800),
            CostBillLine(cost_detail_id=1, claim_amount=400, approved_gsa=None),
            CostBillLine(cost_detail_id=1, claim_amount=None, approved_gsa=100),
        ]
        summary = aggregate_bills(lines, None, 120)

        assert summary.disallowed == pytest.approx(200.0)
        assert summary.requested_total == pytest.approx(1400.0)
        assert summary.gsa == pytest.approx(900.0)

    def test_nonzero_copay_keeps_line_sum(self):
        lines = [
            CostBillLine(cost_detail_id=1, claim_amount=500, approved_gsa=500, approved_nsa=470, approved_copay=30),
        ]
        override = CumulativeCopayDiscountOverride(copay_amount=50)

        summary = aggregate_bills(lines, override, 110)

        assert summary.copay == pytest.approx(30.0)
        assert summary.nsa == pytest.approx(470.0)

    def test_zero_copay_takes_override(self):
        lines = [
            CostBillLine(cost_detail_id=1, claim_amount=500, approved_gsa=500, approved_nsa=500, approved_copay=0),
        ]
        baseline = aggregate_bills(lines, None, 110)
        summary = aggregate_bills(lines, CumulativeCopayDiscountOverride(copay_amount=50), 110)

        assert summary.copay == pytest.approx(50.0)
        assert baseline.nsa - summary.nsa == pytest.approx(50.0)

    def test_copay_and_discount_overrides_both_apply(self):
        lines = [CostBillLine(cost_detail_id=1, claim_amount=1000, approved_gsa=900, approved_nsa=900)]
        override = CumulativeCopayDiscountOverride(copay_amount=50, discount_amount=25)

        summary = aggregate_bills(lines, override, 140)

        assert summary.copay == pytest.approx(50.0)
        assert summary.discount == pytest.approx(25.0)
        assert summary.nsa == pytest.approx(825.0)

    def test_discount_override_only_when_discount_is_zero(self):
        lines = [
            CostBillLine(
                cost_detail_id=1,
                claim_amount=1000,
                approved_gsa=900,
                approved_nsa=880,
                approved_discount=20,
            )
        ]
        override = CumulativeCopayDiscountOverride(copay_amount=10, discount_amount=60)

        summary = aggregate_bills(lines, override, 111)

        assert summary.discount == pytest.approx(20.0)
        assert summary.copay == pytest.approx(10.0)
        assert summary.nsa == pytest.approx(870.0)

    def test_deleted_or_nonpositive_override_is_ignored(self):
        lines = [CostBillLine(cost_detail_id=1, claim_amount=100, approved_gsa=100, approved_nsa=100)]

        deleted = CumulativeCopayDiscountOverride(copay_amount=50, is_deleted=True)
        negative = CumulativeCopayDiscountOverride(copay_amount=-5, discount_amount=0)

        for override in (deleted, negative):
            summary = aggregate_bills(lines, override, 110)
            assert summary.copay == 0
            assert summary.discount == 0
            assert summary.nsa == pytest.approx(100.0)

    def test_invalid_status_code_fails_fast(self):
        with pytest.raises(ValueError):
            aggregate_bills(_three_lines(), None, -110)


class TestBenefitResolver:
    """Tests for benefit description resolution."""

    @pytest.fixture
    def disease_procedure_codes(self):
        return [
            DiseaseProcedureCode(id=501, code="DP-501", description="Appendicectomy"),
            DiseaseProcedureCode(id=502, code="DP-502", description="Cataract"),
        ]

    @pytest.fixture
    def benefit_master(self):
        return [
            BenefitMasterEntry(id=3, parent_id=None, main_coverage="Room Rent"),
            BenefitMasterEntry(id=8, parent_id=3, main_coverage="Room Rent", sub_coverage="ICU Charges"),
            BenefitMasterEntry(id=DISEASE_PROCEDURE_BENEFIT_ID, main_coverage="Disease Procedure"),
        ]

    def test_disease_procedure_list_takes_priority(self, disease_procedure_codes, benefit_master):
        line = BenefitCostSummaryLine(benefit_id=DISEASE_PROCEDURE_BENEFIT_ID, sub_benefit_id=502)

        [resolved] = resolve_benefit_lines([line], disease_procedure_codes, benefit_master)

        assert resolved.description == "DP-502"

    def test_main_and_sub_coverage(self, disease_procedure_codes, benefit_master):
        lines = [
            BenefitCostSummaryLine(benefit_id=3),
            BenefitCostSummaryLine(benefit_id=8),
        ]

        resolved = resolve_benefit_lines(lines, disease_procedure_codes, benefit_master)

        assert [r.description for r in resolved] == ["Room Rent", "ICU Charges"]

    def test_disease_procedure_without_sub_benefit_uses_master(self, disease_procedure_codes, benefit_master):
        line = BenefitCostSummaryLine(benefit_id=DISEASE_PROCEDURE_BENEFIT_ID)

        [resolved] = resolve_benefit_lines([line], disease_procedure_codes, benefit_master)

        assert resolved.description == "Disease Procedure"

    def test_unknown_sub_benefit_with_empty_master(self, disease_procedure_codes):
        line = BenefitCostSummaryLine(benefit_id=DISEASE_PROCEDURE_BENEFIT_ID, sub_benefit_id=999)

        [resolved] = resolve_benefit_lines([line], disease_procedure_codes, [])

        assert resolved.description == ""

    def test_unknown_sub_benefit_skips_benefit_master(self, disease_procedure_codes, benefit_master):
        line = BenefitCostSummaryLine(benefit_id=DISEASE_PROCEDURE_BENEFIT_ID, sub_benefit_id=999)

        [resolved] = resolve_benefit_lines([line], disease_procedure_codes, benefit_master)

        # Benefit master has an entry for the benefit id, but it is not consulted
        assert resolved.description == ""

    def test_empty_disease_procedure_list_uses_master(self, benefit_master):
        line = BenefitCostSummaryLine(benefit_id=DISEASE_PROCEDURE_BENEFIT_ID, sub_benefit_id=999)

        [resolved] = resolve_benefit_lines([line], [], benefit_master)

        assert resolved.description == "Disease Procedure"

    def test_blank_disease_procedure_code_uses_master(self, benefit_master):
        codes = [DiseaseProcedureCode(id=503, code="")]
        line = BenefitCostSummaryLine(benefit_id=DISEASE_PROCEDURE_BENEFIT_ID, sub_benefit_id=503)

        [resolved] = resolve_benefit_lines([line], codes, benefit_master)

        assert resolved.description == "Disease Procedure"

    def test_unmatched_benefit_is_blank(self, disease_procedure_codes, benefit_master):
        [resolved] = resolve_benefit_lines(
            [BenefitCostSummaryLine(benefit_id=404)], disease_procedure_codes, benefit_master
        )
        assert resolved.description == ""

    def test_null_benefit_id_is_never_looked_up(self, disease_procedure_codes):
        master = [BenefitMasterEntry(id=0, main_coverage="Should not match")]
        [resolved] = resolve_benefit_lines(
            [BenefitCostSummaryLine(benefit_id=None, sub_benefit_id=501)],
            disease_procedure_codes,
            master,
        )
        assert resolved.description == ""

    def test_figures_and_disallowed(self):
        line = BenefitCostSummaryLine(
            benefit_id=3, requested_amount=1000, gsa=None, copay=None, discount=15, nsa=800
        )

        [resolved] = resolve_benefit_lines([line], [], [])

        assert resolved.requested_amount == pytest.approx(1000.0)
        assert resolved.gsa == 0
        assert resolved.copay == 0
        assert resolved.discount == pytest.approx(15.0)
        assert resolved.nsa == pytest.approx(800.0)
        assert resolved.disallowed == pytest.approx(1000.0)

    def test_deleted_lines_dropped_and_order_preserved(self, disease_procedure_codes, benefit_master):
        lines = [
            BenefitCostSummaryLine(benefit_id=8, requested_amount=1),
            BenefitCostSummaryLine(benefit_id=3, requested_amount=2, is_deleted=True),
            BenefitCostSummaryLine(benefit_id=3, requested_amount=3),
        ]

        resolved = resolve_benefit_lines(lines, disease_procedure_codes, benefit_master)

        assert [r.requested_amount for r in resolved] == [1.0, 3.0]

    def test_all_deleted_or_empty(self):
        assert resolve_benefit_lines([BenefitCostSummaryLine(benefit_id=3, is_deleted=True)], [], []) == []
        assert resolve_benefit_lines(None, None, None) == []

    def test_custom_disease_procedure_benefit_id(self, disease_procedure_codes, benefit_master):
        line = BenefitCostSummaryLine(benefit_id=3, sub_benefit_id=501)

        [resolved] = resolve_benefit_lines(
            [line], disease_procedure_codes, benefit_master, disease_procedure_benefit_id=3
        )

        assert resolved.description == "DP-501"


class TestClaimCostCalculator:
    """Tests for ClaimCostCalculator."""

    @pytest.fixture
    def calculator(self):
        return ClaimCostCalculator()

    def test_build_cost_view(self, calculator):
        detail = CostDetailInput(
            cost_detail_id=7,
            claim_status_code=110,
            bill_lines=_three_lines(),
            benefit_lines=[BenefitCostSummaryLine(benefit_id=3, requested_amount=1200, gsa=950)],
        )
        master = [BenefitMasterEntry(id=3, main_coverage="Room Rent")]

        view = calculator.build_cost_view(detail, [], master)

        assert isinstance(view, CostView)
        assert view.cost_detail_id == 7
        assert view.approval_phase == "approved"
        assert view.summary.disallowed == pytest.approx(250.0)
        assert view.benefits[0].description == "Room Rent"
        assert view.benefits[0].disallowed == pytest.approx(250.0)

    def test_executive_view(self, calculator):
        detail = CostDetailInput(cost_detail_id=7, claim_status_code=999, bill_lines=_three_lines())

        view = calculator.build_cost_view(detail)

        assert view.approval_phase == "executive"
        assert view.summary.total == pytest.approx(1200.0)
        assert view.summary.gsa == 0
        assert view.benefits == []

    def test_build_cost_views_preserves_order(self, calculator):
        details = [
            CostDetailInput(cost_detail_id=i, claim_status_code=110 if i % 2 else 999)
            for i in (5, 2, 9)
        ]

        views = calculator.build_cost_views(details)

        assert [v.cost_detail_id for v in views] == [5, 2, 9]
        assert [v.approval_phase for v in views] == ["approved", "executive", "approved"]
