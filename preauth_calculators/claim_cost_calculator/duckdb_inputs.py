from __future__ import annotations

from typing import Any

import duckdb

from preauth_calculators.claim_cost_calculator.calculator import CostDetailInput
from preauth_calculators.claim_cost_calculator.line_processing import (
    coerce_optional_int,
    rows_to_benefit_lines,
    rows_to_bill_lines,
    rows_to_overrides,
    select_override,
)
from preauth_calculators.claim_cost_calculator.phases import validate_status_code


def read_cost_detail_inputs(
    con: duckdb.DuckDBPyConnection,
    *,
    schema: str = "main_intermediate",
    limit: int | None = None,
    invalid_rows: str = "error",
) -> tuple[list[CostDetailInput], dict[str, Any]]:
    """Read cost details with their bill lines, overrides and benefit lines.

    Expected relations under `{schema}`:
    - int_cost_details(cost_detail_id, claim_status_code)
    - int_cost_bill_lines(bill_line_id, cost_detail_id, claim_amount, approved_gsa,
      approved_nsa, approved_copay, approved_discount, is_deleted)
    - int_cumulative_copay_discount(override_id, cost_detail_id, copay_amount,
      discount_amount, is_deleted)
    - int_benefit_cost_summary(summary_line_id, cost_detail_id, benefit_id, sub_benefit_id,
      requested_amount, gsa, copay, discount, nsa, is_deleted)

    Returns the inputs ordered by cost_detail_id, plus row statistics.
    """

    detail_sql = f"""
    SELECT cost_detail_id, claim_status_code
    FROM {schema}.int_cost_details
    ORDER BY cost_detail_id
    """.strip()
    if limit is not None:
        detail_sql += f"\nLIMIT {int(limit)}"
    detail_rows = con.execute(detail_sql).fetchall()

    bill_rows = con.execute(
        f"""
        SELECT
            bill_line_id,
            cost_detail_id,
            claim_amount,
            approved_gsa,
            approved_nsa,
            approved_copay,
            approved_discount,
            is_deleted
        FROM {schema}.int_cost_bill_lines
        ORDER BY cost_detail_id, bill_line_id
        """
    ).fetchall()

    override_rows = con.execute(
        f"""
        SELECT override_id, cost_detail_id, copay_amount, discount_amount, is_deleted
        FROM {schema}.int_cumulative_copay_discount
        ORDER BY cost_detail_id, override_id
        """
    ).fetchall()

    benefit_rows = con.execute(
        f"""
        SELECT
            summary_line_id,
            cost_detail_id,
            benefit_id,
            sub_benefit_id,
            requested_amount,
            gsa,
            copay,
            discount,
            nsa,
            is_deleted
        FROM {schema}.int_benefit_cost_summary
        ORDER BY cost_detail_id, summary_line_id
        """
    ).fetchall()

    bills_by_detail, bill_stats = rows_to_bill_lines(bill_rows, invalid_rows=invalid_rows)
    overrides_by_detail = rows_to_overrides(override_rows)
    benefits_by_detail, benefit_stats = rows_to_benefit_lines(benefit_rows, invalid_rows=invalid_rows)

    details: list[CostDetailInput] = []
    for cost_detail_id, claim_status_code in detail_rows:
        detail_id = coerce_optional_int(cost_detail_id)
        status_code = coerce_optional_int(claim_status_code)
        if detail_id is None or status_code is None:
            raise ValueError(
                f"int_cost_details row ({cost_detail_id!r}, {claim_status_code!r}) "
                "must have both cost_detail_id and claim_status_code"
            )

        details.append(
            CostDetailInput(
                cost_detail_id=detail_id,
                claim_status_code=validate_status_code(status_code),
                bill_lines=bills_by_detail.get(detail_id, []),
                override=select_override(overrides_by_detail.get(detail_id)),
                benefit_lines=benefits_by_detail.get(detail_id, []),
            )
        )

    stats = {
        "cost_details": len(details),
        "bill_lines": len(bill_rows),
        "benefit_lines": len(benefit_rows),
        "skipped_bill_lines": int(bill_stats["skipped"]),
        "skipped_benefit_lines": int(benefit_stats["skipped"]),
    }
    return details, stats
