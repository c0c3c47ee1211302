from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from decimal import Decimal, InvalidOperation
from typing import Any

from preauth_calculators.claim_cost_calculator.models import (
    BenefitCostSummaryLine,
    CostBillLine,
    CumulativeCopayDiscountOverride,
)

_TRUE_FLAGS = {"1", "TRUE", "T", "Y", "YES"}


def coerce_amount(value: Any) -> float | None:
    """Coerce a numeric column value to float, keeping NULL as None."""
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    text = str(value).strip().replace(",", "")
    if not text:
        return None
    return float(text)


def coerce_optional_int(value: Any) -> int | None:
    """Coerce an id/code column value to int, keeping NULL as None.

    Whole-valued floats and decimals ("110.0") are accepted; a fractional part
    raises ValueError instead of being truncated.
    """
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"expected a whole number, got {value!r}") from e
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"expected a whole number, got {value!r}")
    return int(number)


def coerce_flag(value: Any) -> bool:
    """Normalize a deletion flag; NULL means not deleted."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().upper() in _TRUE_FLAGS


def _check_invalid_rows_option(invalid_rows: str) -> None:
    if invalid_rows not in {"skip", "error"}:
        raise ValueError("invalid_rows must be one of: skip, error")


def rows_to_bill_lines(
    rows: Iterable[tuple[Any, ...]],
    *,
    invalid_rows: str = "error",
) -> tuple[dict[int, list[CostBillLine]], dict[str, Any]]:
    """
    Convert raw database rows into CostBillLine objects grouped by cost detail.

    Expected row format:
    (bill_line_id, cost_detail_id, claim_amount, approved_gsa, approved_nsa,
     approved_copay, approved_discount, is_deleted)

    A row without a cost_detail_id violates the caller contract: it raises
    unless invalid_rows='skip', in which case it is counted and dropped.
    """
    _check_invalid_rows_option(invalid_rows)

    grouped: dict[int, list[CostBillLine]] = defaultdict(list)
    skipped = 0
    skipped_line_ids: list[str] = []

    for (
        bill_line_id,
        cost_detail_id,
        claim_amount,
        approved_gsa,
        approved_nsa,
        approved_copay,
        approved_discount,
        is_deleted,
    ) in rows:
        detail_id = coerce_optional_int(cost_detail_id)
        if detail_id is None:
            if invalid_rows == "error":
                raise ValueError(f"bill line {bill_line_id!r} has no cost_detail_id")
            skipped += 1
            skipped_line_ids.append("<NULL>" if bill_line_id is None else str(bill_line_id))
            continue

        grouped[detail_id].append(
            CostBillLine(
                bill_line_id=coerce_optional_int(bill_line_id),
                cost_detail_id=detail_id,
                claim_amount=coerce_amount(claim_amount),
                approved_gsa=coerce_amount(approved_gsa),
                approved_nsa=coerce_amount(approved_nsa),
                approved_copay=coerce_amount(approved_copay),
                approved_discount=coerce_amount(approved_discount),
                is_deleted=coerce_flag(is_deleted),
            )
        )

    return dict(grouped), {"skipped": skipped, "skipped_line_ids": skipped_line_ids}


def rows_to_overrides(
    rows: Iterable[tuple[Any, ...]],
) -> dict[int, list[CumulativeCopayDiscountOverride]]:
    """
    Convert raw override rows into override records grouped by cost detail.

    Expected row format:
    (override_id, cost_detail_id, copay_amount, discount_amount, is_deleted)

    Rows without a cost_detail_id cannot belong to any cost detail and are dropped.
    """
    grouped: dict[int, list[CumulativeCopayDiscountOverride]] = defaultdict(list)

    for _override_id, cost_detail_id, copay_amount, discount_amount, is_deleted in rows:
        detail_id = coerce_optional_int(cost_detail_id)
        if detail_id is None:
            continue
        grouped[detail_id].append(
            CumulativeCopayDiscountOverride(
                copay_amount=coerce_amount(copay_amount),
                discount_amount=coerce_amount(discount_amount),
                is_deleted=coerce_flag(is_deleted),
            )
        )

    return dict(grouped)


def select_override(
    records: Sequence[CumulativeCopayDiscountOverride] | None,
) -> CumulativeCopayDiscountOverride | None:
    """Return the first non-deleted override record, or None."""
    for record in records or []:
        if not record.is_deleted:
            return record
    return None


def rows_to_benefit_lines(
    rows: Iterable[tuple[Any, ...]],
    *,
    invalid_rows: str = "error",
) -> tuple[dict[int, list[BenefitCostSummaryLine]], dict[str, Any]]:
    """
    Convert raw benefit summary rows into BenefitCostSummaryLine objects grouped by cost detail.

    Expected row format:
    (summary_line_id, cost_detail_id, benefit_id, sub_benefit_id, requested_amount,
     gsa, copay, discount, nsa, is_deleted)

    Row order within a cost detail is preserved.
    """
    _check_invalid_rows_option(invalid_rows)

    grouped: dict[int, list[BenefitCostSummaryLine]] = defaultdict(list)
    skipped = 0

    for (
        summary_line_id,
        cost_detail_id,
        benefit_id,
        sub_benefit_id,
        requested_amount,
        gsa,
        copay,
        discount,
        nsa,
        is_deleted,
    ) in rows:
        detail_id = coerce_optional_int(cost_detail_id)
        if detail_id is None:
            if invalid_rows == "error":
                raise ValueError(f"benefit summary line {summary_line_id!r} has no cost_detail_id")
            skipped += 1
            continue

        grouped[detail_id].append(
            BenefitCostSummaryLine(
                benefit_id=coerce_optional_int(benefit_id),
                sub_benefit_id=coerce_optional_int(sub_benefit_id),
                requested_amount=coerce_amount(requested_amount),
                gsa=coerce_amount(gsa),
                copay=coerce_amount(copay),
                discount=coerce_amount(discount),
                nsa=coerce_amount(nsa),
                is_deleted=coerce_flag(is_deleted),
            )
        )

    return dict(grouped), {"skipped": skipped}
