from __future__ import annotations

from pathlib import Path

import duckdb
import pytest

from preauth_dagster.db.bootstrap import ensure_preauth_warehouse

COST_DETAILS = [
    (1, 110),
    (2, 999),
    (3, 120),
]

# (bill_line_id, cost_detail_id, claim, gsa, nsa, copay, discount, is_deleted)
BILL_LINES = [
    (10, 1, 1000.0, 800.0, 700.0, 50.0, 50.0, False),
    (11, 1, 500.0, 500.0, 500.0, 0.0, 0.0, True),
    (12, 1, 200.0, 150.0, 150.0, 0.0, 0.0, False),
    (20, 2, 1000.0, 800.0, 700.0, 50.0, 50.0, False),
    (21, 2, 500.0, 500.0, 500.0, 0.0, 0.0, True),
    (22, 2, 200.0, 150.0, 150.0, 0.0, 0.0, False),
    (30, 3, 300.0, 300.0, 300.0, 0.0, 0.0, False),
]

# (override_id, cost_detail_id, copay, discount, is_deleted)
OVERRIDES = [
    (1, 3, 40.0, None, False),
    (2, 1, 99.0, 99.0, False),
]

# (summary_line_id, cost_detail_id, benefit_id, sub_benefit_id, requested, gsa, copay, discount, nsa, is_deleted)
BENEFIT_LINES = [
    (1, 1, 14, 501, 1000.0, 800.0, 50.0, 50.0, 700.0, False),
    (2, 1, 3, None, 200.0, 150.0, 0.0, 0.0, 150.0, False),
    (3, 1, 7, None, 100.0, 100.0, 0.0, 0.0, 100.0, True),
    (4, 3, 8, None, 300.0, 300.0, 0.0, 0.0, 300.0, False),
]

DISEASE_PROCEDURE_CODES = [
    (501, "DP-501", "Appendicectomy"),
    (502, "DP-502", "Cataract"),
]

BENEFIT_MASTER = [
    (3, None, "Room Rent", None),
    (8, 3, "Room Rent", "ICU Charges"),
    (14, None, "Disease Procedure", None),
]


def seed_warehouse(duckdb_path: Path) -> None:
    con = duckdb.connect(str(duckdb_path))
    try:
        ensure_preauth_warehouse(con)
        con.executemany("INSERT INTO main_intermediate.int_cost_details VALUES (?, ?)", COST_DETAILS)
        con.executemany(
            "INSERT INTO main_intermediate.int_cost_bill_lines VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            BILL_LINES,
        )
        con.executemany(
            "INSERT INTO main_intermediate.int_cumulative_copay_discount VALUES (?, ?, ?, ?, ?)",
            OVERRIDES,
        )
        con.executemany(
            "INSERT INTO main_intermediate.int_benefit_cost_summary VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            BENEFIT_LINES,
        )
        con.executemany(
            "INSERT INTO main_intermediate.int_disease_procedure_codes VALUES (?, ?, ?)",
            DISEASE_PROCEDURE_CODES,
        )
        con.executemany(
            "INSERT INTO main_intermediate.int_benefit_master VALUES (?, ?, ?, ?)",
            BENEFIT_MASTER,
        )
    finally:
        con.close()


@pytest.fixture
def warehouse_path(tmp_path: Path) -> Path:
    """DuckDB warehouse seeded with three cost details (approved, executive, approved + override)."""
    duckdb_path = tmp_path / "preauth_claims.duckdb"
    seed_warehouse(duckdb_path)
    return duckdb_path
