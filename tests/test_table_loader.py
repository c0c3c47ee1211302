from __future__ import annotations

from pathlib import Path

import duckdb
import polars as pl
import pytest

from preauth_calculators.claim_cost_calculator.table_loader import (
    load_benefit_master,
    load_disease_procedure_codes,
    read_master_data,
)


def test_load_disease_procedure_codes_from_csv(tmp_path: Path) -> None:
    path = tmp_path / "disease_procedure.csv"
    path.write_text(
        "id,code,description\n501,DP-501 ,Appendicectomy\n502,DP-502,Cataract\n",
        encoding="utf-8",
    )

    codes = load_disease_procedure_codes(path)

    assert [c.id for c in codes] == [501, 502]
    assert codes[0].code == "DP-501"


def test_load_benefit_master_from_parquet(tmp_path: Path) -> None:
    path = tmp_path / "benefit_master.parquet"
    pl.DataFrame(
        {
            "id": [3, 8],
            "parent_id": [None, 3],
            "main_coverage": ["Room Rent", "Room Rent"],
            "sub_coverage": [None, "ICU Charges"],
        }
    ).write_parquet(path)

    entries = load_benefit_master(path)

    assert entries[0].parent_id is None
    assert entries[1].parent_id == 3
    assert entries[1].sub_coverage == "ICU Charges"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_benefit_master(tmp_path / "nope.parquet")


def test_unsupported_suffix_raises(tmp_path: Path) -> None:
    path = tmp_path / "benefit_master.xlsx"
    path.write_bytes(b"")
    with pytest.raises(ValueError, match="Unsupported"):
        load_benefit_master(path)


def test_missing_columns_raise(tmp_path: Path) -> None:
    path = tmp_path / "disease_procedure.csv"
    path.write_text("id,code\n1,A\n", encoding="utf-8")
    with pytest.raises(ValueError, match="description"):
        load_disease_procedure_codes(path)


def test_read_master_data_from_duckdb(warehouse_path: Path) -> None:
    con = duckdb.connect(str(warehouse_path))
    try:
        codes, master = read_master_data(con)
    finally:
        con.close()

    assert [c.code for c in codes] == ["DP-501", "DP-502"]
    assert [m.id for m in master] == [3, 8, 14]
    assert master[1].parent_id == 3
