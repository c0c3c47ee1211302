"""Load master-data snapshots used for benefit description resolution.

Two catalogs are loaded:
    - Disease-procedure master: id, code, description
    - Benefits master: id, parent_id, main_coverage, sub_coverage

Snapshots can be read from files (parquet, csv or json) or from the DuckDB
warehouse tables int_disease_procedure_codes and int_benefit_master. Every
call reads a fresh snapshot; nothing is cached.
"""

from pathlib import Path

import duckdb
import polars as pl

from preauth_calculators.claim_cost_calculator.models import BenefitMasterEntry, DiseaseProcedureCode

DISEASE_PROCEDURE_COLUMNS = ["id", "code", "description"]
BENEFIT_MASTER_COLUMNS = ["id", "parent_id", "main_coverage", "sub_coverage"]


def _read_frame(path: str | Path) -> pl.DataFrame:
    """Read a master-data file into a DataFrame based on its suffix."""
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Master data file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pl.read_parquet(path)
    if suffix == ".csv":
        return pl.read_csv(path)
    if suffix == ".json":
        return pl.read_json(path)
    raise ValueError(f"Unsupported master data format '{suffix}' for {path}")


def _require_columns(df: pl.DataFrame, columns: list[str], source: str) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ValueError(f"{source} is missing columns: {', '.join(missing)}")


def _clean_text(value: object) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def disease_procedure_codes_from_frame(
    df: pl.DataFrame, source: str = "disease procedure master"
) -> list[DiseaseProcedureCode]:
    """Convert a disease-procedure DataFrame into model entries.

    Rows without an id are ignored since they can never match a sub-benefit.
    """
    _require_columns(df, DISEASE_PROCEDURE_COLUMNS, source)

    codes: list[DiseaseProcedureCode] = []
    for row in df.select(DISEASE_PROCEDURE_COLUMNS).iter_rows(named=True):
        if row["id"] is None:
            continue
        codes.append(
            DiseaseProcedureCode(
                id=int(row["id"]),
                code=_clean_text(row["code"]),
                description=_clean_text(row["description"]),
            )
        )
    return codes


def benefit_master_from_frame(
    df: pl.DataFrame, source: str = "benefit master"
) -> list[BenefitMasterEntry]:
    """Convert a benefits catalog DataFrame into model entries."""
    _require_columns(df, BENEFIT_MASTER_COLUMNS, source)

    entries: list[BenefitMasterEntry] = []
    for row in df.select(BENEFIT_MASTER_COLUMNS).iter_rows(named=True):
        if row["id"] is None:
            continue
        parent_id = row["parent_id"]
        entries.append(
            BenefitMasterEntry(
                id=int(row["id"]),
                parent_id=int(parent_id) if parent_id is not None else None,
                main_coverage=_clean_text(row["main_coverage"]),
                sub_coverage=_clean_text(row["sub_coverage"]),
            )
        )
    return entries


def load_disease_procedure_codes(path: str | Path) -> list[DiseaseProcedureCode]:
    """Load the disease-procedure master from a file.

    Args:
        path: Path to a .parquet, .csv or .json snapshot

    Returns:
        List of DiseaseProcedureCode entries in file order
    """
    return disease_procedure_codes_from_frame(_read_frame(path), source=str(path))


def load_benefit_master(path: str | Path) -> list[BenefitMasterEntry]:
    """Load the benefits catalog from a file.

    Args:
        path: Path to a .parquet, .csv or .json snapshot

    Returns:
        List of BenefitMasterEntry entries in file order
    """
    return benefit_master_from_frame(_read_frame(path), source=str(path))


def _query_frame(con: duckdb.DuckDBPyConnection, sql: str, columns: list[str]) -> pl.DataFrame:
    rows = con.execute(sql).fetchall()
    return pl.DataFrame(rows, schema=columns, orient="row")


def read_master_data(
    con: duckdb.DuckDBPyConnection,
    schema: str = "main_intermediate",
) -> tuple[list[DiseaseProcedureCode], list[BenefitMasterEntry]]:
    """Read both master catalogs from the DuckDB warehouse.

    Args:
        con: Open DuckDB connection
        schema: Schema holding int_disease_procedure_codes and int_benefit_master

    Returns:
        Tuple of (disease-procedure codes, benefit master entries)
    """
    dp_df = _query_frame(
        con,
        f"SELECT id, code, description FROM {schema}.int_disease_procedure_codes ORDER BY id",
        DISEASE_PROCEDURE_COLUMNS,
    )
    bm_df = _query_frame(
        con,
        f"SELECT id, parent_id, main_coverage, sub_coverage FROM {schema}.int_benefit_master ORDER BY id",
        BENEFIT_MASTER_COLUMNS,
    )

    return (
        disease_procedure_codes_from_frame(dp_df, source=f"{schema}.int_disease_procedure_codes"),
        benefit_master_from_frame(bm_df, source=f"{schema}.int_benefit_master"),
    )
