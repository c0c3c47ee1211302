from __future__ import annotations

from pathlib import Path

import typer

from preauth_calculators.claim_cost_calculator.benefit_resolver import DISEASE_PROCEDURE_BENEFIT_ID
from preauth_calculators.claim_cost_calculator.duckdb_to_csv import reconcile_from_duckdb_to_csv
from preauth_dagster.assets.reconciliation import InvalidRowsOption
from preauth_dagster.resources.warehouse import PreauthWarehouse, default_warehouse_path

app = typer.Typer(no_args_is_help=True, help="Preauth CLI - Warehouse and reconciliation utilities")

DEFAULT_DUCKDB_PATH = default_warehouse_path()


@app.command(name="db-bootstrap")
def db_bootstrap(
    duckdb_path: str = typer.Option(DEFAULT_DUCKDB_PATH, "--duckdb-path"),
) -> None:
    """Create core schemas + tables in DuckDB.

    Creates: `main_intermediate` input relations, `main_runs` registry and result tables.
    """

    warehouse = PreauthWarehouse(path=duckdb_path)
    with warehouse.connect() as con:
        table_count = con.execute(
            """
            SELECT COUNT(*) FROM information_schema.tables
            WHERE table_schema IN ('main_intermediate', 'main_runs')
            """
        ).fetchone()[0]

    typer.echo(f"Bootstrapped warehouse at {warehouse.resolved_path} ({table_count} tables)")


@app.command(name="reconcile-csv")
def reconcile_csv(
    output_csv: str = typer.Argument(..., help="Output CSV path"),
    duckdb_path: str = typer.Option(DEFAULT_DUCKDB_PATH, "--duckdb-path"),
    schema: str = typer.Option("main_intermediate", "--schema"),
    limit: int | None = typer.Option(None, "--limit"),
    invalid_rows: InvalidRowsOption = typer.Option(
        InvalidRowsOption.error,
        "--invalid-rows",
        help="How to handle lines without a cost_detail_id",
    ),
    disease_procedure_benefit_id: int = typer.Option(
        DISEASE_PROCEDURE_BENEFIT_ID, "--disease-procedure-benefit-id"
    ),
) -> None:
    """Reconcile every cost detail in the warehouse and export the summaries to CSV."""

    count = reconcile_from_duckdb_to_csv(
        duckdb_path=duckdb_path,
        output_csv_path=output_csv,
        schema=schema,
        limit=limit,
        invalid_rows=invalid_rows.value,
        disease_procedure_benefit_id=disease_procedure_benefit_id,
    )
    typer.echo(f"Wrote {count} rows to {Path(output_csv).expanduser().resolve()}")


if __name__ == "__main__":
    app()
