from enum import Enum
from pathlib import Path
from typing import Any, Optional

import polars as pl
from dagster import AssetExecutionContext, Config, asset

from preauth_calculators.claim_cost_calculator import ClaimCostCalculator
from preauth_calculators.claim_cost_calculator.benefit_resolver import DISEASE_PROCEDURE_BENEFIT_ID
from preauth_calculators.claim_cost_calculator.duckdb_inputs import read_cost_detail_inputs
from preauth_calculators.claim_cost_calculator.table_loader import read_master_data
from preauth_dagster.db.run_registry import (
    ReconciliationRun,
    RunTotals,
    allocate_group_id,
    current_git_commit,
    fail_run,
    finish_run,
    generate_run_timestamp,
    now_utc,
    register_run,
)
from preauth_dagster.resources.warehouse import PreauthWarehouse

SUMMARY_COLUMNS = [
    "run_id",
    "cost_detail_id",
    "claim_status_code",
    "approval_phase",
    "total",
    "requested_total",
    "gsa",
    "nsa",
    "copay",
    "discount",
    "disallowed",
    "benefit_count",
    "run_timestamp",
    "created_at",
]

BENEFIT_COLUMNS = [
    "run_id",
    "cost_detail_id",
    "line_index",
    "benefit_id",
    "sub_benefit_id",
    "description",
    "requested_amount",
    "gsa",
    "copay",
    "discount",
    "nsa",
    "disallowed",
    "created_at",
]


class InvalidRowsOption(str, Enum):
    error = "error"
    skip = "skip"


class ReconciliationConfig(Config):
    group_id: Optional[int] = None
    group_description: Optional[str] = None
    run_description: str = "Claim cost reconciliation run"
    trigger_source: str = "dagster"
    input_schema: str = "main_intermediate"
    invalid_rows: InvalidRowsOption = InvalidRowsOption.error
    disease_procedure_benefit_id: int = DISEASE_PROCEDURE_BENEFIT_ID


@asset
def reconcile_cost_details(
    context: AssetExecutionContext, config: ReconciliationConfig, warehouse: PreauthWarehouse
) -> None:
    """Reconcile every cost detail and write results to main_runs.cost_summaries and main_runs.benefit_cost_lines."""

    context.log.info(f"Connecting to DuckDB at: {warehouse.resolved_path}")

    with warehouse.connect() as con:
        run_id = context.run_id
        run_ts = generate_run_timestamp()

        group_id = config.group_id
        if group_id is None:
            group_id = allocate_group_id(con)

        register_run(
            con,
            ReconciliationRun(
                run_id=run_id,
                run_timestamp=run_ts,
                group_id=int(group_id),
                group_description=config.group_description,
                run_description=config.run_description,
                trigger_source=config.trigger_source,
                input_schema=config.input_schema,
                invalid_rows=config.invalid_rows.value,
                disease_procedure_benefit_id=config.disease_procedure_benefit_id,
                git=current_git_commit(cwd=str(Path(__file__).resolve().parents[2])),
            ),
        )

        try:
            details, stats = read_cost_detail_inputs(
                con,
                schema=config.input_schema,
                invalid_rows=config.invalid_rows.value,
            )
            disease_procedure_codes, benefit_master = read_master_data(con, schema=config.input_schema)

            skipped = stats["skipped_bill_lines"] + stats["skipped_benefit_lines"]
            if skipped > 0:
                context.log.warning(f"Skipped {skipped} lines without a cost_detail_id.")

            context.log.info(
                f"Reconciling {len(details)} cost details against "
                f"{len(disease_procedure_codes)} disease-procedure codes and "
                f"{len(benefit_master)} benefit master entries..."
            )

            calculator = ClaimCostCalculator(
                disease_procedure_benefit_id=config.disease_procedure_benefit_id
            )
            views = calculator.build_cost_views(details, disease_procedure_codes, benefit_master)

            created_at = now_utc()
            summary_rows: list[dict[str, Any]] = []
            benefit_rows: list[dict[str, Any]] = []

            for view in views:
                summary_rows.append(
                    {
                        "run_id": run_id,
                        "cost_detail_id": view.cost_detail_id,
                        "claim_status_code": view.claim_status_code,
                        "approval_phase": view.approval_phase,
                        **view.summary.model_dump(),
                        "benefit_count": len(view.benefits),
                        "run_timestamp": run_ts,
                        "created_at": created_at,
                    }
                )
                for line_index, benefit in enumerate(view.benefits):
                    benefit_rows.append(
                        {
                            "run_id": run_id,
                            "cost_detail_id": view.cost_detail_id,
                            "line_index": line_index,
                            **benefit.model_dump(),
                            "created_at": created_at,
                        }
                    )

            # Columns must match the main_runs table definition order
            if summary_rows:
                summary_df = pl.DataFrame(summary_rows).select(SUMMARY_COLUMNS)
                con.execute("INSERT OR REPLACE INTO main_runs.cost_summaries SELECT * FROM summary_df")
            if benefit_rows:
                benefit_df = pl.DataFrame(benefit_rows).select(BENEFIT_COLUMNS)
                con.execute("INSERT OR REPLACE INTO main_runs.benefit_cost_lines SELECT * FROM benefit_df")

            totals = RunTotals.from_views(views, skipped_lines=skipped)
            finish_run(con, run_id, totals)
            context.log.info(
                f"Wrote {totals.cost_details} cost summaries ({totals.approved} approved, "
                f"{totals.executive} executive) and {totals.benefit_lines} benefit lines "
                f"for run_timestamp={run_ts}"
            )

        except Exception:
            fail_run(con, run_id)
            raise
