from dagster import Definitions, define_asset_job

from preauth_dagster.assets.reconciliation import reconcile_cost_details
from preauth_dagster.resources.warehouse import PreauthWarehouse

reconciliation_job = define_asset_job(
    name="reconciliation_job",
    selection=["reconcile_cost_details"],
    description="""
    # Claim Cost Reconciliation Job

    Builds the cost view for every pre-authorization cost detail in the warehouse.

    **Steps:**
    1. Reads cost details, bill lines, overrides and benefit lines from `main_intermediate`
    2. Aggregates bills per approval phase and resolves benefit descriptions
    3. Writes results to `main_runs.cost_summaries` and `main_runs.benefit_cost_lines`
    """,
    tags={"team": "claims", "priority": "high"},
    config={
        "ops": {
            "reconcile_cost_details": {
                "config": {
                    "run_description": "Claim cost reconciliation run (Manual Trigger)",
                    "invalid_rows": "error",
                }
            }
        }
    },
)


definitions = Definitions(
    assets=[reconcile_cost_details],
    resources={
        "warehouse": PreauthWarehouse(),
    },
    jobs=[reconciliation_job],
)
