from __future__ import annotations

import argparse
import csv
import json
import os
from datetime import datetime
from pathlib import Path

import duckdb
import yaml

from preauth_calculators.claim_cost_calculator.benefit_resolver import DISEASE_PROCEDURE_BENEFIT_ID
from preauth_calculators.claim_cost_calculator.calculator import ClaimCostCalculator
from preauth_calculators.claim_cost_calculator.duckdb_inputs import read_cost_detail_inputs
from preauth_calculators.claim_cost_calculator.table_loader import read_master_data

CSV_FIELDNAMES = [
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
    "benefit_descriptions",
]

# Full YAML cost views are written for the first N cost details only
YAML_DETAIL_LIMIT = 20


def _get_repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _default_duckdb_path() -> str:
    env_path = os.environ.get("DUCKDB_PATH")
    if env_path:
        return env_path
    return str((_get_repo_root() / "preauth_claims.duckdb").resolve())


def reconcile_from_duckdb_to_csv(
    *,
    duckdb_path: str,
    output_csv_path: str,
    schema: str = "main_intermediate",
    limit: int | None = None,
    invalid_rows: str = "error",
    disease_procedure_benefit_id: int = DISEASE_PROCEDURE_BENEFIT_ID,
) -> int:
    """Read cost details from DuckDB and write reconciled cost summaries to CSV.

    Returns number of rows written.

    Input relations are read from `{schema}` (see read_cost_detail_inputs and
    read_master_data for the expected columns).
    """

    con = duckdb.connect(str(Path(duckdb_path).expanduser().resolve()))
    try:
        details, stats = read_cost_detail_inputs(
            con,
            schema=schema,
            limit=limit,
            invalid_rows=invalid_rows,
        )
        disease_procedure_codes, benefit_master = read_master_data(con, schema=schema)
    finally:
        con.close()

    calculator = ClaimCostCalculator(disease_procedure_benefit_id=disease_procedure_benefit_id)

    output_path = Path(output_csv_path).expanduser().resolve()
    output_path.parent.mkdir(parents=True, exist_ok=True)

    yaml_dir = output_path.parent / "yaml_details"
    yaml_dir.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()

        for i, detail in enumerate(details):
            view = calculator.build_cost_view(detail, disease_procedure_codes, benefit_master)

            if i < YAML_DETAIL_LIMIT:
                with (yaml_dir / f"{view.cost_detail_id}.yml").open("w", encoding="utf-8") as yf:
                    yaml.dump(view.model_dump(), yf, sort_keys=False)

            summary = view.summary
            writer.writerow(
                {
                    "cost_detail_id": view.cost_detail_id,
                    "claim_status_code": view.claim_status_code,
                    "approval_phase": view.approval_phase,
                    "total": summary.total,
                    "requested_total": summary.requested_total,
                    "gsa": summary.gsa,
                    "nsa": summary.nsa,
                    "copay": summary.copay,
                    "discount": summary.discount,
                    "disallowed": summary.disallowed,
                    "benefit_count": len(view.benefits),
                    "benefit_descriptions": json.dumps([b.description for b in view.benefits]),
                }
            )

    skipped = stats["skipped_bill_lines"] + stats["skipped_benefit_lines"]
    if skipped:
        total_rows = stats["bill_lines"] + stats["benefit_lines"]
        pct = (skipped / total_rows) * 100 if total_rows > 0 else 0
        print(f"Skipped {skipped}/{total_rows} ({pct:.2f}%) lines without a cost_detail_id")

    return len(details)


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="preauth_calculators.claim_cost_calculator.duckdb_to_csv",
        description=(
            "Read cost details, bill lines and benefit summaries from DuckDB and write "
            "reconciled cost summaries to CSV."
        ),
    )
    p.add_argument(
        "--duckdb-path",
        default=_default_duckdb_path(),
        help="Path to DuckDB file (default: DUCKDB_PATH env var or repo preauth_claims.duckdb)",
    )
    p.add_argument(
        "--output-csv",
        required=False,
        help="Output CSV path. Defaults to tmp_exports/YYYYMMDD_HHMMSSffffff_cost_summaries_out.csv",
    )
    p.add_argument(
        "--schema",
        default="main_intermediate",
        help="DuckDB schema containing the input relations",
    )
    p.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Optional cost detail limit for quick smoke tests",
    )
    p.add_argument(
        "--invalid-rows",
        choices=["error", "skip"],
        default="error",
        help="What to do with lines that have no cost_detail_id: fail or skip them",
    )
    p.add_argument(
        "--disease-procedure-benefit-id",
        type=int,
        default=DISEASE_PROCEDURE_BENEFIT_ID,
        help="Product benefit id labelled from the disease-procedure master",
    )
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    output_csv = args.output_csv
    if not output_csv:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S%f")
        output_csv = str(Path(__file__).parent / "tmp_exports" / f"{timestamp}_cost_summaries_out.csv")

    count = reconcile_from_duckdb_to_csv(
        duckdb_path=args.duckdb_path,
        output_csv_path=output_csv,
        schema=str(args.schema),
        limit=args.limit,
        invalid_rows=str(args.invalid_rows),
        disease_procedure_benefit_id=int(args.disease_procedure_benefit_id),
    )

    print(f"Wrote {count} rows to {Path(output_csv).expanduser().resolve()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
