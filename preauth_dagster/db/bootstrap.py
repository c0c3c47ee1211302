from __future__ import annotations

import duckdb


def ensure_core_schemas(con: duckdb.DuckDBPyConnection) -> None:
    con.execute("CREATE SCHEMA IF NOT EXISTS main_intermediate")
    con.execute("CREATE SCHEMA IF NOT EXISTS main_runs")


def ensure_input_tables(con: duckdb.DuckDBPyConnection) -> None:
    """Create empty input relations so a fresh warehouse can be reconciled."""
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_intermediate.int_cost_details (
            cost_detail_id BIGINT PRIMARY KEY,
            claim_status_code INTEGER
        )
        """
    )
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_intermediate.int_cost_bill_lines (
            bill_line_id BIGINT,
            cost_detail_id BIGINT,
            claim_amount DOUBLE,
            approved_gsa DOUBLE,
            approved_nsa DOUBLE,
            approved_copay DOUBLE,
            approved_discount DOUBLE,
            is_deleted BOOLEAN
        )
        """
    )
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_intermediate.int_cumulative_copay_discount (
            override_id BIGINT,
            cost_detail_id BIGINT,
            copay_amount DOUBLE,
            discount_amount DOUBLE,
            is_deleted BOOLEAN
        )
        """
    )
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_intermediate.int_benefit_cost_summary (
            summary_line_id BIGINT,
            cost_detail_id BIGINT,
            benefit_id BIGINT,
            sub_benefit_id BIGINT,
            requested_amount DOUBLE,
            gsa DOUBLE,
            copay DOUBLE,
            discount DOUBLE,
            nsa DOUBLE,
            is_deleted BOOLEAN
        )
        """
    )
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_intermediate.int_disease_procedure_codes (
            id BIGINT PRIMARY KEY,
            code VARCHAR,
            description VARCHAR
        )
        """
    )
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_intermediate.int_benefit_master (
            id BIGINT PRIMARY KEY,
            parent_id BIGINT,
            main_coverage VARCHAR,
            sub_coverage VARCHAR
        )
        """
    )


def ensure_run_registry(con: duckdb.DuckDBPyConnection) -> None:
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_runs.run_registry (
            run_id VARCHAR PRIMARY KEY,
            run_timestamp VARCHAR,
            group_id BIGINT,
            group_description VARCHAR,
            run_description VARCHAR,
            trigger_source VARCHAR,
            input_schema VARCHAR,
            invalid_rows VARCHAR,
            disease_procedure_benefit_id BIGINT,
            git_commit VARCHAR,
            git_commit_clean BOOLEAN,
            status VARCHAR,
            cost_detail_count INTEGER,
            approved_count INTEGER,
            executive_count INTEGER,
            benefit_line_count INTEGER,
            skipped_line_count INTEGER,
            created_at TIMESTAMP,
            updated_at TIMESTAMP
        )
        """
    )

    # Not unique: sub-second collisions are allowed
    con.execute(
        "CREATE INDEX IF NOT EXISTS idx_run_registry_timestamp ON main_runs.run_registry (run_timestamp)"
    )


def ensure_result_tables(con: duckdb.DuckDBPyConnection) -> None:
    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_runs.cost_summaries (
            run_id VARCHAR,
            cost_detail_id BIGINT,
            claim_status_code INTEGER,
            approval_phase VARCHAR,
            total DOUBLE,
            requested_total DOUBLE,
            gsa DOUBLE,
            nsa DOUBLE,
            copay DOUBLE,
            discount DOUBLE,
            disallowed DOUBLE,
            benefit_count INTEGER,
            run_timestamp VARCHAR,
            created_at TIMESTAMP,
            PRIMARY KEY (run_id, cost_detail_id)
        )
        """
    )

    con.execute(
        """
        CREATE TABLE IF NOT EXISTS main_runs.benefit_cost_lines (
            run_id VARCHAR,
            cost_detail_id BIGINT,
            line_index INTEGER,
            benefit_id BIGINT,
            sub_benefit_id BIGINT,
            description VARCHAR,
            requested_amount DOUBLE,
            gsa DOUBLE,
            copay DOUBLE,
            discount DOUBLE,
            nsa DOUBLE,
            disallowed DOUBLE,
            created_at TIMESTAMP,
            PRIMARY KEY (run_id, cost_detail_id, line_index)
        )
        """
    )


def ensure_preauth_warehouse(con: duckdb.DuckDBPyConnection) -> None:
    ensure_core_schemas(con)
    ensure_input_tables(con)
    ensure_run_registry(con)
    ensure_result_tables(con)
