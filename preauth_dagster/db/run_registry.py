"""Registry of reconciliation runs in main_runs.run_registry.

A run is registered as 'started' with the settings it reconciles under, then
finished with per-phase cost detail counts or marked 'failed'. Result rows in
main_runs.cost_summaries and main_runs.benefit_cost_lines share its run_id.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import duckdb

from preauth_calculators.claim_cost_calculator import ApprovalPhase, CostView


def now_utc() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def generate_run_timestamp(now: datetime | None = None) -> str:
    """Return YYYYMMDDHHMMSSUUUU where UUUU is 1/10,000th of a second."""

    now = now or datetime.now(UTC)
    return now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 100:04d}"


@dataclass(frozen=True)
class GitCommit:
    sha: str | None
    clean: bool | None


def current_git_commit(cwd: str | None = None) -> GitCommit:
    """Return the checked-out commit and whether the tree has no changes.

    Untracked files count as changes. Outside a git checkout both fields are None.
    """

    def _git(*args: str) -> str | None:
        try:
            completed = subprocess.run(
                ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
            )
        except (subprocess.CalledProcessError, FileNotFoundError):
            return None
        return completed.stdout.strip()

    sha = _git("rev-parse", "HEAD")
    if not sha:
        return GitCommit(sha=None, clean=None)
    status = _git("status", "--porcelain")
    return GitCommit(sha=sha, clean=None if status is None else status == "")


@dataclass(frozen=True)
class ReconciliationRun:
    """Settings a reconciliation run was started with."""

    run_id: str
    run_timestamp: str
    group_id: int
    group_description: str | None
    run_description: str | None
    trigger_source: str | None
    input_schema: str
    invalid_rows: str
    disease_procedure_benefit_id: int
    git: GitCommit


@dataclass(frozen=True)
class RunTotals:
    cost_details: int
    approved: int
    executive: int
    benefit_lines: int
    skipped_lines: int

    @classmethod
    def from_views(cls, views: Sequence[CostView], *, skipped_lines: int = 0) -> RunTotals:
        approved = sum(1 for v in views if v.approval_phase == ApprovalPhase.approved.value)
        return cls(
            cost_details=len(views),
            approved=approved,
            executive=len(views) - approved,
            benefit_lines=sum(len(v.benefits) for v in views),
            skipped_lines=skipped_lines,
        )


def allocate_group_id(con: duckdb.DuckDBPyConnection) -> int:
    row = con.execute(
        "SELECT COALESCE(MAX(group_id), 0) + 1 FROM main_runs.run_registry"
    ).fetchone()
    return int(row[0])


def register_run(con: duckdb.DuckDBPyConnection, run: ReconciliationRun) -> None:
    created_at = now_utc()
    con.execute(
        """
        INSERT INTO main_runs.run_registry (
            run_id,
            run_timestamp,
            group_id,
            group_description,
            run_description,
            trigger_source,
            input_schema,
            invalid_rows,
            disease_procedure_benefit_id,
            git_commit,
            git_commit_clean,
            status,
            created_at,
            updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'started', ?, ?)
        """,
        [
            run.run_id,
            run.run_timestamp,
            run.group_id,
            run.group_description,
            run.run_description,
            run.trigger_source,
            run.input_schema,
            run.invalid_rows,
            run.disease_procedure_benefit_id,
            run.git.sha,
            run.git.clean,
            created_at,
            created_at,
        ],
    )


def finish_run(con: duckdb.DuckDBPyConnection, run_id: str, totals: RunTotals) -> None:
    con.execute(
        """
        UPDATE main_runs.run_registry
        SET status = 'success',
            cost_detail_count = ?,
            approved_count = ?,
            executive_count = ?,
            benefit_line_count = ?,
            skipped_line_count = ?,
            updated_at = ?
        WHERE run_id = ?
        """,
        [
            totals.cost_details,
            totals.approved,
            totals.executive,
            totals.benefit_lines,
            totals.skipped_lines,
            now_utc(),
            run_id,
        ],
    )


def fail_run(con: duckdb.DuckDBPyConnection, run_id: str) -> None:
    con.execute(
        "UPDATE main_runs.run_registry SET status = 'failed', updated_at = ? WHERE run_id = ?",
        [now_utc(), run_id],
    )
