from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import duckdb
from dagster import ConfigurableResource

from preauth_dagster.db.bootstrap import ensure_preauth_warehouse


def default_warehouse_path() -> str:
    """`DUCKDB_PATH`, else preauth_claims.duckdb at the repository root."""
    return os.environ.get("DUCKDB_PATH") or str(
        (Path(__file__).resolve().parents[2] / "preauth_claims.duckdb").resolve()
    )


class PreauthWarehouse(ConfigurableResource):
    """Pre-authorization claims warehouse in DuckDB.

    Connections handed out by `connect` always see the `main_intermediate`
    input relations and the `main_runs` registry and result tables; a fresh
    file gets them created on first use.
    """

    path: str = default_warehouse_path()

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser().resolve()

    @contextmanager
    def connect(self) -> Iterator[duckdb.DuckDBPyConnection]:
        con = duckdb.connect(str(self.resolved_path))
        try:
            ensure_preauth_warehouse(con)
            yield con
        finally:
            con.close()
