from __future__ import annotations

from pathlib import Path
from typing import Any

import duckdb

EXPORTED_MARTS = {
    "mart_transfers": "transfers",
    "mart_holder_stats": "holder_stats",
    "mart_meltdowns": "meltdowns",
    "mart_generations": "generations",
}


class ExportService:
    def __init__(self, analytics_db: Path) -> None:
        self.analytics_db = analytics_db

    def export_required_datasets(self, output_dir: Path) -> list[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        outputs: list[Path] = []
        with duckdb.connect(str(self.analytics_db)) as conn:
            for table, stem in EXPORTED_MARTS.items():
                outputs.extend(self._export_table(conn, table, output_dir / stem))
        return outputs

    def _export_table(self, conn: Any, table: str, stem: Path) -> list[Path]:
        csv_path = stem.with_suffix(".csv")
        parquet_path = stem.with_suffix(".parquet")
        conn.execute(f"COPY (SELECT * FROM {table}) TO '{csv_path.as_posix()}' (HEADER, DELIMITER ',')")
        conn.execute(f"COPY (SELECT * FROM {table}) TO '{parquet_path.as_posix()}' (FORMAT PARQUET)")
        return [csv_path, parquet_path]
