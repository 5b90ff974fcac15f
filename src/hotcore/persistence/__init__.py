from .duckdb_store import AnalyticsStore
from .etl import run_analytics_refresh
from .migrations import MigrationRunner
from .sqlite_store import AuthoritativeStore

__all__ = [
    "AnalyticsStore",
    "AuthoritativeStore",
    "MigrationRunner",
    "run_analytics_refresh",
]
