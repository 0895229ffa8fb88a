from .api_client import ApiClient, ApiError
from .progress_store import ProgressStore
from .stats_reconciler import StatsReconciler, StatsSnapshot, reduce_stats

__all__ = [
    "ApiClient",
    "ApiError",
    "ProgressStore",
    "StatsReconciler",
    "StatsSnapshot",
    "reduce_stats",
]
