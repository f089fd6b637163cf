"""Album folder synchronization tool.

Keeps a local folder of audio tracks in line with a manifest listing the
desired tracks, fetching missing ones and removing stale ones.
"""

__version__ = "0.1.0"

from .config import Config
from .core.sync import (
    ExecutionResult,
    PlanExecutor,
    ReconciliationPlan,
    Strategy,
    StrategyKind,
    StrategyResolver,
    compute_plan,
)
from .exceptions import AlbumSyncError
from .models import Manifest, parse_manifest, render_manifest

__all__ = [
    "AlbumSyncError",
    "Config",
    "ExecutionResult",
    "Manifest",
    "PlanExecutor",
    "ReconciliationPlan",
    "Strategy",
    "StrategyKind",
    "StrategyResolver",
    "compute_plan",
    "parse_manifest",
    "render_manifest",
]
