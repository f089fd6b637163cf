"""Synchronization module.

Handles strategy resolution, plan computation and plan execution.
"""

from .executor import ExecutionResult, PlanExecutionError, PlanExecutor, StateWriteError
from .progress import ProgressCallback, ProgressPhase, ProgressTracker, ProgressUpdate
from .reconciler import ReconciliationPlan, compute_plan, plan_for_strategy
from .strategy import Strategy, StrategyKind, StrategyResolver

__all__ = [
    # Reconciler
    "ReconciliationPlan",
    "compute_plan",
    "plan_for_strategy",
    # Strategy
    "Strategy",
    "StrategyKind",
    "StrategyResolver",
    # Execution
    "ExecutionResult",
    "PlanExecutionError",
    "PlanExecutor",
    "StateWriteError",
    # Progress
    "ProgressCallback",
    "ProgressPhase",
    "ProgressTracker",
    "ProgressUpdate",
]
