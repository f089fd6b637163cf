"""Reconciler comparing a desired album manifest against an observed one.

The comparison is structural: an entry matches when the first entry with the
same key on the other side carries the same value. A changed value therefore
shows up as a deletion of the old track followed by an addition of the new one.
"""

import logging
from dataclasses import dataclass
from dataclasses import field as dataclass_field
from typing import Dict, List

from ...models.manifest import Entry, Manifest
from .strategy import Strategy, StrategyKind

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationPlan:
    """Additions and deletions turning an observed album into a desired one.

    Attributes:
        additions: Entries to fetch, in desired-manifest order
        deletions: Keys of track files to remove, in observed-manifest order
    """

    additions: List[Entry] = dataclass_field(default_factory=list)
    deletions: List[str] = dataclass_field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check whether the plan has nothing to do."""
        return not self.additions and not self.deletions

    def get_summary(self) -> Dict[str, int]:
        """Get summary statistics."""
        added_keys = {key for key, _ in self.additions}
        return {
            "additions": len(self.additions),
            "deletions": len(self.deletions),
            "replacements": sum(1 for key in self.deletions if key in added_keys),
        }

    def __repr__(self) -> str:
        """String representation of the plan."""
        return (
            f"ReconciliationPlan(to_add={len(self.additions)}, "
            f"to_remove={len(self.deletions)})"
        )


def compute_plan(desired: Manifest, observed: Manifest) -> ReconciliationPlan:
    """Compute the plan that makes ``observed`` match ``desired``.

    Args:
        desired: Manifest the album folder should end up matching
        observed: Manifest recorded for the album folder so far

    Returns:
        ReconciliationPlan with additions and deletions in source order
    """
    plan = ReconciliationPlan()

    for key, value in desired.entries:
        if observed.lookup(key) != value:
            plan.additions.append((key, value))

    # Every raw observed entry is checked, so shadowed duplicates get deleted too
    for key, value in observed.entries:
        if desired.lookup(key) != value:
            plan.deletions.append(key)

    logger.debug(
        "Plan for %s: %d to add, %d to remove",
        desired.title,
        len(plan.additions),
        len(plan.deletions),
    )
    return plan


def plan_for_strategy(desired: Manifest, strategy: Strategy) -> ReconciliationPlan:
    """Derive the plan for ``desired`` given the resolved strategy.

    A new album fetches every desired entry; a rebuild diffs against its
    baseline.
    """
    if strategy.kind == StrategyKind.NEW or strategy.baseline is None:
        return ReconciliationPlan(additions=list(desired.entries))
    return compute_plan(desired, strategy.baseline)
