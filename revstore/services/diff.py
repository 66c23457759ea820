"""
Structural diff between two strategy snapshots.

Conditions are matched on their caller-assigned ``id``, never on
position, so reordering alone produces no changes. Emission order is
fixed: name change, additions (new order), removals (old order),
modifications (new order).

Everything here is pure and synchronous; no storage access.
"""

from collections import Counter
from typing import Union

from ..models.strategy import Change, ChangeType, Condition, StrategySnapshot

SnapshotLike = Union[StrategySnapshot, dict]


def _as_snapshot(data: SnapshotLike) -> StrategySnapshot:
    if isinstance(data, StrategySnapshot):
        return data
    return StrategySnapshot.model_validate(data)


def _index_conditions(snapshot: StrategySnapshot) -> dict[int, Condition]:
    # Duplicate ids: the last one wins but keeps the first one's position
    return {condition.id: condition for condition in snapshot.conditions}


def generate_diff(old: SnapshotLike, new: SnapshotLike) -> list[Change]:
    """
    Compare two snapshots.

    Args:
        old: Baseline snapshot (e.g. a historical revision)
        new: Snapshot to compare against the baseline

    Returns:
        Ordered list of changes; empty when the snapshots are equivalent
    """
    old_snapshot = _as_snapshot(old)
    new_snapshot = _as_snapshot(new)
    changes: list[Change] = []

    if old_snapshot.name != new_snapshot.name:
        changes.append(Change(
            type=ChangeType.NAME_CHANGED,
            field="name",
            old_value=old_snapshot.name,
            new_value=new_snapshot.name,
        ))

    old_conditions = _index_conditions(old_snapshot)
    new_conditions = _index_conditions(new_snapshot)

    for condition_id, condition in new_conditions.items():
        if condition_id not in old_conditions:
            changes.append(Change(
                type=ChangeType.ADDED,
                field="condition",
                new_value=condition.model_copy(),
            ))

    for condition_id, condition in old_conditions.items():
        if condition_id not in new_conditions:
            changes.append(Change(
                type=ChangeType.REMOVED,
                field="condition",
                old_value=condition.model_copy(),
            ))

    for condition_id, new_condition in new_conditions.items():
        old_condition = old_conditions.get(condition_id)
        if old_condition is None:
            continue
        if (
            old_condition.text != new_condition.text
            or old_condition.importance != new_condition.importance
        ):
            changes.append(Change(
                type=ChangeType.MODIFIED,
                field="condition",
                old_value=old_condition.model_copy(),
                new_value=new_condition.model_copy(),
            ))

    return changes


def summarize_changes(changes: list[Change]) -> dict[str, int]:
    """Count changes per type; every type is present, zero if absent."""
    counts = Counter(change.type.value for change in changes)
    return {change_type.value: counts.get(change_type.value, 0) for change_type in ChangeType}


def describe_change(change: Change) -> str:
    """One human-readable line for a change."""
    if change.type == ChangeType.NAME_CHANGED:
        return f"Renamed '{change.old_value}' -> '{change.new_value}'"

    if change.type == ChangeType.ADDED:
        cond = change.new_value
        return f"+ [{cond.importance.value}] {cond.text}"

    if change.type == ChangeType.REMOVED:
        cond = change.old_value
        return f"- [{cond.importance.value}] {cond.text}"

    old_cond, new_cond = change.old_value, change.new_value
    parts = []
    if old_cond.text != new_cond.text:
        parts.append(f"text '{old_cond.text}' -> '{new_cond.text}'")
    if old_cond.importance != new_cond.importance:
        parts.append(
            f"importance {old_cond.importance.value} -> {new_cond.importance.value}"
        )
    return f"~ condition #{new_cond.id}: " + ", ".join(parts)
