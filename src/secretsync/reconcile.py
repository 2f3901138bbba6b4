"""Reconciliation of desired secrets against the remote snapshot.

Pure functions: no I/O, no mutation of inputs, deterministic for the same
two input lists in the same order.
"""

from collections import Counter
from typing import Iterable, NamedTuple, Sequence

from secretsync.models import ActionKind, DesiredSecret, ExistingSecretRef, SyncAction


class ActionPlan(NamedTuple):
    """Actions grouped by category, each preserving reconcile order.

    Attributes:
        creates: Desired secrets absent from the store.
        updates: Desired secrets already on the store.
        deletes: Stored secrets no longer desired.
    """

    creates: tuple[SyncAction, ...]
    updates: tuple[SyncAction, ...]
    deletes: tuple[SyncAction, ...]


def reconcile(
    desired: Sequence[DesiredSecret],
    existing: Sequence[ExistingSecretRef],
) -> list[SyncAction]:
    """Compute the actions that bring the store in line with the desired set.

    Desired entries come first in input order (update if the name is stored,
    create otherwise), then a delete for every stored name not desired, in
    snapshot order. Names match exactly; duplicate desired names each yield
    their own action.

    Args:
        desired: Secrets that should exist, with their values.
        existing: Secrets currently registered on the store.

    Returns:
        The derived actions.
    """
    existing_names = {ref.name for ref in existing}
    desired_names = {secret.name for secret in desired}

    actions: list[SyncAction] = []
    for secret in desired:
        if secret.name in existing_names:
            actions.append(SyncAction.update(secret.name, secret.value))
        else:
            actions.append(SyncAction.create(secret.name, secret.value))

    for ref in existing:
        if ref.name not in desired_names:
            actions.append(SyncAction.delete(ref.name))

    return actions


def partition(actions: Iterable[SyncAction]) -> ActionPlan:
    """Group actions by kind.

    Args:
        actions: Actions as produced by reconcile().

    Returns:
        ActionPlan with creates, updates and deletes.
    """
    buckets: dict[ActionKind, list[SyncAction]] = {kind: [] for kind in ActionKind}
    for action in actions:
        buckets[action.kind].append(action)
    return ActionPlan(
        creates=tuple(buckets[ActionKind.CREATE]),
        updates=tuple(buckets[ActionKind.UPDATE]),
        deletes=tuple(buckets[ActionKind.DELETE]),
    )


def find_duplicates(desired: Iterable[DesiredSecret]) -> list[str]:
    """Return desired names that occur more than once, in first-seen order."""
    counts = Counter(secret.name for secret in desired)
    return [name for name, count in counts.items() if count > 1]
