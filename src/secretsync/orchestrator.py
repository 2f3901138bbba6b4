"""Applies reconciliation actions to the remote store.

Creates and updates run first, deletes second. Every action is attempted;
a failed action is recorded and the run moves on.
"""

import asyncio
import logging
from typing import NamedTuple, Protocol, Sequence, runtime_checkable

from secretsync.errors import EncodeError, RemoteError
from secretsync.models import ActionKind, ActionResult, RecipientKey, SyncAction
from secretsync.security.sealing import seal_b64, validate_key

logger = logging.getLogger(__name__)


@runtime_checkable
class RemoteStore(Protocol):
    """Write side of a repository-scoped secret store."""

    async def upsert(self, name: str, ciphertext_b64: str, key_id: str) -> None:
        """Create or replace a secret. Idempotent per name."""
        ...

    async def delete(self, name: str) -> None:
        """Remove a secret. Idempotent per name."""
        ...


class SyncSummary(NamedTuple):
    """Per-category outcome of a run.

    Attributes:
        succeeded: Names applied successfully, keyed by action kind.
        failed: (name, error) pairs that failed, keyed by action kind.
    """

    succeeded: dict[ActionKind, list[str]]
    failed: dict[ActionKind, list[tuple[str, str]]]

    @property
    def has_failures(self) -> bool:
        return any(self.failed.values())

    @property
    def total(self) -> int:
        return sum(len(v) for v in self.succeeded.values()) + sum(
            len(v) for v in self.failed.values()
        )


async def _apply_one(
    action: SyncAction,
    key: RecipientKey,
    store: RemoteStore,
    semaphore: asyncio.Semaphore,
) -> ActionResult:
    async with semaphore:
        try:
            if action.is_write:
                ciphertext = seal_b64(action.value or "", key)
                await store.upsert(action.name, ciphertext, key.key_id)
            else:
                await store.delete(action.name)
        except RemoteError as e:
            if action.kind is ActionKind.DELETE and e.status_code == 404:
                logger.info("Secret %s already absent, nothing to delete.", action.name)
                return ActionResult(action=action, ok=True, status_code=404)
            logger.error("Failed to %s secret %s: %s", action.kind.value, action.name, e)
            return ActionResult(
                action=action, ok=False, error=str(e), status_code=e.status_code
            )
        except EncodeError as e:
            logger.error("Failed to encode secret %s: %s", action.name, e)
            return ActionResult(action=action, ok=False, error=str(e))
        except Exception as e:
            logger.exception(
                "Unexpected error on %s of secret %s", action.kind.value, action.name
            )
            return ActionResult(action=action, ok=False, error=f"{type(e).__name__}: {e}")

    logger.debug("Applied %s for secret %s.", action.kind.value, action.name)
    return ActionResult(action=action, ok=True)


async def apply_async(
    actions: Sequence[SyncAction],
    key: RecipientKey,
    store: RemoteStore,
    max_concurrency: int = 1,
) -> list[ActionResult]:
    """Apply actions against the store.

    Args:
        actions: Actions from reconcile().
        key: Recipient key used to seal every value.
        store: Remote store to write to.
        max_concurrency: Upper bound on in-flight calls within a phase.
            1 applies actions strictly one after another.

    Returns:
        One result per action: creates and updates first, then deletes,
        each in reconcile order.

    Raises:
        InvalidKeyError: If the key is invalid. Raised before any call.
        ValueError: If max_concurrency is below 1.
    """
    if max_concurrency < 1:
        raise ValueError("max_concurrency must be at least 1")

    validate_key(key)

    writes = [a for a in actions if a.is_write]
    deletes = [a for a in actions if not a.is_write]
    semaphore = asyncio.Semaphore(max_concurrency)

    logger.info(
        "Applying %d writes and %d deletes (concurrency %d).",
        len(writes),
        len(deletes),
        max_concurrency,
    )

    if max_concurrency == 1:
        return [await _apply_one(a, key, store, semaphore) for a in writes + deletes]

    results = await _apply_phase(writes, key, store, semaphore)
    results.extend(await _apply_phase(deletes, key, store, semaphore))
    return results


async def _apply_phase(
    actions: list[SyncAction],
    key: RecipientKey,
    store: RemoteStore,
    semaphore: asyncio.Semaphore,
) -> list[ActionResult]:
    """Run one phase, fanning out across names.

    Actions sharing a name run one after another in input order, so the
    last entry for a name is the one left on the store.
    """
    by_name: dict[str, list[int]] = {}
    for i, action in enumerate(actions):
        by_name.setdefault(action.name, []).append(i)

    results: list[ActionResult | None] = [None] * len(actions)

    async def run_name(indices: list[int]) -> None:
        for i in indices:
            results[i] = await _apply_one(actions[i], key, store, semaphore)

    await asyncio.gather(*(run_name(indices) for indices in by_name.values()))
    return [r for r in results if r is not None]


def apply(
    actions: Sequence[SyncAction],
    key: RecipientKey,
    store: RemoteStore,
    max_concurrency: int = 1,
) -> list[ActionResult]:
    """Synchronous entry point for apply_async().

    Must not be called from inside a running event loop.
    """
    return asyncio.run(apply_async(actions, key, store, max_concurrency))


def summarize(results: Sequence[ActionResult]) -> SyncSummary:
    """Group results by action kind and outcome.

    Args:
        results: Results from apply().

    Returns:
        SyncSummary listing succeeded and failed names per category.
    """
    succeeded: dict[ActionKind, list[str]] = {kind: [] for kind in ActionKind}
    failed: dict[ActionKind, list[tuple[str, str]]] = {kind: [] for kind in ActionKind}
    for result in results:
        kind = result.action.kind
        if result.ok:
            succeeded[kind].append(result.action.name)
        else:
            failed[kind].append((result.action.name, result.error or "unknown error"))
    return SyncSummary(succeeded=succeeded, failed=failed)
