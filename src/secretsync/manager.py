"""Secrets manager: one reconciliation pass over a single repository.

The manager derives the action list once at construction and never
mutates it. The terminal viewer reads from it; the orchestrator applies it.
"""

import asyncio
import logging
from typing import Protocol, Sequence, runtime_checkable

from secretsync.models import (
    MASK,
    REDACTED,
    ActionKind,
    DesiredSecret,
    ExistingSecretRef,
    RecipientKey,
    SecretDetails,
    SyncAction,
)
from secretsync.orchestrator import RemoteStore, SyncSummary, apply, summarize
from secretsync.reconcile import ActionPlan, find_duplicates, partition, reconcile

logger = logging.getLogger(__name__)


@runtime_checkable
class SecretsTransport(RemoteStore, Protocol):
    """A RemoteStore that can also read the key and the current snapshot."""

    async def fetch_public_key(self) -> RecipientKey: ...

    async def fetch_existing_secrets(self) -> list[ExistingSecretRef]: ...


class SecretsManager:
    """Reconciles desired secrets against one repository's store.

    Args:
        desired: Secrets that should exist.
        existing: Snapshot of secrets registered on the store.
        key: Recipient key used to seal values.
        store: Remote store the actions are applied to.
    """

    def __init__(
        self,
        desired: Sequence[DesiredSecret],
        existing: Sequence[ExistingSecretRef],
        key: RecipientKey,
        store: RemoteStore,
    ) -> None:
        self.key = key
        self.store = store
        self._existing = {ref.name: ref for ref in existing}
        self._actions = tuple(reconcile(desired, existing))

        duplicates = find_duplicates(desired)
        if duplicates:
            logger.warning(
                "Duplicate desired secret names, each will be written separately: %s",
                ", ".join(duplicates),
            )

    @classmethod
    async def from_remote(
        cls,
        desired: Sequence[DesiredSecret],
        client: SecretsTransport,
    ) -> "SecretsManager":
        """Fetch the key and snapshot once, then build a manager.

        Args:
            desired: Secrets that should exist.
            client: Transport to read from and apply to, e.g. GitHubClient.

        Returns:
            A manager ready to list and apply actions.

        Raises:
            RemoteError: If either fetch fails. Nothing is applied.
            EncodeError: If the published key is not valid base64.
        """
        key = await client.fetch_public_key()
        existing = await client.fetch_existing_secrets()
        logger.info(
            "Loaded public key %s and %d existing secrets.", key.key_id, len(existing)
        )
        return cls(desired, existing, key, client)

    def list_secrets(self) -> tuple[SyncAction, ...]:
        """Return the derived actions, one per secret, in reconcile order."""
        return self._actions

    def plan(self) -> ActionPlan:
        """Return the actions grouped by category."""
        return partition(self._actions)

    def get_details_by_index(self, index: int, reveal: bool = False) -> SecretDetails | None:
        """Build rendering details for the secret at a list position.

        Args:
            index: Position in list_secrets().
            reveal: Show the plaintext value instead of a mask.

        Returns:
            SecretDetails, or None if index is out of range.
        """
        if index < 0 or index >= len(self._actions):
            return None

        action = self._actions[index]
        if action.kind is ActionKind.DELETE:
            value = REDACTED
        elif reveal:
            value = action.value or ""
        else:
            value = MASK

        ref = self._existing.get(action.name)
        return SecretDetails(
            name=action.name,
            value=value,
            status=action.kind,
            created_at=ref.created_at if ref else None,
            updated_at=ref.updated_at if ref else None,
        )

    def run_reconciliation(self, max_concurrency: int = 1) -> SyncSummary:
        """Apply every action and summarize the outcome.

        Args:
            max_concurrency: Upper bound on in-flight calls within a phase.

        Returns:
            SyncSummary with per-category successes and failures.

        Raises:
            InvalidKeyError: If the recipient key is invalid.
        """
        plan = self.plan()
        logger.info(
            "Reconciling: %d to create, %d to update, %d to delete.",
            len(plan.creates),
            len(plan.updates),
            len(plan.deletes),
        )
        results = apply(self._actions, self.key, self.store, max_concurrency)
        summary = summarize(results)
        if summary.has_failures:
            logger.warning("Reconciliation finished with failures.")
        return summary


def load_manager(
    desired: Sequence[DesiredSecret], client: SecretsTransport
) -> SecretsManager:
    """Synchronous wrapper around SecretsManager.from_remote()."""
    return asyncio.run(SecretsManager.from_remote(desired, client))
