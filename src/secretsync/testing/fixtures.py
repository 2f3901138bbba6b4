"""Store stubs for testing against the RemoteStore interface."""

from unittest.mock import AsyncMock, MagicMock

from secretsync.errors import RemoteError


class RecordingStore:
    """In-memory RemoteStore that records every call.

    Args:
        fail: Mapping of secret name to HTTP status; calls for that name
            raise RemoteError with the status instead of succeeding.
    """

    def __init__(self, fail: dict[str, int] | None = None) -> None:
        self.fail = dict(fail or {})
        self.calls: list[tuple[str, str]] = []
        self.upserts: dict[str, tuple[str, str]] = {}

    async def upsert(self, name: str, ciphertext_b64: str, key_id: str) -> None:
        self.calls.append(("upsert", name))
        if name in self.fail:
            raise RemoteError(self.fail[name], "simulated failure")
        self.upserts[name] = (ciphertext_b64, key_id)

    async def delete(self, name: str) -> None:
        self.calls.append(("delete", name))
        if name in self.fail:
            raise RemoteError(self.fail[name], "simulated failure")


def create_mock_store() -> MagicMock:
    """Create a mock RemoteStore whose calls always succeed.

    Returns:
        MagicMock with AsyncMock upsert() and delete().
    """
    mock = MagicMock()
    mock.upsert = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=None)
    return mock
