"""Data models for secret reconciliation.

Pydantic models for the desired secrets, the snapshot of secrets already
registered on the remote store, the store's public key and the actions
derived from comparing them.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

REDACTED = "<deleted>"
MASK = "******"

# Letters, digits and underscores, not starting with a digit.
SECRET_NAME_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"
RESERVED_PREFIX = "GITHUB_"


class DesiredSecret(BaseModel):
    """A secret that should exist on the remote store."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(
        ..., min_length=1, pattern=SECRET_NAME_PATTERN, description="Case-sensitive secret name"
    )
    value: str = Field(..., repr=False, description="Plaintext value")

    @field_validator("name")
    @classmethod
    def check_not_reserved(cls, v: str) -> str:
        if v.upper().startswith(RESERVED_PREFIX):
            raise ValueError(f"secret names must not start with {RESERVED_PREFIX}")
        return v


class ExistingSecretRef(BaseModel):
    """A secret already registered on the remote store.

    The store never returns values, only names and timestamps.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RecipientKey(BaseModel):
    """The store's published public key, fetched once per run."""

    model_config = ConfigDict(frozen=True)

    key_id: str
    key_bytes: bytes = Field(..., repr=False)


class ActionKind(str, Enum):
    """Lifecycle category of a secret within one reconciliation pass."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SyncAction(BaseModel):
    """A single create, update or delete derived by reconciliation."""

    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    name: str
    value: str | None = Field(None, repr=False)

    @classmethod
    def create(cls, name: str, value: str) -> "SyncAction":
        return cls(kind=ActionKind.CREATE, name=name, value=value)

    @classmethod
    def update(cls, name: str, value: str) -> "SyncAction":
        return cls(kind=ActionKind.UPDATE, name=name, value=value)

    @classmethod
    def delete(cls, name: str) -> "SyncAction":
        return cls(kind=ActionKind.DELETE, name=name)

    @property
    def is_write(self) -> bool:
        """True for creates and updates, which carry a value to seal."""
        return self.kind is not ActionKind.DELETE


class ActionResult(BaseModel):
    """Outcome of applying one SyncAction against the store."""

    model_config = ConfigDict(frozen=True)

    action: SyncAction
    ok: bool
    error: str | None = None
    status_code: int | None = None


class SecretDetails(BaseModel):
    """Rendering record for one secret in the terminal viewer."""

    name: str
    value: str
    status: ActionKind
    created_at: datetime | None = None
    updated_at: datetime | None = None
