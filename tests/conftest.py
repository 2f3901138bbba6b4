"""Shared test configuration and fixtures."""

import pytest

from secretsync.models import DesiredSecret, ExistingSecretRef, RecipientKey
from secretsync.testing import (
    RecordingStore,
    make_desired_secret,
    make_existing_ref,
    make_recipient_keypair,
)


@pytest.fixture
def keypair():
    """Provide a fresh recipient key and its private half."""
    return make_recipient_keypair()


@pytest.fixture
def recipient_key(keypair) -> RecipientKey:
    return keypair[0]


@pytest.fixture
def store() -> RecordingStore:
    """Provide a store stub that always succeeds."""
    return RecordingStore()


@pytest.fixture
def desired_ab() -> list[DesiredSecret]:
    """Desired secrets A=1, B=2."""
    return [
        make_desired_secret(name="A", value="1"),
        make_desired_secret(name="B", value="2"),
    ]


@pytest.fixture
def existing_bc() -> list[ExistingSecretRef]:
    """Stored secrets B and C."""
    return [make_existing_ref(name="B"), make_existing_ref(name="C")]
