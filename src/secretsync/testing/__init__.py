"""Shared test utilities, fixtures, and factories."""

from secretsync.testing.factories import (
    make_desired_secret,
    make_existing_ref,
    make_recipient_keypair,
)
from secretsync.testing.fixtures import RecordingStore, create_mock_store

__all__ = [
    "RecordingStore",
    "create_mock_store",
    "make_desired_secret",
    "make_existing_ref",
    "make_recipient_keypair",
]
