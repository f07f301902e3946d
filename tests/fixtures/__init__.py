"""Test fixtures for in-memory implementations."""

from .in_memory_storage import InMemoryKeyValueStore, InterleavingKeyValueStore
from .in_memory_repositories import (
    InMemoryAccountRepository,
    InMemoryPayRequestRepository,
    InMemoryZkPayRequestRepository,
    register_escrow_scripts,
)

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryKeyValueStore",
    "InMemoryPayRequestRepository",
    "InMemoryZkPayRequestRepository",
    "InterleavingKeyValueStore",
    "register_escrow_scripts",
]
