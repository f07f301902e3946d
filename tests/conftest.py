"""Shared pytest fixtures for escrow tests."""

from __future__ import annotations

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from cryptography.hazmat.primitives.asymmetric import ec

from veilpay.application.ledger import LedgerParams
from veilpay.client.wallet import Wallet
from veilpay.infrastructure.database import DatabaseClient
from veilpay.infrastructure.storage import RedisKeyValueStore

TEST_PROGRAM_ID_HEX = "7e57" * 16


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add command-line options for race condition tests."""
    parser.addoption(
        "--race-iterations",
        type=int,
        default=20,
        help="Number of fresh requests to race settlements on (default: 20)",
    )


@pytest.fixture
def receiver_key_pair() -> tuple[
    ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey
]:
    """Generate a receiver key pair for testing."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    public_key = private_key.public_key()
    return private_key, public_key


@pytest.fixture
def payer_key_pair() -> tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey]:
    """Generate a payer key pair for testing."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    public_key = private_key.public_key()
    return private_key, public_key


@pytest.fixture
def receiver(
    receiver_key_pair: tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey],
) -> Wallet:
    private_key, _ = receiver_key_pair
    return Wallet(private_key)


@pytest.fixture
def payer(
    payer_key_pair: tuple[ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey],
) -> Wallet:
    private_key, _ = payer_key_pair
    return Wallet(private_key)


@pytest.fixture
def ledger_params() -> LedgerParams:
    """Ledger parameters with the default fee schedule and a fixed program id."""
    return LedgerParams(program_id_hex=TEST_PROGRAM_ID_HEX)


class TestDatabaseSettings:
    """Test settings for Redis connection."""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url


@pytest_asyncio.fixture
async def redis_db_client() -> AsyncGenerator[DatabaseClient, None]:
    """Create a Redis database client for testing.

    Uses database 15 by default, or TEST_REDIS_URL if set.
    Falls back to localhost:6379/15 if not specified.
    """
    import warnings

    test_redis_url = os.getenv("TEST_REDIS_URL", "redis://localhost:6379/15")
    settings = TestDatabaseSettings(database_url=test_redis_url)
    client = DatabaseClient(settings)
    client.initialize_database()

    if not await client.is_available():
        await client.close()
        warnings.warn(
            f"Redis not available at {test_redis_url}. "
            "Tests requiring Redis will be skipped. "
            "Start Redis with: redis-server --port 6379",
            UserWarning,
        )
        pytest.skip(f"Redis not available at {test_redis_url}")

    yield client

    # Cleanup: flush test database
    try:
        async with client.get_connection() as conn:
            await conn.flushdb()
    except Exception:
        pass  # Ignore cleanup errors
    await client.close()


@pytest_asyncio.fixture
async def redis_store(redis_db_client: DatabaseClient) -> RedisKeyValueStore:
    """Create a Redis-backed key-value store for testing."""
    return RedisKeyValueStore(redis_db_client)
