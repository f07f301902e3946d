"""Pytest fixtures for use case tests."""

from __future__ import annotations

import pytest

from veilpay.application.ledger import LedgerParams
from veilpay.application.use_cases.accounts import AccountService
from veilpay.application.use_cases.pay_request import PayRequestService
from veilpay.application.use_cases.zk_pay_request import ZkPayRequestService
from veilpay.client.wallet import Wallet
from veilpay.domain.entities import UNITS_PER_COIN
from tests.fixtures import (
    InMemoryAccountRepository,
    InMemoryKeyValueStore,
    InMemoryPayRequestRepository,
    InMemoryZkPayRequestRepository,
    register_escrow_scripts,
)

INITIAL_BALANCE = 10 * UNITS_PER_COIN


# ============================================================================
# Repository Fixtures
# ============================================================================


@pytest.fixture
async def store() -> InMemoryKeyValueStore:
    """One in-memory store shared by every repository of a test."""
    store = InMemoryKeyValueStore()
    await register_escrow_scripts(store)
    return store


@pytest.fixture
def account_repository(store: InMemoryKeyValueStore) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(store)


@pytest.fixture
def pay_request_repository(
    store: InMemoryKeyValueStore,
) -> InMemoryPayRequestRepository:
    return InMemoryPayRequestRepository(store)


@pytest.fixture
def zk_pay_request_repository(
    store: InMemoryKeyValueStore,
) -> InMemoryZkPayRequestRepository:
    return InMemoryZkPayRequestRepository(store)


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def account_service(
    account_repository: InMemoryAccountRepository, ledger_params: LedgerParams
) -> AccountService:
    """Create an account service that funds new accounts with 10 coins."""
    return AccountService(
        account_repo=account_repository,
        params=ledger_params,
        initial_balance=INITIAL_BALANCE,
    )


@pytest.fixture
def pay_request_service(
    account_repository: InMemoryAccountRepository,
    pay_request_repository: InMemoryPayRequestRepository,
    ledger_params: LedgerParams,
) -> PayRequestService:
    return PayRequestService(
        account_repo=account_repository,
        pay_request_repo=pay_request_repository,
        params=ledger_params,
    )


@pytest.fixture
def zk_pay_request_service(
    account_repository: InMemoryAccountRepository,
    zk_pay_request_repository: InMemoryZkPayRequestRepository,
    ledger_params: LedgerParams,
) -> ZkPayRequestService:
    return ZkPayRequestService(
        account_repo=account_repository,
        pay_request_repo=zk_pay_request_repository,
        params=ledger_params,
    )


# ============================================================================
# Participant Fixtures
# ============================================================================


@pytest.fixture
async def registered_receiver(
    receiver: Wallet, account_service: AccountService
) -> Wallet:
    await account_service.register(receiver.registration())
    return receiver


@pytest.fixture
async def registered_payer(payer: Wallet, account_service: AccountService) -> Wallet:
    await account_service.register(payer.registration())
    return payer
