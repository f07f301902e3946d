"""Dependencies for the escrow API."""

from __future__ import annotations

from functools import lru_cache

from ..application.use_cases.accounts import AccountService
from ..application.use_cases.pay_request import PayRequestService
from ..application.use_cases.zk_pay_request import ZkPayRequestService
from ..domain.entities import PayRequest, ZkPayRequest
from ..envs.escrow_env import Settings, get_settings
from ..infrastructure.account_repository_impl import AccountRepositoryImpl
from ..infrastructure.database import DatabaseClient
from ..infrastructure.pay_request_repository_impl import PayRequestRepositoryImpl
from ..infrastructure.storage import RedisKeyValueStore


@lru_cache()
def get_settings_dependency() -> Settings:
    return get_settings()


@lru_cache()
def get_database_client_dependency() -> DatabaseClient:
    settings = get_settings_dependency()
    return DatabaseClient(settings)


@lru_cache()
def get_store_dependency() -> RedisKeyValueStore:
    db_client = get_database_client_dependency()
    return RedisKeyValueStore(db_client)


def get_account_repository() -> AccountRepositoryImpl:
    return AccountRepositoryImpl(get_store_dependency())


def get_pay_request_repository() -> PayRequestRepositoryImpl[PayRequest]:
    return PayRequestRepositoryImpl(get_store_dependency(), PayRequest)


def get_zk_pay_request_repository() -> PayRequestRepositoryImpl[ZkPayRequest]:
    return PayRequestRepositoryImpl(get_store_dependency(), ZkPayRequest)


def get_account_service() -> AccountService:
    settings = get_settings_dependency()
    return AccountService(
        get_account_repository(),
        settings.ledger_params,
        settings.initial_balance,
    )


def get_pay_request_service() -> PayRequestService:
    settings = get_settings_dependency()
    return PayRequestService(
        get_account_repository(),
        get_pay_request_repository(),
        settings.ledger_params,
    )


def get_zk_pay_request_service() -> ZkPayRequestService:
    settings = get_settings_dependency()
    return ZkPayRequestService(
        get_account_repository(),
        get_zk_pay_request_repository(),
        settings.ledger_params,
    )
