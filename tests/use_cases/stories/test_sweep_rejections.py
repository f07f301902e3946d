"""Story: Only the receiver sweeps, and only a settled request."""

from __future__ import annotations

import pytest

from veilpay.application.use_cases.accounts import AccountService
from veilpay.application.use_cases.pay_request import PayRequestService
from veilpay.client.wallet import Wallet
from veilpay.domain.errors import (
    NotSettledError,
    RequestNotFoundError,
    UnauthorizedReceiverError,
    VaultMismatchError,
)
from veilpay.infrastructure.keys import escrow_vault_key
from tests.fixtures import InMemoryKeyValueStore


@pytest.mark.asyncio
async def test_sweep_by_non_receiver_rejected(
    pay_request_service: PayRequestService,
    registered_receiver: Wallet,
    registered_payer: Wallet,
) -> None:
    """
    Story: The payer tries to drain the vault it just funded.

    Security rule: the signer of a sweep must be the stored receiver.
    """
    created = await pay_request_service.create_pay_request(
        registered_receiver.create_pay_request(1, 10_000)
    )
    await pay_request_service.settle_pay_request(
        created.address, registered_payer.settle_pay_request(created.address, 10_000)
    )

    with pytest.raises(UnauthorizedReceiverError):
        await pay_request_service.sweep_pay_request(
            created.address, registered_payer.sweep_pay_request(created.address)
        )

    record = await pay_request_service.get_pay_request(created.address)
    assert record.vault_balance == 10_000


@pytest.mark.asyncio
async def test_sweep_before_settlement_rejected(
    pay_request_service: PayRequestService,
    registered_receiver: Wallet,
) -> None:
    created = await pay_request_service.create_pay_request(
        registered_receiver.create_pay_request(2, 10_000)
    )

    with pytest.raises(NotSettledError) as exc_info:
        await pay_request_service.sweep_pay_request(
            created.address, registered_receiver.sweep_pay_request(created.address)
        )

    # Not-settled is reported as the not-found family
    assert isinstance(exc_info.value, RequestNotFoundError)
    record = await pay_request_service.get_pay_request(created.address)
    assert record.is_settled is False


@pytest.mark.asyncio
async def test_second_sweep_and_late_settlement_find_nothing(
    pay_request_service: PayRequestService,
    account_service: AccountService,
    registered_receiver: Wallet,
    registered_payer: Wallet,
) -> None:
    created = await pay_request_service.create_pay_request(
        registered_receiver.create_pay_request(3, 10_000)
    )
    await pay_request_service.settle_pay_request(
        created.address, registered_payer.settle_pay_request(created.address, 10_000)
    )
    sweep = await pay_request_service.sweep_pay_request(
        created.address, registered_receiver.sweep_pay_request(created.address)
    )

    with pytest.raises(RequestNotFoundError):
        await pay_request_service.sweep_pay_request(
            created.address, registered_receiver.sweep_pay_request(created.address)
        )
    with pytest.raises(RequestNotFoundError):
        await pay_request_service.settle_pay_request(
            created.address,
            registered_payer.settle_pay_request(created.address, 10_000),
        )

    account = await account_service.get_account(registered_receiver.address)
    assert account.balance == sweep.receiver_balance


@pytest.mark.asyncio
async def test_settle_unknown_address_rejected(
    pay_request_service: PayRequestService,
    registered_payer: Wallet,
) -> None:
    address = "ab" * 32
    with pytest.raises(RequestNotFoundError):
        await pay_request_service.settle_pay_request(
            address, registered_payer.settle_pay_request(address, 1)
        )


@pytest.mark.asyncio
async def test_sweep_refuses_vault_out_of_step_with_record(
    pay_request_service: PayRequestService,
    account_service: AccountService,
    store: InMemoryKeyValueStore,
    registered_receiver: Wallet,
    registered_payer: Wallet,
) -> None:
    """
    Story: The vault no longer holds what the record says was settled.

    Safety rule: sweep pays out nothing and leaves both records in place.
    """
    created = await pay_request_service.create_pay_request(
        registered_receiver.create_pay_request(4, 10_000)
    )
    await pay_request_service.settle_pay_request(
        created.address, registered_payer.settle_pay_request(created.address, 10_000)
    )
    before = await account_service.get_account(registered_receiver.address)

    # Given: The vault balance drifted away from settled_amount
    store._data[escrow_vault_key(created.escrow_address)] = "9999"

    # When/Then: The sweep is refused as a ledger inconsistency, not a caller error
    with pytest.raises(VaultMismatchError) as exc_info:
        await pay_request_service.sweep_pay_request(
            created.address, registered_receiver.sweep_pay_request(created.address)
        )
    assert not isinstance(exc_info.value, ValueError)

    record = await pay_request_service.get_pay_request(created.address)
    assert record.is_settled is True
    assert record.vault_balance == 9999
    after = await account_service.get_account(registered_receiver.address)
    assert after.balance == before.balance
