"""Story: A receiver cannot open the same request id twice."""

from __future__ import annotations

import pytest

from veilpay.application.ledger import LedgerParams
from veilpay.application.use_cases.accounts import AccountService
from veilpay.application.use_cases.pay_request import PayRequestService
from veilpay.application.use_cases.zk_pay_request import ZkPayRequestService
from veilpay.client.stealth import StealthKit
from veilpay.client.wallet import Wallet
from veilpay.domain.entities import PayRequest
from veilpay.domain.errors import DuplicateRequestError


@pytest.mark.asyncio
async def test_duplicate_request_id_rejected_and_charged_once(
    pay_request_service: PayRequestService,
    account_service: AccountService,
    registered_receiver: Wallet,
    ledger_params: LedgerParams,
) -> None:
    # Given: An open request with id 7
    first = await pay_request_service.create_pay_request(
        registered_receiver.create_pay_request(7, 1_000)
    )

    # When: The receiver tries id 7 again, even with a different amount
    with pytest.raises(DuplicateRequestError):
        await pay_request_service.create_pay_request(
            registered_receiver.create_pay_request(7, 2_000)
        )

    # Then: The original record is untouched and only one deposit was taken
    stored = await pay_request_service.get_pay_request(first.address)
    assert stored.amount == 1_000
    account = await account_service.get_account(registered_receiver.address)
    assert account.balance == (
        account_service.initial_balance
        - ledger_params.storage_deposit(PayRequest.SPACE)
        - ledger_params.transaction_fee
    )


@pytest.mark.asyncio
async def test_same_request_id_is_free_for_other_receivers_and_variants(
    pay_request_service: PayRequestService,
    zk_pay_request_service: ZkPayRequestService,
    account_service: AccountService,
    registered_receiver: Wallet,
) -> None:
    other = Wallet.generate()
    await account_service.register(other.registration())

    mine = await pay_request_service.create_pay_request(
        registered_receiver.create_pay_request(1, 500)
    )
    theirs = await pay_request_service.create_pay_request(
        other.create_pay_request(1, 500)
    )
    private = await zk_pay_request_service.create_pay_request(
        registered_receiver.create_zk_pay_request(1, StealthKit.create(500), 1, 1_000)
    )

    assert len({mine.address, theirs.address, private.address}) == 3
    escrows = {mine.escrow_address, theirs.escrow_address, private.escrow_address}
    assert len(escrows) == 3


@pytest.mark.asyncio
async def test_private_duplicate_request_id_rejected(
    zk_pay_request_service: ZkPayRequestService,
    registered_receiver: Wallet,
) -> None:
    await zk_pay_request_service.create_pay_request(
        registered_receiver.create_zk_pay_request(9, StealthKit.create(50), 10, 100)
    )
    with pytest.raises(DuplicateRequestError):
        await zk_pay_request_service.create_pay_request(
            registered_receiver.create_zk_pay_request(
                9, StealthKit.create(60), 10, 100
            )
        )
