"""Story: Receiver hides the amount, payer settles inside the bounds, receiver sweeps."""

from __future__ import annotations

import base64

import pytest

from veilpay.application.ledger import LedgerParams
from veilpay.application.use_cases.accounts import AccountService
from veilpay.application.use_cases.zk_pay_request import ZkPayRequestService
from veilpay.client.stealth import StealthKit
from veilpay.client.wallet import Wallet, derive_pay_request_addresses
from veilpay.crypto.commitments import (
    derive_stealth_address,
    settlement_commitment,
)
from veilpay.domain.entities import UNITS_PER_COIN, ZkPayRequest
from veilpay.domain.errors import AmountOutOfRangeError, RequestNotFoundError

REQUEST_ID = 54321
MIN_AMOUNT = UNITS_PER_COIN // 20
MAX_AMOUNT = UNITS_PER_COIN // 5
AMOUNT = UNITS_PER_COIN // 10


@pytest.mark.asyncio
async def test_complete_zk_pay_request_flow(
    zk_pay_request_service: ZkPayRequestService,
    account_service: AccountService,
    registered_receiver: Wallet,
    registered_payer: Wallet,
    ledger_params: LedgerParams,
) -> None:
    """
    Story: Complete private pay request lifecycle.

    Only a commitment and bounds are published at creation. An amount outside
    the bounds is rejected; the committed amount settles, and the receiver
    proves stealth-address ownership to sweep.
    """
    fee = ledger_params.transaction_fee
    initial = account_service.initial_balance
    deposit = ledger_params.storage_deposit(ZkPayRequest.SPACE)
    kit = StealthKit.create(AMOUNT)

    # Given: A private request for a hidden amount in [0.05, 0.2]
    created = await zk_pay_request_service.create_pay_request(
        registered_receiver.create_zk_pay_request(
            REQUEST_ID, kit, MIN_AMOUNT, MAX_AMOUNT
        )
    )
    assert created.min_amount == MIN_AMOUNT
    assert created.max_amount == MAX_AMOUNT
    assert created.storage_deposit == deposit
    assert base64.b64decode(created.amount_commitment_b64) == kit.commitment
    assert created.stealth_address == derive_stealth_address(
        registered_receiver.address, REQUEST_ID, kit.ephemeral_pubkey
    )
    assert created.settled_amount is None

    # Then: Addresses come from the private namespace, not the plain one
    private = derive_pay_request_addresses(
        registered_receiver.address,
        REQUEST_ID,
        ledger_params.program_id_hex,
        private=True,
    )
    plain = derive_pay_request_addresses(
        registered_receiver.address, REQUEST_ID, ledger_params.program_id_hex
    )
    assert created.address == private.address
    assert created.escrow_address == private.escrow_address
    assert created.address != plain.address

    # When: The payer offers 0.5 coin, above max_amount
    with pytest.raises(AmountOutOfRangeError):
        await zk_pay_request_service.settle_pay_request(
            created.address,
            registered_payer.settle_zk_pay_request(
                created.address, UNITS_PER_COIN // 2, kit.payment_proof()
            ),
        )
    still_open = await zk_pay_request_service.get_pay_request(created.address)
    assert still_open.is_settled is False
    assert still_open.vault_balance == 0

    # When: The payer settles the committed 0.1 coin
    settlement = await zk_pay_request_service.settle_pay_request(
        created.address,
        registered_payer.settle_zk_pay_request(
            created.address, AMOUNT, kit.payment_proof()
        ),
    )
    assert settlement.settled_amount == AMOUNT
    assert settlement.vault_balance == AMOUNT

    settled = await zk_pay_request_service.get_pay_request(created.address)
    assert settled.is_settled is True
    assert settled.payer == registered_payer.address
    assert settled.settled_at is not None
    assert settled.settlement_commitment_b64 == settlement.settlement_commitment_b64
    assert base64.b64decode(
        settled.settlement_commitment_b64 or ""
    ) == settlement_commitment(
        registered_payer.address, AMOUNT, int(settled.settled_at.timestamp())
    )

    # When: The receiver sweeps with its ownership proof and ephemeral secret
    sweep = await zk_pay_request_service.sweep_pay_request(
        created.address,
        registered_receiver.sweep_zk_pay_request(created.address, kit),
    )

    # Then: The receiver nets the amount minus two fees and the record is gone
    assert sweep.swept_amount == AMOUNT
    assert sweep.refunded_deposit == deposit
    assert sweep.receiver_balance == initial + AMOUNT - 2 * fee
    with pytest.raises(RequestNotFoundError):
        await zk_pay_request_service.get_pay_request(created.address)
