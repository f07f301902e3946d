"""Run the plain and private escrow flows end to end against a live server."""

from __future__ import annotations

from veilpay.client.stealth import StealthKit
from veilpay.client.wallet import Wallet, derive_pay_request_addresses
from veilpay.domain.entities import UNITS_PER_COIN
from veilpay.envs.client_env import get_settings
from veilpay.infrastructure.escrow_client import EscrowClient
from veilpay.infrastructure.http.http_client import HttpResponseError


def _coins(units: int) -> str:
    return f"{units / UNITS_PER_COIN:.9f}"


def run_plain_flow(client: EscrowClient, program_id: str) -> None:
    receiver = Wallet.generate()
    payer = Wallet.generate()
    client.register(receiver.registration())
    client.register(payer.registration())

    request_id = 12345
    amount = UNITS_PER_COIN // 10
    print(f"Receiver {receiver.address} requests {_coins(amount)} (id={request_id})")
    created = client.create_pay_request(receiver.create_pay_request(request_id, amount))
    print(f"Request record: {created.address}")
    print(f"Escrow vault:   {created.escrow_address}")

    # The payer needs nothing but the receiver address and the request id
    derived = derive_pay_request_addresses(receiver.address, request_id, program_id)
    if derived.address != created.address:
        raise RuntimeError("Derived request address does not match the server's")

    settlement = client.settle_pay_request(
        derived.address, payer.settle_pay_request(derived.address, amount)
    )
    print(f"Settled: vault holds {_coins(settlement.vault_balance)}")

    try:
        client.settle_pay_request(
            derived.address, payer.settle_pay_request(derived.address, amount)
        )
    except HttpResponseError as e:
        print(f"Second settlement rejected: {e.error_code}")

    before = client.get_account(receiver.address).balance
    swept = client.sweep_pay_request(
        derived.address, receiver.sweep_pay_request(derived.address)
    )
    print(
        f"Swept {_coins(swept.swept_amount)} and refunded "
        f"{_coins(swept.refunded_deposit)} deposit "
        f"(receiver balance {_coins(before)} -> {_coins(swept.receiver_balance)})"
    )


def run_private_flow(client: EscrowClient, program_id: str) -> None:
    receiver = Wallet.generate()
    payer = Wallet.generate()
    client.register(receiver.registration())
    client.register(payer.registration())

    request_id = 54321
    amount = UNITS_PER_COIN // 10
    kit = StealthKit.create(amount)
    created = client.create_zk_pay_request(
        receiver.create_zk_pay_request(
            request_id,
            kit,
            min_amount=UNITS_PER_COIN // 20,
            max_amount=UNITS_PER_COIN // 5,
        )
    )
    print(f"Private request {created.address} (stealth {created.stealth_address})")

    address = derive_pay_request_addresses(
        receiver.address, request_id, program_id, private=True
    ).address
    try:
        client.settle_zk_pay_request(
            address,
            payer.settle_zk_pay_request(
                address, UNITS_PER_COIN // 2, kit.payment_proof(UNITS_PER_COIN // 2)
            ),
        )
    except HttpResponseError as e:
        print(f"Out-of-range settlement rejected: {e.error_code}")

    settlement = client.settle_zk_pay_request(
        address, payer.settle_zk_pay_request(address, amount, kit.payment_proof())
    )
    print(f"Settled privately: {_coins(settlement.settled_amount)}")

    swept = client.sweep_zk_pay_request(
        address, receiver.sweep_zk_pay_request(address, kit)
    )
    print(f"Swept {_coins(swept.swept_amount)} to the receiver")


def main() -> None:
    settings = get_settings()
    print(f"Escrow server: {settings.base_url}")
    with EscrowClient(settings.base_url) as client:
        program = client.get_program()
        print(f"Program id: {program.program_id}")
        run_plain_flow(client, program.program_id)
        run_private_flow(client, program.program_id)


if __name__ == "__main__":
    main()
