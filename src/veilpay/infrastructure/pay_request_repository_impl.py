"""Request record repository implementation over a storage abstraction."""

from __future__ import annotations

from typing import Any, Optional, Type

from pydantic import ValidationError

from ..domain.entities import EscrowVault
from ..domain.repositories import PayRequestRepository, RecordT
from .keys import (
    FEES_COLLECTED_KEY,
    account_balance_key,
    escrow_vault_key,
    pay_request_key,
)
from .storage import KeyValueStore


def _parse_result(result: Any) -> tuple[int, Optional[str]]:
    # result is a list-like: [code, json_or_empty]
    code = int(result[0]) if result and result[0] not in (None, "") else 0
    payload = result[1] if len(result) > 1 and result[1] else None
    return code, payload


class PayRequestRepositoryImpl(PayRequestRepository[RecordT]):
    """Request records of one kind (plain or private) using a KeyValueStore."""

    def __init__(self, store: KeyValueStore, model: Type[RecordT]):
        self.store = store
        self.model = model

    def _decode(self, payload: Optional[str]) -> Optional[RecordT]:
        return self.model.model_validate_json(payload) if payload else None

    async def get_by_address(self, address: str) -> Optional[RecordT]:
        data = await self.store.get(pay_request_key(address))
        if not data:
            return None
        try:
            return self.model.model_validate_json(data)
        except ValidationError:
            # Records of the other variant share the key prefix but not the schema
            return None

    async def get_vault(self, escrow_address: str) -> Optional[EscrowVault]:
        balance = await self.store.get(escrow_vault_key(escrow_address))
        if balance is None:
            return None
        return EscrowVault(address=escrow_address, balance=int(balance))

    async def create(
        self, record: RecordT, *, fee: int
    ) -> tuple[int, Optional[RecordT]]:
        result = await self.store.run_script(
            "create_pay_request",
            keys=[
                pay_request_key(record.address),
                escrow_vault_key(record.escrow_address),
                account_balance_key(record.receiver),
                FEES_COLLECTED_KEY,
            ],
            args=[
                record.model_dump_json(),
                str(record.storage_deposit + fee),
                str(fee),
            ],
        )
        code, payload = _parse_result(result)
        if code == 1:
            return 1, self._decode(payload)
        return code, None

    async def settle(
        self, settled: RecordT, *, fee: int
    ) -> tuple[int, Optional[RecordT]]:
        if settled.settled_amount is None or settled.payer is None:
            raise ValueError("Record must be marked settled before persisting")
        amount = settled.settled_amount
        result = await self.store.run_script(
            "settle_pay_request",
            keys=[
                pay_request_key(settled.address),
                escrow_vault_key(settled.escrow_address),
                account_balance_key(settled.payer),
                FEES_COLLECTED_KEY,
            ],
            args=[settled.model_dump_json(), str(amount), str(fee), str(amount + fee)],
        )
        code, payload = _parse_result(result)
        if code in (0, 1):
            return code, self._decode(payload)
        return code, None

    async def sweep(
        self, record: RecordT, caller: str, *, fee: int
    ) -> tuple[int, Optional[RecordT]]:
        settled_amount = record.settled_amount or 0
        payout = settled_amount + record.storage_deposit - fee
        result = await self.store.run_script(
            "sweep_pay_request",
            keys=[
                pay_request_key(record.address),
                escrow_vault_key(record.escrow_address),
                account_balance_key(record.receiver),
                FEES_COLLECTED_KEY,
            ],
            args=[caller, str(settled_amount), str(payout), str(fee)],
        )
        code, payload = _parse_result(result)
        if code == 2:
            return code, None
        return code, self._decode(payload)
