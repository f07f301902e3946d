"""Account repository implementation."""

from __future__ import annotations

from typing import Optional

from ..domain.entities import Account
from ..domain.repositories import AccountRepository
from .keys import account_balance_key, account_meta_key
from .storage import KeyValueStore


class AccountRepositoryImpl(AccountRepository):
    """Account repository backed by KeyValueStore.

    Key layout:
      - account:meta:{address} -> Account JSON (balance as of registration)
      - account:{address}      -> live integer balance
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def create_if_absent(self, account: Account) -> tuple[bool, Account]:
        result = await self.store.run_script(
            "register_account",
            keys=[
                account_meta_key(account.address),
                account_balance_key(account.address),
            ],
            args=[account.model_dump_json(), str(account.balance)],
        )
        code = int(result[0])
        if code == 1:
            return True, account
        existing = await self.get_by_address(account.address)
        if existing is None:
            raise RuntimeError("Unexpected: account reported present but not readable")
        return False, existing

    async def get_by_address(self, address: str) -> Optional[Account]:
        data = await self.store.get(account_meta_key(address))
        if not data:
            return None
        account = Account.model_validate_json(data)
        balance = await self.store.get(account_balance_key(address))
        account.balance = int(balance) if balance is not None else 0
        return account
