"""Escrow domain repositories: accounts and request records."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from .entities import Account, EscrowRecord, EscrowVault

RecordT = TypeVar("RecordT", bound=EscrowRecord)


class AccountRepository(ABC):
    """Repository for ledger accounts (receivers and payers alike)."""

    @abstractmethod
    async def create_if_absent(self, account: Account) -> tuple[bool, Account]:
        """Store the account unless its address is taken.

        Returns (created, stored account).
        """
        pass

    @abstractmethod
    async def get_by_address(self, address: str) -> Optional[Account]:
        pass


class PayRequestRepository(ABC, Generic[RecordT]):
    """Repository for request records and their escrow vaults.

    State-changing methods commit atomically and report the outcome as a
    status code instead of raising, mirroring the storage scripts:

      1 -> applied
      0 -> state conflict (record already exists / already settled)
      2 -> record missing
      3 -> caller is not the stored receiver
      4 -> signer balance cannot cover the transfer
      5 -> record not settled yet
      6 -> vault balance inconsistent with settled_amount
    """

    @abstractmethod
    async def get_by_address(self, address: str) -> Optional[RecordT]:
        pass

    @abstractmethod
    async def get_vault(self, escrow_address: str) -> Optional[EscrowVault]:
        pass

    @abstractmethod
    async def create(
        self, record: RecordT, *, fee: int
    ) -> tuple[int, Optional[RecordT]]:
        """Charge deposit + fee to the receiver, store the record, open the vault."""
        pass

    @abstractmethod
    async def settle(
        self, settled: RecordT, *, fee: int
    ) -> tuple[int, Optional[RecordT]]:
        """Move settled_amount from the payer into the vault and persist the record."""
        pass

    @abstractmethod
    async def sweep(
        self, record: RecordT, caller: str, *, fee: int
    ) -> tuple[int, Optional[RecordT]]:
        """Drain the vault to the receiver, refund the deposit, remove both keys."""
        pass
