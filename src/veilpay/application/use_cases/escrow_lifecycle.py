"""Shared Create -> Settle -> Sweep plumbing for both request variants.

Services run the cheap checks and proof verification first, then hand the
mutation to the repository, whose storage script re-checks state and applies
every effect together. A lost race therefore shows up as a status code, which
is translated back into the domain error the caller would have seen had it
arrived second.
"""

from __future__ import annotations

import logging
from typing import ClassVar, Generic, Optional

from ...crypto.derivation import (
    AddressNamespace,
    RequestAddresses,
    derive_request_addresses,
    matches_derived_address,
)
from ...domain.entities import Account
from ...domain.errors import (
    AlreadySettledError,
    AccountNotFoundError,
    DuplicateRequestError,
    InsufficientFundsError,
    InvalidSignatureError,
    NotSettledError,
    RequestNotFoundError,
    UnauthorizedReceiverError,
    VaultMismatchError,
)
from ...domain.repositories import AccountRepository, PayRequestRepository, RecordT
from ..dtos import SweepResponseDTO
from ..ledger import LedgerParams
from .validators import ensure_can_cover, ensure_receiver, ensure_settled

logger = logging.getLogger(__name__)


class EscrowLifecycleService(Generic[RecordT]):
    """Base for the plain and private request services."""

    namespace: ClassVar[AddressNamespace]
    kind: ClassVar[str]

    def __init__(
        self,
        account_repo: AccountRepository,
        pay_request_repo: PayRequestRepository[RecordT],
        params: LedgerParams,
    ):
        self.account_repo = account_repo
        self.pay_request_repo = pay_request_repo
        self.params = params

    def derive_addresses(self, receiver: str, request_id: int) -> RequestAddresses:
        return derive_request_addresses(
            self.namespace, receiver, request_id, self.params.program_id
        )

    async def _require_account(self, address: str) -> Account:
        account = await self.account_repo.get_by_address(address)
        if not account:
            raise AccountNotFoundError("Signer account not registered")
        return account

    async def _load_record(self, address: str) -> RecordT:
        record = await self.pay_request_repo.get_by_address(address)
        if record is None:
            raise RequestNotFoundError(f"No {self.kind} at {address}")
        if not matches_derived_address(
            self.namespace,
            record.receiver,
            record.request_id,
            self.params.program_id,
            address=record.address,
            bump=record.bump,
            escrow_address=record.escrow_address,
            escrow_bump=record.escrow_bump,
        ):
            raise RequestNotFoundError(
                f"Stored {self.kind} at {address} does not match its derived address"
            )
        return record

    async def _vault_balance(self, escrow_address: str) -> int:
        vault = await self.pay_request_repo.get_vault(escrow_address)
        return vault.balance if vault else 0

    async def _commit_create(self, record: RecordT) -> RecordT:
        fee = self.params.transaction_fee
        ensure_can_cover(
            await self.account_repo.get_by_address(record.receiver),
            record.storage_deposit + fee,
        )
        status, stored = await self.pay_request_repo.create(record, fee=fee)
        if status == 0:
            raise self._duplicate(record)
        if status == 2:
            raise AccountNotFoundError("Receiver account not registered")
        if status == 4:
            raise InsufficientFundsError("Receiver cannot cover deposit and fee")
        if status != 1 or stored is None:
            raise RuntimeError(f"Unexpected create status: {status}")
        logger.info(
            "Created %s %s (request_id=%d, deposit=%d)",
            self.kind,
            stored.address,
            stored.request_id,
            stored.storage_deposit,
        )
        return stored

    async def _commit_settle(self, settled: RecordT) -> RecordT:
        status, stored = await self.pay_request_repo.settle(
            settled, fee=self.params.transaction_fee
        )
        if status == 0:
            raise AlreadySettledError("Payment request already settled")
        if status == 2:
            raise RequestNotFoundError(f"No {self.kind} at {settled.address}")
        if status == 4:
            raise InsufficientFundsError("Payer cannot cover amount and fee")
        if status != 1 or stored is None:
            raise RuntimeError(f"Unexpected settle status: {status}")
        logger.info(
            "Settled %s %s (amount=%s, payer=%s)",
            self.kind,
            stored.address,
            stored.settled_amount,
            stored.payer,
        )
        return stored

    def _check_sweep_caller(self, record: RecordT, caller: str) -> None:
        # Wrong signer is rejected before any proof is examined
        ensure_receiver(record, caller)
        ensure_settled(record)

    async def _commit_sweep(self, record: RecordT, caller: str) -> SweepResponseDTO:
        status, stored = await self.pay_request_repo.sweep(
            record, caller, fee=self.params.transaction_fee
        )
        if status == 2:
            raise RequestNotFoundError(f"No {self.kind} at {record.address}")
        if status == 3:
            raise UnauthorizedReceiverError(
                "Caller is not the receiver of this request"
            )
        if status == 5:
            raise NotSettledError("Payment request has not been settled yet")
        if status == 6:
            raise VaultMismatchError(
                f"Vault {record.escrow_address} does not hold the settled amount"
            )
        if status != 1 or stored is None:
            raise RuntimeError(f"Unexpected sweep status: {status}")

        stored.mark_swept()
        receiver_account = await self._require_account(stored.receiver)
        swept_amount = stored.settled_amount or 0
        logger.info(
            "Swept %s %s (amount=%d, refunded_deposit=%d)",
            self.kind,
            stored.address,
            swept_amount,
            stored.storage_deposit,
        )
        return SweepResponseDTO(
            address=stored.address,
            escrow_address=stored.escrow_address,
            receiver=stored.receiver,
            swept_amount=swept_amount,
            refunded_deposit=stored.storage_deposit,
            receiver_balance=receiver_account.balance,
        )

    def _duplicate(self, record: RecordT) -> DuplicateRequestError:
        return DuplicateRequestError(
            f"{self.kind} {record.request_id} already exists for this receiver"
        )

    @staticmethod
    def _address_mismatch() -> InvalidSignatureError:
        return InvalidSignatureError(
            "Signed payload targets a different request address"
        )

    @staticmethod
    def _log_rejection(kind: str, address: Optional[str], error: Exception) -> None:
        logger.info(
            "Rejected %s on %s: %s",
            kind,
            address or "<new>",
            getattr(error, "code", type(error).__name__),
        )
