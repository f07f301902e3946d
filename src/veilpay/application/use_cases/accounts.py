"""Account registration and lookup."""

from __future__ import annotations

import binascii
import logging

from ...crypto.certificates import (
    DERB64,
    address_from_public_key_der_b64,
    load_public_key_from_der_b64,
)
from ...crypto.derivation import PLAIN_NAMESPACE, PRIVATE_NAMESPACE
from ...domain.entities import Account
from ...domain.errors import AccountNotFoundError, InvalidSignatureError
from ...domain.repositories import AccountRepository
from ..dtos import AccountResponseDTO, ProgramInfoDTO, RegisterAccountRequestDTO
from ..ledger import LedgerParams

logger = logging.getLogger(__name__)


class AccountService:
    """Service orchestrating ledger account registration."""

    def __init__(
        self,
        account_repo: AccountRepository,
        params: LedgerParams,
        initial_balance: int,
    ):
        self.account_repo = account_repo
        self.params = params
        self.initial_balance = initial_balance

    def get_program_info(self) -> ProgramInfoDTO:
        return ProgramInfoDTO(
            program_id=self.params.program_id_hex,
            transaction_fee=self.params.transaction_fee,
            deposit_per_byte=self.params.deposit_per_byte,
            account_overhead_bytes=self.params.account_overhead_bytes,
            pay_request_tags=[
                PLAIN_NAMESPACE.request_tag.decode(),
                PLAIN_NAMESPACE.escrow_tag.decode(),
            ],
            zk_pay_request_tags=[
                PRIVATE_NAMESPACE.request_tag.decode(),
                PRIVATE_NAMESPACE.escrow_tag.decode(),
            ],
        )

    async def register(self, dto: RegisterAccountRequestDTO) -> AccountResponseDTO:
        # Registration is idempotent: an existing account keeps its balance
        try:
            load_public_key_from_der_b64(DERB64(dto.public_key_der_b64))
        except (binascii.Error, ValueError) as e:
            raise InvalidSignatureError(f"Invalid public key: {e}") from e

        address = address_from_public_key_der_b64(dto.public_key_der_b64)
        created, account = await self.account_repo.create_if_absent(
            Account(
                address=address,
                public_key_der_b64=dto.public_key_der_b64,
                balance=self.initial_balance,
            )
        )
        if created:
            logger.info("Registered account %s (balance=%d)", address, account.balance)
        return AccountResponseDTO(**account.model_dump(exclude={"created_at"}))

    async def get_account(self, address: str) -> AccountResponseDTO:
        account = await self.account_repo.get_by_address(address)
        if not account:
            raise AccountNotFoundError("Account not found")
        return AccountResponseDTO(**account.model_dump(exclude={"created_at"}))
