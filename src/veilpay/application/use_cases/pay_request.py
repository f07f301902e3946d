"""Plain payment requests: the requested amount is public."""

from __future__ import annotations

from datetime import datetime, timezone

from ...crypto.certificates import address_from_public_key_der_b64
from ...crypto.derivation import PLAIN_NAMESPACE
from ...domain.entities import PayRequest
from ...domain.errors import EscrowError
from ..dtos import (
    CreatePayRequestDTO,
    PayRequestResponseDTO,
    SettlementResponseDTO,
    SettlePayRequestDTO,
    SweepPayRequestDTO,
    SweepResponseDTO,
)
from ..shared.pay_request_payloads import (
    CreatePayRequestPayload,
    SettlePayRequestPayload,
    SweepPayRequestPayload,
)
from ..shared.serialization import open_signed_payload
from .escrow_lifecycle import EscrowLifecycleService
from .validators import (
    ensure_can_cover,
    ensure_not_settled,
    validate_exact_amount,
    validate_requested_amount,
)


class PayRequestService(EscrowLifecycleService[PayRequest]):
    """Service to create, settle and sweep plain payment requests."""

    namespace = PLAIN_NAMESPACE
    kind = "pay_request"

    async def create_pay_request(
        self, dto: CreatePayRequestDTO
    ) -> PayRequestResponseDTO:
        try:
            payload = open_signed_payload(
                signer_public_key_der_b64=dto.receiver_public_key_der_b64,
                payload_b64=dto.payload_b64,
                signature_b64=dto.signature_b64,
                model=CreatePayRequestPayload,
                key_field="receiver_public_key_der_b64",
            )
            validate_requested_amount(payload.amount)

            receiver = address_from_public_key_der_b64(
                payload.receiver_public_key_der_b64
            )
            addresses = self.derive_addresses(receiver, payload.request_id)
            record = PayRequest(
                address=addresses.address,
                escrow_address=addresses.escrow_address,
                bump=addresses.bump,
                escrow_bump=addresses.escrow_bump,
                receiver=receiver,
                request_id=payload.request_id,
                amount=payload.amount,
                storage_deposit=self.params.storage_deposit(PayRequest.SPACE),
            )
            if await self.pay_request_repo.get_by_address(record.address):
                raise self._duplicate(record)
            created = await self._commit_create(record)
        except EscrowError as e:
            self._log_rejection("create", None, e)
            raise
        return self._to_dto(created, vault_balance=0)

    async def settle_pay_request(
        self, address: str, dto: SettlePayRequestDTO
    ) -> SettlementResponseDTO:
        try:
            payload = open_signed_payload(
                signer_public_key_der_b64=dto.payer_public_key_der_b64,
                payload_b64=dto.payload_b64,
                signature_b64=dto.signature_b64,
                model=SettlePayRequestPayload,
                key_field="payer_public_key_der_b64",
            )
            if payload.pay_request_address != address:
                raise self._address_mismatch()
            payer = address_from_public_key_der_b64(payload.payer_public_key_der_b64)

            record = await self._load_record(address)
            ensure_not_settled(record)
            validate_exact_amount(payload.amount, record.amount)
            ensure_can_cover(
                await self.account_repo.get_by_address(payer),
                record.amount + self.params.transaction_fee,
            )

            settled = record.model_copy(deep=True)
            settled.mark_settled(payer, record.amount, datetime.now(timezone.utc))
            stored = await self._commit_settle(settled)
        except EscrowError as e:
            self._log_rejection("settle", address, e)
            raise

        return SettlementResponseDTO(
            address=stored.address,
            escrow_address=stored.escrow_address,
            payer=payer,
            settled_amount=record.amount,
            vault_balance=await self._vault_balance(stored.escrow_address),
        )

    async def sweep_pay_request(
        self, address: str, dto: SweepPayRequestDTO
    ) -> SweepResponseDTO:
        try:
            payload = open_signed_payload(
                signer_public_key_der_b64=dto.receiver_public_key_der_b64,
                payload_b64=dto.payload_b64,
                signature_b64=dto.signature_b64,
                model=SweepPayRequestPayload,
                key_field="receiver_public_key_der_b64",
            )
            if payload.pay_request_address != address:
                raise self._address_mismatch()
            caller = address_from_public_key_der_b64(
                payload.receiver_public_key_der_b64
            )

            record = await self._load_record(address)
            self._check_sweep_caller(record, caller)
            return await self._commit_sweep(record, caller)
        except EscrowError as e:
            self._log_rejection("sweep", address, e)
            raise

    async def get_pay_request(self, address: str) -> PayRequestResponseDTO:
        record = await self._load_record(address)
        return self._to_dto(
            record, vault_balance=await self._vault_balance(record.escrow_address)
        )

    @staticmethod
    def _to_dto(record: PayRequest, *, vault_balance: int) -> PayRequestResponseDTO:
        return PayRequestResponseDTO(
            **record.model_dump(), vault_balance=vault_balance
        )
