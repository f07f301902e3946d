"""Private payment requests: hidden amounts and stealth-bound withdrawal."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ...crypto.certificates import address_from_public_key_der_b64
from ...crypto.commitments import (
    COMMITMENT_LEN,
    EPHEMERAL_KEY_LEN,
    MAX_PAYMENT_PROOF_LEN,
    MAX_RANGE_PROOF_LEN,
    MAX_RECEIVER_PROOF_LEN,
    MIN_PAYMENT_PROOF_LEN,
    MIN_RANGE_PROOF_LEN,
    MIN_RECEIVER_PROOF_LEN,
    CommitmentScheme,
    Sha256CommitmentScheme,
    bytes_to_b64,
    derive_stealth_address,
    is_valid_ephemeral_pubkey,
    settlement_commitment,
    verify_receiver_ownership,
)
from ...crypto.derivation import PRIVATE_NAMESPACE
from ...domain.entities import ZkPayRequest
from ...domain.errors import EscrowError, InvalidProofError
from ...domain.repositories import AccountRepository, PayRequestRepository
from ..dtos import (
    CreatePayRequestDTO,
    SettlementResponseDTO,
    SettlePayRequestDTO,
    SweepPayRequestDTO,
    SweepResponseDTO,
    ZkPayRequestResponseDTO,
)
from ..ledger import LedgerParams
from ..shared.serialization import open_signed_payload
from ..shared.zk_pay_request_payloads import (
    CreateZkPayRequestPayload,
    SettleZkPayRequestPayload,
    SweepZkPayRequestPayload,
)
from .escrow_lifecycle import EscrowLifecycleService
from .validators import (
    decode_proof_bytes,
    ensure_can_cover,
    ensure_not_settled,
    validate_amount_bounds,
    validate_amount_in_range,
)


class ZkPayRequestService(EscrowLifecycleService[ZkPayRequest]):
    """Service to create, settle and sweep commitment-backed payment requests."""

    namespace = PRIVATE_NAMESPACE
    kind = "zk_pay_request"

    def __init__(
        self,
        account_repo: AccountRepository,
        pay_request_repo: PayRequestRepository[ZkPayRequest],
        params: LedgerParams,
        commitment_scheme: Optional[CommitmentScheme] = None,
    ):
        super().__init__(account_repo, pay_request_repo, params)
        self.commitment_scheme = commitment_scheme or Sha256CommitmentScheme()

    async def create_pay_request(
        self, dto: CreatePayRequestDTO
    ) -> ZkPayRequestResponseDTO:
        try:
            payload = open_signed_payload(
                signer_public_key_der_b64=dto.receiver_public_key_der_b64,
                payload_b64=dto.payload_b64,
                signature_b64=dto.signature_b64,
                model=CreateZkPayRequestPayload,
                key_field="receiver_public_key_der_b64",
            )
            validate_amount_bounds(payload.min_amount, payload.max_amount)
            # Only structure is checked here; binding is checked at settlement
            decode_proof_bytes(
                payload.amount_commitment_b64,
                "amount_commitment",
                min_len=COMMITMENT_LEN,
                max_len=COMMITMENT_LEN,
            )
            decode_proof_bytes(
                payload.range_proof_b64,
                "range_proof",
                min_len=MIN_RANGE_PROOF_LEN,
                max_len=MAX_RANGE_PROOF_LEN,
            )
            ephemeral_pubkey = decode_proof_bytes(
                payload.ephemeral_pubkey_b64,
                "ephemeral_pubkey",
                min_len=EPHEMERAL_KEY_LEN,
                max_len=EPHEMERAL_KEY_LEN,
            )
            if not is_valid_ephemeral_pubkey(ephemeral_pubkey):
                raise InvalidProofError("ephemeral_pubkey is not a valid X25519 key")

            receiver = address_from_public_key_der_b64(
                payload.receiver_public_key_der_b64
            )
            addresses = self.derive_addresses(receiver, payload.request_id)
            record = ZkPayRequest(
                address=addresses.address,
                escrow_address=addresses.escrow_address,
                bump=addresses.bump,
                escrow_bump=addresses.escrow_bump,
                receiver=receiver,
                request_id=payload.request_id,
                storage_deposit=self.params.storage_deposit(ZkPayRequest.SPACE),
                amount_commitment_b64=payload.amount_commitment_b64,
                range_proof_b64=payload.range_proof_b64,
                min_amount=payload.min_amount,
                max_amount=payload.max_amount,
                ephemeral_pubkey_b64=payload.ephemeral_pubkey_b64,
                stealth_address=derive_stealth_address(
                    receiver, payload.request_id, ephemeral_pubkey
                ),
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
                model=SettleZkPayRequestPayload,
                key_field="payer_public_key_der_b64",
            )
            if payload.pay_request_address != address:
                raise self._address_mismatch()
            payer = address_from_public_key_der_b64(payload.payer_public_key_der_b64)

            record = await self._load_record(address)
            ensure_not_settled(record)
            validate_amount_in_range(
                payload.amount, record.min_amount, record.max_amount
            )
            decode_proof_bytes(
                payload.payment_proof_b64,
                "payment_proof",
                min_len=MIN_PAYMENT_PROOF_LEN,
                max_len=MAX_PAYMENT_PROOF_LEN,
            )
            commitment = decode_proof_bytes(
                record.amount_commitment_b64,
                "amount_commitment",
                min_len=COMMITMENT_LEN,
                max_len=COMMITMENT_LEN,
            )
            range_proof = decode_proof_bytes(
                record.range_proof_b64,
                "range_proof",
                min_len=MIN_RANGE_PROOF_LEN,
                max_len=MAX_RANGE_PROOF_LEN,
            )
            if not self.commitment_scheme.verify_binding(
                commitment, payload.amount, range_proof
            ):
                raise InvalidProofError("Amount does not open the stored commitment")

            ensure_can_cover(
                await self.account_repo.get_by_address(payer),
                payload.amount + self.params.transaction_fee,
            )

            settled_at = datetime.now(timezone.utc)
            settled = record.model_copy(deep=True)
            settled.mark_settled(payer, payload.amount, settled_at)
            settled.settlement_commitment_b64 = bytes_to_b64(
                settlement_commitment(
                    payer, payload.amount, int(settled_at.timestamp())
                )
            )
            stored = await self._commit_settle(settled)
        except EscrowError as e:
            self._log_rejection("settle", address, e)
            raise

        return SettlementResponseDTO(
            address=stored.address,
            escrow_address=stored.escrow_address,
            payer=payer,
            settled_amount=payload.amount,
            vault_balance=await self._vault_balance(stored.escrow_address),
            settlement_commitment_b64=stored.settlement_commitment_b64,
        )

    async def sweep_pay_request(
        self, address: str, dto: SweepPayRequestDTO
    ) -> SweepResponseDTO:
        try:
            payload = open_signed_payload(
                signer_public_key_der_b64=dto.receiver_public_key_der_b64,
                payload_b64=dto.payload_b64,
                signature_b64=dto.signature_b64,
                model=SweepZkPayRequestPayload,
                key_field="receiver_public_key_der_b64",
            )
            if payload.pay_request_address != address:
                raise self._address_mismatch()
            caller = address_from_public_key_der_b64(
                payload.receiver_public_key_der_b64
            )

            record = await self._load_record(address)
            self._check_sweep_caller(record, caller)

            receiver_proof = decode_proof_bytes(
                payload.receiver_proof_b64,
                "receiver_proof",
                min_len=MIN_RECEIVER_PROOF_LEN,
                max_len=MAX_RECEIVER_PROOF_LEN,
            )
            ephemeral_secret = decode_proof_bytes(
                payload.ephemeral_secret_b64,
                "ephemeral_secret",
                min_len=EPHEMERAL_KEY_LEN,
                max_len=EPHEMERAL_KEY_LEN,
            )
            ephemeral_pubkey = decode_proof_bytes(
                record.ephemeral_pubkey_b64,
                "ephemeral_pubkey",
                min_len=EPHEMERAL_KEY_LEN,
                max_len=EPHEMERAL_KEY_LEN,
            )
            if not verify_receiver_ownership(
                receiver=record.receiver,
                request_id=record.request_id,
                receiver_proof=receiver_proof,
                ephemeral_secret=ephemeral_secret,
                ephemeral_pubkey=ephemeral_pubkey,
                stealth_address=record.stealth_address,
            ):
                raise InvalidProofError("Receiver ownership proof rejected")

            return await self._commit_sweep(record, caller)
        except EscrowError as e:
            self._log_rejection("sweep", address, e)
            raise

    async def get_pay_request(self, address: str) -> ZkPayRequestResponseDTO:
        record = await self._load_record(address)
        return self._to_dto(
            record, vault_balance=await self._vault_balance(record.escrow_address)
        )

    @staticmethod
    def _to_dto(
        record: ZkPayRequest, *, vault_balance: int
    ) -> ZkPayRequestResponseDTO:
        return ZkPayRequestResponseDTO(
            **record.model_dump(), vault_balance=vault_balance
        )
