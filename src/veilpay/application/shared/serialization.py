from __future__ import annotations

from typing import Type, TypeVar

from cryptography.exceptions import InvalidSignature
from pydantic import BaseModel

from ...crypto.certificates import (
    DERB64,
    Envelope,
    PayloadB64,
    SignatureB64,
    deserialize_payload,
    json_to_bytes,
    load_public_key_from_der_b64,
    verify_envelope,
)
from ...domain.errors import InvalidSignatureError

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def payload_to_bytes(payload: BaseModel) -> bytes:
    """Canonical bytes for signing/verifying Pydantic payloads.

    Centralizes the "model_dump() -> json bytes" convention so clients and the
    escrow service never diverge in how they serialize the exact message being
    signed.
    """

    return json_to_bytes(payload.model_dump())


def open_signed_payload(
    *,
    signer_public_key_der_b64: str,
    payload_b64: str,
    signature_b64: str,
    model: Type[PayloadT],
    key_field: str,
) -> PayloadT:
    """Verify an envelope against the declared signer and decode its payload.

    The payload must repeat the signer's key in ``key_field``; any mismatch,
    bad signature or undecodable payload raises InvalidSignatureError.
    """
    try:
        public_key = load_public_key_from_der_b64(DERB64(signer_public_key_der_b64))
    except ValueError as e:
        raise InvalidSignatureError(f"Invalid signer public key: {e}") from e

    envelope = Envelope(
        payload_b64=PayloadB64(payload_b64),
        signature_b64=SignatureB64(signature_b64),
    )
    try:
        verify_envelope(public_key, envelope)
    except (InvalidSignature, ValueError):
        raise InvalidSignatureError("Invalid signature for signed payload")

    try:
        payload = deserialize_payload(envelope, model)
    except ValueError as e:
        raise InvalidSignatureError(f"Malformed signed payload: {e}") from e

    if getattr(payload, key_field) != signer_public_key_der_b64:
        raise InvalidSignatureError(
            "Mismatched signer public key between field and payload"
        )
    return payload
