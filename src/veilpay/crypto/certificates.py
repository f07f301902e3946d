from __future__ import annotations

import base64
import hashlib
import json
from typing import NewType, Type, TypeVar

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel

# Stronger semantic aliases
PayloadB64 = NewType("PayloadB64", str)
SignatureB64 = NewType("SignatureB64", str)
DERB64 = NewType("DERB64", str)

PayloadT = TypeVar("PayloadT", bound=BaseModel)


class Envelope(BaseModel):
    """Typed container for a base64-encoded canonical JSON payload and its signature."""

    payload_b64: PayloadB64
    signature_b64: SignatureB64


def json_to_bytes(data: dict) -> bytes:
    """Serialize dict to canonical JSON bytes for signing/verification."""
    return json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8")


def sign_bytes(private_key: ec.EllipticCurvePrivateKey, payload_bytes: bytes) -> str:
    """Sign bytes with ECDSA SHA256 and return base64-encoded DER signature."""
    signature_der = private_key.sign(payload_bytes, ec.ECDSA(hashes.SHA256()))
    return base64.b64encode(signature_der).decode("utf-8")


def verify_signature_bytes(
    public_key: ec.EllipticCurvePublicKey, payload_bytes: bytes, signature_b64: str
) -> bool:
    """Verify base64-encoded DER signature over payload bytes. Raises InvalidSignature on failure."""
    signature_bytes = base64.b64decode(signature_b64, validate=True)
    public_key.verify(signature_bytes, payload_bytes, ec.ECDSA(hashes.SHA256()))
    return True


def load_public_key_from_der_b64(der_b64: DERB64) -> ec.EllipticCurvePublicKey:
    """Load a cryptography public key object from base64-encoded DER (SubjectPublicKeyInfo)."""
    der = base64.b64decode(der_b64, validate=True)
    public_key = serialization.load_der_public_key(der)
    if not isinstance(public_key, ec.EllipticCurvePublicKey):
        raise ValueError("Public key is not an elliptic curve key")
    return public_key


def load_private_key_from_pem(pem_str: str) -> ec.EllipticCurvePrivateKey:
    """Load a cryptography private key object from a PEM-formatted string."""
    private_key = serialization.load_pem_private_key(pem_str.encode(), password=None)
    if not isinstance(private_key, ec.EllipticCurvePrivateKey):
        raise ValueError("Private key is not an elliptic curve key")
    return private_key


def public_key_to_der_b64(public_key: ec.EllipticCurvePublicKey) -> str:
    """Encode a public key as base64 DER SubjectPublicKeyInfo."""
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("utf-8")


def address_from_public_key_der_b64(der_b64: str) -> str:
    """Ledger address of a public key: SHA-256 over its DER bytes, as hex."""
    der = base64.b64decode(der_b64, validate=True)
    return hashlib.sha256(der).hexdigest()


def generate_envelope(
    private_key: ec.EllipticCurvePrivateKey, payload: dict
) -> Envelope:
    """Sign a payload dict and wrap it in an envelope."""
    payload_bytes = json_to_bytes(payload)
    signature_b64 = sign_bytes(private_key, payload_bytes)
    return Envelope(
        payload_b64=PayloadB64(base64.b64encode(payload_bytes).decode("utf-8")),
        signature_b64=SignatureB64(signature_b64),
    )


def verify_envelope(public_key: ec.EllipticCurvePublicKey, envelope: Envelope) -> bool:
    """Verify a certificate over the decoded payload bytes contained in the envelope."""
    payload_bytes = base64.b64decode(envelope.payload_b64, validate=True)
    return verify_signature_bytes(public_key, payload_bytes, envelope.signature_b64)


def envelope_payload_bytes(envelope: Envelope) -> bytes:
    """Return the raw decoded payload bytes inside an envelope."""
    return base64.b64decode(envelope.payload_b64, validate=True)


def deserialize_payload(envelope: Envelope, model: Type[PayloadT]) -> PayloadT:
    """Decode and validate an envelope payload into the given model."""
    data = json.loads(envelope_payload_bytes(envelope).decode("utf-8"))
    return model.model_validate(data)
