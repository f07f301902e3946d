"""Deterministic program-derived addresses for request records and escrow vaults.

An address is ``sha256(seeds || bump || program_id || marker)`` for the highest
bump whose digest does not decode to an ed25519 point. Off-curve addresses have
no private key, so only the program can act for them.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Final, Sequence

PDA_MARKER: Final[bytes] = b"ProgramDerivedAddress"
MAX_SEEDS: Final[int] = 16
MAX_SEED_LEN: Final[int] = 32

# ed25519 field prime and curve constant d = -121665 / 121666
_P: Final[int] = 2**255 - 19
_D: Final[int] = (-121665 * pow(121666, _P - 2, _P)) % _P


@dataclass(frozen=True)
class AddressNamespace:
    """Seed tags for one record kind. Variants never share tags."""

    request_tag: bytes
    escrow_tag: bytes


PLAIN_NAMESPACE: Final[AddressNamespace] = AddressNamespace(
    request_tag=b"pay_request", escrow_tag=b"escrow"
)
PRIVATE_NAMESPACE: Final[AddressNamespace] = AddressNamespace(
    request_tag=b"zk_pay_request", escrow_tag=b"zk_escrow"
)


@dataclass(frozen=True)
class RequestAddresses:
    """Derived addresses (hex) and bumps for one (receiver, request_id) pair."""

    address: str
    bump: int
    escrow_address: str
    escrow_bump: int


def is_on_curve(candidate: bytes) -> bool:
    """Return True if the 32 bytes decompress to a point on edwards25519."""
    if len(candidate) != 32:
        raise ValueError("Curve point encoding must be 32 bytes")
    y = (int.from_bytes(candidate, "little") & ((1 << 255) - 1)) % _P
    y2 = y * y % _P
    u = (y2 - 1) % _P
    v = (_D * y2 + 1) % _P
    x2 = u * pow(v, _P - 2, _P) % _P
    return x2 == 0 or pow(x2, (_P - 1) // 2, _P) == 1


def _check_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) > MAX_SEEDS:
        raise ValueError(f"At most {MAX_SEEDS} seeds are allowed")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"Seed exceeds {MAX_SEED_LEN} bytes")


def create_program_address(seeds: Sequence[bytes], program_id: bytes) -> bytes:
    """Hash seeds into an address; raise if the result lands on the curve."""
    _check_seeds(seeds)
    hasher = hashlib.sha256()
    for seed in seeds:
        hasher.update(seed)
    hasher.update(program_id)
    hasher.update(PDA_MARKER)
    digest = hasher.digest()
    if is_on_curve(digest):
        raise ValueError("Invalid seeds: derived address falls on the curve")
    return digest


def find_program_address(
    seeds: Sequence[bytes], program_id: bytes
) -> tuple[bytes, int]:
    """Search bumps from 255 down and return the first off-curve address."""
    _check_seeds([*seeds, b"\x00"])
    for bump in range(255, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except ValueError:
            continue
    raise ValueError("Unable to find a viable program address bump")


def request_seeds(tag: bytes, receiver: str, request_id: int) -> list[bytes]:
    """Seeds binding a record kind to its receiver and request id."""
    return [tag, bytes.fromhex(receiver), request_id.to_bytes(8, "little")]


def derive_request_addresses(
    namespace: AddressNamespace,
    receiver: str,
    request_id: int,
    program_id: bytes,
) -> RequestAddresses:
    """Derive the record and vault addresses anyone can recompute from public data."""
    address, bump = find_program_address(
        request_seeds(namespace.request_tag, receiver, request_id), program_id
    )
    escrow, escrow_bump = find_program_address(
        request_seeds(namespace.escrow_tag, receiver, request_id), program_id
    )
    return RequestAddresses(
        address=address.hex(),
        bump=bump,
        escrow_address=escrow.hex(),
        escrow_bump=escrow_bump,
    )


def matches_derived_address(
    namespace: AddressNamespace,
    receiver: str,
    request_id: int,
    program_id: bytes,
    *,
    address: str,
    bump: int,
    escrow_address: str,
    escrow_bump: int,
) -> bool:
    """Check stored addresses against a re-derivation with the stored bumps."""
    try:
        expected = create_program_address(
            [
                *request_seeds(namespace.request_tag, receiver, request_id),
                bytes([bump]),
            ],
            program_id,
        )
        expected_escrow = create_program_address(
            [
                *request_seeds(namespace.escrow_tag, receiver, request_id),
                bytes([escrow_bump]),
            ],
            program_id,
        )
    except ValueError:
        return False
    return expected.hex() == address and expected_escrow.hex() == escrow_address
