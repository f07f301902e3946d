"""Pure validation rules for escrow transitions.

These functions contain business logic validation rules that can be tested
in isolation without dependencies on repositories or infrastructure. Each
raises the matching domain error on the first failing condition.
"""

from __future__ import annotations

import binascii

from ...crypto.commitments import b64_to_bytes
from ...domain.entities import U64_MAX, Account, EscrowRecord
from ...domain.errors import (
    AccountNotFoundError,
    AlreadySettledError,
    AmountOutOfRangeError,
    InsufficientFundsError,
    InvalidProofError,
    InvalidRangeError,
    NotSettledError,
    UnauthorizedReceiverError,
)


def validate_requested_amount(amount: int) -> None:
    """Validate a plain request amount is a positive u64.

    Raises:
        InvalidRangeError: If amount is zero, negative or above u64.
    """
    if amount <= 0:
        raise InvalidRangeError("Requested amount must be positive")
    if amount > U64_MAX:
        raise InvalidRangeError("Requested amount exceeds u64 range")


def validate_amount_bounds(min_amount: int, max_amount: int) -> None:
    """Validate private request bounds: 0 < min_amount <= max_amount <= u64.

    Raises:
        InvalidRangeError: If a bound is not positive or min exceeds max.
    """
    if min_amount <= 0 or max_amount <= 0:
        raise InvalidRangeError("Amount bounds must be positive")
    if max_amount > U64_MAX:
        raise InvalidRangeError("max_amount exceeds u64 range")
    if min_amount > max_amount:
        raise InvalidRangeError(
            f"min_amount exceeds max_amount (min={min_amount}, max={max_amount})"
        )


def validate_exact_amount(offered: int, requested: int) -> None:
    """Plain settlement must transfer exactly the requested amount."""
    if offered != requested:
        raise AmountOutOfRangeError(
            f"Settlement amount must equal the requested amount "
            f"(offered={offered}, requested={requested})"
        )


def validate_amount_in_range(amount: int, min_amount: int, max_amount: int) -> None:
    """Inclusive range check for a revealed private amount."""
    if amount < min_amount or amount > max_amount:
        raise AmountOutOfRangeError(
            f"Amount {amount} outside [{min_amount}, {max_amount}]"
        )


def decode_proof_bytes(
    value_b64: str, field_name: str, *, min_len: int, max_len: int
) -> bytes:
    """Decode a base64 proof field and enforce its length window.

    Raises:
        InvalidProofError: If the field is not valid base64 or has a bad length.
    """
    try:
        data = b64_to_bytes(value_b64)
    except (binascii.Error, ValueError) as e:
        raise InvalidProofError(f"Invalid {field_name} encoding: {e}") from e
    if not min_len <= len(data) <= max_len:
        raise InvalidProofError(
            f"{field_name} must be {min_len}..{max_len} bytes (got {len(data)})"
        )
    return data


def ensure_not_settled(record: EscrowRecord) -> None:
    if record.is_settled:
        raise AlreadySettledError("Payment request already settled")


def ensure_receiver(record: EscrowRecord, caller: str) -> None:
    if record.receiver != caller:
        raise UnauthorizedReceiverError("Caller is not the receiver of this request")


def ensure_settled(record: EscrowRecord) -> None:
    if not record.is_settled:
        raise NotSettledError("Payment request has not been settled yet")


def ensure_can_cover(account: Account | None, required: int) -> Account:
    """Return the account if its balance covers ``required``.

    Raises:
        AccountNotFoundError: If the signer has no ledger account.
        InsufficientFundsError: If the balance is below ``required``.
    """
    if account is None:
        raise AccountNotFoundError("Signer account not registered")
    if account.balance < required:
        raise InsufficientFundsError(
            f"Insufficient balance (balance={account.balance}, required={required})"
        )
    return account
