"""Domain-specific exceptions for the escrow lifecycle.

Every error derives from ``EscrowError`` (itself a ``ValueError``) so callers can
catch the whole family at once, while tests and API layers can still tell the
individual kinds apart.
"""

from __future__ import annotations


class EscrowError(ValueError):
    """Base class for every rejected escrow transition."""

    code: str = "EscrowError"


class DuplicateRequestError(EscrowError):
    """A record already lives at the derived request address."""

    code = "DuplicateRequest"


class InvalidRangeError(EscrowError):
    """Amount or bounds are malformed (zero, or min greater than max)."""

    code = "InvalidRange"


class AlreadySettledError(EscrowError):
    """The request has already been settled by some payer."""

    code = "AlreadySettled"


class AmountOutOfRangeError(EscrowError):
    """The offered amount does not satisfy the request's bounds."""

    code = "AmountOutOfRange"


class InvalidProofError(EscrowError):
    """A commitment, range proof or ownership proof failed verification."""

    code = "InvalidProof"


class UnauthorizedReceiverError(EscrowError):
    """The caller is not the receiver recorded on the request."""

    code = "UnauthorizedReceiver"


class RequestNotFoundError(EscrowError):
    """No live record exists at the referenced address."""

    code = "RequestNotFound"


class NotSettledError(RequestNotFoundError):
    """Sweep attempted on a request that has no settled funds yet."""

    code = "NotSettled"


class InvalidSignatureError(EscrowError):
    """The signed envelope does not authenticate its declared signer."""

    code = "InvalidSignature"


class InsufficientFundsError(EscrowError):
    """The signer's balance cannot cover the amount, deposit or fee."""

    code = "InsufficientFunds"


class AccountNotFoundError(EscrowError):
    """Raised when an account lookup fails."""

    code = "AccountNotFound"


class VaultMismatchError(RuntimeError):
    """The escrow vault balance disagrees with the record's settled amount.

    Not a caller mistake, so it stays outside the ``EscrowError`` family and
    surfaces as a server error.
    """

    code = "VaultMismatch"
