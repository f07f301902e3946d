"""Key layout shared by repositories and the scripts they call."""

from __future__ import annotations

FEES_COLLECTED_KEY = "ledger:fees_collected"


def account_balance_key(address: str) -> str:
    return f"account:{address}"


def account_meta_key(address: str) -> str:
    return f"account:meta:{address}"


def pay_request_key(address: str) -> str:
    return f"pay_request:{address}"


def escrow_vault_key(address: str) -> str:
    return f"escrow_vault:{address}"
