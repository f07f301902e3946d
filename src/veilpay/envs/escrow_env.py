from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

from ..application.ledger import LedgerParams

DEFAULT_PROGRAM_ID = "5a4b9f0c1e6d7a8b3c2f1e0d9c8b7a6f5e4d3c2b1a09f8e7d6c5b4a392817160"


class Settings(BaseModel):
    database_url: str

    api_host: str
    api_port: int
    api_debug: bool
    api_cors_origins: list[str]

    app_name: str
    app_version: str

    program_id: str = DEFAULT_PROGRAM_ID
    transaction_fee: int = Field(5000, ge=0)
    deposit_per_byte: int = Field(6960, ge=0)
    account_overhead_bytes: int = Field(128, ge=0)
    initial_balance: int = Field(10_000_000_000, ge=0)

    @field_validator("program_id")
    @classmethod
    def validate_program_id(cls, v: str) -> str:
        """Program id must be 32 bytes of lowercase hex."""
        v = v.strip().lower()
        try:
            raw = bytes.fromhex(v)
        except ValueError as e:
            raise ValueError(f"Invalid program id hex: {e}") from e
        if len(raw) != 32:
            raise ValueError("Program id must be 32 bytes (64 hex chars)")
        return v

    @property
    def ledger_params(self) -> LedgerParams:
        return LedgerParams(
            program_id_hex=self.program_id,
            transaction_fee=self.transaction_fee,
            deposit_per_byte=self.deposit_per_byte,
            account_overhead_bytes=self.account_overhead_bytes,
        )


def get_settings() -> Settings:
    api_debug_str = os.environ.get("ESCROW_API_DEBUG")
    api_cors_origins_str = os.environ.get("ESCROW_API_CORS_ORIGINS")
    api_port_str = os.environ.get("ESCROW_API_PORT")

    # Ledger parameters fall back to model defaults when unset
    overrides: dict[str, object] = {}
    for field, env_name in (
        ("program_id", "ESCROW_PROGRAM_ID"),
        ("transaction_fee", "ESCROW_TRANSACTION_FEE"),
        ("deposit_per_byte", "ESCROW_DEPOSIT_PER_BYTE"),
        ("account_overhead_bytes", "ESCROW_ACCOUNT_OVERHEAD_BYTES"),
        ("initial_balance", "ESCROW_INITIAL_BALANCE"),
    ):
        value = os.environ.get(env_name)
        if value is not None:
            overrides[field] = value

    return Settings(
        database_url=os.environ.get("ESCROW_DATABASE_URL", "redis://localhost:6379/0"),
        api_host=os.environ.get("ESCROW_API_HOST", "0.0.0.0"),
        api_port=int(api_port_str) if api_port_str is not None else 8000,
        api_debug=api_debug_str.lower() == "true"
        if api_debug_str is not None
        else False,
        api_cors_origins=api_cors_origins_str.split(",")
        if api_cors_origins_str is not None
        else ["*"],
        app_name=os.environ.get("ESCROW_APP_NAME", "VeilPay"),
        app_version=os.environ.get("ESCROW_APP_VERSION", "0.1.0"),
        **overrides,
    )
