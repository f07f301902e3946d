from __future__ import annotations

import os
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    base_url: str

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Escrow base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Escrow base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Escrow base URL must include a host")
        return v


def get_settings() -> Settings:
    return Settings(base_url=os.environ.get("CLIENT_BASE_URL", "http://localhost:8000"))
