from __future__ import annotations

from typing import Optional, Type
from types import TracebackType

from ..application.dtos import (
    AccountResponseDTO,
    CreatePayRequestDTO,
    PayRequestResponseDTO,
    ProgramInfoDTO,
    RegisterAccountRequestDTO,
    SettlementResponseDTO,
    SettlePayRequestDTO,
    SweepPayRequestDTO,
    SweepResponseDTO,
    ZkPayRequestResponseDTO,
)
from .http.http_client import AsyncHttpClient, HttpClient

API_PREFIX = "/api/v1"


class EscrowClient:
    """Synchronous client for talking to the escrow HTTP API.

    Methods are intentionally bound to the application DTOs.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._http = HttpClient(f"{base_url.rstrip('/')}{API_PREFIX}", timeout=timeout)

    def get_program(self) -> ProgramInfoDTO:
        resp = self._http.get("/program")
        return ProgramInfoDTO.model_validate(resp.json())

    def register(self, dto: RegisterAccountRequestDTO) -> AccountResponseDTO:
        resp = self._http.post("/accounts", json=dto.model_dump())
        return AccountResponseDTO.model_validate(resp.json())

    def get_account(self, address: str) -> AccountResponseDTO:
        resp = self._http.get(f"/accounts/{address}")
        return AccountResponseDTO.model_validate(resp.json())

    def create_pay_request(self, dto: CreatePayRequestDTO) -> PayRequestResponseDTO:
        resp = self._http.post("/pay-requests", json=dto.model_dump())
        return PayRequestResponseDTO.model_validate(resp.json())

    def settle_pay_request(
        self, address: str, dto: SettlePayRequestDTO
    ) -> SettlementResponseDTO:
        resp = self._http.post(
            f"/pay-requests/{address}/settlements", json=dto.model_dump()
        )
        return SettlementResponseDTO.model_validate(resp.json())

    def sweep_pay_request(
        self, address: str, dto: SweepPayRequestDTO
    ) -> SweepResponseDTO:
        resp = self._http.post(f"/pay-requests/{address}/sweeps", json=dto.model_dump())
        return SweepResponseDTO.model_validate(resp.json())

    def get_pay_request(self, address: str) -> PayRequestResponseDTO:
        resp = self._http.get(f"/pay-requests/{address}")
        return PayRequestResponseDTO.model_validate(resp.json())

    def create_zk_pay_request(
        self, dto: CreatePayRequestDTO
    ) -> ZkPayRequestResponseDTO:
        resp = self._http.post("/zk-pay-requests", json=dto.model_dump())
        return ZkPayRequestResponseDTO.model_validate(resp.json())

    def settle_zk_pay_request(
        self, address: str, dto: SettlePayRequestDTO
    ) -> SettlementResponseDTO:
        resp = self._http.post(
            f"/zk-pay-requests/{address}/settlements", json=dto.model_dump()
        )
        return SettlementResponseDTO.model_validate(resp.json())

    def sweep_zk_pay_request(
        self, address: str, dto: SweepPayRequestDTO
    ) -> SweepResponseDTO:
        resp = self._http.post(
            f"/zk-pay-requests/{address}/sweeps", json=dto.model_dump()
        )
        return SweepResponseDTO.model_validate(resp.json())

    def get_zk_pay_request(self, address: str) -> ZkPayRequestResponseDTO:
        resp = self._http.get(f"/zk-pay-requests/{address}")
        return ZkPayRequestResponseDTO.model_validate(resp.json())

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "EscrowClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()


class AsyncEscrowClient:
    """Asynchronous client for talking to the escrow HTTP API.

    Mirrors `EscrowClient` but uses `AsyncHttpClient` and async methods.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._http = AsyncHttpClient(
            f"{base_url.rstrip('/')}{API_PREFIX}", timeout=timeout
        )

    async def get_program(self) -> ProgramInfoDTO:
        resp = await self._http.get("/program")
        return ProgramInfoDTO.model_validate(resp.json())

    async def register(self, dto: RegisterAccountRequestDTO) -> AccountResponseDTO:
        resp = await self._http.post("/accounts", json=dto.model_dump())
        return AccountResponseDTO.model_validate(resp.json())

    async def get_account(self, address: str) -> AccountResponseDTO:
        resp = await self._http.get(f"/accounts/{address}")
        return AccountResponseDTO.model_validate(resp.json())

    async def create_pay_request(
        self, dto: CreatePayRequestDTO
    ) -> PayRequestResponseDTO:
        resp = await self._http.post("/pay-requests", json=dto.model_dump())
        return PayRequestResponseDTO.model_validate(resp.json())

    async def settle_pay_request(
        self, address: str, dto: SettlePayRequestDTO
    ) -> SettlementResponseDTO:
        resp = await self._http.post(
            f"/pay-requests/{address}/settlements", json=dto.model_dump()
        )
        return SettlementResponseDTO.model_validate(resp.json())

    async def sweep_pay_request(
        self, address: str, dto: SweepPayRequestDTO
    ) -> SweepResponseDTO:
        resp = await self._http.post(
            f"/pay-requests/{address}/sweeps", json=dto.model_dump()
        )
        return SweepResponseDTO.model_validate(resp.json())

    async def get_pay_request(self, address: str) -> PayRequestResponseDTO:
        resp = await self._http.get(f"/pay-requests/{address}")
        return PayRequestResponseDTO.model_validate(resp.json())

    async def create_zk_pay_request(
        self, dto: CreatePayRequestDTO
    ) -> ZkPayRequestResponseDTO:
        resp = await self._http.post("/zk-pay-requests", json=dto.model_dump())
        return ZkPayRequestResponseDTO.model_validate(resp.json())

    async def settle_zk_pay_request(
        self, address: str, dto: SettlePayRequestDTO
    ) -> SettlementResponseDTO:
        resp = await self._http.post(
            f"/zk-pay-requests/{address}/settlements", json=dto.model_dump()
        )
        return SettlementResponseDTO.model_validate(resp.json())

    async def sweep_zk_pay_request(
        self, address: str, dto: SweepPayRequestDTO
    ) -> SweepResponseDTO:
        resp = await self._http.post(
            f"/zk-pay-requests/{address}/sweeps", json=dto.model_dump()
        )
        return SweepResponseDTO.model_validate(resp.json())

    async def get_zk_pay_request(self, address: str) -> ZkPayRequestResponseDTO:
        resp = await self._http.get(f"/zk-pay-requests/{address}")
        return ZkPayRequestResponseDTO.model_validate(resp.json())

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "AsyncEscrowClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
