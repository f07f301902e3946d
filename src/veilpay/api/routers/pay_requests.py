"""Plain payment request routes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ...application.dtos import (
    CreatePayRequestDTO,
    PayRequestResponseDTO,
    SettlementResponseDTO,
    SettlePayRequestDTO,
    SweepPayRequestDTO,
    SweepResponseDTO,
)
from ...application.use_cases.pay_request import PayRequestService
from ...domain.errors import VaultMismatchError
from ..dependencies import get_pay_request_service
from ..errors import to_http_exception
from ..metrics import pay_request_settlements, pay_request_sweeps

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pay-requests", tags=["pay-requests"])

ADDRESS_PATTERN = r"^[0-9a-f]{64}$"


@router.post(
    "",
    response_model=PayRequestResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_pay_request(
    payload: CreatePayRequestDTO,
    service: PayRequestService = Depends(get_pay_request_service),
) -> PayRequestResponseDTO:
    try:
        return await service.create_pay_request(payload)
    except ValueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("Internal server error while creating pay request: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while creating pay request",
        )


@router.post(
    "/{address}/settlements",
    response_model=SettlementResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def settle_pay_request(
    payload: SettlePayRequestDTO,
    address: str = Path(..., pattern=ADDRESS_PATTERN, description="Request address"),
    service: PayRequestService = Depends(get_pay_request_service),
) -> SettlementResponseDTO:
    """Settle a plain pay request; exactly one concurrent settlement wins."""
    start_time = time.perf_counter()
    pay_request_settlements.inprogress.inc()
    try:
        result = await service.settle_pay_request(address, payload)
        pay_request_settlements.observe("success", start_time)
        return result
    except ValueError as e:
        pay_request_settlements.observe("client_error", start_time)
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("Internal server error while settling pay request: %s", e)
        pay_request_settlements.observe("server_error", start_time)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while settling pay request",
        )
    finally:
        pay_request_settlements.inprogress.dec()


@router.post(
    "/{address}/sweeps",
    response_model=SweepResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def sweep_pay_request(
    payload: SweepPayRequestDTO,
    address: str = Path(..., pattern=ADDRESS_PATTERN, description="Request address"),
    service: PayRequestService = Depends(get_pay_request_service),
) -> SweepResponseDTO:
    start_time = time.perf_counter()
    pay_request_sweeps.inprogress.inc()
    try:
        result = await service.sweep_pay_request(address, payload)
        pay_request_sweeps.observe("success", start_time)
        return result
    except ValueError as e:
        pay_request_sweeps.observe("client_error", start_time)
        raise to_http_exception(e)
    except VaultMismatchError as e:
        logger.error("Ledger inconsistency while sweeping pay request: %s", e)
        pay_request_sweeps.observe("vault_mismatch", start_time)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": e.code,
                "message": "Escrow vault does not match the settled amount",
            },
        )
    except Exception as e:
        logger.exception("Internal server error while sweeping pay request: %s", e)
        pay_request_sweeps.observe("server_error", start_time)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while sweeping pay request",
        )
    finally:
        pay_request_sweeps.inprogress.dec()


@router.get(
    "/{address}",
    response_model=PayRequestResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_pay_request(
    address: str = Path(..., pattern=ADDRESS_PATTERN, description="Request address"),
    service: PayRequestService = Depends(get_pay_request_service),
) -> PayRequestResponseDTO:
    try:
        return await service.get_pay_request(address)
    except ValueError as e:
        raise to_http_exception(e)
