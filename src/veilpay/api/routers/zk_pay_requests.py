"""Private (commitment-backed) payment request routes."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ...application.dtos import (
    CreatePayRequestDTO,
    ZkPayRequestResponseDTO,
    SettlementResponseDTO,
    SettlePayRequestDTO,
    SweepPayRequestDTO,
    SweepResponseDTO,
)
from ...application.use_cases.zk_pay_request import ZkPayRequestService
from ...domain.errors import VaultMismatchError
from ..dependencies import get_zk_pay_request_service
from ..errors import to_http_exception
from ..metrics import zk_pay_request_settlements, zk_pay_request_sweeps

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/zk-pay-requests", tags=["zk-pay-requests"])

ADDRESS_PATTERN = r"^[0-9a-f]{64}$"


@router.post(
    "",
    response_model=ZkPayRequestResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def create_zk_pay_request(
    payload: CreatePayRequestDTO,
    service: ZkPayRequestService = Depends(get_zk_pay_request_service),
) -> ZkPayRequestResponseDTO:
    try:
        return await service.create_pay_request(payload)
    except ValueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("Internal server error while creating zk pay request: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while creating zk pay request",
        )


@router.post(
    "/{address}/settlements",
    response_model=SettlementResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def settle_zk_pay_request(
    payload: SettlePayRequestDTO,
    address: str = Path(..., pattern=ADDRESS_PATTERN, description="Request address"),
    service: ZkPayRequestService = Depends(get_zk_pay_request_service),
) -> SettlementResponseDTO:
    """Reveal the amount behind the commitment and settle the request."""
    start_time = time.perf_counter()
    zk_pay_request_settlements.inprogress.inc()
    try:
        result = await service.settle_pay_request(address, payload)
        zk_pay_request_settlements.observe("success", start_time)
        return result
    except ValueError as e:
        zk_pay_request_settlements.observe("client_error", start_time)
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("Internal server error while settling zk pay request: %s", e)
        zk_pay_request_settlements.observe("server_error", start_time)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while settling zk pay request",
        )
    finally:
        zk_pay_request_settlements.inprogress.dec()


@router.post(
    "/{address}/sweeps",
    response_model=SweepResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def sweep_zk_pay_request(
    payload: SweepPayRequestDTO,
    address: str = Path(..., pattern=ADDRESS_PATTERN, description="Request address"),
    service: ZkPayRequestService = Depends(get_zk_pay_request_service),
) -> SweepResponseDTO:
    start_time = time.perf_counter()
    zk_pay_request_sweeps.inprogress.inc()
    try:
        result = await service.sweep_pay_request(address, payload)
        zk_pay_request_sweeps.observe("success", start_time)
        return result
    except ValueError as e:
        zk_pay_request_sweeps.observe("client_error", start_time)
        raise to_http_exception(e)
    except VaultMismatchError as e:
        logger.error("Ledger inconsistency while sweeping zk pay request: %s", e)
        zk_pay_request_sweeps.observe("vault_mismatch", start_time)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": e.code,
                "message": "Escrow vault does not match the settled amount",
            },
        )
    except Exception as e:
        logger.exception("Internal server error while sweeping zk pay request: %s", e)
        zk_pay_request_sweeps.observe("server_error", start_time)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while sweeping zk pay request",
        )
    finally:
        zk_pay_request_sweeps.inprogress.dec()


@router.get(
    "/{address}",
    response_model=ZkPayRequestResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_zk_pay_request(
    address: str = Path(..., pattern=ADDRESS_PATTERN, description="Request address"),
    service: ZkPayRequestService = Depends(get_zk_pay_request_service),
) -> ZkPayRequestResponseDTO:
    try:
        return await service.get_pay_request(address)
    except ValueError as e:
        raise to_http_exception(e)
