"""Account and program-info routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ...application.dtos import (
    AccountResponseDTO,
    ProgramInfoDTO,
    RegisterAccountRequestDTO,
)
from ...application.use_cases.accounts import AccountService
from ..dependencies import get_account_service
from ..errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["accounts"])


@router.post(
    "/accounts",
    response_model=AccountResponseDTO,
    status_code=status.HTTP_201_CREATED,
)
async def register_account(
    payload: RegisterAccountRequestDTO,
    service: AccountService = Depends(get_account_service),
) -> AccountResponseDTO:
    try:
        return await service.register(payload)
    except ValueError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.exception("Internal server error while registering account: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while registering account",
        )


@router.get(
    "/accounts/{address}",
    response_model=AccountResponseDTO,
    status_code=status.HTTP_200_OK,
)
async def get_account(
    address: str = Path(..., pattern=r"^[0-9a-f]{64}$"),
    service: AccountService = Depends(get_account_service),
) -> AccountResponseDTO:
    try:
        return await service.get_account(address)
    except ValueError as e:
        raise to_http_exception(e)


@router.get("/program", response_model=ProgramInfoDTO)
async def get_program(
    service: AccountService = Depends(get_account_service),
) -> ProgramInfoDTO:
    return service.get_program_info()
