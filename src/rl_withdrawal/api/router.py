"""rl_withdrawal user API — create and list own withdrawal requests."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import get_db_session
from src.rl_common.response import ApiResponse, success_response
from src.rl_gateway.auth.dependencies import get_current_user
from src.rl_gateway.middleware.request_log import get_request_id
from src.rl_gateway.user.db_models import UserModel
from src.rl_withdrawal.application.schemas import CreateWithdrawalRequest
from src.rl_withdrawal.application.service import WithdrawalApplicationService

router = APIRouter(prefix="/withdrawals", tags=["withdrawals"])

_service = WithdrawalApplicationService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_withdrawal(
    body: CreateWithdrawalRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create(db, str(current_user.id), body)
    resp = success_response(data.model_dump(), message="Withdrawal request submitted successfully")
    resp.request_id = get_request_id(request)
    return resp


@router.get("")
async def list_my_withdrawals(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_mine(db, str(current_user.id))
    resp = success_response(data.model_dump())
    resp.request_id = get_request_id(request)
    return resp
