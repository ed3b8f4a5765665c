"""rl_withdrawal admin API — review queue and decisions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import get_db_session
from src.rl_common.enums import WithdrawalStatus
from src.rl_common.response import ApiResponse, success_response
from src.rl_gateway.auth.dependencies import require_admin
from src.rl_gateway.middleware.request_log import get_request_id
from src.rl_gateway.user.db_models import UserModel
from src.rl_withdrawal.application.schemas import WithdrawalDecisionRequest
from src.rl_withdrawal.application.service import WithdrawalApplicationService

router = APIRouter(prefix="/admin/withdrawals", tags=["admin"])

_service = WithdrawalApplicationService()


@router.get("")
async def list_withdrawals(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: WithdrawalStatus | None = Query(None, description="Filter by status"),
) -> ApiResponse:
    data = await _service.list_for_admin(db, status)
    resp = success_response(data.model_dump())
    resp.request_id = get_request_id(request)
    return resp


@router.patch("/{request_id}")
async def decide_withdrawal(
    request_id: str,
    body: WithdrawalDecisionRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.decide(db, request_id, str(admin.id), body)
    resp = success_response(data.model_dump(), message=data.message)
    resp.request_id = get_request_id(request)
    return resp


@router.get("/{request_id}/payout-status")
async def get_payout_status(
    request_id: str,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.payout_status(db, request_id)
    resp = success_response(data.model_dump())
    resp.request_id = get_request_id(request)
    return resp
