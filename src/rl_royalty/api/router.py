"""rl_royalty REST API.

User endpoints require a Bearer token. The order-paid notification is a
server-to-server call authenticated with X-Internal-Token.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import get_db_session
from src.rl_common.enums import LedgerEntryType
from src.rl_common.response import ApiResponse, success_response
from src.rl_gateway.auth.dependencies import get_current_user, require_internal_caller
from src.rl_gateway.middleware.request_log import get_request_id
from src.rl_gateway.user.db_models import UserModel
from src.rl_royalty.application.schemas import CreditSummaryResponse, OrderPaidNotification
from src.rl_royalty.application.service import RoyaltyApplicationService

router = APIRouter(prefix="/royalty", tags=["royalty"])

_service = RoyaltyApplicationService()


@router.post("/sales", dependencies=[Depends(require_internal_caller)])
async def order_paid(
    body: OrderPaidNotification,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    summary = await _service.credit_paid_order(db, body.to_paid_order())
    resp = success_response(CreditSummaryResponse.from_summary(summary).model_dump())
    resp.request_id = get_request_id(request)
    return resp


@router.get("/balance")
async def get_balance(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, str(current_user.id))
    resp = success_response(data.model_dump())
    resp.request_id = get_request_id(request)
    return resp


@router.get("/history")
async def list_history(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_history(db, str(current_user.id), cursor, limit)
    resp = success_response(data.model_dump())
    resp.request_id = get_request_id(request)
    return resp


@router.get("/ledger")
async def list_ledger(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    entry_type: LedgerEntryType | None = Query(None, description="Filter by LedgerEntryType"),
) -> ApiResponse:
    data = await _service.list_ledger(
        db,
        str(current_user.id),
        cursor,
        limit,
        entry_type.value if entry_type else None,
    )
    resp = success_response(data.model_dump())
    resp.request_id = get_request_id(request)
    return resp
