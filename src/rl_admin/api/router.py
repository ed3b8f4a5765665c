"""Admin REST API — royalty maintenance."""
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_admin.application.service import AdminService
from src.rl_common.database import get_db_session
from src.rl_common.response import ApiResponse, success_response
from src.rl_gateway.auth.dependencies import require_admin
from src.rl_gateway.middleware.request_log import get_request_id
from src.rl_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin/royalty", tags=["admin"])
_service = AdminService()


@router.post("/backfill")
async def run_backfill(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    summary = await _service.run_backfill(db)
    resp = success_response(summary.model_dump(), message="Backfill completed")
    resp.request_id = get_request_id(request)
    return resp


@router.get("/invariants")
async def verify_invariants(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    return success_response(await _service.verify_all_invariants(db))
