"""rl_design REST API — ownership lookup used by the storefront's design pages."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_common.database import get_db_session
from src.rl_common.response import ApiResponse, success_response
from src.rl_design.application.resolver import DesignOwnershipResolver
from src.rl_design.application.schemas import DesignOwnerResponse
from src.rl_gateway.auth.dependencies import get_current_user
from src.rl_gateway.middleware.request_log import get_request_id
from src.rl_gateway.user.db_models import UserModel

router = APIRouter(prefix="/designs", tags=["designs"])

_resolver = DesignOwnershipResolver()


@router.get("/{design_id}/owner")
async def get_design_owner(
    design_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    design = await _resolver.require_owner(db, design_id)
    resp = success_response(DesignOwnerResponse.from_design(design).model_dump())
    resp.request_id = get_request_id(request)
    return resp
