"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.rl_admin.api.router import router as admin_router
from src.rl_common.database import engine
from src.rl_common.errors import AppError
from src.rl_common.redis_client import close_redis, get_redis
from src.rl_common.response import error_response
from src.rl_design.api.router import router as design_router
from src.rl_gateway.middleware.request_log import RequestLogMiddleware
from src.rl_royalty.api.router import router as royalty_router
from src.rl_withdrawal.api.admin_router import router as admin_withdrawal_router
from src.rl_withdrawal.api.router import router as withdrawal_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: dispose."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await get_redis()
    yield
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, exc.data)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(design_router, prefix="/api/v1")
app.include_router(royalty_router, prefix="/api/v1")
app.include_router(withdrawal_router, prefix="/api/v1")
app.include_router(admin_withdrawal_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
