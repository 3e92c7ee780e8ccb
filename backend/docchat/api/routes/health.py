"""Health check endpoints.

- /health: liveness, always ok
- /healthz: component status; 503 when the configured database is unreachable
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from backend.docchat.config import Settings, secret_value

router = APIRouter()


async def check_db(engine: AsyncEngine | None) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if engine is None:
        return (True, "not_configured")

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return (True, "ok")
    except (SQLAlchemyError, OSError) as e:
        return (False, f"error: {type(e).__name__}")


def provider_status(settings: Settings) -> dict[str, str]:
    """Which outbound integrations are configured (no network calls)."""

    def configured(value: Any) -> str:
        return "configured" if secret_value(value) else "mock"

    return {
        "openai": configured(settings.openai_api_key),
        "anthropic": configured(settings.anthropic_api_key),
        "ocr": "configured" if secret_value(settings.ocr_space_api_key) else "disabled",
    }


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(request: Request) -> dict[str, Any] | JSONResponse:
    """Health check endpoint.

    Returns:
        200 with component status if the store is reachable
        503 if the database check fails
    """
    settings: Settings = request.app.state.settings
    engine: AsyncEngine | None = getattr(request.app.state, "engine", None)

    db_ok, db_status = await check_db(engine)

    response_body = {
        "status": "ok" if db_ok else "degraded",
        "components": {
            "store": "sql" if engine is not None else "in_memory",
            "db": db_status,
            **provider_status(settings),
        },
    }

    if not db_ok:
        return JSONResponse(content=response_body, status_code=503)

    return response_body
