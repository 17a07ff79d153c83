"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.obs import health
from app.settings import settings

router = APIRouter(prefix="", tags=["ops"])


def _resolve_token(x_admin_token: Optional[str], authorization: Optional[str]) -> Optional[str]:
	if x_admin_token:
		return x_admin_token
	if authorization and authorization.lower().startswith("bearer "):
		return authorization.split(" ", 1)[1]
	return None


async def require_metrics_access(
	x_admin_token: Optional[str] = Header(default=None, alias="X-Admin-Token"),
	authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> None:
	if settings.obs_metrics_public:
		return
	token = settings.obs_admin_token
	if not token:
		# Fail closed when no token is configured.
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="admin_token_not_configured")
	if _resolve_token(x_admin_token, authorization) != token:
		raise HTTPException(status.HTTP_403_FORBIDDEN, detail="forbidden")


@router.get("/health/live")
async def health_live() -> dict[str, object]:
	return await health.liveness()


@router.get("/health/ready")
async def health_ready() -> Response:
	status_code, payload = await health.readiness()
	return JSONResponse(content=payload, status_code=status_code)


@router.get("/metrics")
async def prometheus_metrics(_: None = Depends(require_metrics_access)) -> Response:
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
