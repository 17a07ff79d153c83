"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import auth, messages, ops, pictures, status, users
from app.api.errors import install_error_handlers
from app.api.middleware_request_id import RequestIdMiddleware
from app.infra import postgres
from app.moderation import router as moderation_router
from app.obs import init as obs_init
from app.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	await postgres.init_pool()
	logger.info("startup", extra={"service": settings.service_name, "commit": settings.git_commit})
	try:
		yield
	finally:
		await postgres.close_pool()


app = FastAPI(title="FemConnect API", lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = ["http://localhost:5173", "http://localhost:5000"] if settings.is_dev() else [settings.public_base_url]

# Starlette disallows wildcard '*' with allow_credentials=True.
if "*" in allow_origins:
	allow_origins = [origin for origin in allow_origins if origin != "*"] or [settings.public_base_url]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Observability middleware reads the request id, so RequestIdMiddleware is added
# after it and ends up outermost.
obs_init(app)
app.add_middleware(RequestIdMiddleware)

app.include_router(ops.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(messages.router)
app.include_router(status.router)
app.include_router(pictures.router)
app.include_router(moderation_router)
