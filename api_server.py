from __future__ import annotations  # FastAPI server exposing discussion rooms and AI interviews

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import interview, rooms
from api.deps import get_room_service
from api.schemas import HealthResp
from config import settings
from errors import ServiceError
from observability import log_event

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:  # Build the room service so the database is migrated before traffic
    service = get_room_service()
    log_event(
        "server.started",
        "api",
        mode="live-ai" if settings.ai_enabled else "mock-ai",
        status="persistent" if service.store.persistent else "memory-only",
    )
    yield


app = FastAPI(title="DebAItor API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(rooms.router)
app.include_router(interview.router)


@app.exception_handler(ServiceError)
async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:  # Map domain errors onto HTTP
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/api/health", response_model=HealthResp)
def health() -> HealthResp:  # Liveness plus feature switches
    return HealthResp(ai_enabled=settings.ai_enabled, persistence_enabled=get_room_service().store.persistent)
