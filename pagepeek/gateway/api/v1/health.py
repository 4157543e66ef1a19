import asyncio
import os
import platform
import resource
import threading
import time
import uuid
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse
from loguru import logger
from pydantic import BaseModel

from pagepeek import __version__
from pagepeek.gateway.deps import SettingsDep

health_router = APIRouter(prefix="/api/health", tags=["Health"])
ping_router = APIRouter(tags=["Health"])

APPLICATION_NAME = "pagepeek"
MAX_LOAD_TEST_DELAY_MS = 60_000


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    message: str


class ServerInfo(BaseModel):
    application_name: str
    version: str
    environment: str
    machine_name: str
    process_id: int
    start_time: datetime
    thread_count: int


class PerformanceInfo(BaseModel):
    uptime_seconds: float
    peak_memory_mb: int
    cpu_time_ms: float


class DetailedHealthResponse(BaseModel):
    status: str
    timestamp: datetime
    server_info: ServerInfo
    performance: PerformanceInfo


class LoadTestResponse(BaseModel):
    request_id: str
    status: str
    requested_delay_ms: int
    actual_delay_ms: float
    start_time: datetime
    end_time: datetime
    thread_id: int


@health_router.get("")
async def get_health() -> HealthResponse:
    response = HealthResponse(status="Healthy", timestamp=datetime.now(UTC), message="Server is running normally")
    logger.debug(f"Health check: {response.status} at {response.timestamp.isoformat()}")
    return response


@health_router.get("/detailed")
async def get_detailed_health(request: Request, settings: SettingsDep) -> DetailedHealthResponse:
    """Health check with process metadata."""
    now = datetime.now(UTC)
    started_at: datetime = request.app.state.started_at
    # ru_maxrss is reported in kilobytes on Linux
    peak_memory_mb = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss // 1024

    response = DetailedHealthResponse(
        status="Healthy",
        timestamp=now,
        server_info=ServerInfo(
            application_name=APPLICATION_NAME,
            version=__version__,
            environment=settings.environment,
            machine_name=platform.node(),
            process_id=os.getpid(),
            start_time=started_at,
            thread_count=threading.active_count(),
        ),
        performance=PerformanceInfo(
            uptime_seconds=(now - started_at).total_seconds(),
            peak_memory_mb=peak_memory_mb,
            cpu_time_ms=time.process_time() * 1000,
        ),
    )
    logger.info(f"Detailed health check: pid={response.server_info.process_id} memory={peak_memory_mb}MB")
    return response


@health_router.get("/load-test")
async def load_test(
    delay: Annotated[int, Query(ge=0, le=MAX_LOAD_TEST_DELAY_MS, description="Delay in milliseconds")] = 1000,
) -> LoadTestResponse:
    """Sleep without blocking the event loop, for exercising concurrent request handling."""
    request_id = uuid.uuid4().hex[:8]
    start_time = datetime.now(UTC)
    t0 = time.monotonic()
    logger.info(f"Load test started: request_id={request_id} delay={delay}ms")

    await asyncio.sleep(delay / 1000)

    actual_delay_ms = round((time.monotonic() - t0) * 1000, 2)
    response = LoadTestResponse(
        request_id=request_id,
        status="Completed",
        requested_delay_ms=delay,
        actual_delay_ms=actual_delay_ms,
        start_time=start_time,
        end_time=datetime.now(UTC),
        thread_id=threading.get_ident(),
    )
    logger.info(f"Load test finished: request_id={request_id} actual_delay={actual_delay_ms}ms")
    return response


@ping_router.get("/ping", response_class=PlainTextResponse)
async def ping() -> str:
    return "pong"
