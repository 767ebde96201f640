"""ProjectHost FastAPI application.

Entry point: uvicorn projecthost.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from projecthost.config import build_registrar_config, build_verification_policy, settings
from projecthost.database import AsyncSessionLocal, async_engine
from projecthost.errors import ProjectHostError
from projecthost.middleware import RequestIDLogFilter, RequestIDMiddleware, get_request_id
from projecthost.registrar.client import RegistrarClient
from projecthost.registrar.nameservers import NameserverResolver
from projecthost.routers import domains, health, projects, webhooks
from projecthost.schemas.common import ErrorResponse
from projecthost.services.verification_poller import VerificationPoller
from projecthost.sync.domain_sweep import sweep_added_domains

log = logging.getLogger(__name__)


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    handler = logging.StreamHandler()
    handler.addFilter(RequestIDLogFilter())
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level.upper())


async def _scheduled_sweep(registrar: RegistrarClient) -> None:
    async with AsyncSessionLocal() as session:
        await sweep_added_domains(session, registrar)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    if not settings.IDENTITY_WEBHOOK_SECRET:
        log.warning("IDENTITY_WEBHOOK_SECRET is not set; webhook signatures are not verified")

    http_client = httpx.AsyncClient(timeout=settings.REGISTRAR_TIMEOUT_SECONDS)
    registrar = RegistrarClient(build_registrar_config(), http_client, NameserverResolver())
    poller = VerificationPoller(
        AsyncSessionLocal, registrar, build_verification_policy(background=True)
    )
    app.state.registrar = registrar
    app.state.verification_poller = poller

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _scheduled_sweep,
        "interval",
        minutes=settings.VERIFICATION_SWEEP_INTERVAL_MINUTES,
        args=[registrar],
    )
    scheduler.start()

    yield

    await poller.shutdown()
    scheduler.shutdown(wait=False)
    await http_client.aclose()
    await async_engine.dispose()


app = FastAPI(title="ProjectHost", lifespan=lifespan)

app.add_middleware(RequestIDMiddleware)


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    request_id = get_request_id()
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=code, message=message, request_id=request_id).model_dump(
            by_alias=True
        ),
        headers={"X-Request-ID": request_id} if request_id else None,
    )


@app.exception_handler(ProjectHostError)
async def projecthost_error_handler(request: Request, exc: ProjectHostError) -> JSONResponse:
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = str(errors[0].get("msg", "Invalid request")) if errors else "Invalid request"
    return _error_response(400, "VALIDATION_ERROR", message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


app.include_router(health.router)
app.include_router(domains.router)
app.include_router(projects.router)
app.include_router(webhooks.router)
