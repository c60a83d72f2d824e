from fastapi import FastAPI, Request, APIRouter
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.api.v1.routes import (
    events as events_router,
    schedules as schedules_router,
    rsvps as rsvps_router,
    notifications as notifications_router,
    health as health_router,
)
from app.cache.redis_client import cache
from app.db.session import engine, Base
from app.core.config import settings
from app.core.exceptions import ServiceError, TransientStorageError
from app.core.logging import logger
from app.core.rate_limit import limiter

app = FastAPI(title="EventSphere")

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events_router.router)
api_router.include_router(schedules_router.router)
api_router.include_router(rsvps_router.router)
api_router.include_router(notifications_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    headers = None
    if isinstance(exc, TransientStorageError):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies and parameters are caller errors like any other validation failure
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors()), "code": "validation_error"},
    )


@app.on_event("startup")
async def on_startup():
    # create tables (simple approach for local runs; deployments use alembic)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"EventSphere started in {settings.ENVIRONMENT} mode")


@app.on_event("shutdown")
async def on_shutdown():
    await cache.close()
    await engine.dispose()
