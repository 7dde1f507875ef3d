import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .database import init_db
from .errors import ApiError, error_body, status_code_for
from .redis_client import redis_client
from .routers import (
    availability_overrides,
    availability_rules,
    availability_settings,
    bookings,
    slots,
)
from .services.bookings import BookingValidationError
from .services.slots.errors import ParseError, RangeError
from .services.slots.locks import ProviderBusyError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Provider calendar API started (redis=%s)", redis_client is not None)
    yield


app = FastAPI(title="Provider Calendar API", lifespan=lifespan)

app.include_router(availability_rules.router)
app.include_router(availability_overrides.router)
app.include_router(availability_settings.router)
app.include_router(slots.router)
app.include_router(bookings.router)


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


@app.exception_handler(BookingValidationError)
async def booking_error_handler(request: Request, exc: BookingValidationError):
    return JSONResponse(
        status_code=status_code_for(exc.code),
        content=error_body(exc.code, exc.message),
    )


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("PARSE_ERROR", str(exc)),
    )


@app.exception_handler(RangeError)
async def range_error_handler(request: Request, exc: RangeError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("RANGE_ERROR", str(exc)),
    )


@app.exception_handler(ProviderBusyError)
async def provider_busy_handler(request: Request, exc: ProviderBusyError):
    logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_body("PROVIDER_BUSY", str(exc)),
    )


@app.get("/health")
def health():
    if redis_client is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis_client.ping()}
    except RedisError:
        logger.exception("Redis ping failed")
        return {"status": "degraded", "redis": False}
