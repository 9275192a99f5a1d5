# backend/app/main.py

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from .config import settings
from .errors import BookingEngineError
from .redis_client import get_redis
from .routers import bookings, schedule, slots, wallets

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Booking API")

app.include_router(slots.router)
app.include_router(bookings.router)
app.include_router(schedule.router)
app.include_router(wallets.router)


@app.exception_handler(BookingEngineError)
async def booking_engine_error_handler(request: Request, exc: BookingEngineError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


@app.get("/health")
def health():
    redis = get_redis()
    if redis is None:
        return {"status": "ok", "redis": None}
    try:
        return {"status": "ok", "redis": redis.ping()}
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return {"status": "degraded", "redis": False}
