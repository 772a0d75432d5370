# carwash/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from carwash import __version__
from carwash.config import settings
from carwash.db import init_db
from carwash.routers import (
    admin_routes,
    auth_routes,
    bookings_routes,
    health_routes,
    notifications_routes,
    schedule_routes,
    services_routes,
    users_routes,
)

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application starting up ({settings.environment})...")
    init_db()
    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Car Wash Booking API", version=__version__, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


app.include_router(health_routes.router)
app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(services_routes.router)
app.include_router(schedule_routes.router)
app.include_router(bookings_routes.router)
app.include_router(admin_routes.router)
app.include_router(notifications_routes.router)
