# salon_app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import LOG_LEVEL
from .db import create_db_and_tables
from .routers import (
    appointments_routes,
    auth_routes,
    booking_routes,
    calendar_routes,
    salons_routes,
    schedules_routes,
    users_routes,
)

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    create_db_and_tables()
    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Salon Booking API", version="1.0.0", lifespan=lifespan)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(salons_routes.router)
app.include_router(schedules_routes.router)
app.include_router(booking_routes.router)
app.include_router(appointments_routes.router)
app.include_router(calendar_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}
