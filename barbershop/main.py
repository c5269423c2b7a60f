# barbershop/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from barbershop.config import settings
from barbershop.db import engine, init_db, seed_specialties
from barbershop.errors import register_exception_handlers
from barbershop.slots import auto_generate_slots
from barbershop.routers.auth_routes import router as auth_router
from barbershop.routers.users_routes import router as users_router
from barbershop.routers.shops_routes import router as shops_router
from barbershop.routers.services_routes import router as services_router
from barbershop.routers.service_templates_routes import router as service_templates_router
from barbershop.routers.specialties_routes import router as specialties_router
from barbershop.routers.working_hours_routes import router as working_hours_router
from barbershop.routers.slots_routes import router as slots_router
from barbershop.routers.bookings_routes import router as bookings_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("passlib").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting barbershop API (%s)", settings.ENV)
    init_db()
    with Session(engine) as session:
        seed_specialties(session)
        if settings.AUTO_GENERATE_SLOTS_ON_STARTUP:
            auto_generate_slots(session)
    yield
    logger.info("Shutting down barbershop API")


app = FastAPI(title="Barbershop Booking API", version="1.0.0", lifespan=lifespan)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(shops_router)
app.include_router(services_router)
app.include_router(service_templates_router)
app.include_router(specialties_router)
app.include_router(working_hours_router)
app.include_router(slots_router)
app.include_router(bookings_router)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
