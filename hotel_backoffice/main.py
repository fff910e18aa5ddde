# hotel_backoffice/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotel_backoffice.config import ALLOWED_ORIGINS
from hotel_backoffice.logging_config import setup_logging
from hotel_backoffice.middleware import RequestIDMiddleware
from hotel_backoffice.routes.dashboard import router as dashboard_router
from hotel_backoffice.routes.health import router as health_router
from hotel_backoffice.routes.metrics import router as metrics_router
from hotel_backoffice.routes.reservations import router as reservations_router
from hotel_backoffice.routes.rooms import router as rooms_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Hotel Back-Office API",
    description="Reservation lifecycle, room availability and occupancy reporting",
    version="1.0.0",
)

app.add_middleware(RequestIDMiddleware)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(reservations_router, tags=["Reservations"])
app.include_router(rooms_router, tags=["Rooms"])
app.include_router(dashboard_router, tags=["Dashboard"])
