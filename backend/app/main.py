"""
Camp reservations back-office - application entry point
Payment allocation and reconciliation for camp reservations
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import init_db
from app.routers import auth, reservations, catalog, payments

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    init_db()

    # item lifecycle registers its state machine on import
    from core.engine import state_machine_registry
    import core.payments  # noqa: F401
    logger.info(f"State machines registered: {state_machine_registry.names()}")

    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Per-item payment allocation and reconciliation for camp reservations",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(reservations.router)
app.include_router(catalog.router)
app.include_router(payments.router)


@app.get("/")
def root():
    return {"name": settings.APP_NAME, "version": "1.0.0"}


@app.get("/health")
def health_check():
    return {"status": "healthy"}
