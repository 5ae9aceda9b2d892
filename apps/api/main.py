"""GarageHub API"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from redis.asyncio import Redis

from errors import register_exception_handlers
from garagehub import __version__
from garagehub.config import Settings
from garagehub.repositories import DatabasePool
from garagehub.services import Mailer
from garagehub.utils.logging_setup import setup_logging
from routes.contacts import router as contacts_router
from routes.garages import router as garages_router
from routes.health import router as health_router
from routes.payments import router as payments_router
from routes.users import router as users_router
from routes.zones import router as zones_router

settings = Settings()
setup_logging(settings)
logger = logging.getLogger("garagehub.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.redis = Redis.from_url(settings.redis_url, decode_responses=True)
    app.state.settings = settings
    app.state.db_pool = await DatabasePool.get_pool(settings)
    app.state.mailer = Mailer(settings.smtp)
    if not settings.smtp.configured:
        logger.warning("SMTP credentials not set; password reset emails will fail")
    logger.info("API starting (redis=%s, uploads=%s)", settings.redis_url, settings.upload_dir)
    try:
        yield
    finally:
        redis: Redis | None = getattr(app.state, "redis", None)
        if redis is not None:
            await redis.aclose()
        await DatabasePool.close()


app = FastAPI(
    title="GarageHub API",
    description="Car service marketplace backend",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allow_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(garages_router, prefix="/api")
app.include_router(zones_router, prefix="/api")
app.include_router(payments_router, prefix="/api/payments")
app.include_router(payments_router, prefix="/api/payment", include_in_schema=False)
app.include_router(users_router, prefix="/api")
app.include_router(contacts_router, prefix="/api")
app.include_router(health_router)

app.mount(
    f"/{settings.upload_url_prefix}",
    StaticFiles(directory=settings.upload_dir),
    name="uploads",
)
