import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
import sentry_sdk
from fastapi import FastAPI
from sqlalchemy import text

from collabhub.config import settings
from collabhub.database import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize Sentry
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        traces_sample_rate=0.2 if settings.ENVIRONMENT == "production" else 1.0,
        profiles_sample_rate=0.1,
        send_default_pii=False,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: verify DB connection and connect Redis
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))

    app.state.redis = redis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    await app.state.redis.ping()
    logger.info("collabhub started (%s)", settings.ENVIRONMENT)

    yield

    # Shutdown
    await app.state.redis.close()
    await engine.dispose()


app = FastAPI(
    title="CollabHub API",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from collabhub.middleware.rate_limit import RateLimitMiddleware  # noqa: E402

_cors_origins = [
    "http://localhost:5173",
    "http://localhost:3000",
]

app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from collabhub.middleware.error_handler import register_error_handlers  # noqa: E402

register_error_handlers(app)

# Routers
from collabhub.routers.activity import router as activity_router  # noqa: E402
from collabhub.routers.auth import router as auth_router  # noqa: E402
from collabhub.routers.calendar import router as calendar_router  # noqa: E402
from collabhub.routers.friends import router as friends_router  # noqa: E402
from collabhub.routers.messages import router as messages_router  # noqa: E402
from collabhub.routers.notifications import router as notifications_router  # noqa: E402
from collabhub.routers.profiles import router as profiles_router  # noqa: E402
from collabhub.routers.projects import router as projects_router  # noqa: E402
from collabhub.routers.tasks import router as tasks_router  # noqa: E402

app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(friends_router)
app.include_router(messages_router)
app.include_router(notifications_router)
app.include_router(projects_router)
app.include_router(tasks_router)
app.include_router(calendar_router)
app.include_router(activity_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
