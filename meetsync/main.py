import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from meetsync.config import get_settings
from meetsync.db.session import engine
from meetsync.logging_config import setup_logging
from meetsync.models import Base
from meetsync.routers import auth, calendars, meetings, public, users
from meetsync.services.errors import MeetSyncError

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    yield


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(MeetSyncError)
async def meetsync_error_handler(request: Request, exc: MeetSyncError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(calendars.router)
app.include_router(meetings.router)
app.include_router(public.router)


@app.get("/health")
def health_check():
    db_status = "ok"
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Database health check failed")
        db_status = "error"

    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "database": db_status,
    }
