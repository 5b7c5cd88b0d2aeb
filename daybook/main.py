# daybook/main.py
import logging
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

import daybook.models  # noqa: F401  (registers every table on Base.metadata)
from daybook.config.settings import settings
from daybook.db.database import Base, SessionLocal, engine
from daybook.routers import auth, data, health, memo, money, project, todo
from daybook.services.forms import CsrfError, InvalidRequest
from daybook.services.sessions import purge_expired_sessions

logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


def _purge_sessions_job():
    db = SessionLocal()
    try:
        purge_expired_sessions(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("[scheduler] session purge failed")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    - create tables on startup
    - purge idle login sessions every hour
    - stop the scheduler on shutdown
    """
    Base.metadata.create_all(bind=engine)

    scheduler = AsyncIOScheduler(timezone=ZoneInfo(settings.timezone))
    scheduler.add_job(_purge_sessions_job, CronTrigger(minute=0))
    scheduler.start()

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        logger.info("[scheduler] stopped")


app = FastAPI(lifespan=lifespan)

# cookies travel with every request, so origins must be explicit in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CsrfError)
async def csrf_error_handler(request: Request, exc: CsrfError):
    logger.warning("[csrf] %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"success": False, "error": "CSRF token mismatch"},
    )


@app.exception_handler(InvalidRequest)
async def invalid_request_handler(request: Request, exc: InvalidRequest):
    # details stay in the log; the client only learns that the request failed
    logger.warning("[request] %s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "An error occurred"},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("[db] %s %s failed", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Database error"},
    )


app.include_router(auth.router)
app.include_router(data.router)
app.include_router(todo.router)
app.include_router(money.router)
app.include_router(health.router)
app.include_router(project.router)
app.include_router(memo.router)


@app.get("/")
async def root():
    return {"message": "daybook API is running", "version": "1.0.0"}
