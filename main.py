import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.checkin_routes import router as checkin_router
from api.report_routes import router as report_router
from core.config import ALLOWED_ORIGINS, LOG_LEVEL
from core.errors import CheckinError
from db.bootstrap import create_db_and_tables
from db.session import engine

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# This file is the control center of the whole application


# When We Start, Create the DB Tables if they don't exist
@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables(engine)
    yield


# Starts Fast API Up; Init
app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# One place turns core errors into HTTP responses
@app.exception_handler(CheckinError)
async def checkin_error_handler(request: Request, exc: CheckinError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.kind)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.kind,
            "message": exc.message,
            "retryable": exc.retryable,
        },
    )


app.include_router(checkin_router, prefix="/api/checkins", tags=["Checkins"])
app.include_router(report_router, prefix="/api/reports", tags=["Reports"])
