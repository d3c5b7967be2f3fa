import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from practice_tracker.api import auth_api, progress_api, question_api, sync_api, user_api
from practice_tracker.configs import settings
from practice_tracker.configs.database import init_db, close_db
from practice_tracker.configs.logging_config import setup_logging
from practice_tracker.utils.errors import TrackerError
from practice_tracker.utils.rate_limit import check_rate_limit

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    init_db()
    logger.info("Database tables ready")
    yield
    close_db()


app = FastAPI(title="Practice Tracker API", lifespan=lifespan, dependencies=[Depends(check_rate_limit)])

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,  # Allowed origins
    allow_credentials=True,  # Allow cookies/auth headers
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_content(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0])
                     for error in exc.errors()})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "Missing or invalid fields", "fields": fields},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal server error"},
    )


# Include routers
app.include_router(auth_api.router)
app.include_router(question_api.router)
app.include_router(user_api.router)
app.include_router(progress_api.router)
app.include_router(sync_api.router)


@app.get("/health")
def health():
    return {"status": "ok"}
