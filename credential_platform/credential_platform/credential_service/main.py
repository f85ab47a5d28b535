"""
Credential service - signup, login, email check and password reset
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from .config import settings
from .db import create_db_engine, make_session_factory
from .errors import DomainError
from .resilience import RetryPolicy, retry_with_backoff, wait_for_database
from .routes import credentials, health
from .schema import ensure_schema
from .utils.event_logger import configure_logging

configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect, make sure the schema exists, then serve. Startup failures are fatal."""
    engine = create_db_engine(settings)
    policy = RetryPolicy.from_settings(settings)
    try:
        wait_for_database(engine, policy)
        retry_with_backoff(
            lambda: ensure_schema(engine, username_unique=settings.USERNAME_UNIQUE),
            policy,
            description="schema initialization",
        )
    except Exception:
        logger.critical("Database is not usable, refusing to start")
        engine.dispose()
        raise

    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    logger.info("Credential service ready")
    yield
    engine.dispose()


app = FastAPI(
    title="Credential Service",
    description="User registration, login verification and password reset",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(credentials.router)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error"})


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
