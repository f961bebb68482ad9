from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from app.base.config import settings
from app.base.database import init_db
from app.base.error_handlers import register_exception_handlers
from app.base.logging_config import app_logger as logger
from app.routers import admin, bookings, interview_scheduler
from app.routers.deps import verify_api_key

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"🚀 {settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield


# --- FastAPI app instance ---
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=APP_VERSION,
    debug=settings.DEBUG_MODE,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# --- CORS config ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Prometheus metrics ---
if settings.ENABLE_PROMETHEUS:
    Instrumentator().instrument(app).expose(app)


# --- Logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"📥 {request.method} request to {request.url}")
    response = await call_next(request)
    logger.info(f"📤 Response: {response.status_code} for {request.url}")
    return response


# --- Exception handlers ---
register_exception_handlers(app)

# --- API Routers ---
secured = [Depends(verify_api_key)]
app.include_router(bookings.router, tags=["Bookings"], dependencies=secured)
app.include_router(interview_scheduler.router, tags=["Interviewer"], dependencies=secured)
app.include_router(admin.router, tags=["Admin"], dependencies=secured)


# --- System endpoints ---
@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}


@app.get("/version", tags=["System"])
def version_check():
    return {
        "version": APP_VERSION,
        "api_version": settings.API_VERSION,
        "environment": settings.ENVIRONMENT,
        "booking_buffer_minutes": settings.BOOKING_BUFFER_MINUTES,
    }
