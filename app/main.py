from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time
import structlog

from app.config import load_settings
from app.routers import study as study_router
from app.services.logging import configure_logging, log_api_request
from app.services.monitoring import health_checker, get_metrics, REQUEST_COUNT, REQUEST_DURATION

settings = load_settings()

# Configure logging
configure_logging(settings.log_level)
logger = structlog.get_logger()

app = FastAPI(
    title="StudyForge",
    description="Summaries, flashcards and quizzes generated from uploaded study documents",
    version="1.0.0"
)
app.state.settings = settings

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Add middleware for request logging and metrics
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()

    log_api_request(request)

    try:
        response = await call_next(request)
    except Exception as e:
        log_api_request(request, error=e)
        raise

    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code
    ).inc()

    REQUEST_DURATION.labels(
        method=request.method,
        endpoint=request.url.path
    ).observe(process_time)

    response.response_time = process_time
    log_api_request(request, response)

    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_error", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# ----------------- Health & Monitoring Endpoints -----------------
@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint"""
    return health_checker.get_health_status(request.app.state.settings)


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    return get_metrics()


@app.on_event("startup")
def on_startup():
    if settings.ai_enabled:
        logger.info("ai_provider_selected", provider=settings.provider, model=settings.model)
    else:
        logger.info("ai_provider_missing", message="No AI provider found, heuristic fallbacks will be used")


# ----------------- Routers -----------------
app.include_router(study_router.router)
