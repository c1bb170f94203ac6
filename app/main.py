import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import config
from .cache import get_cache_stats, get_redis_client
from .domain.documents import router as documents_router
from .domain.pricing import router as pricing_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")

    if config.PRICING_API_BASE_URL:
        logger.info(f"Pricing backend: {config.PRICING_API_BASE_URL}")
    else:
        logger.warning("PRICING_API_BASE_URL not set - pricing from built-in defaults only")

    if not config.DOCUMENT_API_BASE_URL:
        logger.warning("DOCUMENT_API_BASE_URL not set - /documents endpoints will return 503")

    try:
        if get_redis_client() is not None:
            logger.info("Redis connection established")
    except Exception as e:
        logger.warning(f"Redis connection failed - config cache will operate in fail-open mode: {e}")

    yield
    logger.info("Application shutting down...")


app = FastAPI(title="Service Pricing API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw ctx objects, which may not serialize"""
    return [{key: value for key, value in error.items() if key != "ctx"} for error in exc.errors()]


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} - Error: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# CORS Configuration
ALLOWED_ORIGINS = [origin.strip() for origin in config.ALLOWED_ORIGINS.split(",") if origin.strip()]
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(pricing_router)
app.include_router(documents_router)


@app.get("/")
def root():
    return {"message": "Service Pricing API is running"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "pricingBackend": bool(config.PRICING_API_BASE_URL),
        "documentBackend": bool(config.DOCUMENT_API_BASE_URL),
        "cache": get_cache_stats(),
    }
