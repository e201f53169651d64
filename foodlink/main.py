import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from foodlink.api import marketplace
from foodlink.core.config import get_settings
from foodlink.core.errors import MarketplaceError
from foodlink.core.logging import configure_logging
from foodlink.core.rate_limit import RateLimiter
from foodlink.db.init import init_db

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="foodlink",
    description="Marketplace API connecting farmers, retailers and NGOs to reduce food waste",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

app.state.submission_limiter = RateLimiter(
    limit=settings.submission_rate_limit,
    window_seconds=settings.submission_rate_window_seconds,
)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid value for {field}: {error['msg']}"},
    )


# Initialize database
@app.on_event("startup")
async def startup_event():
    init_db()
    logger.info("foodlink API started")

# Include routers
app.include_router(marketplace.router, prefix="/marketplace", tags=["marketplace"])

@app.get("/")
def read_root():
    return {"message": "Welcome to the FoodLink marketplace API"}

@app.get("/health")
def health():
    return {"status": "ok"}
