from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from pte_api.api.v1.routes.router import router as api_v1_router
from pte_api.core.config import settings
from pte_api.core.logging_config import get_logger
from pte_api.core.response import error_response, success_response, validation_error_response
from pte_api.db.seed.questions import seed_all
from pte_api.services.accounts import AccountError
from pte_api.services.ai_service.base import ProviderError, ScoringUnavailableError
from pte_api.services.attempts import AttemptError
from pte_api.services.credits import CreditLimitExceeded
from pte_api.services.realtime import RealtimeError

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown operations."""
    if settings.SEED_ON_STARTUP:
        await seed_all()
    yield


app = FastAPI(
    title="PTE Academic Practice API",
    description="Practice, mock tests and AI scoring for the PTE Academic exam",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

app.include_router(
    api_v1_router,
    prefix="/api/v1",
)


@app.get("/health", tags=["health"])
async def health():
    return success_response(msg="OK", data={"environment": settings.ENVIRONMENT})


def _request_context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "client_ip": request.client.host if request.client else None,
    }


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with logging"""
    msg = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    logger.warning(
        f"HTTP Exception: {exc.status_code} - {msg}",
        extra={"status_code": exc.status_code, **_request_context(request)},
    )
    return error_response(msg, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Validation error handler with structured error details and logging"""
    error_count = len(exc.errors())
    logger.warning(
        f"Validation Error: {error_count} field(s) failed validation",
        extra={"error_count": error_count, **_request_context(request)},
    )
    return validation_error_response(exc.errors(), status_code=422)


@app.exception_handler(CreditLimitExceeded)
async def credit_limit_handler(request: Request, exc: CreditLimitExceeded):
    logger.info(f"AI credit limit reached ({exc.used}/{exc.allowance})", extra=_request_context(request))
    return error_response(
        str(exc),
        status_code=403,
        error_code="AI_CREDIT_LIMIT_EXCEEDED",
        data={"used": exc.used, "allowance": exc.allowance},
    )


async def coded_error_handler(request: Request, exc: AccountError | AttemptError | RealtimeError):
    return error_response(exc.message, status_code=exc.status_code, error_code=exc.error_code)


app.add_exception_handler(AccountError, coded_error_handler)
app.add_exception_handler(AttemptError, coded_error_handler)
app.add_exception_handler(RealtimeError, coded_error_handler)


@app.exception_handler(ScoringUnavailableError)
async def scoring_unavailable_handler(request: Request, exc: ScoringUnavailableError):
    logger.error(f"Scoring unavailable: {exc}", extra=_request_context(request))
    return error_response(
        "AI scoring is temporarily unavailable. Please try again later.",
        status_code=503,
        error_code="SCORING_UNAVAILABLE",
    )


@app.exception_handler(ProviderError)
async def provider_error_handler(request: Request, exc: ProviderError):
    logger.error(f"AI provider error: {exc}", extra=_request_context(request))
    return error_response(str(exc), status_code=502, error_code="PROVIDER_ERROR")


logger.info(f"Configuring CORS middleware with origins: {settings.ALLOWED_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pte_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
