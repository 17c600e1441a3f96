"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from medhub.core.config import settings
from medhub.core.errors import HTTP_STATUS_BY_CODE, InvalidInputError, ServiceError
from medhub.db.session import engine

# ============================================================================
# Sentry Integration (optional, for production error tracking)
# ============================================================================

if settings.SENTRY_DSN and settings.ENV != "dev":
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENV,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,  # 10% of requests for performance monitoring
        send_default_pii=False,  # Don't send PHI to Sentry
    )
    logging.info("Sentry initialized for error tracking")


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="MedHub API",
    description="Multi-tenant hospital equipment and service provider API",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,  # Required for cookies
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render service errors as {code, message, message_vi, message_en, details}."""
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, paths and queries get the VALIDATION error shape."""
    error = InvalidInputError(
        "Dữ liệu gửi lên không hợp lệ",
        "Request data is invalid",
        {"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=error.http_status, content=error.to_dict())


_CODE_BY_HTTP_STATUS = {status: code for code, status in HTTP_STATUS_BY_CODE.items()}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown route, bad method) keep a stable code too."""
    code = _CODE_BY_HTTP_STATUS.get(exc.status_code)
    message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": code.value if code else f"HTTP_{exc.status_code}",
            "message": message,
            "message_vi": message,
            "message_en": message,
            "details": {},
        },
        headers=getattr(exc, "headers", None),
    )


# ============================================================================
# Routers
# ============================================================================

from medhub.routers import (
    admin_router,
    audit_router,
    disputes_router,
    equipment_router,
    internal_router,
    members_router,
    payments_router,
    providers_router,
    service_requests_router,
    support_router,
)

# Hospital operations
app.include_router(equipment_router)
app.include_router(service_requests_router)
app.include_router(disputes_router)
app.include_router(payments_router)

# Provider self-service
app.include_router(providers_router)

# Organization-level
app.include_router(members_router)
app.include_router(support_router)
app.include_router(audit_router)

# Platform admin (cross-tenant, every access logged)
app.include_router(admin_router)

# Internal endpoints (scheduled/cron jobs - protected by INTERNAL_SECRET)
app.include_router(internal_router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
