import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import all models to ensure they're registered with SQLAlchemy Base
# This is needed for relationships between models in different files
from . import (
    models,  # noqa: F401
    models_equipment,  # noqa: F401
    models_expense,  # noqa: F401
    models_invoice,  # noqa: F401
)
from .config import Settings
from .database import Base, create_db_engine, create_session_factory
from .domain.billing.dodo_service import DodoPaymentsService
from .domain.billing.router import router as billing_router
from .domain.clients.router import router as clients_router
from .domain.email.router import router as email_router
from .domain.equipment.router import router as equipment_router
from .domain.expenses.router import router as expenses_router
from .domain.invoices.router import router as invoices_router
from .domain.jobs.router import router as jobs_router
from .domain.profiles.router import router as profiles_router
from .errors import BizznexError
from .security_headers import SecurityHeadersMiddleware

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Reduce noise from HTTP client libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with its own engine, session factory and payments client"""
    settings = settings or Settings.from_env()
    engine = create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("🚀 Starting Bizznex API...")
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database tables ready")
        yield
        # Shutdown
        logger.info("🛑 Shutting down Bizznex API...")
        engine.dispose()

    app = FastAPI(title="Bizznex API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.payments = DodoPaymentsService(settings)

    # ========================================================================
    # EXCEPTION HANDLERS
    # ========================================================================

    @app.exception_handler(BizznexError)
    async def bizznex_error_handler(request: Request, exc: BizznexError):
        if exc.status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Return 401 instead of a validation error when the Authorization header is missing"""
        errors = exc.errors()
        for error in errors:
            loc = error.get("loc", ())
            if len(loc) >= 2 and loc[0] == "header" and str(loc[1]).lower() == "authorization":
                return JSONResponse(
                    status_code=401,
                    content={"success": False, "message": "Not authenticated"},
                    headers={"WWW-Authenticate": "Bearer"},
                )

        logger.warning(f"⚠️ Validation failed for {request.method} {request.url.path}")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Validation failed",
                "errors": jsonable_encoder(errors, custom_encoder={Exception: str}),
            },
        )

    # ========================================================================
    # MIDDLEWARE
    # ========================================================================

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = (time.time() - start_time) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration:.0f}ms)"
        )
        return response

    if settings.security_headers_enabled:
        app.add_middleware(
            SecurityHeadersMiddleware,
            exclude_paths=["/health", "/docs", "/openapi.json"],
            hsts=settings.base_url.startswith("https://"),
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Invoice-Persisted", "X-Invoice-Id"],
    )

    # ========================================================================
    # ROUTERS
    # ========================================================================

    app.include_router(profiles_router)
    app.include_router(clients_router)
    app.include_router(jobs_router)
    app.include_router(invoices_router)
    app.include_router(equipment_router)
    app.include_router(expenses_router)
    app.include_router(email_router)
    app.include_router(billing_router)

    @app.get("/")
    async def root():
        return {"message": "Bizznex API is running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
