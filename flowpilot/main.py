"""
FastAPI Application Entry Point - Application initialization and configuration
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
import logging
import sys
import time

from flowpilot.core.config import settings, validate_config, is_production
from flowpilot.database import (
    SessionLocal,
    check_db_connection,
    close_db_connections,
    get_pool_stats,
    init_db,
    seed_default_users,
)
from flowpilot.assistant import AssistantError, GenerationError

# Configure application logging with timestamp and log level
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

def create_application() -> FastAPI:
    """
    Factory function to create and configure FastAPI application.
    Tests build the app through this function with their own settings.
    """
    app = FastAPI(
        title=settings.APP_NAME,  # Shown in the OpenAPI docs
        version=settings.APP_VERSION,  # Reported by /health too
        debug=settings.DEBUG,  # Tracebacks in responses during development
        docs_url="/api/docs" if not is_production() else None,  # Hide Swagger docs in production
        redoc_url="/api/redoc" if not is_production() else None,  # Same for ReDoc
        description="Project and task management with audit trail and AI planning"
    )

    setup_middleware(app)  # CORS and request timing
    setup_exception_handlers(app)  # Uniform error bodies
    setup_event_handlers(app)  # Startup checks, seeding and shutdown
    setup_routers(app)  # Health check and /api routers

    return app

def setup_middleware(app: FastAPI) -> None:
    """Configure application middleware - runs on every request/response"""

    # CORS middleware - allows the React client to call the API from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,  # e.g. http://localhost:5173 for the Vite dev server
        allow_credentials=True,  # Authorization headers are sent cross-origin
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request timing and logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with method, path, status, and processing time"""
        start_time = time.time()  # Request start
        logger.info(f"➡️  {request.method} {request.url.path}")

        response = await call_next(request)  # Run the route and its dependencies

        process_time = time.time() - start_time  # Seconds spent in the app
        logger.info(
            f"⬅️  {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Time: {process_time:.2f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)  # Exposed for client-side debugging
        return response

def _error_response(status_code: int, error: str, detail) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, "timestamp": time.time()}
    )

def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers for consistent error responses"""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Pydantic validation errors, reported per field"""
        errors = []
        for error in exc.errors():  # One entry per invalid field
            errors.append({
                "field": ".".join(str(x) for x in error["loc"]),  # Field path (e.g. "body.email")
                "message": error["msg"],  # Human-readable message
                "type": error["type"]  # e.g. "value_error", "greater_than_equal"
            })

        logger.warning(f"❌ Validation error on {request.url.path}: {errors}")
        return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", errors)

    @app.exception_handler(AssistantError)
    async def assistant_exception_handler(request: Request, exc: AssistantError):
        """Bad assistant input or model output the processing chain could not use"""
        logger.warning(f"⚠️  Assistant error on {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_400_BAD_REQUEST, "Assistant Error", exc.message)

    @app.exception_handler(GenerationError)
    async def generation_exception_handler(request: Request, exc: GenerationError):
        """Upstream model failures"""
        logger.error(f"❌ Generation error on {request.url.path}: {exc.message}")
        return _error_response(status.HTTP_502_BAD_GATEWAY, "Generation Error", exc.message)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """
        Handle database errors - logs full details but returns generic message.
        Never expose database schema or internal errors to client.
        """
        logger.error(
            f"❌ Database error on {request.method} {request.url.path}: {str(exc)}",
            exc_info=True  # Full stack trace in logs only
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Database Error",
            "An error occurred while processing your request. Please try again later."
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Catch-all handler for unexpected exceptions"""
        logger.error(
            f"❌ Unhandled exception on {request.method} {request.url.path}: {str(exc)}",
            exc_info=True
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            "An unexpected error occurred."
        )

def setup_event_handlers(app: FastAPI) -> None:
    """Configure startup and shutdown event handlers"""

    @app.on_event("startup")
    async def startup_event():
        """
        Validate config, check the database and seed initial accounts.
        Fail fast: if checks fail, the application won't start.
        """
        logger.info("🚀 Starting FlowPilot API...")

        try:
            validate_config()  # Secrets and debug flag checked before serving
        except Exception as e:
            logger.error(f"❌ Configuration validation failed: {e}")
            sys.exit(1)  # Refuse to start with an unsafe configuration

        if not check_db_connection():  # Database must be reachable
            logger.error("❌ Cannot connect to database. Exiting.")
            sys.exit(1)

        if settings.AUTO_CREATE_TABLES:
            init_db()  # Creates missing tables only

        if settings.SEED_DEFAULT_USERS:
            with SessionLocal() as db:
                seed_default_users(db)  # No-op once any user exists

        pool_stats = get_pool_stats()
        logger.info(f"📊 Database pool: {pool_stats}")
        logger.info("✅ Application started successfully")
        logger.info(f"🌍 Environment: {settings.ENVIRONMENT}")
        logger.info(f"🔧 Debug mode: {settings.DEBUG}")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Run on application shutdown - clean up resources gracefully"""
        logger.info("🛑 Shutting down FlowPilot API...")
        close_db_connections()  # Release pooled connections
        logger.info("✅ Shutdown complete")

def setup_routers(app: FastAPI) -> None:
    """Mount health check and API routers"""

    @app.get("/health", tags=["Health"])
    async def health_check():
        """
        Health check endpoint for monitoring and load balancers.
        Returns application status, database connectivity, and version info.
        """
        db_healthy = check_db_connection()  # SELECT 1 against the database
        pool_stats = get_pool_stats()  # Connection usage, for spotting leaks

        return {
            "status": "healthy" if db_healthy else "unhealthy",
            "database": "connected" if db_healthy else "disconnected",
            "poolStats": pool_stats,
            "timestamp": time.time(),
            "version": settings.APP_VERSION
        }

    # Include API routers
    from flowpilot.api import auth, users, projects, tasks, audit, assistant
    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["Tasks"])
    app.include_router(audit.router, prefix="/api/audit", tags=["Audit Logs"])
    app.include_router(assistant.router, prefix="/api/assistant", tags=["Assistant"])

# Create application instance
app = create_application()

if __name__ == "__main__":
    """
    Direct execution entry point - for development only.
    Production: Use `uvicorn flowpilot.main:app --host 0.0.0.0 --port 8000`
    """
    import uvicorn
    uvicorn.run(
        "flowpilot.main:app",
        host="0.0.0.0",  # All interfaces
        port=8000,
        reload=settings.DEBUG,  # Auto-reload while developing
        log_level="debug" if settings.DEBUG else "info"
    )
