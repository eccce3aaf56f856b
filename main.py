import os
import sys
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.errors import AppError
from core.logging_config import logger
from database import create_db_and_tables

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.join_requests import router as join_requests_router
from routers.users import router as users_router
from routers.families import router as families_router
from routers.properties import router as properties_router
from routers.events import router as events_router
from routers.health import router as health_router


def describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Homestead API for property management, join requests and tenant onboarding",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
        if settings.DB_AUTO_CREATE:
            create_db_and_tables()
        for route in app.routes:
            # Mounted sub-routers carry no path of their own
            path = getattr(route, "path", None)
            if not path:
                continue
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.info(f"Route {methods:10s} {path}")

    # -------------------------------------------------
    # Error handling. Every error body is {"error": "..."}
    # -------------------------------------------------
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"HTTP {exc.status_code} at {request.url}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": describe_validation_error(exc)})

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(join_requests_router)
    app.include_router(users_router)
    app.include_router(families_router)
    app.include_router(properties_router)
    app.include_router(events_router)
    app.include_router(health_router)

    return app


# Create the global FastAPI instance
app = create_app()
