"""
Site Config Admin API
FastAPI service for editing the site's per-page JSON config files.
Saves to local disk and, on request, commits to GitHub.

Install dependencies:
pip install -e .

Run server:
uvicorn main:app --host 0.0.0.0 --port 3000
"""

from fastapi import FastAPI, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
import contextvars
import logging
import time
import uuid

import httpx

from adapters.github import GitHubConfig, GitHubConfigStore
from adapters.json import LocalConfigStore
from core.auth import CredentialStore
from core.config_service import ConfigService
from core.validation import flatten_validation_errors
from routers.admin_config import router as admin_config_router
from settings import Settings, get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar('request_id', default=None)

# Configure logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================================================
# STORE INITIALIZATION
# ============================================================================

def build_config_service(
    settings: Settings,
    github_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ConfigService:
    local = LocalConfigStore(settings.config_directory)
    remote = GitHubConfigStore(
        GitHubConfig(
            token=settings.github_token,
            owner=settings.github_owner,
            repo=settings.github_repo,
            branch=settings.github_branch,
            api_url=settings.github_api_url,
            file_paths=dict(settings.github_file_paths),
        ),
        transport=github_transport,
    )
    return ConfigService(local=local, remote=remote)


# ============================================================================
# FASTAPI APP
# ============================================================================

def create_app(
    settings: Optional[Settings] = None,
    github_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the API from an explicit settings object.

    Credentials and stores are created once here and hung on app.state;
    nothing reads the environment after this point.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Site Config Admin API starting up...")
        logger.info(f"Config directory: {settings.config_directory}")
        if settings.remote_configured():
            logger.info(
                f"GitHub: {settings.github_owner}/{settings.github_repo}@{settings.github_branch}"
            )
        else:
            logger.info("GitHub: not configured (local storage only)")
        logger.info(f"Admin users: {len(app.state.credentials)}")
        yield
        logger.info("Site Config Admin API shutting down...")

    app = FastAPI(
        title="Site Config Admin API",
        description="Read and update the site's page config documents",
        version="1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.credentials = CredentialStore(settings.resolved_credentials())
    app.state.config_service = build_config_service(settings, github_transport)

    # ========== Body Size Limit ==========
    @app.middleware("http")
    async def body_size_limit_middleware(request, call_next):
        """Reject bodies whose declared size exceeds max_body_bytes."""
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.max_body_bytes:
            logger.warning(f"Rejected {content_length}-byte body on {request.method} {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"error": "Payload too large"},
            )
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_origins_list(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ========== Request Tracing Middleware ==========
    # Registered last so it wraps every other middleware, 413s included
    @app.middleware("http")
    async def request_tracing_middleware(request, call_next):
        """Add request_id and timing to all requests."""
        request_id = str(uuid.uuid4())[:8]
        request_id_var.set(request_id)
        start = time.time()

        response = await call_next(request)

        latency = time.time() - start
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": round(latency * 1000, 2),
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response

    # ========== Error Rendering ==========
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": jsonable_encoder(flatten_validation_errors(exc.errors()))},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"}
        )

    # ============================================================================
    # ENDPOINTS
    # ============================================================================
    @app.get("/health")
    async def health_check():
        """Liveness probe; no auth, no storage access."""
        return {"status": "ok"}

    app.include_router(admin_config_router, prefix=settings.admin_base_path.rstrip("/"))

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().port)
