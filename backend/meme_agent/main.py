"""
Meme Agent Supervisor - Main Application Entry Point.

This FastAPI application acts as an orchestrator for feeling-to-meme generation.
It coordinates between:
1. Caller - sends a free-text feeling
2. OpenAI - runs the supervisor, emotion and meme agents
3. Imgflip MCP server - renders the meme and returns its URL

The supervisor NEVER renders images itself.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meme_agent.config import Settings, get_settings
from meme_agent.routes.meme import router as meme_router
from meme_agent.services.supervisor import MemeAgentService

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

APP_NAME = "meme-agent-supervisor"
DEFAULT_PORT = 3001


# =============================================================================
# ERROR HANDLERS
# =============================================================================

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report bad request bodies as 400 with a readable message."""
    errors = exc.errors()
    if errors and errors[0].get("loc", ())[-1:] == ("body",):
        message = "Request body is missing. Please send JSON with 'feeling' field."
    else:
        message = "Please provide a 'feeling' field with a string value"

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request", "message": message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Error generating meme: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    service: Optional[MemeAgentService] = None,
) -> FastAPI:
    """
    Build the supervisor application.

    The MemeAgentService (and with it every agent) is created during startup
    and stored on app.state; pass one in to use a pre-built service instead.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {APP_NAME} v{settings.APP_VERSION}")

        # Log configuration status (without exposing secrets)
        logger.info(f"OpenAI API key configured: {bool(settings.OPENAI_API_KEY)}")
        logger.info(f"Model: {settings.OPENAI_MODEL}")
        logger.info(f"MCP server URL: {settings.MCP_SERVER_URL}")
        logger.info(f"CORS origins: {settings.cors_origins_list}")

        for name in settings.missing_agent_settings():
            logger.warning(
                f"⚠️  {name} is not configured. "
                "Set this in your .env file before making requests."
            )

        app.state.meme_agent_service = service or MemeAgentService(settings)
        logger.info("Application startup complete")

        yield

        logger.info("Application shutdown")

    app = FastAPI(
        title=APP_NAME,
        version=settings.APP_VERSION,
        description="""
## Meme Agent Supervisor

Turns a feeling into an emotion summary and a matching Imgflip meme.

### Flow

1. **Caller** sends `{"feeling": "..."}`
2. **Emotion agent** summarizes the feeling in one line
3. **Meme agent** picks a template and calls the Imgflip MCP tool
4. **Supervisor** returns the summary and meme URL

### Key Endpoints

- `POST /generate-meme` - Generate a meme
- `GET /api/v1/health` - Health check
- `GET /api/v1/health/ready` - Readiness check
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(meme_router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {
            "status": "ok",
            "name": APP_NAME,
            "version": settings.APP_VERSION,
            "endpoint": "/generate-meme",
        }

    return app


app = create_app()


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def run() -> None:
    """Validate required settings, then run the supervisor with uvicorn."""
    import uvicorn

    settings = get_settings()

    missing = settings.missing_agent_settings()
    if missing:
        logger.error(f"ERROR: {', '.join(missing)} environment variable(s) are required")
        raise SystemExit(1)

    port = settings.PORT or DEFAULT_PORT
    logger.info(f"🚀 Meme Agent Supervisor running on http://localhost:{port}")
    logger.info(f"📍 Generate meme endpoint: http://localhost:{port}/generate-meme")
    logger.info(f"🏥 Health check: http://localhost:{port}/")

    uvicorn.run(
        "meme_agent.main:app",
        host=settings.HOST,
        port=port,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
