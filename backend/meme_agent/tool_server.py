"""
Imgflip Meme MCP Server - Application Entry Point.

Exposes a single Model Context Protocol tool, generate_meme, over the
streamable HTTP transport at /mcp. The tool forwards template ID and text
boxes to Imgflip's caption_image endpoint and returns the sanitized meme URL.

Imgflip credentials are supplied by the caller on every tool call.
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from meme_agent.config import Settings, get_settings
from meme_agent.schemas.meme import CaptionImageRequest, MemeToolResult
from meme_agent.services.imgflip import ImgflipService, ImgflipServiceError

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

SERVER_NAME = "imgflip-meme-mcp"
MCP_ENDPOINT = "/mcp"
DEFAULT_PORT = 3000


# =============================================================================
# MCP SERVER
# =============================================================================

def build_mcp_server(imgflip_service: ImgflipService, settings: Settings) -> FastMCP:
    """Create the FastMCP server and register the generate_meme tool."""
    mcp = FastMCP(
        SERVER_NAME,
        host=settings.HOST,
        stateless_http=True,
        json_response=True,
        streamable_http_path=MCP_ENDPOINT,
    )

    @mcp.tool(
        name="generate_meme",
        description="Generate a meme from Imgflip using a specific template ID and custom text",
    )
    async def generate_meme(
        username: Annotated[str, Field(description="Imgflip username")],
        password: Annotated[str, Field(description="Imgflip password")],
        template_id: Annotated[
            str,
            Field(description="The ID of the meme template to use (e.g., '181913649' for Drake)"),
        ],
        text0: Annotated[str, Field(description="Text for the first text box (usually top text)")],
        text1: Annotated[
            Optional[str],
            Field(description="Text for the second text box (usually bottom text)"),
        ] = None,
        text2: Annotated[
            Optional[str],
            Field(description="Text for the third text box (if template supports it)"),
        ] = None,
        text3: Annotated[
            Optional[str],
            Field(description="Text for the fourth text box (if template supports it)"),
        ] = None,
        text4: Annotated[
            Optional[str],
            Field(description="Text for the fifth text box (if template supports it)"),
        ] = None,
    ) -> Annotated[CallToolResult, MemeToolResult]:
        request = CaptionImageRequest(
            username=username,
            password=password,
            template_id=template_id,
            text0=text0,
            text1=text1,
            text2=text2,
            text3=text3,
            text4=text4,
        )
        try:
            meme_url = await imgflip_service.caption_image(request)
        except ImgflipServiceError as e:
            # Propagates to the client as an isError tool result
            logger.error(f"generate_meme failed: {e}")
            raise
        return CallToolResult(
            content=[
                TextContent(
                    type="text",
                    text=f"Meme generated successfully! Meme image URL: {meme_url}",
                )
            ],
            structuredContent=MemeToolResult(meme_url=meme_url).model_dump(),
        )

    return mcp


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    imgflip_service: Optional[ImgflipService] = None,
) -> FastAPI:
    """
    Build the tool server application.

    Every call creates its own MCP server, since an MCP session manager can
    only be started once.
    """
    settings = settings or get_settings()
    imgflip_service = imgflip_service or ImgflipService(settings)

    mcp = build_mcp_server(imgflip_service, settings)
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {SERVER_NAME} v{settings.APP_VERSION}")
        logger.info(f"Imgflip endpoint: {settings.IMGFLIP_CAPTION_IMAGE_URL}")
        logger.info(f"CORS origins: {settings.cors_origins_list}")

        async with mcp.session_manager.run():
            logger.info("Application startup complete")
            yield

        logger.info("Application shutdown")

    app = FastAPI(
        title=SERVER_NAME,
        version=settings.APP_VERSION,
        description="MCP server exposing the Imgflip generate_meme tool at /mcp.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.mcp = mcp

    @app.get("/")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "name": SERVER_NAME,
            "version": settings.APP_VERSION,
            "endpoint": MCP_ENDPOINT,
        }

    # The MCP app owns /mcp; explicit routes above take precedence
    app.mount("/", mcp_app)

    return app


app = create_app()


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def run() -> None:
    """Run the tool server with uvicorn."""
    import uvicorn

    settings = get_settings()
    port = settings.PORT or DEFAULT_PORT

    logger.info(f"🚀 Meme Generator MCP Server running on http://localhost:{port}")
    logger.info(f"📍 MCP endpoint: http://localhost:{port}{MCP_ENDPOINT}")
    logger.info(f"🏥 Health check: http://localhost:{port}/")

    uvicorn.run(
        "meme_agent.tool_server:app",
        host=settings.HOST,
        port=port,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
