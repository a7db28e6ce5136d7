"""
Meme generation API routes.

This module defines the REST API endpoints of the agent supervisor.
The supervisor acts purely as an orchestrator:
1. Caller (feeling) -> Supervisor
2. Supervisor -> emotion agent (1-line summary)
3. Supervisor -> meme agent -> Imgflip MCP tool (meme URL)
4. Supervisor -> Caller (summary + meme URL)
"""

import logging
from typing import Annotated

import openai
from fastapi import APIRouter, Depends, HTTPException, status

from meme_agent.config import Settings, get_settings
from meme_agent.schemas.meme import (
    ErrorResponse,
    MemeGenerateRequest,
    MemeGenerateResponse,
)
from meme_agent.services.agents import AgentConfigurationError, AgentError
from meme_agent.services.meme_tool import MemeToolError
from meme_agent.services.supervisor import MemeAgentService, get_meme_agent_service

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["meme"])


@router.post(
    "/generate-meme",
    response_model=MemeGenerateResponse,
    status_code=status.HTTP_200_OK,
    responses={
        200: {
            "description": "Successfully generated meme",
            "model": MemeGenerateResponse,
        },
        400: {
            "description": "Invalid request (missing or non-string 'feeling')",
            "model": ErrorResponse,
        },
        502: {
            "description": "Meme tool or agent error",
            "model": ErrorResponse,
        },
        503: {
            "description": "Service unavailable (OpenAI unreachable or not configured)",
            "model": ErrorResponse,
        },
    },
    summary="Generate a meme from a feeling",
    description="""
    Turn a free-text feeling into an emotion summary and a matching meme.

    The supervisor agent first asks the emotion agent for a 1-line summary,
    then asks the meme agent to pick an Imgflip template and caption it.
    """,
)
@router.post(
    "/api/v1/generate-meme",
    response_model=MemeGenerateResponse,
    include_in_schema=False,
)
async def generate_meme(
    request: MemeGenerateRequest,
    service: Annotated[MemeAgentService, Depends(get_meme_agent_service)],
) -> MemeGenerateResponse:
    """
    Generate a meme from the caller's feeling.

    Raises:
        HTTPException: On agent, tool or OpenAI errors
    """
    logger.info(f"Received meme generation request. Feeling length: {len(request.feeling)} chars")

    try:
        return await service.generate(request.feeling)

    except AgentConfigurationError as e:
        logger.error(f"Agent configuration error: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "agent_configuration_error",
                "message": str(e),
                "details": {"action": "Set OPENAI_API_KEY in your .env file"},
            },
        )

    except (openai.APIConnectionError, openai.AuthenticationError) as e:
        logger.error(f"OpenAI connection error: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "openai_connection_error",
                "message": str(e),
                "details": {
                    "service": "OpenAI",
                    "action": "Check OPENAI_API_KEY and network connectivity",
                },
            },
        )

    except MemeToolError as e:
        logger.error(f"Meme tool error: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": "meme_tool_error",
                "message": str(e),
                "details": {"service": "Imgflip MCP server"},
            },
        )

    except (AgentError, openai.OpenAIError) as e:
        logger.error(f"Agent error: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": "agent_error",
                "message": str(e),
                "details": {"service": "OpenAI"},
            },
        )


@router.get(
    "/api/v1/health",
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Check if the supervisor is running.",
)
async def health_check(settings: Annotated[Settings, Depends(get_settings)]):
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "meme-agent-supervisor",
        "version": settings.APP_VERSION,
    }


@router.get(
    "/api/v1/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Check if the supervisor has everything it needs to accept requests.",
)
async def readiness_check(settings: Annotated[Settings, Depends(get_settings)]):
    """
    Readiness check that verifies configuration is loaded.

    Returns:
        dict: Readiness status with configuration info
    """
    missing = settings.missing_agent_settings()

    return {
        "status": "ready" if not missing else "not_ready",
        "configuration": {
            "openai_api_key_configured": bool(settings.OPENAI_API_KEY),
            "imgflip_credentials_configured": bool(
                settings.IMGFLIP_USERNAME and settings.IMGFLIP_PASSWORD
            ),
            "mcp_server_url": settings.MCP_SERVER_URL,
            "model": settings.OPENAI_MODEL,
        },
        "warnings": [f"{name} is not configured" for name in missing],
    }
