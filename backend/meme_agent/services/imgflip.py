"""
Imgflip caption_image API Service.

This module handles all communication with Imgflip's caption_image endpoint,
which renders text onto a meme template and returns a hosted image URL.

The service is responsible for:
1. Forwarding the tool arguments as a form-encoded request
2. Mapping Imgflip failures to typed errors
3. Sanitizing the returned URL before anyone else sees it
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from meme_agent.config import Settings, get_settings
from meme_agent.schemas.meme import CaptionImageRequest, ImgflipCaptionResponse
from meme_agent.services.url_sanitizer import is_absolute_url, sanitize_url

# Configure logging
logger = logging.getLogger(__name__)


class ImgflipServiceError(Exception):
    """Base exception for Imgflip service errors."""
    pass


class ImgflipCredentialsError(ImgflipServiceError):
    """Raised when the caller did not supply Imgflip credentials."""
    pass


class ImgflipConnectionError(ImgflipServiceError):
    """Raised when unable to reach the Imgflip API."""
    pass


class ImgflipResponseError(ImgflipServiceError):
    """Raised when Imgflip returns an error or an unusable response."""
    pass


class ImgflipService:
    """
    Service for generating memes through Imgflip.

    Credentials are pass-through: they arrive with every request and are
    never stored or logged.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the Imgflip service.

        Args:
            settings: Optional settings instance. If not provided, uses default settings.
        """
        self.settings = settings or get_settings()

    @staticmethod
    def _error_message_from(response: httpx.Response) -> Optional[str]:
        """Pull Imgflip's error_message out of an error response body, if any."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict):
            return body.get("error_message")
        return None

    def _parse_response(self, response_data: dict) -> ImgflipCaptionResponse:
        """
        Parse and validate the caption_image response.

        Raises:
            ImgflipResponseError: If the response is malformed or reports failure
        """
        try:
            caption_response = ImgflipCaptionResponse.model_validate(response_data)
        except ValidationError as e:
            logger.error(f"Failed to parse Imgflip response: {e}")
            raise ImgflipResponseError(
                f"Failed to parse Imgflip response: {str(e)}"
            ) from e

        if not caption_response.success:
            error_msg = caption_response.error_message or "Failed to generate meme"
            logger.error(f"Imgflip returned error: {error_msg}")
            raise ImgflipResponseError(error_msg)

        return caption_response

    async def caption_image(self, request: CaptionImageRequest) -> str:
        """
        Generate a meme and return its sanitized image URL.

        Args:
            request: Template ID, text boxes and pass-through credentials

        Returns:
            The sanitized, absolute meme URL

        Raises:
            ImgflipCredentialsError: If username or password is missing
            ImgflipConnectionError: If unable to reach Imgflip
            ImgflipResponseError: If Imgflip fails or returns no usable URL
        """
        if not request.username or not request.password:
            raise ImgflipCredentialsError(
                "Imgflip credentials are required. Please provide username and password."
            )

        logger.info(
            f"Calling Imgflip caption_image for template {request.template_id}"
        )

        try:
            async with httpx.AsyncClient(timeout=self.settings.IMGFLIP_TIMEOUT) as client:
                response = await client.post(
                    self.settings.IMGFLIP_CAPTION_IMAGE_URL,
                    data=request.to_form_data(),
                )

                if response.status_code != 200:
                    upstream_msg = self._error_message_from(response)
                    logger.error(
                        f"Imgflip API returned status {response.status_code}: "
                        f"{response.text[:500]}"
                    )
                    raise ImgflipResponseError(
                        f"Imgflip API error: "
                        f"{upstream_msg or f'status {response.status_code}'}"
                    )

                response_data = response.json()
                logger.debug(f"Imgflip raw response: {response_data}")

        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to Imgflip API: {e}")
            raise ImgflipConnectionError(
                f"Imgflip API error: failed to connect to "
                f"{self.settings.IMGFLIP_CAPTION_IMAGE_URL}"
            ) from e

        except httpx.TimeoutException as e:
            logger.error(f"Imgflip API request timed out: {e}")
            raise ImgflipConnectionError(
                f"Imgflip API error: request timed out after "
                f"{self.settings.IMGFLIP_TIMEOUT} seconds"
            ) from e

        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling Imgflip API: {e}")
            raise ImgflipConnectionError(f"Imgflip API error: {str(e)}") from e

        except ValueError as e:
            raise ImgflipResponseError(
                f"Imgflip API error: response is not valid JSON: {response.text[:200]}"
            ) from e

        caption_response = self._parse_response(response_data)

        meme_url = sanitize_url(caption_response.raw_url)
        if not meme_url or not is_absolute_url(meme_url):
            logger.error(
                f"Could not recover a meme URL from {caption_response.raw_url!r}"
            )
            raise ImgflipResponseError(
                "Failed to extract valid meme URL from API response"
            )

        logger.info(f"Imgflip generated meme: {meme_url}")
        return meme_url
