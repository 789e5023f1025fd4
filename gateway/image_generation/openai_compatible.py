"""Image generation against OpenAI-shaped ``/images/generations`` endpoints."""

import logging
from typing import Any, Dict, List, Optional

from ..config import get_settings
from ..errors import ResponseParseError, excerpt
from ..providers.base import BaseProvider, ProviderContext
from ..schemas import ImageGenerationRequest
from ..transport import HttpTransport
from ..types import ProviderConfig
from .types import DEFAULT_IMAGE_MIME_TYPE, GeneratedImage

logger = logging.getLogger(__name__)

IMAGES_PATH = "/images/generations"


class OpenAICompatibleImageClient:
    """Request/response image adapter.

    Follows the same credential and base URL resolution as chat providers,
    but does not go through a protocol strategy since nothing is streamed.
    """

    vendor_label = "Image"

    def __init__(self, config: ProviderConfig, transport: Optional[HttpTransport] = None):
        self.config = config
        self.base = BaseProvider(config)
        self._transport = transport

    @property
    def transport(self) -> HttpTransport:
        if self._transport is None:
            self._transport = HttpTransport()
        return self._transport

    def build_body(self, model: str, request: ImageGenerationRequest) -> Dict[str, Any]:
        body: Dict[str, Any] = {"model": model, "prompt": request.prompt}
        for key in ("size", "quality", "n", "response_format"):
            value = getattr(request, key)
            if value is not None:
                body[key] = value
        return body

    def parse_response(self, payload: Any) -> List[GeneratedImage]:
        """Convert a vendor reply into normalized images.

        Raises:
            ResponseParseError: If the reply has no ``data`` list.
        """
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise ResponseParseError(
                f"{self.vendor_label} response has no 'data' list: {excerpt(str(payload))}",
                self.config.id,
                raw=str(payload),
            )

        images = []
        for item in data:
            if not isinstance(item, dict):
                raise ResponseParseError(
                    f"Unexpected {self.vendor_label} image entry: {excerpt(str(item))}",
                    self.config.id,
                    raw=str(item),
                )
            images.append(GeneratedImage(
                b64_json=item.get("b64_json"),
                url=item.get("url"),
                mime_type=DEFAULT_IMAGE_MIME_TYPE,
                revised_prompt=item.get("revised_prompt"),
            ))
        return images

    async def generate(
        self,
        ctx: ProviderContext,
        model: str,
        request: ImageGenerationRequest,
    ) -> List[GeneratedImage]:
        """Generate images.

        Credentials are resolved before anything touches the network.

        Raises:
            CredentialMissingError: If no API key is configured.
            EndpointUnresolvedError: If no base URL is usable.
            UpstreamError: On a non-success response.
            ResponseParseError: If the reply cannot be normalized.
        """
        credentials = await self.base.require_credentials(ctx.credential_store)
        base_url = await self.base.resolve_base_url_with_fallback(ctx.settings)
        url = f"{base_url}{IMAGES_PATH}"

        headers = {"Content-Type": "application/json"}
        token = getattr(credentials, "token", None)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.info(f"Generating image with {self.config.id} model {model}")
        payload = await self.transport.post_json(
            url,
            headers,
            self.build_body(model, request),
            self.config.id,
            timeout=get_settings().image_timeout,
        )
        images = self.parse_response(payload)
        logger.info(f"{self.vendor_label} returned {len(images)} image(s)")
        return images
