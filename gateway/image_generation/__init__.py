"""Image generation adapters."""

from typing import Dict, Optional, Type

from ..transport import HttpTransport
from ..types import ProviderConfig
from .openai_compatible import OpenAICompatibleImageClient
from .types import GeneratedImage
from .volcengine import VolcengineImageClient

IMAGE_CLIENT_CLASSES: Dict[str, Type[OpenAICompatibleImageClient]] = {
    "volcengine": VolcengineImageClient,
}


def create_image_client(
    config: ProviderConfig,
    transport: Optional[HttpTransport] = None,
) -> OpenAICompatibleImageClient:
    """Instantiate the image adapter for ``config``."""
    client_class = IMAGE_CLIENT_CLASSES.get(config.id, OpenAICompatibleImageClient)
    return client_class(config, transport)


__all__ = [
    "GeneratedImage",
    "OpenAICompatibleImageClient",
    "VolcengineImageClient",
    "create_image_client",
]
