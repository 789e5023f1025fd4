"""Provider Registry for managing provider instances.

Providers are constructed once at startup from the static catalog and looked
up by id at call time.
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Type
import logging

from ..errors import ProviderNotFoundError
from ..types import ProviderConfig
from .base import LLMProvider
from .catalog import PROVIDER_CLASSES, PROVIDER_CONFIGS, IMAGE_PROVIDER_IDS
from .default_provider import DefaultProvider

if TYPE_CHECKING:
    from ..image_generation import OpenAICompatibleImageClient
    from ..transport import HttpTransport

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for managing provider instances.

    The registry allows registration and retrieval of chat providers and
    image generation clients by provider id.
    """

    def __init__(self) -> None:
        """Initialize an empty provider registry."""
        self._providers: Dict[str, LLMProvider] = {}
        self._provider_classes: Dict[str, Type[LLMProvider]] = dict(PROVIDER_CLASSES)
        self._image_clients: Dict[str, "OpenAICompatibleImageClient"] = {}

    def register_provider_class(
        self,
        provider_id: str,
        provider_class: Type[LLMProvider],
    ) -> None:
        """Register the variant used for a provider id.

        Args:
            provider_id: Provider id this class serves.
            provider_class: The provider class to register.
        """
        self._provider_classes[provider_id] = provider_class
        logger.info(f"Registered provider class for {provider_id}: {provider_class.__name__}")

    def create_provider(self, config: ProviderConfig) -> LLMProvider:
        """Create a provider instance for ``config``.

        Ids without a registered class get ``DefaultProvider``.
        """
        provider_class = self._provider_classes.get(config.id, DefaultProvider)
        provider = provider_class(config)
        logger.debug(f"Created provider instance: {provider!r}")
        return provider

    def register_provider(self, provider: LLMProvider) -> None:
        """Register a provider instance.

        Args:
            provider: The provider instance to register.
        """
        if provider.id in self._providers:
            logger.warning(f"Replacing registered provider: {provider.id}")
        self._providers[provider.id] = provider
        logger.info(f"Registered provider instance: {provider.id} ({provider.protocol.name})")

    def unregister_provider(self, provider_id: str) -> None:
        """Unregister a provider by id.

        Args:
            provider_id: Id of the provider to unregister.
        """
        if provider_id in self._providers:
            del self._providers[provider_id]
            logger.info(f"Unregistered provider: {provider_id}")

    def get_provider(self, provider_id: str) -> Optional[LLMProvider]:
        """Get a registered provider by id.

        Returns:
            The provider instance, or None if not found.
        """
        return self._providers.get(provider_id)

    def require_provider(self, provider_id: str) -> LLMProvider:
        """Get a registered provider by id.

        Raises:
            ProviderNotFoundError: If the id is not registered.
        """
        provider = self.get_provider(provider_id)
        if provider is None:
            raise ProviderNotFoundError(provider_id)
        return provider

    def list_providers(self) -> List[str]:
        """List ids of all registered providers."""
        return list(self._providers.keys())

    def register_image_client(self, client: "OpenAICompatibleImageClient") -> None:
        """Register an image generation client under its provider id."""
        self._image_clients[client.config.id] = client
        logger.info(f"Registered image client: {client.config.id}")

    def get_image_client(self, provider_id: str) -> Optional["OpenAICompatibleImageClient"]:
        return self._image_clients.get(provider_id)

    def require_image_client(self, provider_id: str) -> "OpenAICompatibleImageClient":
        """Get a registered image client by provider id.

        Raises:
            ProviderNotFoundError: If no image client is registered for the id.
        """
        client = self.get_image_client(provider_id)
        if client is None:
            raise ProviderNotFoundError(provider_id)
        return client

    def list_image_providers(self) -> List[str]:
        return list(self._image_clients.keys())


def build_default_registry(transport: Optional["HttpTransport"] = None) -> ProviderRegistry:
    """Build a registry holding every catalog vendor.

    Args:
        transport: Transport shared by the image clients.
    """
    from ..image_generation import create_image_client

    registry = ProviderRegistry()
    for config in PROVIDER_CONFIGS:
        registry.register_provider(registry.create_provider(config))
        if config.id in IMAGE_PROVIDER_IDS:
            registry.register_image_client(create_image_client(config, transport))
    return registry


# Global registry instance
_registry: Optional[ProviderRegistry] = None


def get_registry() -> ProviderRegistry:
    """Get the global provider registry instance.

    Builds the default registry if it doesn't exist.

    Returns:
        The global ProviderRegistry instance.
    """
    global _registry
    if _registry is None:
        _registry = build_default_registry()
        logger.info("Initialized global provider registry")
    return _registry


def reset_registry() -> None:
    """Reset the global registry (useful for testing)."""
    global _registry
    _registry = None
    logger.info("Reset global provider registry")
