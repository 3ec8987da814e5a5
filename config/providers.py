"""Model provider configuration and registry."""

import os
from dataclasses import dataclass
from typing import Optional

from .defaults import DEFAULT_MODEL_PROVIDERS


@dataclass
class ModelProvider:
    """Represents a model provider configuration.

    Attributes:
        id: Unique identifier for the provider
        name: Human-readable name
        base_url: Base URL for API requests
        env_key: Environment variable name for API key (None for local providers)
    """
    id: str
    name: str
    base_url: str
    env_key: Optional[str] = None

    def get_api_key(self) -> Optional[str]:
        """Get API key from environment variable."""
        if self.env_key:
            return os.environ.get(self.env_key)
        return None

    def is_local(self) -> bool:
        """Check if provider is local (no API key needed)."""
        return self.env_key is None

    def is_configured(self) -> bool:
        """A provider is usable when it is local or its API key is set."""
        return self.is_local() or bool(self.get_api_key())


class ProviderRegistry:
    """Registry of known model providers."""

    def __init__(self) -> None:
        self._providers: dict[str, ModelProvider] = {
            provider_id: ModelProvider(id=provider_id, **config)
            for provider_id, config in DEFAULT_MODEL_PROVIDERS.items()
        }

    def register(self, provider: ModelProvider) -> None:
        self._providers[provider.id] = provider

    def get(self, provider_id: str) -> Optional[ModelProvider]:
        return self._providers.get(provider_id)

    def list_providers(self) -> list[ModelProvider]:
        return list(self._providers.values())


# Global registry instance
provider_registry = ProviderRegistry()
