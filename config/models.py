"""
Model registry.

Lists the models an agent can run on. A model is available when its
provider is configured: local providers always are, hosted providers need
their API key in the environment.
"""

import logging
from typing import Any

from core.exceptions import CoreError
from core.lifecycle import format_model_name
from core.models import ModelInfo

from .defaults import AVAILABLE_MODELS, DEFAULT_MODEL
from .providers import ProviderRegistry, provider_registry

logger = logging.getLogger(__name__)


def format_model_info(model: dict[str, Any]) -> ModelInfo:
    return ModelInfo(
        provider=model["provider"],
        modelId=model["id"],
        name=format_model_name(model["provider"], model["id"]),
    )


class ModelRegistry:
    """Available models filtered by provider configuration."""

    def __init__(
        self,
        models: list[dict[str, Any]] | None = None,
        providers: ProviderRegistry | None = None,
        preferred_model: str = DEFAULT_MODEL,
    ) -> None:
        self.models = models if models is not None else AVAILABLE_MODELS
        self.providers = providers or provider_registry
        self.preferred_model = preferred_model

    def get_available(self) -> list[ModelInfo]:
        available = []
        for model in self.models:
            provider = self.providers.get(model["provider"])
            if provider is not None and provider.is_configured():
                available.append(format_model_info(model))
        return available

    def find(self, provider: str, model: str) -> ModelInfo | None:
        for info in self.get_available():
            if info.provider == provider and info.modelId == model:
                return info
        return None

    def get_default_model(self) -> ModelInfo:
        """
        Pick the model new agents use when none is given.

        Raises:
            CoreError: If no provider is configured
        """
        available = self.get_available()
        for info in available:
            if info.modelId == self.preferred_model:
                return info
        if available:
            logger.debug("Preferred model %s unavailable, using %s", self.preferred_model, available[0].name)
            return available[0]
        raise CoreError("No models available - configure API keys first")
