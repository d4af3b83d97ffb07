"""Provider registry - selects image generation backends by id

Every provider is described statically here; instances are created lazily
on first use and cached for the life of the process.
"""
import logging
from typing import Callable, Dict, List, NamedTuple

from services.image_generation.providers import (
    FAL_FLUX_PRO_INFO,
    FAL_FLUX_TURBO_INFO,
    OPENAI_DALLE3_INFO,
    FalFluxProProvider,
    FalFluxTurboProvider,
    OpenAIProvider,
)
from services.image_generation.providers.base import resolve_api_key
from services.image_generation.types import (
    ImageGenerationProvider,
    ProviderInfo,
    UnknownProviderError,
)


logger = logging.getLogger(__name__)


class ProviderRegistryEntry(NamedTuple):
    info: ProviderInfo
    factory: Callable[[], ImageGenerationProvider]

    @property
    def id(self) -> str:
        return self.info.id

    @property
    def env_key(self) -> str:
        return self.info.env_key


PROVIDER_REGISTRY: Dict[str, ProviderRegistryEntry] = {
    OPENAI_DALLE3_INFO.id: ProviderRegistryEntry(OPENAI_DALLE3_INFO, OpenAIProvider),
    FAL_FLUX_TURBO_INFO.id: ProviderRegistryEntry(FAL_FLUX_TURBO_INFO, FalFluxTurboProvider),
    FAL_FLUX_PRO_INFO.id: ProviderRegistryEntry(FAL_FLUX_PRO_INFO, FalFluxProProvider),
}

DEFAULT_MODEL = FAL_FLUX_TURBO_INFO.id

_provider_cache: Dict[str, ImageGenerationProvider] = {}


def is_key_configured(env_key: str) -> bool:
    return bool(resolve_api_key(env_key))


def get_provider(provider_id: str) -> ImageGenerationProvider:
    """
    Get a provider instance by id.

    Raises:
        UnknownProviderError: If the id is not in the registry
    """
    entry = PROVIDER_REGISTRY.get(provider_id)
    if entry is None:
        raise UnknownProviderError(provider_id)

    provider = _provider_cache.get(provider_id)
    if provider is None:
        logger.info(f"Creating image provider instance: {provider_id}")
        provider = entry.factory()
        _provider_cache[provider_id] = provider

    return provider


def get_available_providers() -> List[ProviderInfo]:
    """Providers whose API key is configured, in registry order"""
    return [
        entry.info
        for entry in PROVIDER_REGISTRY.values()
        if is_key_configured(entry.env_key)
    ]


def get_default_provider_id() -> str:
    """The default model if configured, else the first available, else the default anyway"""
    if is_key_configured(PROVIDER_REGISTRY[DEFAULT_MODEL].env_key):
        return DEFAULT_MODEL

    available = get_available_providers()
    if available:
        return available[0].id

    return DEFAULT_MODEL


def has_any_provider() -> bool:
    return len(get_available_providers()) > 0


async def clear_provider_cache() -> None:
    """Close and forget every cached provider instance"""
    providers = list(_provider_cache.values())
    _provider_cache.clear()
    for provider in providers:
        await provider.close()
