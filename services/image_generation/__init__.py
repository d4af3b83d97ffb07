"""Image generation service

Entry point for image generation: picks a provider (explicit id or the
configured default) and delegates to it, or produces mock placeholders
when no provider is configured.
"""
from typing import Optional

from services.image_generation.providers.mock_provider import generate_mock_images
from services.image_generation.registry import (
    DEFAULT_MODEL,
    PROVIDER_REGISTRY,
    clear_provider_cache,
    get_available_providers,
    get_default_provider_id,
    get_provider,
    has_any_provider,
    is_key_configured,
)
from services.image_generation.types import (
    GeneratedImage,
    GenerateOptions,
    GenerateResult,
    ImageGenerationError,
    ImageGenerationProvider,
    NoProviderConfiguredError,
    ProviderError,
    ProviderInfo,
    ProviderNotConfiguredError,
    UnknownProviderError,
)


async def generate_images(
    options: GenerateOptions,
    provider_id: Optional[str] = None
) -> GenerateResult:
    """
    Generate images with ``provider_id`` or the default provider.

    Raises:
        NoProviderConfiguredError: If no provider has an API key
        UnknownProviderError: If ``provider_id`` is not registered
        ProviderNotConfiguredError: If the chosen provider has no API key
        ProviderError: If the provider call fails
    """
    if not has_any_provider():
        raise NoProviderConfiguredError()

    actual_provider_id = provider_id or get_default_provider_id()
    provider = get_provider(actual_provider_id)

    if not provider.is_configured():
        raise ProviderNotConfiguredError(actual_provider_id, provider.info.env_key)

    return await provider.generate(options)


def should_use_mock() -> bool:
    """Mock generation is used when no provider is configured"""
    return not has_any_provider()


__all__ = [
    "DEFAULT_MODEL",
    "PROVIDER_REGISTRY",
    "GeneratedImage",
    "GenerateOptions",
    "GenerateResult",
    "ImageGenerationError",
    "ImageGenerationProvider",
    "NoProviderConfiguredError",
    "ProviderError",
    "ProviderInfo",
    "ProviderNotConfiguredError",
    "UnknownProviderError",
    "clear_provider_cache",
    "generate_images",
    "generate_mock_images",
    "get_available_providers",
    "get_default_provider_id",
    "get_provider",
    "has_any_provider",
    "is_key_configured",
    "should_use_mock",
]
