"""Image generation provider implementations"""
from services.image_generation.providers.fal_provider import (
    FAL_FLUX_PRO_INFO,
    FAL_FLUX_TURBO_INFO,
    FalFluxProProvider,
    FalFluxTurboProvider,
)
from services.image_generation.providers.mock_provider import generate_mock_images
from services.image_generation.providers.openai_provider import OPENAI_DALLE3_INFO, OpenAIProvider

__all__ = [
    "FAL_FLUX_PRO_INFO",
    "FAL_FLUX_TURBO_INFO",
    "OPENAI_DALLE3_INFO",
    "FalFluxProProvider",
    "FalFluxTurboProvider",
    "OpenAIProvider",
    "generate_mock_images",
]
