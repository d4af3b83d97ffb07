"""Placeholder images for development without API keys"""
import secrets
import time

from config.settings import settings
from services.image_generation.types import GeneratedImage, GenerateResult


def mock_seed(prefix: str = "") -> str:
    seed = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
    return f"{prefix}-{seed}" if prefix else seed


def mock_image_url(seed: str, width: int = None, height: int = None) -> str:
    width = width or settings.mock_image_width
    height = height or settings.mock_image_height
    return f"{settings.mock_image_base_url}/{seed}/{width}/{height}"


def generate_mock_images(count: int = 1) -> GenerateResult:
    """Return ``count`` unique picsum placeholders sized for TikTok portrait (9:16)"""
    images = [
        GeneratedImage(url=mock_image_url(mock_seed(str(i))))
        for i in range(max(0, count))
    ]
    return GenerateResult(images=images, model="mock", provider="mock")
