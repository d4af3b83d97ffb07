"""Image generation provider types

Shared request/result models, the provider interface and the error
hierarchy used by every image generation backend.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


ImageSize = Literal["1024x1024", "1792x1024", "1024x1792"]
ProviderSpeed = Literal["fast", "medium", "slow"]

SUPPORTED_SIZES: List[str] = ["1024x1024", "1792x1024", "1024x1792"]


class GenerateOptions(BaseModel):
    """Options for a single generation request"""
    prompt: str = Field(..., min_length=1, description="Text prompt")
    reference_image_urls: List[str] = Field(default_factory=list, description="Attached reference images")
    context_text: Optional[str] = Field(None, description="Video context notes")
    seed: Optional[int] = Field(None, description="Seed for reproducibility")
    image_count: int = Field(1, description="Number of images to generate (clamped to 1-4)")

    # Provider-specific options
    ip_adapter_scale: Optional[float] = Field(None, ge=0.0, le=1.0, description="FLUX reference strength")
    strength: Optional[float] = Field(None, ge=0.0, le=1.0, description="img2img change strength")
    size: Optional[ImageSize] = Field(None, description="Output size")
    quality: Literal["standard", "hd"] = Field("standard", description="Output quality")

    def clamped_count(self, maximum: int = 4) -> int:
        return min(max(1, self.image_count), maximum)


class GeneratedImage(BaseModel):
    url: str
    revised_prompt: Optional[str] = None
    seed: Optional[int] = None


class GenerateResult(BaseModel):
    images: List[GeneratedImage] = Field(default_factory=list)
    model: str
    provider: str


class ProviderCapabilities(BaseModel):
    supports_image_reference: bool = Field(..., description="Reference images are passed to the model directly")
    max_reference_images: int = Field(..., ge=0)
    max_output_images: int = Field(..., ge=1)
    supported_sizes: List[str] = Field(default_factory=lambda: list(SUPPORTED_SIZES))


class ProviderInfo(BaseModel):
    """Static description of a provider"""
    id: str = Field(..., description="Registry id, e.g. fal-flux-turbo")
    name: str = Field(..., description="Display name")
    provider: str = Field(..., description="Backend vendor, e.g. fal")
    cost: str = Field(..., description="Approximate price per image")
    speed: ProviderSpeed
    capabilities: ProviderCapabilities
    env_key: str = Field(..., description="Environment variable holding the API key")


class ImageGenerationProvider(ABC):
    """Interface every image generation backend implements"""

    info: ProviderInfo

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the provider has an API key available"""

    @abstractmethod
    async def generate(self, options: GenerateOptions) -> GenerateResult:
        """Generate images for ``options``"""

    async def close(self) -> None:
        """Release network resources held by the provider"""


# ==================== Errors ====================

class ImageGenerationError(Exception):
    """Base error for the image generation layer"""

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class UnknownProviderError(ImageGenerationError):
    def __init__(self, provider_id: str):
        super().__init__(f"Unknown provider: {provider_id}", provider=provider_id)
        self.provider_id = provider_id


class NoProviderConfiguredError(ImageGenerationError):
    def __init__(self):
        super().__init__(
            "No image generation providers are configured. Please set FAL_KEY or OPENAI_API_KEY."
        )


class ProviderNotConfiguredError(ImageGenerationError):
    def __init__(self, provider_id: str, env_key: str):
        super().__init__(
            f"Provider {provider_id} is not configured. Missing API key ({env_key}).",
            provider=provider_id
        )
        self.provider_id = provider_id
        self.env_key = env_key


class ProviderError(ImageGenerationError):
    """A provider call failed or returned an unusable response"""

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message, provider=provider)
        self.status_code = status_code
        self.response = response
        self.original_error = original_error
