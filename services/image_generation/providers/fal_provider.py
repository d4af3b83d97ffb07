"""FAL FLUX providers

Reference images are passed straight to the model (IP-Adapter style), which
keeps characters and style consistent across frames.
"""
from typing import Any, Dict, List, Optional

from config.settings import settings
from services.image_generation.providers.base import HTTPImageProvider
from services.image_generation.types import (
    GeneratedImage,
    GenerateOptions,
    GenerateResult,
    ProviderCapabilities,
    ProviderError,
    ProviderInfo,
)


FAL_FLUX_TURBO_INFO = ProviderInfo(
    id="fal-flux-turbo",
    name="FLUX.2 Turbo (Fast & Cheap)",
    provider="fal",
    cost="$0.008/image",
    speed="fast",
    capabilities=ProviderCapabilities(
        supports_image_reference=True,
        max_reference_images=1,
        max_output_images=4,
    ),
    env_key="FAL_KEY",
)

FAL_FLUX_PRO_INFO = ProviderInfo(
    id="fal-flux-pro",
    name="FLUX.2 Pro (Best Quality)",
    provider="fal",
    cost="$0.03/image",
    speed="medium",
    capabilities=ProviderCapabilities(
        supports_image_reference=True,
        max_reference_images=9,
        max_output_images=1,
    ),
    env_key="FAL_KEY",
)

DEFAULT_IP_ADAPTER_SCALE = 0.7


def to_fal_size(size: Optional[str]) -> str:
    """Map a WxH size onto a FAL image_size preset (portrait 9:16 by default)"""
    if size == "1024x1024":
        return "square_hd"
    if size == "1792x1024":
        return "landscape_16_9"
    return "portrait_16_9"


def with_context(prompt: str, context_text: Optional[str]) -> str:
    if context_text and context_text.strip():
        return f"{prompt}\n\nContext: {context_text}"
    return prompt


def image_urls(output: Dict[str, Any]) -> List[str]:
    """URLs of the well-formed entries in a FAL ``images`` list"""
    return [
        img["url"] for img in output["images"]
        if isinstance(img, dict) and isinstance(img.get("url"), str) and img["url"]
    ]


class FalProvider(HTTPImageProvider):
    """Common FAL request handling"""

    endpoint: str = ""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        super().__init__(api_key=api_key, base_url=base_url or settings.fal_base_url)

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Key {self.api_key}"}

    async def _run(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        result = await self._post_json(self.endpoint, payload)
        if not isinstance(result.get("images"), list):
            raise ProviderError(
                f"{self.info.id} response has no images",
                provider=self.info.id,
                response=result
            )
        return result


class FalFluxTurboProvider(FalProvider):
    """FLUX Turbo: up to 4 images per call, one reference image"""

    info = FAL_FLUX_TURBO_INFO

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        super().__init__(api_key=api_key, base_url=base_url)
        self.endpoint = settings.fal_flux_turbo_endpoint

    def build_payload(self, options: GenerateOptions) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "prompt": with_context(options.prompt, options.context_text),
            "image_size": to_fal_size(options.size),
            "num_inference_steps": 8,
            "num_images": options.clamped_count(),
            "enable_safety_checker": True,
            "output_format": "png",
        }

        if options.reference_image_urls:
            payload["image_url"] = options.reference_image_urls[0]

        if options.seed is not None:
            payload["seed"] = options.seed

        return payload

    async def generate(self, options: GenerateOptions) -> GenerateResult:
        self._require_key()
        payload = self.build_payload(options)
        self.logger.info(
            f"Generating {payload['num_images']} image(s) with FLUX Turbo | "
            f"references={len(options.reference_image_urls)}"
        )

        output = await self._run(payload)
        images = [GeneratedImage(url=url, seed=output.get("seed")) for url in image_urls(output)]

        if not images:
            raise ProviderError("Failed to generate any images", provider=self.info.id)

        return GenerateResult(images=images, model="flux-turbo", provider="fal")


class FalFluxProProvider(FalProvider):
    """FLUX Pro: one image per call, up to 9 reference images"""

    info = FAL_FLUX_PRO_INFO

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        super().__init__(api_key=api_key, base_url=base_url)
        self.endpoint = settings.fal_flux_pro_endpoint

    def build_payload(self, options: GenerateOptions) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "prompt": with_context(options.prompt, options.context_text),
            "image_size": to_fal_size(options.size),
            "output_format": "png",
            "safety_tolerance": "2",
        }

        references = options.reference_image_urls
        if len(references) == 1:
            payload["ip_adapter_image_url"] = references[0]
            payload["ip_adapter_scale"] = (
                options.ip_adapter_scale
                if options.ip_adapter_scale is not None
                else DEFAULT_IP_ADAPTER_SCALE
            )
        elif references:
            payload["image_urls"] = references[:self.info.capabilities.max_reference_images]

        if options.seed is not None:
            payload["seed"] = options.seed

        return payload

    async def generate(self, options: GenerateOptions) -> GenerateResult:
        self._require_key()
        payload = self.build_payload(options)
        count = options.clamped_count()
        self.logger.info(
            f"Generating {count} image(s) with FLUX Pro | "
            f"references={len(options.reference_image_urls)}"
        )

        images: List[GeneratedImage] = []
        for _ in range(count):
            output = await self._run(payload)
            urls = image_urls(output)
            if urls:
                images.append(GeneratedImage(url=urls[0], seed=output.get("seed")))

        if not images:
            raise ProviderError("Failed to generate any images", provider=self.info.id)

        return GenerateResult(images=images, model="flux-pro", provider="fal")
