"""OpenAI DALL-E 3 provider

Text-to-image only. When reference images are attached they are first
described by a vision chat model and the description is appended to the
prompt, since DALL-E 3 cannot take images as input.
"""
from typing import List, Optional

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


OPENAI_DALLE3_INFO = ProviderInfo(
    id="openai-dalle3",
    name="DALL-E 3",
    provider="openai",
    cost="$0.04/image",
    speed="medium",
    capabilities=ProviderCapabilities(
        supports_image_reference=False,
        max_reference_images=0,
        max_output_images=1,
    ),
    env_key="OPENAI_API_KEY",
)

REFERENCE_ANALYSIS_PROMPT = (
    "Analyze these reference images and describe their key visual elements "
    "(style, colors, composition, subjects) in 2-3 sentences. "
    "This will be used to guide image generation."
)

DEFAULT_SIZE = "1792x1024"


class OpenAIProvider(HTTPImageProvider):
    """DALL-E 3 over the OpenAI REST API"""

    info = OPENAI_DALLE3_INFO

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        super().__init__(api_key=api_key, base_url=base_url or settings.openai_base_url)

    async def analyze_images(self, image_urls: List[str], prompt: str) -> str:
        """
        Describe ``image_urls`` with the vision model.

        Args:
            image_urls: Images to analyze
            prompt: Instruction for the vision model

        Returns:
            The model's description

        Raises:
            ProviderError: If the model returned no content
        """
        content = [{"type": "text", "text": prompt}]
        content.extend({"type": "image_url", "image_url": {"url": url}} for url in image_urls)

        result = await self._post_json(
            "/chat/completions",
            {
                "model": settings.openai_vision_model,
                "messages": [{"role": "user", "content": content}],
                "max_tokens": settings.openai_vision_max_tokens,
            }
        )

        choices = result.get("choices")
        first = choices[0] if isinstance(choices, list) and choices else None
        message = (first.get("message") or {}) if isinstance(first, dict) else {}
        description = message.get("content") if isinstance(message, dict) else None
        if not description or not isinstance(description, str):
            raise ProviderError("No response from vision model", provider=self.info.id, response=result)
        return description

    async def build_prompt(self, options: GenerateOptions) -> str:
        enhanced = options.prompt

        if options.reference_image_urls:
            analysis = await self.analyze_images(options.reference_image_urls, REFERENCE_ANALYSIS_PROMPT)
            enhanced = f"{enhanced}\n\nReference image context: {analysis}"

        if options.context_text and options.context_text.strip():
            enhanced = f"{enhanced}\n\nAdditional context: {options.context_text}"

        return enhanced

    async def generate(self, options: GenerateOptions) -> GenerateResult:
        self._require_key()
        prompt = await self.build_prompt(options)
        count = options.clamped_count()

        self.logger.info(f"Generating {count} image(s) with DALL-E 3 | prompt={prompt[:50]}...")

        # DALL-E 3 only accepts n=1
        images: List[GeneratedImage] = []
        for _ in range(count):
            result = await self._post_json(
                "/images/generations",
                {
                    "model": settings.openai_image_model,
                    "prompt": prompt,
                    "n": 1,
                    "size": options.size or DEFAULT_SIZE,
                    "quality": options.quality,
                }
            )

            data = result.get("data")
            first = data[0] if isinstance(data, list) and data else None
            if isinstance(first, dict) and isinstance(first.get("url"), str) and first["url"]:
                images.append(GeneratedImage(
                    url=first["url"],
                    revised_prompt=first.get("revised_prompt") or prompt,
                ))

        if not images:
            raise ProviderError("Failed to generate any images", provider=self.info.id)

        return GenerateResult(images=images, model="dall-e-3", provider="openai")
