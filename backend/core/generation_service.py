"""
Generation service - turns a prompt on a frame, context or main chat into a
message with generated images.

Uses the configured image provider when one is available and falls back to
placeholder images otherwise (or, when enabled, after a provider failure).
"""
import asyncio
import uuid
from typing import List, Optional

import httpx

from backend.config import settings
from backend.core.exceptions import (
    APIException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from backend.core.models import GenerateRequest, GenerationStatusResponse, MessageView
from backend.core.storage import InMemoryStore
from backend.core.views import message_view
from backend.models.storyboard_models import Image, ImageRelation
from backend.utils.logger import get_logger
from services.image_generation import (
    PROVIDER_REGISTRY,
    GenerateOptions,
    GenerateResult,
    ImageGenerationError,
    ProviderNotConfiguredError,
    generate_images,
    generate_mock_images,
    get_available_providers,
    get_default_provider_id,
    should_use_mock,
)

logger = get_logger(__name__)

OWNER_LABELS = {
    ImageRelation.FRAME: "Frame",
    ImageRelation.CONTEXT: "Context",
    ImageRelation.MAIN_CHAT: "Main chat",
}


class GenerationService:
    """Generates images for message threads and records the results in the store"""

    def __init__(self, store: InMemoryStore):
        self.store = store

    def _resolve_owner(self, owner_type: ImageRelation, owner_id: str, with_context: bool):
        """
        Check the owner exists and find the context text to send along.

        Returns:
            Tuple of (relation owner id, context text or None)
        """
        if owner_type == ImageRelation.FRAME:
            frame = self.store.get_frame(owner_id)
            if frame is None:
                raise NotFoundException("Frame", owner_id)
            context = self.store.get_context_for_video(frame.video_id) if with_context else None
            return frame.id, context.content if context else None

        if owner_type == ImageRelation.CONTEXT:
            # Context threads are addressed by video id
            if self.store.get_video(owner_id) is None:
                raise NotFoundException("Video", owner_id)
            context = self.store.get_context_for_video(owner_id)
            if context is None:
                raise NotFoundException("Context", owner_id)
            return context.id, context.content

        if owner_type == ImageRelation.MAIN_CHAT:
            main_chat = self.store.get_main_chat(owner_id)
            if main_chat is None:
                raise NotFoundException("Main chat", owner_id)
            context = self.store.get_context_for_video(main_chat.video_id) if with_context else None
            return main_chat.id, context.content if context else None

        raise ValidationException(f"Cannot generate images for {owner_type}", field="owner_type")

    async def _run_generation(self, options: GenerateOptions, model: Optional[str]) -> GenerateResult:
        count = options.image_count

        if should_use_mock():
            logger.info(f"No image provider configured, using mock images | count={count}")
            if settings.mock_generation_delay > 0:
                await asyncio.sleep(settings.mock_generation_delay)
            return generate_mock_images(count)

        try:
            result = await generate_images(options, model)
            logger.info(
                f"Generated {len(result.images)} images | provider={result.provider} | model={result.model}"
            )
            return result

        except ProviderNotConfiguredError as e:
            raise APIException(
                message=e.message,
                error_code="PROVIDER_NOT_CONFIGURED",
                status_code=400,
                details={"provider": e.provider_id, "env_key": e.env_key}
            )

        except (ImageGenerationError, httpx.HTTPError) as e:
            provider_id = getattr(e, "provider", None) or model or get_default_provider_id()
            logger.error(f"Image generation failed | provider={provider_id} | error={e}")

            if not settings.mock_fallback_on_error:
                raise ServiceException(
                    message=str(e),
                    service_name=provider_id,
                    retryable=True,
                    original_error=e
                )

            logger.warning("Falling back to mock images")
            return generate_mock_images(count)

    async def generate(
        self,
        owner_type: ImageRelation,
        owner_id: str,
        request: GenerateRequest
    ) -> MessageView:
        """
        Generate images for a frame, context thread or main chat.

        Args:
            owner_type: frame, context or mainChat
            owner_id: Frame id, video id (for the context thread) or main chat id
            request: Prompt and generation options

        Returns:
            The new message with its images and attached images
        """
        owner_type = ImageRelation(owner_type)
        with_context = request.with_context or owner_type == ImageRelation.CONTEXT
        relation_id, context_text = self._resolve_owner(owner_type, owner_id, with_context)

        prompt = (request.prompt or "").strip()
        if not prompt:
            raise ValidationException("Prompt is required", field="prompt")

        if request.model and request.model not in PROVIDER_REGISTRY:
            raise ValidationException(f"Unknown model: {request.model}", field="model")

        attached: List[Image] = self.store.resolve_images(request.context_image_ids)
        options = GenerateOptions(
            prompt=prompt,
            reference_image_urls=[img.url for img in attached],
            context_text=context_text if context_text and context_text.strip() else None,
            seed=request.seed,
            image_count=settings.generated_images_per_prompt,
            ip_adapter_scale=request.ip_adapter_scale,
        )

        logger.info(
            f"Generating images | owner={owner_type.value}:{relation_id} | "
            f"references={len(attached)} | model={request.model or 'default'}"
        )
        result = await self._run_generation(options, request.model)

        with self.store.transaction():
            # The owner may have been deleted while the provider was running
            if not self.store.relation_owner_exists(owner_type, relation_id):
                logger.warning(
                    f"Discarding {len(result.images)} generated images | "
                    f"owner={owner_type.value}:{relation_id} was deleted"
                )
                raise NotFoundException(OWNER_LABELS[owner_type], owner_id)

            message = self.store.create_message(
                owner_type,
                relation_id,
                prompt=prompt,
                with_context=request.with_context,
                attached_image_ids=request.context_image_ids,
                model=result.model,
                provider=result.provider,
            )
            for generated in result.images:
                image = self.store.create_image(
                    url=generated.url,
                    message_id=message.id,
                    storage_id=None if result.provider == "mock" else f"{result.provider}-{uuid.uuid4().hex[:12]}"
                )
                self.store.add_image_to_target(image.id, owner_type, relation_id)

            return message_view(self.store, message)


def upload_mock_image(store: InMemoryStore, owner_type: ImageRelation, owner_id: str) -> Image:
    """Create a placeholder 'uploaded' image and add it to a collection"""
    with store.transaction():
        image = store.create_image()
        store.add_image_to_target(image.id, owner_type, owner_id)
    logger.info(f"Uploaded mock image {image.id} to {ImageRelation(owner_type).value}:{owner_id}")
    return image


def generation_status() -> GenerationStatusResponse:
    providers = [info.id for info in get_available_providers()]
    mock = not providers
    default_model = None if mock else get_default_provider_id()
    return GenerationStatusResponse(
        mode="mock" if mock else default_model,
        mock=mock,
        providers=providers,
        default_model=default_model,
    )
