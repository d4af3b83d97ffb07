"""
Image model listing endpoints.
"""
from fastapi import APIRouter

from backend.core.exceptions import NotFoundException
from backend.core.models import ModelDetailResponse, ModelsResponse
from services.image_generation import (
    PROVIDER_REGISTRY,
    get_available_providers,
    get_default_provider_id,
    is_key_configured,
)

router = APIRouter(prefix="/models", tags=["models"])


@router.get("", response_model=ModelsResponse)
async def list_models():
    """
    List the image models that have an API key configured.

    When none are configured every registered model is returned under
    ``all_models`` with a hint about which keys to set.
    """
    available = get_available_providers()

    if not available:
        return ModelsResponse(
            models=[],
            all_models=[entry.info for entry in PROVIDER_REGISTRY.values()],
            default=None,
            message="No image generation providers configured. Set FAL_KEY or OPENAI_API_KEY to enable.",
        )

    return ModelsResponse(models=available, default=get_default_provider_id())


@router.get("/{model_id}", response_model=ModelDetailResponse)
async def get_model(model_id: str):
    """Details of a single model, including whether its key is configured"""
    entry = PROVIDER_REGISTRY.get(model_id)
    if entry is None:
        raise NotFoundException("Model", model_id)

    return ModelDetailResponse(
        **entry.info.model_dump(),
        configured=is_key_configured(entry.env_key),
    )
