"""
Image generation API endpoints.

Generation is attached to a thread: a frame, a video's context or a main
chat. Each request records a message and the generated images.
"""
from fastapi import APIRouter, Depends

from backend.api.dependencies import get_storyboard_store, require_frame, require_main_chat
from backend.core.generation_service import GenerationService, generation_status, upload_mock_image
from backend.core.models import GenerateRequest, GenerationStatusResponse, MessageView
from backend.core.storage import InMemoryStore
from backend.models.storyboard_models import Image, ImageRelation

router = APIRouter(tags=["generation"])


@router.post("/frames/{frame_id}/generate", response_model=MessageView, status_code=201)
async def generate_for_frame(
    frame_id: str,
    request: GenerateRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """
    Generate candidate images for a frame.

    **Parameters:**
    - **prompt**: Text description of the shot
    - **with_context**: Append the video's context notes to the prompt
    - **context_image_ids**: Existing images used as references
    - **model**: Provider id (default: configured default provider)
    - **ip_adapter_scale**: Reference strength for FLUX Pro
    - **seed**: Seed for reproducibility

    **Returns:**
    - The new message with its generated and attached images
    """
    return await GenerationService(store).generate(ImageRelation.FRAME, frame_id, request)


@router.post("/videos/{video_id}/context/generate", response_model=MessageView, status_code=201)
async def generate_for_context(
    video_id: str,
    request: GenerateRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Generate reference images in the video's context thread (context notes always included)"""
    return await GenerationService(store).generate(ImageRelation.CONTEXT, video_id, request)


@router.post("/main-chats/{main_chat_id}/generate", response_model=MessageView, status_code=201)
async def generate_for_main_chat(
    main_chat_id: str,
    request: GenerateRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Generate images in a main chat"""
    return await GenerationService(store).generate(ImageRelation.MAIN_CHAT, main_chat_id, request)


@router.post("/frames/{frame_id}/upload", response_model=Image, status_code=201)
async def upload_frame_image(frame_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Add a placeholder 'uploaded' image to a frame"""
    with store.transaction():
        require_frame(store, frame_id)
        return upload_mock_image(store, ImageRelation.FRAME, frame_id)


@router.post("/main-chats/{main_chat_id}/upload", response_model=Image, status_code=201)
async def upload_main_chat_image(main_chat_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Add a placeholder 'uploaded' image to a main chat"""
    with store.transaction():
        require_main_chat(store, main_chat_id)
        return upload_mock_image(store, ImageRelation.MAIN_CHAT, main_chat_id)


@router.get("/generation/status", response_model=GenerationStatusResponse)
async def get_generation_status():
    """Whether generation runs against a provider or mock placeholders"""
    return generation_status()
