"""
API routes for a video's context notes and reference images.
"""
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import get_storyboard_store, require_context
from backend.core.generation_service import upload_mock_image
from backend.core.models import (
    ContextDetailResponse,
    ContextUpdateRequest,
    ContextUpdateResponse,
    DeleteResponse,
    MessageView,
)
from backend.core.storage import InMemoryStore
from backend.core.views import message_views
from backend.models.storyboard_models import Image, ImageRelation

router = APIRouter(prefix="/videos/{video_id}/context", tags=["context"])


@router.get("", response_model=ContextDetailResponse)
async def get_context(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Context notes of a video with its images and messages"""
    with store.transaction():
        context = require_context(store, video_id)
        return ContextDetailResponse(
            id=context.id,
            video_id=context.video_id,
            content=context.content,
            images=store.relation_images(ImageRelation.CONTEXT, context.id),
            messages=message_views(store, ImageRelation.CONTEXT, context.id),
        )


@router.patch("", response_model=ContextUpdateResponse)
async def update_context(
    video_id: str,
    request: ContextUpdateRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Replace the context notes; a missing content clears them"""
    with store.transaction():
        require_context(store, video_id)
        context = store.update_context_content(video_id, request.content or "")
        return ContextUpdateResponse(id=context.id, content=context.content, updated_at=context.updated_at)


@router.post("/images", response_model=Image, status_code=201)
async def upload_context_image(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Add a placeholder 'uploaded' reference image to the context"""
    with store.transaction():
        context = require_context(store, video_id)
        return upload_mock_image(store, ImageRelation.CONTEXT, context.id)


@router.delete("/history", response_model=DeleteResponse)
async def clear_context_history(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete the context messages and the images they generated"""
    with store.transaction():
        context = require_context(store, video_id)
        deleted = store.clear_history(ImageRelation.CONTEXT, context.id)
    return DeleteResponse(deleted=deleted)


@router.get("/messages", response_model=List[MessageView])
async def list_context_messages(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    with store.transaction():
        context = require_context(store, video_id)
        return message_views(store, ImageRelation.CONTEXT, context.id)
