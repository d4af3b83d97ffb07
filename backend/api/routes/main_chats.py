"""
API routes for main chats: free-form generation threads of a video.
"""
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import (
    get_storyboard_store,
    require_main_chat,
    require_text,
    require_video,
)
from backend.core.exceptions import NotFoundException
from backend.core.models import (
    DeleteResponse,
    MainChatDetailResponse,
    MainChatSummary,
    NameRequest,
)
from backend.core.storage import InMemoryStore
from backend.core.views import main_chat_summary, message_views
from backend.models.storyboard_models import ImageRelation
from backend.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["main chats"])


@router.get("/videos/{video_id}/main-chats", response_model=List[MainChatSummary])
async def list_main_chats(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Main chats of a video, oldest first"""
    with store.transaction():
        require_video(store, video_id)
        return [main_chat_summary(store, c) for c in store.list_main_chats(video_id)]


@router.post("/videos/{video_id}/main-chats", response_model=MainChatSummary, status_code=201)
async def create_main_chat(
    video_id: str,
    request: NameRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    with store.transaction():
        require_video(store, video_id)
        name = require_text(request.name, "name")
        main_chat = store.create_main_chat(video_id, name)

    logger.info(f"Created main chat {main_chat.id} in video {video_id}")
    return main_chat_summary(store, main_chat)


@router.get("/main-chats/{main_chat_id}", response_model=MainChatDetailResponse)
async def get_main_chat(main_chat_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """A main chat with its images and messages"""
    with store.transaction():
        main_chat = require_main_chat(store, main_chat_id)
        return MainChatDetailResponse(
            **main_chat_summary(store, main_chat).model_dump(),
            images=store.relation_images(ImageRelation.MAIN_CHAT, main_chat_id),
            messages=message_views(store, ImageRelation.MAIN_CHAT, main_chat_id),
        )


@router.put("/main-chats/{main_chat_id}", response_model=MainChatSummary)
async def update_main_chat(
    main_chat_id: str,
    request: NameRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    name = require_text(request.name, "name")
    main_chat = store.rename_main_chat(main_chat_id, name)
    if not main_chat:
        raise NotFoundException("Main chat", main_chat_id)
    return main_chat_summary(store, main_chat)


@router.delete("/main-chats/{main_chat_id}", response_model=DeleteResponse)
async def delete_main_chat(main_chat_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete a main chat with its messages and generated images"""
    deleted = store.delete_main_chat(main_chat_id)
    if deleted is None:
        raise NotFoundException("Main chat", main_chat_id)
    logger.info(f"Deleted main chat {main_chat_id}: {deleted}")
    return DeleteResponse(deleted=deleted)


@router.delete("/main-chats/{main_chat_id}/history", response_model=DeleteResponse)
async def clear_main_chat_history(main_chat_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    with store.transaction():
        require_main_chat(store, main_chat_id)
        deleted = store.clear_history(ImageRelation.MAIN_CHAT, main_chat_id)
    return DeleteResponse(deleted=deleted)
