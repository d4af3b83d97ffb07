"""
API routes for videos within a project.
"""
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import (
    get_storyboard_store,
    require_project,
    require_text,
    require_video,
)
from backend.core.exceptions import NotFoundException
from backend.core.models import (
    ContextStub,
    DeleteResponse,
    NameRequest,
    VideoCreatedResponse,
    VideoDetailResponse,
    VideoListItem,
    VideoUpdateResponse,
)
from backend.core.storage import InMemoryStore
from backend.core.views import (
    context_summary,
    frame_summaries,
    main_chat_summary,
    video_list_item,
)
from backend.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["videos"])


@router.get("/projects/{project_id}/videos", response_model=List[VideoListItem])
async def list_videos(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """List the videos of a project, newest first"""
    with store.transaction():
        require_project(store, project_id)
        return [video_list_item(store, v) for v in store.list_videos(project_id)]


@router.post("/projects/{project_id}/videos", response_model=VideoCreatedResponse, status_code=201)
async def create_video(
    project_id: str,
    request: NameRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """
    Create a video in a project.

    The video gets an empty context and a default "Main Chat".
    """
    with store.transaction():
        require_project(store, project_id)
        name = require_text(request.name, "name")
        video = store.create_video(project_id, name)
        context = store.get_context_for_video(video.id)

    logger.info(f"Created video {video.id} in project {project_id}: {name}")
    return VideoCreatedResponse(
        id=video.id,
        name=video.name,
        created_at=video.created_at,
        context=ContextStub(id=context.id, message_count=0) if context else None,
        frames=[],
    )


@router.get("/videos/{video_id}", response_model=VideoDetailResponse)
async def get_video(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Get a video with its context summary, frames and main chats"""
    with store.transaction():
        video = require_video(store, video_id)
        return VideoDetailResponse(
            id=video.id,
            name=video.name,
            project_id=video.project_id,
            created_at=video.created_at,
            updated_at=video.updated_at,
            context=context_summary(store, video_id),
            frames=frame_summaries(store, store.list_frames(video_id)),
            main_chats=[main_chat_summary(store, c) for c in store.list_main_chats(video_id)],
        )


@router.put("/videos/{video_id}", response_model=VideoUpdateResponse)
async def update_video(
    video_id: str,
    request: NameRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Rename a video"""
    name = require_text(request.name, "name")
    video = store.rename_video(video_id, name)
    if not video:
        raise NotFoundException("Video", video_id)

    return VideoUpdateResponse(
        id=video.id,
        name=video.name,
        project_id=video.project_id,
        updated_at=video.updated_at,
    )


@router.delete("/videos/{video_id}", response_model=DeleteResponse)
async def delete_video(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete a video with its frames, context, main chats and their messages"""
    deleted = store.delete_video(video_id)
    if deleted is None:
        raise NotFoundException("Video", video_id)
    return DeleteResponse(deleted=deleted)
