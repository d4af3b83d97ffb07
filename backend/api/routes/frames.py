"""
API routes for storyboard frames.
"""
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import (
    get_storyboard_store,
    require_frame,
    require_text,
    require_video,
)
from backend.core.exceptions import ImageNotFoundException, NotFoundException
from backend.core.models import (
    DeleteResponse,
    FrameImage,
    FrameSummary,
    MessageView,
    ReorderRequest,
    SelectedImageResponse,
    SelectImageRequest,
    TitleRequest,
)
from backend.core.storage import InMemoryStore
from backend.core.views import frame_summaries, frame_summary, message_views, selected_image
from backend.models.storyboard_models import ImageRelation
from backend.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["frames"])


@router.get("/videos/{video_id}/frames", response_model=List[FrameSummary])
async def list_frames(video_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """List the frames of a video in storyboard order"""
    with store.transaction():
        require_video(store, video_id)
        return frame_summaries(store, store.list_frames(video_id))


@router.post("/videos/{video_id}/frames", response_model=FrameSummary, status_code=201)
async def create_frame(
    video_id: str,
    request: TitleRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Append a frame at the end of a video"""
    with store.transaction():
        require_video(store, video_id)
        title = require_text(request.title, "title")
        frame = store.create_frame(video_id, title)

    logger.info(f"Created frame {frame.id} at position {frame.order} in video {video_id}")
    return frame_summary(store, frame)


@router.put("/frames/{frame_id}", response_model=FrameSummary)
async def update_frame(
    frame_id: str,
    request: TitleRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Rename a frame"""
    title = require_text(request.title, "title")
    frame = store.rename_frame(frame_id, title)
    if not frame:
        raise NotFoundException("Frame", frame_id)
    return frame_summary(store, frame)


@router.patch("/frames/{frame_id}/reorder", response_model=List[FrameSummary])
async def reorder_frame(
    frame_id: str,
    request: ReorderRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """
    Move a frame to a new position within its video.

    Positions past the end are clamped to the last slot.

    Returns:
        All frames of the video in their new order
    """
    with store.transaction():
        frames = store.reorder_frame(frame_id, request.new_order)
        if frames is None:
            raise NotFoundException("Frame", frame_id)
        return frame_summaries(store, frames)


@router.patch("/frames/{frame_id}/selected-image", response_model=SelectedImageResponse)
async def select_frame_image(
    frame_id: str,
    request: SelectImageRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Select the frame's chosen image, or clear it with a null image_id"""
    with store.transaction():
        require_frame(store, frame_id)
        if request.image_id and store.get_image(request.image_id) is None:
            raise ImageNotFoundException(request.image_id, status_code=400)

        frame = store.select_frame_image(frame_id, request.image_id or None)
        return SelectedImageResponse(id=frame.id, selected_image=selected_image(store, frame))


@router.delete("/frames/{frame_id}", response_model=DeleteResponse)
async def delete_frame(frame_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete a frame; the remaining frames are renumbered"""
    if not store.delete_frame(frame_id):
        raise NotFoundException("Frame", frame_id)
    logger.info(f"Deleted frame {frame_id}")
    return DeleteResponse()


@router.delete("/frames/{frame_id}/history", response_model=DeleteResponse)
async def clear_frame_history(frame_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete the frame's messages and the images they generated"""
    with store.transaction():
        require_frame(store, frame_id)
        deleted = store.clear_history(ImageRelation.FRAME, frame_id)
    return DeleteResponse(deleted=deleted)


@router.get("/frames/{frame_id}/messages", response_model=List[MessageView])
async def list_frame_messages(frame_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Messages of a frame, oldest first, with their images"""
    with store.transaction():
        require_frame(store, frame_id)
        return message_views(store, ImageRelation.FRAME, frame_id)


@router.get("/frames/{frame_id}/images", response_model=List[FrameImage])
async def list_frame_images(frame_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Images in the frame with the selected one flagged"""
    with store.transaction():
        frame = require_frame(store, frame_id)
        images = store.relation_images(ImageRelation.FRAME, frame_id)
        return [
            FrameImage(**img.model_dump(), is_selected=img.id == frame.selected_image_id)
            for img in sorted(images, key=lambda i: i.created_at)
        ]
