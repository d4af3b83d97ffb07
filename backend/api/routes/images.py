"""
API routes for moving images between frames, context, galleries, main
chats and characters.
"""
from fastapi import APIRouter, Depends

from backend.api.dependencies import get_storyboard_store, require_project
from backend.core.exceptions import NotFoundException
from backend.core.models import (
    CopyImageRequest,
    DeleteResponse,
    FrameImageRef,
    FrameImages,
    ImageMutationResponse,
    MoveImageRequest,
    ProjectImagesResponse,
    RemoveImageRequest,
    VideoImages,
)
from backend.core.storage import InMemoryStore
from backend.core.views import image_ref
from backend.models.storyboard_models import Image, ImageRelation
from backend.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["images"])


def _require_image(store: InMemoryStore, image_id: str) -> Image:
    image = store.get_image(image_id)
    if image is None:
        raise NotFoundException("Image", image_id)
    return image


@router.get("/projects/{project_id}/images", response_model=ProjectImagesResponse)
async def list_project_images(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """
    All frame and context images of a project grouped by video and frame.

    Returns:
        Videos with their frames' images and context images, plus a total count
    """
    with store.transaction():
        require_project(store, project_id)

        videos = []
        total_count = 0
        for video in store.list_videos(project_id):
            frames = []
            for frame in store.list_frames(video.id):
                images = [
                    FrameImageRef(id=img.id, url=img.url, is_selected=img.id == frame.selected_image_id)
                    for img in store.relation_images(ImageRelation.FRAME, frame.id)
                ]
                total_count += len(images)
                frames.append(FrameImages(id=frame.id, title=frame.title, images=images))

            context = store.get_context_for_video(video.id)
            context_images = [
                image_ref(img)
                for img in (store.relation_images(ImageRelation.CONTEXT, context.id) if context else [])
            ]
            total_count += len(context_images)
            videos.append(VideoImages(id=video.id, name=video.name, frames=frames, context_images=context_images))

        return ProjectImagesResponse(videos=videos, total_count=total_count)


@router.delete("/images/{image_id}", response_model=DeleteResponse)
async def delete_image(image_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete an image and remove it from every collection"""
    if not store.delete_image(image_id):
        raise NotFoundException("Image", image_id)
    logger.info(f"Deleted image {image_id}")
    return DeleteResponse()


@router.post("/images/{image_id}/copy", response_model=ImageMutationResponse)
async def copy_image(
    image_id: str,
    request: CopyImageRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Add an image to another collection; it stays where it already is"""
    with store.transaction():
        image = _require_image(store, image_id)
        store.copy_image(image_id, request.target_type, request.target_id)

    logger.info(f"Copied image {image_id} to {request.target_type}:{request.target_id}")
    return ImageMutationResponse(image=image_ref(image))


@router.post("/images/{image_id}/move", response_model=ImageMutationResponse)
async def move_image(
    image_id: str,
    request: MoveImageRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Move an image from one collection to another"""
    with store.transaction():
        image = _require_image(store, image_id)
        store.move_image(
            image_id,
            request.source_type,
            request.source_id,
            request.target_type,
            request.target_id,
        )

    logger.info(
        f"Moved image {image_id} from {request.source_type}:{request.source_id} "
        f"to {request.target_type}:{request.target_id}"
    )
    return ImageMutationResponse(image=image_ref(image))


@router.post("/images/{image_id}/remove", response_model=DeleteResponse)
async def remove_image(
    image_id: str,
    request: RemoveImageRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Remove an image from one collection without deleting it"""
    with store.transaction():
        _require_image(store, image_id)
        store.remove_image_from_source(image_id, request.source_type, request.source_id)
    return DeleteResponse()
