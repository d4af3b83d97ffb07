"""
API routes for a project's image gallery.
"""
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import get_storyboard_store, require_project
from backend.core.exceptions import ImageNotFoundException
from backend.core.generation_service import upload_mock_image
from backend.core.models import (
    DeleteResponse,
    GalleryAddRequest,
    GalleryImage,
    ImageMutationResponse,
)
from backend.core.storage import InMemoryStore
from backend.core.views import image_ref
from backend.models.storyboard_models import Image, ImageRelation

router = APIRouter(prefix="/projects/{project_id}/gallery", tags=["gallery"])


@router.get("", response_model=List[GalleryImage])
async def list_gallery(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Gallery images of a project, newest first"""
    with store.transaction():
        require_project(store, project_id)
        images = store.relation_images(ImageRelation.GALLERY, project_id)
        return [
            GalleryImage(id=img.id, url=img.url, created_at=img.created_at)
            for img in sorted(images, key=lambda i: i.created_at, reverse=True)
        ]


@router.post("", response_model=ImageMutationResponse, status_code=201)
async def add_to_gallery(
    project_id: str,
    request: GalleryAddRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Save an existing image to the project gallery"""
    with store.transaction():
        require_project(store, project_id)
        image = store.get_image(request.image_id)
        if image is None:
            raise ImageNotFoundException(request.image_id)

        store.add_image_to_target(image.id, ImageRelation.GALLERY, project_id)
        return ImageMutationResponse(image=image_ref(image))


@router.delete("/{image_id}", response_model=DeleteResponse)
async def remove_from_gallery(
    project_id: str,
    image_id: str,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Remove an image from the gallery; the image itself is kept"""
    with store.transaction():
        require_project(store, project_id)
        store.remove_image_from_source(image_id, ImageRelation.GALLERY, project_id)
    return DeleteResponse()


@router.post("/upload", response_model=Image, status_code=201)
async def upload_gallery_image(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Add a placeholder 'uploaded' image to the gallery"""
    with store.transaction():
        require_project(store, project_id)
        return upload_mock_image(store, ImageRelation.GALLERY, project_id)
