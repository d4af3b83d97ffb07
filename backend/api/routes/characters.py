"""
API routes for characters: named sets of reference images within a project.
"""
import time
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import (
    get_storyboard_store,
    require_character,
    require_project,
    require_text,
)
from backend.core.exceptions import ImageNotFoundException, NotFoundException, ValidationException
from backend.core.models import (
    CharacterImageRequest,
    CharacterView,
    CreateCharacterRequest,
    DeleteResponse,
    UpdateCharacterRequest,
)
from backend.core.storage import InMemoryStore
from backend.core.views import character_view
from backend.models.storyboard_models import Image, ImageRelation
from backend.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["characters"])


@router.get("/projects/{project_id}/characters", response_model=List[CharacterView])
async def list_characters(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Characters of a project with their reference images, sorted by name"""
    with store.transaction():
        require_project(store, project_id)
        return [character_view(store, c) for c in store.list_characters(project_id)]


@router.post("/projects/{project_id}/characters", response_model=CharacterView, status_code=201)
async def create_character(
    project_id: str,
    request: CreateCharacterRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    with store.transaction():
        require_project(store, project_id)
        name = require_text(request.name, "name", "Character name")
        character = store.create_character(project_id, name, (request.description or "").strip())

    logger.info(f"Created character {character.id} in project {project_id}: {name}")
    return character_view(store, character)


@router.get("/characters/{character_id}", response_model=CharacterView)
async def get_character(character_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    with store.transaction():
        return character_view(store, require_character(store, character_id))


@router.patch("/characters/{character_id}", response_model=CharacterView)
async def update_character(
    character_id: str,
    request: UpdateCharacterRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Update name and/or description; a provided name must not be blank"""
    with store.transaction():
        require_character(store, character_id)

        name = None
        if request.name is not None:
            name = request.name.strip()
            if not name:
                raise ValidationException("Character name cannot be empty", field="name")

        description = request.description.strip() if request.description is not None else None
        character = store.update_character(character_id, name=name, description=description)
        return character_view(store, character)


@router.delete("/characters/{character_id}", response_model=DeleteResponse)
async def delete_character(character_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """Delete a character; its reference images stay in the store"""
    if not store.delete_character(character_id):
        raise NotFoundException("Character", character_id)
    return DeleteResponse(deleted={"character_id": character_id})


@router.post("/characters/{character_id}/images", response_model=Image, status_code=201)
async def add_character_image(
    character_id: str,
    request: CharacterImageRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """
    Add a reference image to a character.

    **Parameters:**
    - **image_id**: Copy an existing image into a new image record
    - **image_url**: Create a new image from a URL

    One of the two is required.
    """
    with store.transaction():
        require_character(store, character_id)

        if request.image_id:
            source = store.get_image(request.image_id)
            if source is None:
                raise ImageNotFoundException(request.image_id)
            image = store.create_image(url=source.url, storage_id=source.storage_id)
        elif request.image_url and request.image_url.strip():
            image = store.create_image(
                url=request.image_url.strip(),
                storage_id=f"character-{int(time.time() * 1000)}"
            )
        else:
            raise ValidationException("Either image_id or image_url is required", field="image_id")

        store.add_image_to_target(image.id, ImageRelation.CHARACTER, character_id)
        store.update_character(character_id)

    logger.info(f"Added reference image {image.id} to character {character_id}")
    return image


@router.delete("/characters/{character_id}/images/{image_id}", response_model=DeleteResponse)
async def remove_character_image(
    character_id: str,
    image_id: str,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """Remove a reference image from a character"""
    with store.transaction():
        require_character(store, character_id)
        if image_id not in store.relation_image_ids(ImageRelation.CHARACTER, character_id):
            raise NotFoundException("Image in character", image_id)

        store.remove_image_from_source(image_id, ImageRelation.CHARACTER, character_id)
        store.update_character(character_id)
    return DeleteResponse()
