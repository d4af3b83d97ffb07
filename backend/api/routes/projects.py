"""
API routes for project management.
"""
from typing import List

from fastapi import APIRouter, Depends

from backend.api.dependencies import get_storyboard_store, require_project, require_text
from backend.core.exceptions import NotFoundException
from backend.core.models import (
    DeleteResponse,
    NameRequest,
    ProjectDetailResponse,
    ProjectListItem,
)
from backend.core.storage import InMemoryStore
from backend.core.views import project_list_item, video_list_item
from backend.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=List[ProjectListItem])
async def list_projects(store: InMemoryStore = Depends(get_storyboard_store)):
    """
    List all projects, newest first.

    Returns:
        Projects with video, image and gallery counts
    """
    with store.transaction():
        return [project_list_item(store, p) for p in store.list_projects()]


@router.post("", response_model=ProjectListItem, status_code=201)
async def create_project(request: NameRequest, store: InMemoryStore = Depends(get_storyboard_store)):
    """
    Create a new project with an empty gallery.

    Args:
        request: Project name

    Returns:
        Created project
    """
    name = require_text(request.name, "name")
    project = store.create_project(name)
    logger.info(f"Created project {project.id}: {project.name}")
    return project_list_item(store, project)


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """
    Get project details by ID.

    Args:
        project_id: Project identifier

    Returns:
        Project with its videos (newest first) and gallery size
    """
    with store.transaction():
        project = require_project(store, project_id)
        return ProjectDetailResponse(
            id=project.id,
            name=project.name,
            created_at=project.created_at,
            updated_at=project.updated_at,
            videos=[video_list_item(store, v) for v in store.list_videos(project_id)],
            gallery_count=store.gallery_count(project_id),
        )


@router.put("/{project_id}", response_model=ProjectListItem)
async def update_project(
    project_id: str,
    request: NameRequest,
    store: InMemoryStore = Depends(get_storyboard_store)
):
    """
    Rename a project.

    Args:
        project_id: Project identifier
        request: New name

    Returns:
        Updated project
    """
    name = require_text(request.name, "name")
    project = store.rename_project(project_id, name)
    if not project:
        raise NotFoundException("Project", project_id)

    logger.info(f"Renamed project {project_id}: {name}")
    return project_list_item(store, project)


@router.delete("/{project_id}", response_model=DeleteResponse)
async def delete_project(project_id: str, store: InMemoryStore = Depends(get_storyboard_store)):
    """
    Delete a project with its videos, gallery and characters.

    Args:
        project_id: Project identifier

    Returns:
        Counts of deleted videos, frames and images
    """
    deleted = store.delete_project(project_id)
    if deleted is None:
        raise NotFoundException("Project", project_id)
    return DeleteResponse(deleted=deleted)
