"""Main API router

This module combines the resource routers of the storyboard API
"""
from fastapi import APIRouter

from backend.api.routes import (
    characters,
    context,
    frames,
    gallery,
    generate,
    images,
    main_chats,
    models,
    projects,
    videos,
)

# Create main API router
api_router = APIRouter()

api_router.include_router(projects.router)
api_router.include_router(videos.router)
api_router.include_router(frames.router)
api_router.include_router(context.router)
api_router.include_router(main_chats.router)
api_router.include_router(generate.router)
api_router.include_router(images.router)
api_router.include_router(gallery.router)
api_router.include_router(characters.router)
api_router.include_router(models.router)
