"""Shared route dependencies and lookup helpers"""
from typing import Optional

from backend.config import settings
from backend.core.exceptions import NotFoundException, ValidationException
from backend.core.storage import InMemoryStore, get_store
from backend.models.storyboard_models import (
    Character,
    Context,
    Frame,
    MainChat,
    Project,
    Video,
)


def get_storyboard_store() -> InMemoryStore:
    """FastAPI dependency: the global store with sample data seeded"""
    store = get_store()
    if settings.seed_sample_data:
        store.seed_sample_data()
    return store


def require_text(value: Optional[str], field: str, label: Optional[str] = None) -> str:
    """Trim ``value`` and reject blank input with a 400"""
    text = (value or "").strip()
    if not text:
        raise ValidationException(f"{label or field.capitalize()} is required", field=field)
    return text


def require_project(store: InMemoryStore, project_id: str) -> Project:
    project = store.get_project(project_id)
    if project is None:
        raise NotFoundException("Project", project_id)
    return project


def require_video(store: InMemoryStore, video_id: str) -> Video:
    video = store.get_video(video_id)
    if video is None:
        raise NotFoundException("Video", video_id)
    return video


def require_context(store: InMemoryStore, video_id: str) -> Context:
    """The context of a video; 404 if either is missing"""
    require_video(store, video_id)
    context = store.get_context_for_video(video_id)
    if context is None:
        raise NotFoundException("Context", video_id)
    return context


def require_frame(store: InMemoryStore, frame_id: str) -> Frame:
    frame = store.get_frame(frame_id)
    if frame is None:
        raise NotFoundException("Frame", frame_id)
    return frame


def require_main_chat(store: InMemoryStore, main_chat_id: str) -> MainChat:
    main_chat = store.get_main_chat(main_chat_id)
    if main_chat is None:
        raise NotFoundException("Main chat", main_chat_id)
    return main_chat


def require_character(store: InMemoryStore, character_id: str) -> Character:
    character = store.get_character(character_id)
    if character is None:
        raise NotFoundException("Character", character_id)
    return character
