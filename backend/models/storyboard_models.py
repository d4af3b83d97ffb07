"""
Storyboard entity models held by the in-memory store.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ImageRelation(str, Enum):
    """Collections an image can belong to."""
    FRAME = "frame"
    CONTEXT = "context"
    GALLERY = "gallery"
    MAIN_CHAT = "mainChat"
    CHARACTER = "character"


class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Video(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    project_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Context(BaseModel):
    """Creative-direction notes for a video (one per video)."""
    id: str = Field(default_factory=new_id)
    content: str = ""
    video_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Frame(BaseModel):
    """Ordered storyboard slot. ``order`` is dense 0..N-1 within a video."""
    id: str = Field(default_factory=new_id)
    title: str
    order: int = Field(..., ge=0)
    video_id: str
    selected_image_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class MainChat(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    video_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Message(BaseModel):
    """A generation prompt. Exactly one of frame_id, context_id, main_chat_id is set."""
    id: str = Field(default_factory=new_id)
    prompt: str
    with_context: bool = False
    frame_id: Optional[str] = None
    context_id: Optional[str] = None
    main_chat_id: Optional[str] = None
    attached_image_ids: List[str] = Field(default_factory=list)
    model: Optional[str] = None
    provider: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Image(BaseModel):
    id: str = Field(default_factory=new_id)
    url: str
    storage_id: str = Field(..., description="External asset id (mock, upload or provider)")
    message_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Character(BaseModel):
    """Named bundle of reference images within a project."""
    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    project_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
