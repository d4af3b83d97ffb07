"""Pydantic models for API requests and responses

Entities themselves live in backend.models.storyboard_models; the models
here describe request bodies and the aggregated views returned by routes.
"""
from pydantic import BaseModel, Field
from typing import Any, Optional, Dict, List, Literal
from datetime import datetime

from backend.models.storyboard_models import Image, Message
from services.image_generation import ProviderInfo


TargetType = Literal["frame", "context", "gallery", "mainChat", "character"]


# ==================== Request Models ====================

class NameRequest(BaseModel):
    """Create or rename a project, video or main chat"""
    name: Optional[str] = Field(None, description="Display name (trimmed, non-blank)")


class TitleRequest(BaseModel):
    """Create or rename a frame"""
    title: Optional[str] = Field(None, description="Frame title (trimmed, non-blank)")


class ReorderRequest(BaseModel):
    new_order: int = Field(..., ge=0, description="Target position; clamped to the last frame")


class SelectImageRequest(BaseModel):
    image_id: Optional[str] = Field(None, description="Image to select, or null to clear")


class ContextUpdateRequest(BaseModel):
    content: Optional[str] = Field(None, description="Context notes; missing means empty")


class GenerateRequest(BaseModel):
    """Generate images for a frame, context or main chat"""
    prompt: Optional[str] = Field(None, description="Text prompt (trimmed, non-blank)")
    with_context: bool = Field(False, description="Include the video's context notes (frames and main chats; always on for the context thread)")
    context_image_ids: List[str] = Field(default_factory=list, description="Attached reference images")
    model: Optional[str] = Field(None, description="Provider id, e.g. fal-flux-turbo")
    ip_adapter_scale: Optional[float] = Field(None, ge=0.0, le=1.0, description="Reference strength")
    seed: Optional[int] = Field(None, description="Seed for reproducibility")


class CopyImageRequest(BaseModel):
    target_type: TargetType
    target_id: str = Field(..., min_length=1)


class MoveImageRequest(BaseModel):
    source_type: TargetType
    source_id: str = Field(..., min_length=1)
    target_type: TargetType
    target_id: str = Field(..., min_length=1)


class RemoveImageRequest(BaseModel):
    source_type: TargetType
    source_id: str = Field(..., min_length=1)


class GalleryAddRequest(BaseModel):
    image_id: str = Field(..., min_length=1)


class CreateCharacterRequest(BaseModel):
    name: Optional[str] = Field(None, description="Character name (trimmed, non-blank)")
    description: str = Field("", description="Free-text description")


class UpdateCharacterRequest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class CharacterImageRequest(BaseModel):
    """Attach a reference image by copying an existing image or from a URL"""
    image_id: Optional[str] = None
    image_url: Optional[str] = None


# ==================== Shared Response Models ====================

class DeleteResponse(BaseModel):
    success: bool = True
    deleted: Optional[Dict[str, Any]] = None


class ImageRef(BaseModel):
    id: str
    url: str


class ImageMutationResponse(BaseModel):
    """Result of copying or moving an image"""
    success: bool = True
    image: ImageRef


class MessageView(Message):
    """A message with its generated and attached images"""
    images: List[Image] = Field(default_factory=list)
    attached_images: List[Image] = Field(default_factory=list)


# ==================== Project Models ====================

class ProjectListItem(BaseModel):
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    video_count: int = 0
    image_count: int = 0
    gallery_count: int = 0


class VideoListItem(BaseModel):
    id: str
    name: str
    created_at: datetime
    frame_count: int = 0
    image_count: int = 0


class ProjectDetailResponse(BaseModel):
    id: str
    name: str
    created_at: datetime
    updated_at: datetime
    videos: List[VideoListItem]
    gallery_count: int


# ==================== Video Models ====================

class ContextStub(BaseModel):
    id: str
    message_count: int = 0


class VideoCreatedResponse(BaseModel):
    id: str
    name: str
    created_at: datetime
    context: Optional[ContextStub] = None
    frames: List["FrameSummary"] = Field(default_factory=list)


class ContextSummary(BaseModel):
    id: str
    content: str
    message_count: int
    image_count: int


class MainChatSummary(BaseModel):
    id: str
    name: str
    video_id: str
    created_at: datetime
    updated_at: datetime
    message_count: int
    image_count: int


class VideoDetailResponse(BaseModel):
    id: str
    name: str
    project_id: str
    created_at: datetime
    updated_at: datetime
    context: Optional[ContextSummary] = None
    frames: List["FrameSummary"]
    main_chats: List[MainChatSummary]


class VideoUpdateResponse(BaseModel):
    id: str
    name: str
    project_id: str
    updated_at: datetime


# ==================== Frame Models ====================

class FrameSummary(BaseModel):
    id: str
    title: str
    order: int
    selected_image: Optional[Image] = None
    image_count: int = 0


class SelectedImageResponse(BaseModel):
    id: str
    selected_image: Optional[Image] = None


class FrameImage(Image):
    is_selected: bool = False


# ==================== Context & Main Chat Models ====================

class ContextDetailResponse(BaseModel):
    id: str
    video_id: str
    content: str
    images: List[Image]
    messages: List[MessageView]


class ContextUpdateResponse(BaseModel):
    id: str
    content: str
    updated_at: datetime


class MainChatDetailResponse(MainChatSummary):
    images: List[Image]
    messages: List[MessageView]


# ==================== Image Overview Models ====================

class FrameImageRef(ImageRef):
    is_selected: bool = False


class FrameImages(BaseModel):
    id: str
    title: str
    images: List[FrameImageRef]


class VideoImages(BaseModel):
    id: str
    name: str
    frames: List[FrameImages]
    context_images: List[ImageRef]


class ProjectImagesResponse(BaseModel):
    videos: List[VideoImages]
    total_count: int


class GalleryImage(BaseModel):
    id: str
    url: str
    created_at: datetime


# ==================== Character Models ====================

class CharacterView(BaseModel):
    id: str
    name: str
    description: str
    project_id: str
    created_at: datetime
    updated_at: datetime
    image_count: int = 0
    reference_images: List[Image] = Field(default_factory=list)


# ==================== Generation & Model Info ====================

class GenerationStatusResponse(BaseModel):
    mode: str = Field(..., description="'mock' or the default provider id")
    mock: bool
    providers: List[str] = Field(default_factory=list, description="Configured provider ids")
    default_model: Optional[str] = None


class ModelsResponse(BaseModel):
    models: List[ProviderInfo]
    all_models: Optional[List[ProviderInfo]] = None
    default: Optional[str] = None
    message: Optional[str] = None


class ModelDetailResponse(ProviderInfo):
    configured: bool


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    image_generation: str = Field(..., description="'mock' or the default provider id")
    providers: List[str] = Field(default_factory=list)


VideoCreatedResponse.model_rebuild()
VideoDetailResponse.model_rebuild()
