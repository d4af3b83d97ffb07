"""
Builders for the aggregated views returned by the REST routes.

Each builder reads the store under its lock and returns a response model.
"""
from typing import List, Optional

from backend.core.models import (
    CharacterView,
    ContextSummary,
    FrameSummary,
    ImageRef,
    MainChatSummary,
    MessageView,
    ProjectListItem,
    VideoListItem,
)
from backend.core.storage import InMemoryStore
from backend.models.storyboard_models import (
    Character,
    Frame,
    Image,
    ImageRelation,
    MainChat,
    Message,
    Project,
    Video,
)


def project_list_item(store: InMemoryStore, project: Project) -> ProjectListItem:
    return ProjectListItem(
        id=project.id,
        name=project.name,
        created_at=project.created_at,
        updated_at=project.updated_at,
        video_count=store.project_video_count(project.id),
        image_count=store.project_image_count(project.id),
        gallery_count=store.gallery_count(project.id),
    )


def video_list_item(store: InMemoryStore, video: Video) -> VideoListItem:
    return VideoListItem(
        id=video.id,
        name=video.name,
        created_at=video.created_at,
        frame_count=store.video_frame_count(video.id),
        image_count=store.video_image_count(video.id),
    )


def selected_image(store: InMemoryStore, frame: Frame) -> Optional[Image]:
    if not frame.selected_image_id:
        return None
    return store.get_image(frame.selected_image_id)


def frame_summary(store: InMemoryStore, frame: Frame) -> FrameSummary:
    return FrameSummary(
        id=frame.id,
        title=frame.title,
        order=frame.order,
        selected_image=selected_image(store, frame),
        image_count=store.relation_count(ImageRelation.FRAME, frame.id),
    )


def frame_summaries(store: InMemoryStore, frames: List[Frame]) -> List[FrameSummary]:
    return [frame_summary(store, f) for f in frames]


def context_summary(store: InMemoryStore, video_id: str) -> Optional[ContextSummary]:
    context = store.get_context_for_video(video_id)
    if context is None:
        return None
    return ContextSummary(
        id=context.id,
        content=context.content,
        message_count=store.message_count(ImageRelation.CONTEXT, context.id),
        image_count=store.relation_count(ImageRelation.CONTEXT, context.id),
    )


def main_chat_summary(store: InMemoryStore, main_chat: MainChat) -> MainChatSummary:
    return MainChatSummary(
        id=main_chat.id,
        name=main_chat.name,
        video_id=main_chat.video_id,
        created_at=main_chat.created_at,
        updated_at=main_chat.updated_at,
        message_count=store.message_count(ImageRelation.MAIN_CHAT, main_chat.id),
        image_count=store.relation_count(ImageRelation.MAIN_CHAT, main_chat.id),
    )


def message_view(store: InMemoryStore, message: Message) -> MessageView:
    return MessageView(
        **message.model_dump(),
        images=store.message_images(message.id),
        attached_images=store.attached_images(message),
    )


def message_views(store: InMemoryStore, owner_type: ImageRelation, owner_id: str) -> List[MessageView]:
    return [message_view(store, m) for m in store.list_messages(owner_type, owner_id)]


def image_ref(image: Image) -> ImageRef:
    return ImageRef(id=image.id, url=image.url)


def character_view(store: InMemoryStore, character: Character) -> CharacterView:
    return CharacterView(
        **character.model_dump(),
        image_count=store.relation_count(ImageRelation.CHARACTER, character.id),
        reference_images=store.relation_images(ImageRelation.CHARACTER, character.id),
    )
