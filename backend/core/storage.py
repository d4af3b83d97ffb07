"""
In-memory storyboard store.

Entities live in plain dicts keyed by id; image membership of frames,
contexts, main chats, project galleries and characters is kept in dicts of
id sets so an image can belong to several collections at once. Nothing is
persisted: data is lost when the process exits.
"""
import contextlib
import functools
import threading
import uuid
from typing import Callable, Dict, List, Optional, Set

from loguru import logger

from backend.core.exceptions import TargetNotFoundException
from backend.models.storyboard_models import (
    Character,
    Context,
    Frame,
    Image,
    ImageRelation,
    MainChat,
    Message,
    Project,
    Video,
    utcnow,
)


PLACEHOLDER_BASE_URL = "https://picsum.photos/seed"

# Message owners and the Message field that points at them
OWNER_FIELDS = {
    ImageRelation.FRAME: "frame_id",
    ImageRelation.CONTEXT: "context_id",
    ImageRelation.MAIN_CHAT: "main_chat_id",
}

SAMPLE_PROJECTS = [
    {
        "name": "My First Video Project",
        "videos": [
            ("Product Demo", ["Introduction", "Main Features", "Conclusion"]),
            ("Tutorial Video", ["Welcome", "Step 1"]),
        ],
        "gallery_seed": "gallery",
        "gallery_size": 6,
    },
    {
        "name": "Marketing Campaign",
        "videos": [
            ("Brand Story", ["Opening Scene"]),
        ],
        "gallery_seed": "gallery2",
        "gallery_size": 3,
    },
]


def synchronized(method: Callable) -> Callable:
    """Run a store method while holding the store lock"""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def placeholder_url(seed: str) -> str:
    return f"{PLACEHOLDER_BASE_URL}/{seed}/1792/1024"


class InMemoryStore:
    """
    Relational store for projects, videos, frames, threads and images.

    All public methods are atomic with respect to each other; the lock is
    re-entrant so operations can be composed inside one another.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._seeded = False
        self._init_tables()

    def _init_tables(self):
        self.projects: Dict[str, Project] = {}
        self.videos: Dict[str, Video] = {}
        self.contexts: Dict[str, Context] = {}
        self.frames: Dict[str, Frame] = {}
        self.main_chats: Dict[str, MainChat] = {}
        self.messages: Dict[str, Message] = {}
        self.images: Dict[str, Image] = {}
        self.characters: Dict[str, Character] = {}

        self.frame_images: Dict[str, Set[str]] = {}
        self.context_images: Dict[str, Set[str]] = {}
        self.main_chat_images: Dict[str, Set[str]] = {}
        self.gallery_images: Dict[str, Set[str]] = {}
        self.character_images: Dict[str, Set[str]] = {}

    def _tables_for(self, relation: ImageRelation):
        """(entity table, relation table) for a relation type"""
        relation = ImageRelation(relation)
        return {
            ImageRelation.FRAME: (self.frames, self.frame_images),
            ImageRelation.CONTEXT: (self.contexts, self.context_images),
            ImageRelation.GALLERY: (self.projects, self.gallery_images),
            ImageRelation.MAIN_CHAT: (self.main_chats, self.main_chat_images),
            ImageRelation.CHARACTER: (self.characters, self.character_images),
        }[relation]

    def _all_relation_tables(self) -> List[Dict[str, Set[str]]]:
        return [
            self.frame_images,
            self.context_images,
            self.main_chat_images,
            self.gallery_images,
            self.character_images,
        ]

    # ==================== Lifecycle ====================

    @synchronized
    def reset(self):
        """Drop every entity and forget that sample data was seeded"""
        self._init_tables()
        self._seeded = False
        logger.debug("In-memory store reset")

    @synchronized
    def seed_sample_data(self) -> bool:
        """
        Populate the store with sample projects once.

        Returns:
            True if data was created, False if the store was already seeded
        """
        if self._seeded:
            return False
        self._seeded = True

        for sample in SAMPLE_PROJECTS:
            project = self.create_project(sample["name"])
            for video_name, frame_titles in sample["videos"]:
                video = self.create_video(project.id, video_name)
                for title in frame_titles:
                    self.create_frame(video.id, title)

            gallery = self.gallery_images[project.id]
            for i in range(sample["gallery_size"]):
                image = self.create_image(url=placeholder_url(f"{sample['gallery_seed']}-{i}"))
                gallery.add(image.id)

        logger.info(f"Seeded sample data: {len(self.projects)} projects, {len(self.videos)} videos")
        return True

    @contextlib.contextmanager
    def transaction(self):
        """Hold the store lock across several operations"""
        with self._lock:
            yield self

    @property
    def is_seeded(self) -> bool:
        return self._seeded

    # ==================== Creation ====================

    @synchronized
    def create_project(self, name: str) -> Project:
        project = Project(name=name)
        self.projects[project.id] = project
        self.gallery_images[project.id] = set()
        return project

    @synchronized
    def create_video(self, project_id: str, name: str) -> Video:
        """Create a video with its context and a default main chat"""
        video = Video(name=name, project_id=project_id)
        self.videos[video.id] = video

        context = Context(video_id=video.id, created_at=video.created_at, updated_at=video.created_at)
        self.contexts[context.id] = context
        self.context_images[context.id] = set()

        self.create_main_chat(video.id, "Main Chat")
        return video

    @synchronized
    def create_main_chat(self, video_id: str, name: str) -> MainChat:
        main_chat = MainChat(name=name, video_id=video_id)
        self.main_chats[main_chat.id] = main_chat
        self.main_chat_images[main_chat.id] = set()
        return main_chat

    @synchronized
    def create_frame(self, video_id: str, title: str) -> Frame:
        """Append a frame at the end of the video"""
        frame = Frame(title=title, order=self.video_frame_count(video_id), video_id=video_id)
        self.frames[frame.id] = frame
        self.frame_images[frame.id] = set()
        return frame

    @synchronized
    def create_image(
        self,
        url: Optional[str] = None,
        message_id: Optional[str] = None,
        storage_id: Optional[str] = None
    ) -> Image:
        """Create an image; without a URL a unique placeholder is used"""
        seed = f"init-{uuid.uuid4().hex[:12]}"
        image = Image(
            url=url or placeholder_url(seed),
            storage_id=storage_id or f"mock-{seed}",
            message_id=message_id
        )
        self.images[image.id] = image
        return image

    @synchronized
    def create_character(self, project_id: str, name: str, description: str = "") -> Character:
        character = Character(name=name, description=description, project_id=project_id)
        self.characters[character.id] = character
        self.character_images[character.id] = set()
        return character

    @synchronized
    def create_message(
        self,
        owner_type: ImageRelation,
        owner_id: str,
        prompt: str,
        with_context: bool = False,
        attached_image_ids: Optional[List[str]] = None,
        model: Optional[str] = None,
        provider: Optional[str] = None
    ) -> Message:
        message = Message(
            prompt=prompt,
            with_context=with_context,
            attached_image_ids=list(attached_image_ids or []),
            model=model,
            provider=provider,
            **{OWNER_FIELDS[ImageRelation(owner_type)]: owner_id}
        )
        self.messages[message.id] = message
        return message

    # ==================== Lookups ====================

    def get_project(self, project_id: str) -> Optional[Project]:
        return self.projects.get(project_id)

    def get_video(self, video_id: str) -> Optional[Video]:
        return self.videos.get(video_id)

    def get_frame(self, frame_id: str) -> Optional[Frame]:
        return self.frames.get(frame_id)

    def get_main_chat(self, main_chat_id: str) -> Optional[MainChat]:
        return self.main_chats.get(main_chat_id)

    def get_image(self, image_id: str) -> Optional[Image]:
        return self.images.get(image_id)

    def get_character(self, character_id: str) -> Optional[Character]:
        return self.characters.get(character_id)

    @synchronized
    def get_context_for_video(self, video_id: str) -> Optional[Context]:
        for context in self.contexts.values():
            if context.video_id == video_id:
                return context
        return None

    @synchronized
    def list_projects(self) -> List[Project]:
        """Projects, newest first"""
        return sorted(self.projects.values(), key=lambda p: p.created_at, reverse=True)

    @synchronized
    def list_videos(self, project_id: str) -> List[Video]:
        """Videos of a project, newest first"""
        videos = [v for v in self.videos.values() if v.project_id == project_id]
        return sorted(videos, key=lambda v: v.created_at, reverse=True)

    @synchronized
    def list_frames(self, video_id: str) -> List[Frame]:
        """Frames of a video sorted by order"""
        frames = [f for f in self.frames.values() if f.video_id == video_id]
        return sorted(frames, key=lambda f: f.order)

    @synchronized
    def list_main_chats(self, video_id: str) -> List[MainChat]:
        """Main chats of a video, oldest first"""
        chats = [c for c in self.main_chats.values() if c.video_id == video_id]
        return sorted(chats, key=lambda c: c.created_at)

    @synchronized
    def list_characters(self, project_id: str) -> List[Character]:
        """Characters of a project sorted by name"""
        characters = [c for c in self.characters.values() if c.project_id == project_id]
        return sorted(characters, key=lambda c: c.name)

    @synchronized
    def list_messages(self, owner_type: ImageRelation, owner_id: str) -> List[Message]:
        """Messages of a frame, context or main chat, oldest first"""
        field = OWNER_FIELDS[ImageRelation(owner_type)]
        messages = [m for m in self.messages.values() if getattr(m, field) == owner_id]
        return sorted(messages, key=lambda m: m.created_at)

    @synchronized
    def message_images(self, message_id: str) -> List[Image]:
        """Images generated by a message"""
        return [img for img in self.images.values() if img.message_id == message_id]

    @synchronized
    def attached_images(self, message: Message) -> List[Image]:
        """Resolve a message's attached image ids, dropping deleted images"""
        return [self.images[i] for i in message.attached_image_ids if i in self.images]

    @synchronized
    def resolve_images(self, image_ids: List[str]) -> List[Image]:
        return [self.images[i] for i in image_ids if i in self.images]

    @synchronized
    def relation_owner_exists(self, relation: ImageRelation, owner_id: str) -> bool:
        entities, _ = self._tables_for(relation)
        return owner_id in entities

    @synchronized
    def relation_image_ids(self, relation: ImageRelation, owner_id: str) -> Set[str]:
        _, relations = self._tables_for(relation)
        return set(relations.get(owner_id, set()))

    @synchronized
    def relation_images(self, relation: ImageRelation, owner_id: str) -> List[Image]:
        """Existing images in a relation set"""
        _, relations = self._tables_for(relation)
        ids = relations.get(owner_id, set())
        return [self.images[i] for i in ids if i in self.images]

    # ==================== Counters ====================

    @synchronized
    def project_video_count(self, project_id: str) -> int:
        return sum(1 for v in self.videos.values() if v.project_id == project_id)

    @synchronized
    def project_image_count(self, project_id: str) -> int:
        """Frame and context images over every video of the project"""
        count = 0
        for video in self.videos.values():
            if video.project_id != project_id:
                continue
            count += self.video_image_count(video.id)
            context = self.get_context_for_video(video.id)
            if context:
                count += len(self.context_images.get(context.id, ()))
        return count

    @synchronized
    def gallery_count(self, project_id: str) -> int:
        return len(self.gallery_images.get(project_id, ()))

    @synchronized
    def video_frame_count(self, video_id: str) -> int:
        return sum(1 for f in self.frames.values() if f.video_id == video_id)

    @synchronized
    def video_image_count(self, video_id: str) -> int:
        return sum(
            len(self.frame_images.get(f.id, ()))
            for f in self.frames.values() if f.video_id == video_id
        )

    @synchronized
    def relation_count(self, relation: ImageRelation, owner_id: str) -> int:
        """Image count of a frame, context, main chat, gallery or character"""
        _, relations = self._tables_for(relation)
        return len(relations.get(owner_id, ()))

    @synchronized
    def message_count(self, owner_type: ImageRelation, owner_id: str) -> int:
        field = OWNER_FIELDS[ImageRelation(owner_type)]
        return sum(1 for m in self.messages.values() if getattr(m, field) == owner_id)

    @synchronized
    def project_character_count(self, project_id: str) -> int:
        return sum(1 for c in self.characters.values() if c.project_id == project_id)

    # ==================== Updates ====================

    @synchronized
    def rename_project(self, project_id: str, name: str) -> Optional[Project]:
        project = self.projects.get(project_id)
        if project:
            project.name = name
            project.updated_at = utcnow()
        return project

    @synchronized
    def rename_video(self, video_id: str, name: str) -> Optional[Video]:
        video = self.videos.get(video_id)
        if video:
            video.name = name
            video.updated_at = utcnow()
        return video

    @synchronized
    def rename_frame(self, frame_id: str, title: str) -> Optional[Frame]:
        frame = self.frames.get(frame_id)
        if frame:
            frame.title = title
            frame.updated_at = utcnow()
        return frame

    @synchronized
    def rename_main_chat(self, main_chat_id: str, name: str) -> Optional[MainChat]:
        main_chat = self.main_chats.get(main_chat_id)
        if main_chat:
            main_chat.name = name
            main_chat.updated_at = utcnow()
        return main_chat

    @synchronized
    def update_context_content(self, video_id: str, content: str) -> Optional[Context]:
        context = self.get_context_for_video(video_id)
        if context:
            context.content = content
            context.updated_at = utcnow()
        return context

    @synchronized
    def update_character(
        self,
        character_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None
    ) -> Optional[Character]:
        character = self.characters.get(character_id)
        if character:
            if name is not None:
                character.name = name
            if description is not None:
                character.description = description
            character.updated_at = utcnow()
        return character

    @synchronized
    def select_frame_image(self, frame_id: str, image_id: Optional[str]) -> Optional[Frame]:
        frame = self.frames.get(frame_id)
        if frame:
            frame.selected_image_id = image_id
            frame.updated_at = utcnow()
        return frame

    # ==================== Frame ordering ====================

    @synchronized
    def reorder_frame(self, frame_id: str, new_order: int) -> Optional[List[Frame]]:
        """
        Move a frame to ``new_order`` within its video.

        ``new_order`` is clamped to the last position; frames between the old
        and new position shift by one so the order stays dense.

        Returns:
            The video's frames sorted by order, or None if the frame is unknown
        """
        frame = self.frames.get(frame_id)
        if frame is None:
            return None

        frames = self.list_frames(frame.video_id)
        old_order = frame.order
        target = min(new_order, len(frames) - 1)

        if target != old_order:
            now = utcnow()
            for f in frames:
                if f.id == frame_id:
                    f.order = target
                elif old_order < target and old_order < f.order <= target:
                    f.order -= 1
                elif old_order > target and target <= f.order < old_order:
                    f.order += 1
                f.updated_at = now

        return sorted(frames, key=lambda f: f.order)

    @synchronized
    def renumber_frames(self, video_id: str):
        """Renumber a video's frames 0..N-1 keeping their relative order"""
        for index, frame in enumerate(self.list_frames(video_id)):
            frame.order = index

    # ==================== Deletion ====================

    def _purge_image(self, image_id: str):
        """Remove an image from every relation set and frame selection, then delete it"""
        for relations in self._all_relation_tables():
            for ids in relations.values():
                ids.discard(image_id)
        for frame in self.frames.values():
            if frame.selected_image_id == image_id:
                frame.selected_image_id = None
        self.images.pop(image_id, None)

    def _delete_messages(self, owner_type: ImageRelation, owner_id: str) -> Dict[str, int]:
        """Delete an owner's messages and the images they generated"""
        deleted_messages = 0
        deleted_images = 0
        for message in self.list_messages(owner_type, owner_id):
            for image in self.message_images(message.id):
                self._purge_image(image.id)
                deleted_images += 1
            del self.messages[message.id]
            deleted_messages += 1
        return {"messages": deleted_messages, "images": deleted_images}

    def _delete_video_tree(self, video_id: str) -> Dict[str, int]:
        deleted_frames = 0
        deleted_images = 0

        for frame in self.list_frames(video_id):
            deleted_images += len(self.frame_images.pop(frame.id, ()))
            self._delete_messages(ImageRelation.FRAME, frame.id)
            del self.frames[frame.id]
            deleted_frames += 1

        context = self.get_context_for_video(video_id)
        if context:
            deleted_images += len(self.context_images.pop(context.id, ()))
            self._delete_messages(ImageRelation.CONTEXT, context.id)
            del self.contexts[context.id]

        for main_chat in self.list_main_chats(video_id):
            self._delete_main_chat_tree(main_chat.id)

        del self.videos[video_id]
        return {"frames": deleted_frames, "images": deleted_images}

    def _delete_main_chat_tree(self, main_chat_id: str) -> Dict[str, int]:
        counts = self._delete_messages(ImageRelation.MAIN_CHAT, main_chat_id)
        self.main_chat_images.pop(main_chat_id, None)
        del self.main_chats[main_chat_id]
        return counts

    @synchronized
    def delete_project(self, project_id: str) -> Optional[Dict[str, int]]:
        """
        Delete a project with its videos, gallery and characters.

        Returns:
            Counts of deleted videos, frames and images, or None if unknown
        """
        if project_id not in self.projects:
            return None

        deleted = {"videos": 0, "frames": 0, "images": 0}
        for video in self.list_videos(project_id):
            counts = self._delete_video_tree(video.id)
            deleted["videos"] += 1
            deleted["frames"] += counts["frames"]
            deleted["images"] += counts["images"]

        deleted["images"] += len(self.gallery_images.pop(project_id, ()))

        for character in self.list_characters(project_id):
            self.character_images.pop(character.id, None)
            del self.characters[character.id]

        del self.projects[project_id]
        logger.info(f"Deleted project {project_id}: {deleted}")
        return deleted

    @synchronized
    def delete_video(self, video_id: str) -> Optional[Dict[str, int]]:
        """Delete a video and everything under it; returns frame and image counts"""
        if video_id not in self.videos:
            return None
        deleted = self._delete_video_tree(video_id)
        logger.info(f"Deleted video {video_id}: {deleted}")
        return deleted

    @synchronized
    def delete_frame(self, frame_id: str) -> bool:
        """Delete a frame and renumber the remaining frames of its video"""
        frame = self.frames.get(frame_id)
        if frame is None:
            return False

        self._delete_messages(ImageRelation.FRAME, frame_id)
        self.frame_images.pop(frame_id, None)
        del self.frames[frame_id]
        self.renumber_frames(frame.video_id)
        return True

    @synchronized
    def delete_main_chat(self, main_chat_id: str) -> Optional[Dict[str, int]]:
        if main_chat_id not in self.main_chats:
            return None
        return self._delete_main_chat_tree(main_chat_id)

    @synchronized
    def delete_character(self, character_id: str) -> bool:
        """Delete a character; its reference images are kept"""
        if character_id not in self.characters:
            return False
        self.character_images.pop(character_id, None)
        del self.characters[character_id]
        return True

    @synchronized
    def clear_history(self, owner_type: ImageRelation, owner_id: str) -> Dict[str, int]:
        """
        Delete the messages of a frame, context or main chat and the images
        they generated. Uploaded or copied images stay in the owner's set.
        """
        counts = self._delete_messages(owner_type, owner_id)

        if ImageRelation(owner_type) == ImageRelation.FRAME:
            frame = self.frames.get(owner_id)
            if frame and frame.selected_image_id and frame.selected_image_id not in self.images:
                frame.selected_image_id = None

        return counts

    @synchronized
    def delete_image(self, image_id: str) -> bool:
        """Remove an image from every collection and delete it"""
        if image_id not in self.images:
            return False
        self._purge_image(image_id)
        return True

    # ==================== Image relations ====================

    @synchronized
    def add_image_to_target(self, image_id: str, target_type: ImageRelation, target_id: str) -> bool:
        """
        Add an image to a relation set.

        Returns:
            False if the target entity does not exist
        """
        entities, relations = self._tables_for(target_type)
        if target_id not in entities:
            return False
        relations.setdefault(target_id, set()).add(image_id)
        return True

    @synchronized
    def remove_image_from_source(self, image_id: str, source_type: ImageRelation, source_id: str) -> bool:
        """
        Remove an image from a relation set without deleting it.

        Returns:
            False if the source relation set does not exist
        """
        _, relations = self._tables_for(source_type)
        ids = relations.get(source_id)
        if ids is None:
            return False
        ids.discard(image_id)

        if ImageRelation(source_type) == ImageRelation.FRAME:
            frame = self.frames.get(source_id)
            if frame and frame.selected_image_id == image_id:
                frame.selected_image_id = None
        return True

    @synchronized
    def copy_image(self, image_id: str, target_type: ImageRelation, target_id: str):
        """Add an image to another collection, keeping its existing memberships"""
        if not self.add_image_to_target(image_id, target_type, target_id):
            raise TargetNotFoundException(ImageRelation(target_type).value, target_id)

    @synchronized
    def move_image(
        self,
        image_id: str,
        source_type: ImageRelation,
        source_id: str,
        target_type: ImageRelation,
        target_id: str
    ):
        """
        Remove an image from the source collection and add it to the target.

        When the target does not exist the image is put back in the source
        and TargetNotFoundException is raised. A frame selection cleared by
        the removal stays cleared.
        """
        self.remove_image_from_source(image_id, source_type, source_id)
        if not self.add_image_to_target(image_id, target_type, target_id):
            self.add_image_to_target(image_id, source_type, source_id)
            raise TargetNotFoundException(ImageRelation(target_type).value, target_id)


# Global singleton instance
_store: Optional[InMemoryStore] = None


def get_store() -> InMemoryStore:
    """Get the global InMemoryStore instance."""
    global _store
    if _store is None:
        _store = InMemoryStore()
    return _store
