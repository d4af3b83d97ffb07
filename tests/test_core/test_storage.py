"""Tests for the in-memory storyboard store"""
import pytest

from backend.core.exceptions import TargetNotFoundException
from backend.core.storage import InMemoryStore
from backend.models.storyboard_models import ImageRelation


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def video(memory_store):
    project = memory_store.create_project("Test Project")
    return memory_store.create_video(project.id, "Test Video")


def orders(store, video_id):
    return [(f.title, f.order) for f in store.list_frames(video_id)]


class TestSeedData:

    def test_seed_is_idempotent(self, memory_store):
        assert memory_store.seed_sample_data() is True
        assert memory_store.seed_sample_data() is False
        assert len(memory_store.projects) == 2
        assert len(memory_store.videos) == 3

    def test_seed_contents(self, memory_store):
        memory_store.seed_sample_data()
        by_name = {p.name: p for p in memory_store.projects.values()}
        first = by_name["My First Video Project"]
        second = by_name["Marketing Campaign"]

        assert memory_store.gallery_count(first.id) == 6
        assert memory_store.gallery_count(second.id) == 3
        assert memory_store.project_video_count(first.id) == 2

        videos = {v.name: v for v in memory_store.videos.values()}
        assert [f.title for f in memory_store.list_frames(videos["Product Demo"].id)] == [
            "Introduction", "Main Features", "Conclusion"
        ]
        assert memory_store.video_frame_count(videos["Tutorial Video"].id) == 2
        assert memory_store.video_frame_count(videos["Brand Story"].id) == 1

        gallery_urls = {img.url for img in memory_store.relation_images(ImageRelation.GALLERY, first.id)}
        assert "https://picsum.photos/seed/gallery-0/1792/1024" in gallery_urls

    def test_reset(self, memory_store):
        memory_store.seed_sample_data()
        memory_store.reset()
        assert memory_store.projects == {}
        assert memory_store.is_seeded is False
        assert memory_store.seed_sample_data() is True


class TestCreation:

    def test_video_gets_context_and_main_chat(self, memory_store, video):
        context = memory_store.get_context_for_video(video.id)
        assert context is not None
        assert context.content == ""
        assert memory_store.relation_count(ImageRelation.CONTEXT, context.id) == 0

        chats = memory_store.list_main_chats(video.id)
        assert [c.name for c in chats] == ["Main Chat"]

    def test_frames_append(self, memory_store, video):
        for title in ["A", "B", "C"]:
            memory_store.create_frame(video.id, title)
        assert orders(memory_store, video.id) == [("A", 0), ("B", 1), ("C", 2)]

    def test_default_image_url(self, memory_store):
        a = memory_store.create_image()
        b = memory_store.create_image()
        assert a.url.startswith("https://picsum.photos/seed/init-")
        assert a.url != b.url
        assert a.storage_id.startswith("mock-")
        assert a.message_id is None


class TestReorder:

    @pytest.fixture
    def frames(self, memory_store, video):
        return [memory_store.create_frame(video.id, t) for t in ["A", "B", "C", "D"]]

    def test_move_forward(self, memory_store, video, frames):
        memory_store.reorder_frame(frames[0].id, 2)
        assert orders(memory_store, video.id) == [("B", 0), ("C", 1), ("A", 2), ("D", 3)]

    def test_move_backward(self, memory_store, video, frames):
        result = memory_store.reorder_frame(frames[3].id, 1)
        assert [f.title for f in result] == ["A", "D", "B", "C"]
        assert orders(memory_store, video.id) == [("A", 0), ("D", 1), ("B", 2), ("C", 3)]

    def test_clamped_to_last(self, memory_store, video, frames):
        memory_store.reorder_frame(frames[1].id, 99)
        assert orders(memory_store, video.id) == [("A", 0), ("C", 1), ("D", 2), ("B", 3)]

    def test_same_position_is_noop(self, memory_store, video, frames):
        memory_store.reorder_frame(frames[2].id, 2)
        assert orders(memory_store, video.id) == [("A", 0), ("B", 1), ("C", 2), ("D", 3)]

    def test_unknown_frame(self, memory_store):
        assert memory_store.reorder_frame("missing", 0) is None

    def test_delete_renumbers(self, memory_store, video, frames):
        assert memory_store.delete_frame(frames[1].id) is True
        assert orders(memory_store, video.id) == [("A", 0), ("C", 1), ("D", 2)]


class TestHistoryAndDeletes:

    def _generate(self, store, owner_type, owner_id, count=2):
        message = store.create_message(owner_type, owner_id, prompt="p")
        images = []
        for _ in range(count):
            image = store.create_image(message_id=message.id)
            store.add_image_to_target(image.id, owner_type, owner_id)
            images.append(image)
        return message, images

    def test_clear_frame_history_keeps_uploads(self, memory_store, video):
        frame = memory_store.create_frame(video.id, "A")
        _, generated = self._generate(memory_store, ImageRelation.FRAME, frame.id)
        upload = memory_store.create_image()
        memory_store.add_image_to_target(upload.id, ImageRelation.FRAME, frame.id)
        memory_store.select_frame_image(frame.id, generated[0].id)

        counts = memory_store.clear_history(ImageRelation.FRAME, frame.id)

        assert counts == {"messages": 1, "images": 2}
        assert memory_store.relation_image_ids(ImageRelation.FRAME, frame.id) == {upload.id}
        assert memory_store.get_frame(frame.id).selected_image_id is None
        assert memory_store.list_messages(ImageRelation.FRAME, frame.id) == []

    def test_delete_main_chat(self, memory_store, video):
        chat = memory_store.create_main_chat(video.id, "Ideas")
        self._generate(memory_store, ImageRelation.MAIN_CHAT, chat.id, count=4)

        assert memory_store.delete_main_chat(chat.id) == {"messages": 1, "images": 4}
        assert memory_store.get_main_chat(chat.id) is None
        assert chat.id not in memory_store.main_chat_images
        assert memory_store.delete_main_chat(chat.id) is None

    def test_delete_video_counts(self, memory_store, video):
        frame = memory_store.create_frame(video.id, "A")
        self._generate(memory_store, ImageRelation.FRAME, frame.id, count=3)
        context = memory_store.get_context_for_video(video.id)
        memory_store.add_image_to_target(memory_store.create_image().id, ImageRelation.CONTEXT, context.id)

        assert memory_store.delete_video(video.id) == {"frames": 1, "images": 4}
        assert memory_store.frames == {}
        assert memory_store.contexts == {}
        assert memory_store.main_chats == {}
        assert memory_store.messages == {}

    def test_delete_project_cascades(self, memory_store):
        memory_store.seed_sample_data()
        project = next(p for p in memory_store.projects.values() if p.name == "My First Video Project")
        character = memory_store.create_character(project.id, "Hero")

        deleted = memory_store.delete_project(project.id)

        assert deleted == {"videos": 2, "frames": 5, "images": 6}
        assert memory_store.get_character(character.id) is None
        assert project.id not in memory_store.gallery_images
        assert len(memory_store.videos) == 1

    def test_delete_image_everywhere(self, memory_store, video):
        frame = memory_store.create_frame(video.id, "A")
        image = memory_store.create_image()
        memory_store.add_image_to_target(image.id, ImageRelation.FRAME, frame.id)
        memory_store.add_image_to_target(image.id, ImageRelation.GALLERY, video.project_id)
        memory_store.select_frame_image(frame.id, image.id)

        assert memory_store.delete_image(image.id) is True
        assert memory_store.relation_count(ImageRelation.FRAME, frame.id) == 0
        assert memory_store.gallery_count(video.project_id) == 0
        assert memory_store.get_frame(frame.id).selected_image_id is None
        assert memory_store.delete_image(image.id) is False


class TestImageRelations:

    @pytest.fixture
    def setup(self, memory_store, video):
        frame_a = memory_store.create_frame(video.id, "A")
        frame_b = memory_store.create_frame(video.id, "B")
        image = memory_store.create_image()
        memory_store.add_image_to_target(image.id, ImageRelation.FRAME, frame_a.id)
        return frame_a, frame_b, image

    def test_relation_owner_exists(self, memory_store, setup, video):
        frame_a, _, _ = setup
        assert memory_store.relation_owner_exists(ImageRelation.FRAME, frame_a.id) is True
        assert memory_store.relation_owner_exists(ImageRelation.GALLERY, video.project_id) is True

        memory_store.delete_frame(frame_a.id)
        assert memory_store.relation_owner_exists(ImageRelation.FRAME, frame_a.id) is False

    def test_add_to_missing_target(self, memory_store, setup):
        _, _, image = setup
        assert memory_store.add_image_to_target(image.id, ImageRelation.CHARACTER, "nope") is False

    def test_copy_keeps_source(self, memory_store, setup, video):
        frame_a, _, image = setup
        memory_store.copy_image(image.id, ImageRelation.GALLERY, video.project_id)

        assert image.id in memory_store.relation_image_ids(ImageRelation.FRAME, frame_a.id)
        assert image.id in memory_store.relation_image_ids(ImageRelation.GALLERY, video.project_id)

    def test_move(self, memory_store, setup):
        frame_a, frame_b, image = setup
        memory_store.move_image(image.id, ImageRelation.FRAME, frame_a.id, ImageRelation.FRAME, frame_b.id)

        assert memory_store.relation_image_ids(ImageRelation.FRAME, frame_a.id) == set()
        assert memory_store.relation_image_ids(ImageRelation.FRAME, frame_b.id) == {image.id}

    def test_move_to_missing_target_rolls_back(self, memory_store, setup):
        frame_a, _, image = setup

        with pytest.raises(TargetNotFoundException) as exc_info:
            memory_store.move_image(image.id, ImageRelation.FRAME, frame_a.id, ImageRelation.CONTEXT, "nope")

        assert exc_info.value.error_code == "TARGET_NOT_FOUND"
        assert exc_info.value.message == "Target context not found"
        assert memory_store.relation_image_ids(ImageRelation.FRAME, frame_a.id) == {image.id}

    def test_failed_move_leaves_selection_cleared(self, memory_store, setup):
        frame_a, _, image = setup
        memory_store.select_frame_image(frame_a.id, image.id)

        with pytest.raises(TargetNotFoundException):
            memory_store.move_image(image.id, ImageRelation.FRAME, frame_a.id, ImageRelation.FRAME, "nope")

        assert memory_store.relation_image_ids(ImageRelation.FRAME, frame_a.id) == {image.id}
        assert memory_store.get_frame(frame_a.id).selected_image_id is None

    def test_remove_unselects(self, memory_store, setup):
        frame_a, _, image = setup
        memory_store.select_frame_image(frame_a.id, image.id)

        assert memory_store.remove_image_from_source(image.id, ImageRelation.FRAME, frame_a.id) is True
        assert memory_store.get_frame(frame_a.id).selected_image_id is None
        assert memory_store.get_image(image.id) is not None

    def test_remove_from_missing_source(self, memory_store, setup):
        _, _, image = setup
        assert memory_store.remove_image_from_source(image.id, ImageRelation.GALLERY, "nope") is False

    def test_image_in_many_sets(self, memory_store, setup, video):
        frame_a, frame_b, image = setup
        memory_store.copy_image(image.id, ImageRelation.FRAME, frame_b.id)
        context = memory_store.get_context_for_video(video.id)
        memory_store.copy_image(image.id, ImageRelation.CONTEXT, context.id)

        assert memory_store.video_image_count(video.id) == 2
        assert memory_store.project_image_count(video.project_id) == 3
