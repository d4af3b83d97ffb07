"""Tests for the video endpoints"""


class TestVideosAPI:

    def test_list_videos(self, client, sample_project):
        response = client.get(f"/projects/{sample_project['id']}/videos")

        assert response.status_code == 200
        assert {v["name"] for v in response.json()} == {"Product Demo", "Tutorial Video"}

    def test_list_videos_missing_project(self, client):
        assert client.get("/projects/nope/videos").status_code == 404

    def test_create_video(self, client, sample_project):
        response = client.post(f"/projects/{sample_project['id']}/videos", json={"name": "Trailer"})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Trailer"
        assert data["frames"] == []
        assert data["context"]["message_count"] == 0

        detail = client.get(f"/videos/{data['id']}").json()
        assert detail["project_id"] == sample_project["id"]
        assert detail["context"]["id"] == data["context"]["id"]
        assert detail["context"]["content"] == ""
        assert [c["name"] for c in detail["main_chats"]] == ["Main Chat"]

    def test_create_video_blank_name(self, client, sample_project):
        response = client.post(f"/projects/{sample_project['id']}/videos", json={"name": ""})
        assert response.status_code == 400

    def test_create_video_missing_project(self, client):
        assert client.post("/projects/nope/videos", json={"name": "x"}).status_code == 404

    def test_get_video(self, client, sample_video):
        assert [f["title"] for f in sample_video["frames"]] == ["Introduction", "Main Features", "Conclusion"]
        assert [f["order"] for f in sample_video["frames"]] == [0, 1, 2]
        assert sample_video["frames"][0]["selected_image"] is None
        assert sample_video["context"]["image_count"] == 0

    def test_rename_video(self, client, sample_video):
        response = client.put(f"/videos/{sample_video['id']}", json={"name": "Demo v2"})

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Demo v2"
        assert data["project_id"] == sample_video["project_id"]

    def test_delete_video(self, client, sample_video):
        response = client.delete(f"/videos/{sample_video['id']}")

        assert response.status_code == 200
        assert response.json()["deleted"] == {"frames": 3, "images": 0}
        assert client.get(f"/videos/{sample_video['id']}").status_code == 404
        frame_id = sample_video["frames"][0]["id"]
        assert client.get(f"/frames/{frame_id}/images").status_code == 404

    def test_delete_missing_video(self, client):
        assert client.delete("/videos/nope").status_code == 404
