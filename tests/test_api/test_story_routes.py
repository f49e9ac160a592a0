"""
Tests for Story and Page Endpoints

Tests for panelcraft/api/routers/stories.py, pages.py, ocr.py and export.py
"""


class TestStories:
    """Tests for /api/stories."""

    def test_list(self, client, owned_story):
        response = client.get("/api/stories")

        assert response.status_code == 200
        stories = response.json()["stories"]
        assert [s["slug"] for s in stories] == ["comic-abc123"]
        assert stories[0]["pageCount"] == 3
        assert stories[0]["coverImage"].endswith("/p1.jpg")

    def test_get_public(self, client, owned_story, auth):
        """Test anyone can read a story; only the owner is flagged as owner."""
        auth.user_id = None

        response = client.get("/api/stories/comic-abc123")

        assert response.status_code == 200
        data = response.json()
        assert data["isOwner"] is False
        assert [p["pageNumber"] for p in data["pages"]] == [1, 2, 3]
        assert data["story"]["style"] == "manga"

    def test_get_as_owner(self, client, owned_story):
        assert client.get("/api/stories/comic-abc123").json()["isOwner"] is True

    def test_get_missing(self, client):
        response = client.get("/api/stories/comic-nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Story not found", "errorType": "not_found"}

    def test_update(self, client, owned_story):
        response = client.put("/api/stories/comic-abc123", json={"title": "Renamed", "summary": "Plot"})

        assert response.status_code == 200
        story = response.json()["story"]
        assert story["title"] == "Renamed"
        assert story["summary"] == "Plot"

    def test_update_nothing(self, client, owned_story):
        response = client.put("/api/stories/comic-abc123", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"

    def test_update_not_owner(self, client, owned_story, auth):
        auth.user_id = "user-2"
        assert client.put("/api/stories/comic-abc123", json={"title": "X"}).status_code == 403

    def test_delete(self, client, repository, owned_story):
        response = client.delete("/api/stories/comic-abc123")

        assert response.json() == {"success": True}
        assert repository.stories == {}

    def test_characters(self, client, owned_story):
        response = client.get("/api/stories/comic-abc123/characters")

        assert response.json()["characterImages"] == [
            "https://chars.test/a.png",
            "https://chars.test/b.png",
            "https://chars.test/c.png",
        ]


class TestPages:
    """Tests for /api/pages."""

    def test_delete_page(self, client, repository, owned_story):
        page = [p for p in repository.pages.values() if p.page_number == 2][0]

        response = client.delete(f"/api/pages/{page.id}")

        assert response.json() == {"success": True, "pageId": page.id, "pageNumber": 2}
        assert sorted(p.page_number for p in repository.pages.values()) == [1, 3]


class TestOCR:
    """Tests for /api/ocr."""

    def test_page(self, client, repository, owned_story):
        page = [p for p in repository.pages.values() if p.page_number == 1][0]

        response = client.post("/api/ocr", json={"pageId": page.id})

        assert response.status_code == 200
        result = response.json()["result"]
        assert result["fullText"] == "HELLO WORLD"
        assert result["textBlocks"][0]["boundingBox"]["vertices"][0] == {"x": 10, "y": 10}

        stored = client.get(f"/api/ocr/{page.id}").json()
        assert [b["text"] for b in stored["textBlocks"]] == ["HELLO", "WORLD"]

    def test_story(self, client, owned_story):
        response = client.post("/api/ocr", json={"storyId": owned_story.slug})

        assert response.json()["message"] == "Processed 3 pages"
        assert len(response.json()["results"]) == 3

    def test_requires_target(self, client):
        response = client.post("/api/ocr", json={})

        assert response.status_code == 400
        assert response.json()["errorType"] == "validation_error"


class TestExport:
    """Tests for /api/download-pdf."""

    def test_download(self, client, owned_story, monkeypatch):
        async def fake_export(story_with_pages):
            return b"%PDF-1.4 fake"

        monkeypatch.setattr("panelcraft.api.routers.export.export_story_pdf", fake_export)

        response = client.get("/api/download-pdf", params={"storySlug": owned_story.slug})

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="Comic-Abc123.pdf"'
        assert response.content == b"%PDF-1.4 fake"

    def test_missing_slug(self, client):
        response = client.get("/api/download-pdf")
        assert response.status_code == 400

    def test_no_images(self, client, repository):
        story = repository.add_story("comic-blank", "user-1")
        repository.add_page(story, 1, image=None)

        response = client.get("/api/download-pdf", params={"storySlug": "comic-blank"})

        assert response.status_code == 400
        assert response.json()["error"] == "No images to download"


class TestHealth:
    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "healthy"}


class TestErrorEnvelope:
    """Tests that every error response carries errorType."""

    def test_unexpected_failure(self, client, repository, monkeypatch):
        async def broken(user_id):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(repository, "list_stories", broken)

        response = client.get("/api/stories")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch stories", "errorType": "api_error"}

    def test_unauthenticated(self, client, auth):
        auth.user_id = None

        response = client.delete("/api/stories/comic-abc123")

        assert response.status_code == 401
        assert response.json()["errorType"] == "unauthorized"

    def test_unknown_route(self, client):
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json()["errorType"] == "not_found"
