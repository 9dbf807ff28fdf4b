"""
Selah Backend — API Endpoint Tests
===================================

What:  End-to-end checks through the real FastAPI app.
How:   httpx.AsyncClient over ASGITransport; the DB session and (for
       `test_client`) the caller are replaced via dependency_overrides.

Covers the HTTP contract rather than service internals: status codes,
camelCase bodies, the error envelope and ownership answering 404.
"""

import httpx
import pytest

from app.dependencies import get_current_user, get_optional_user
from app.exceptions import LLMServiceError
from app.main import app
from app.services.annotation_service import annotation_service
from app.services.identity_service import identity_service
from app.services.library_service import library_service
from app.services.llm_base import LLMService


class FailingLLM(LLMService):
    async def generate(self, prompt: str) -> str:
        raise LLMServiceError(message="model unavailable")

    async def health_check(self) -> bool:
        return False


def _as(user):
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_optional_user] = lambda: user


# ══════════════════════════════════════════════════════════════════════════
# Health & public endpoints
# ══════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_health_without_gemini_key(anon_client):
    response = await anon_client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["gemini"] == "not_configured"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_request_id_is_echoed(anon_client):
    response = await anon_client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


@pytest.mark.asyncio
async def test_verse_of_day_empty_is_404(anon_client):
    response = await anon_client.get("/api/verse-of-day")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "not_found"
    assert "request_id" in body


@pytest.mark.asyncio
async def test_verse_of_day(anon_client, verses):
    response = await anon_client.get("/api/verse-of-day")
    assert response.status_code == 200
    assert set(response.json()) >= {"id", "book", "chapter", "verse", "text", "translation"}


@pytest.mark.asyncio
async def test_read_chapter_and_search(anon_client, verses):
    chapter = await anon_client.get("/api/bible/John/3")
    assert [v["verse"] for v in chapter.json()] == [16, 17]

    found = await anon_client.get("/api/bible/search/SHEPHERD")
    assert [(v["book"], v["chapter"], v["verse"]) for v in found.json()] == [("Psalms", 23, 1)]

    count = await anon_client.get("/api/bible/chapters/Psalms")
    assert count.json()["count"] == 24


@pytest.mark.asyncio
async def test_extract_references(anon_client):
    response = await anon_client.post(
        "/api/references/extract", json={"text": "Read John 3:16 and then Psalm 23:1-4."}
    )
    assert response.status_code == 200
    assert response.json()["references"] == ["John 3:16", "Psalm 23:1-4"]


# ══════════════════════════════════════════════════════════════════════════
# Authentication
# ══════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_missing_token_is_401(anon_client):
    response = await anon_client.get("/api/notes")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"] == "unauthorized"


@pytest.mark.asyncio
async def test_token_validated_by_identity_provider(anon_client, monkeypatch):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.headers["Authorization"] == "Bearer good":
            return httpx.Response(200, json={"id": "user-a", "email": "a@example.com"})
        return httpx.Response(401, json={"msg": "invalid JWT"})

    monkeypatch.setattr(identity_service, "transport", httpx.MockTransport(handler))

    ok = await anon_client.get("/api/notes", headers={"Authorization": "Bearer good"})
    assert ok.status_code == 200
    assert ok.json() == []

    bad = await anon_client.get("/api/notes", headers={"Authorization": "Bearer bad"})
    assert bad.status_code == 401


# ══════════════════════════════════════════════════════════════════════════
# Highlights & notes
# ══════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_highlight_upsert_returns_same_row(test_client, verses):
    verse_id = verses[0].id
    first = await test_client.post("/api/highlights", json={"verseId": verse_id, "color": "yellow"})
    second = await test_client.post("/api/highlights", json={"verseId": verse_id, "color": "blue"})

    assert first.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["color"] == "blue"

    listed = await test_client.get("/api/highlights")
    assert len(listed.json()) == 1


@pytest.mark.asyncio
async def test_highlight_on_missing_verse_is_404(test_client, verses):
    response = await test_client.post("/api/highlights", json={"verseId": 9999})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_someone_elses_highlight_is_noop(test_client, verses, other_user, user):
    created = await test_client.post("/api/highlights", json={"verseId": verses[0].id})
    highlight_id = created.json()["id"]

    _as(other_user)
    response = await test_client.delete(f"/api/highlights/{highlight_id}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    _as(user)
    remaining = await test_client.get("/api/highlights")
    assert [h["id"] for h in remaining.json()] == [highlight_id]


@pytest.mark.asyncio
async def test_notes_carry_total_count(test_client, verses):
    await test_client.post("/api/notes", json={"content": "First", "verseId": verses[0].id})
    await test_client.post("/api/notes", json={"content": "Second"})

    response = await test_client.get("/api/notes")
    assert response.headers["X-Total-Count"] == "2"
    assert response.headers["Cache-Control"] == "private, no-store"
    assert [n["content"] for n in response.json()] == ["Second", "First"]


@pytest.mark.asyncio
async def test_schema_errors_are_422(test_client):
    response = await test_client.post("/api/highlights", json={"verseId": 0})
    assert response.status_code == 422


# ══════════════════════════════════════════════════════════════════════════
# Livestreams
# ══════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_livestream_lifecycle(test_client, other_user, user):
    created = await test_client.post(
        "/api/livestreams",
        json={"title": "Sunday Service", "sourceUrl": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
    )
    assert created.status_code == 201
    stream = created.json()
    assert stream["sourceType"] == "youtube"
    assert stream["embedUrl"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert stream["lastViewPosition"] == 0

    moved = await test_client.patch(f"/api/livestreams/{stream['id']}/position", json={"position": 90})
    assert moved.json()["lastViewPosition"] == 90

    _as(other_user)
    foreign = await test_client.patch(f"/api/livestreams/{stream['id']}/position", json={"position": 5})
    assert foreign.status_code == 404
    assert (await test_client.get(f"/api/livestreams/{stream['id']}")).status_code == 404

    _as(user)
    again = await test_client.get(f"/api/livestreams/{stream['id']}")
    assert again.json()["lastViewPosition"] == 90


@pytest.mark.asyncio
async def test_livestream_note_defaults_reference(test_client):
    stream = (
        await test_client.post(
            "/api/livestreams", json={"title": "Vespers", "sourceUrl": "https://example.org/live.m3u8"}
        )
    ).json()
    assert stream["sourceType"] == "hls"

    note = await test_client.post(
        f"/api/livestreams/{stream['id']}/notes",
        json={"content": "Pastor read Romans 8:28 here", "timestampSeconds": 125},
    )
    assert note.status_code == 201
    assert note.json()["bibleReference"] == "Romans 8:28"
    assert note.json()["timestampSeconds"] == 125


@pytest.mark.asyncio
async def test_failed_annotation_is_503_and_recorded(test_client, monkeypatch):
    monkeypatch.setattr(annotation_service, "llm", FailingLLM())
    stream = (
        await test_client.post(
            "/api/livestreams", json={"title": "Service", "sourceUrl": "https://vimeo.com/76979871"}
        )
    ).json()

    response = await test_client.post(
        f"/api/livestreams/{stream['id']}/transcript",
        json={
            "rawText": "Turn with me to John 3:16",
            "segments": [{"startSeconds": 0, "endSeconds": 4, "text": "Turn with me to John 3:16"}],
        },
    )
    assert response.status_code == 503
    assert response.json()["error"] == "llm_service_error"

    transcript = await test_client.get(f"/api/livestreams/{stream['id']}/transcript")
    assert transcript.status_code == 200
    assert transcript.json()["status"] == "failed"
    assert transcript.json()["errorMessage"]


# ══════════════════════════════════════════════════════════════════════════
# Preferences & library
# ══════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_preferences_defaults_and_update(test_client):
    defaults = await test_client.get("/api/preferences")
    assert defaults.json()["preferredTranslation"] == "KJV"
    assert defaults.json()["themeMode"] == "light"
    assert defaults.json()["fontSize"] == "medium"

    saved = await test_client.put("/api/preferences", json={"themeMode": "dark"})
    assert saved.json()["themeMode"] == "dark"
    assert saved.json()["fontSize"] == "medium"

    invalid = await test_client.put("/api/preferences", json={"fontSize": "huge"})
    assert invalid.status_code == 422


@pytest.mark.asyncio
async def test_private_book_visibility(test_client, db):
    book = await library_service.create_book(
        db,
        title="My Imported Book",
        chapters=[("Part 1", "text")],
        owner_id="user-a",
        is_public=False,
    )
    await db.commit()

    owned = await test_client.get(f"/api/devotional-books/{book.id}")
    assert owned.status_code == 200
    assert [c["title"] for c in owned.json()["chapters"]] == ["Part 1"]

    # Without a token the optional identity is None: public books only
    app.dependency_overrides.pop(get_current_user)
    app.dependency_overrides.pop(get_optional_user)
    assert (await test_client.get(f"/api/devotional-books/{book.id}")).status_code == 404
    listed = await test_client.get("/api/devotional-books")
    assert book.id not in [b["id"] for b in listed.json()]


@pytest.mark.asyncio
async def test_devotional_today_empty_is_404(anon_client):
    assert (await anon_client.get("/api/devotionals/today")).status_code == 404
