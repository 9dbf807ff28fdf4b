"""
Selah Backend — Livestream Service Tests
=========================================

What we test:
    ✅ Source type detection on create
    ✅ Ownership: another user's livestream is indistinguishable from a missing one
    ✅ Notes default their bibleReference to the first reference in the content
    ✅ Detected hymns link to the hymnal by title when possible
    ✅ Deleting a livestream removes every child row (and only its own)
"""

import pytest
from sqlalchemy import func, select

from app.exceptions import NotFoundError
from app.models.hymn import Hymn
from app.models.livestream import (
    DetectedHymn,
    DetectedVerse,
    Livestream,
    LivestreamNote,
    Transcript,
    TranscriptSegment,
)
from app.services.livestream_service import livestream_service


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _stream(db, user_id="user-a", url="https://www.youtube.com/watch?v=abc123"):
    return await livestream_service.create_livestream(db, user_id, title="Sunday Service", source_url=url)


class TestLivestreams:

    @pytest.mark.asyncio
    async def test_create_detects_source_type(self, db):
        youtube = await _stream(db)
        hls = await _stream(db, url="https://cdn.example.org/live/index.m3u8")

        assert youtube.source_type == "youtube"
        assert hls.source_type == "hls"
        assert youtube.last_view_position == 0

    @pytest.mark.asyncio
    async def test_other_user_sees_not_found(self, db):
        stream = await _stream(db)

        with pytest.raises(NotFoundError):
            await livestream_service.get_livestream(db, stream.id, "user-b")
        with pytest.raises(NotFoundError):
            await livestream_service.update_position(db, stream.id, "user-b", 90)
        with pytest.raises(NotFoundError):
            await livestream_service.create_note(db, stream.id, "user-b", "sneaky")

    @pytest.mark.asyncio
    async def test_update_position_last_write_wins(self, db):
        stream = await _stream(db)
        await livestream_service.update_position(db, stream.id, "user-a", 30)
        await livestream_service.update_position(db, stream.id, "user-a", 60)

        fetched = await livestream_service.get_livestream(db, stream.id, "user-a")
        assert fetched.last_view_position == 60

    @pytest.mark.asyncio
    async def test_list_only_own_streams(self, db):
        await _stream(db)
        await _stream(db, user_id="user-b")
        streams = await livestream_service.list_livestreams(db, "user-a")
        assert [s.user_id for s in streams] == ["user-a"]


class TestLivestreamNotes:

    @pytest.mark.asyncio
    async def test_reference_defaults_to_first_in_content(self, db):
        stream = await _stream(db)
        note = await livestream_service.create_note(
            db, stream.id, "user-a", "Grace John 3:16 and Romans 5:8", timestamp_seconds=95
        )
        assert note.bible_reference == "John 3:16"
        assert note.timestamp_seconds == 95

    @pytest.mark.asyncio
    async def test_explicit_reference_wins(self, db):
        stream = await _stream(db)
        note = await livestream_service.create_note(
            db, stream.id, "user-a", "John 3:16", bible_reference="Psalm 23:1"
        )
        assert note.bible_reference == "Psalm 23:1"

    @pytest.mark.asyncio
    async def test_no_reference_in_content(self, db):
        stream = await _stream(db)
        note = await livestream_service.create_note(db, stream.id, "user-a", "Great worship today")
        assert note.bible_reference is None

    @pytest.mark.asyncio
    async def test_notes_ordered_by_timestamp(self, db):
        stream = await _stream(db)
        for ts in (120, 5, 60):
            await livestream_service.create_note(db, stream.id, "user-a", f"at {ts}", timestamp_seconds=ts)

        notes = await livestream_service.list_notes(db, stream.id, "user-a")
        assert [n.timestamp_seconds for n in notes] == [5, 60, 120]

    @pytest.mark.asyncio
    async def test_delete_note_scoped(self, db):
        stream = await _stream(db)
        note = await livestream_service.create_note(db, stream.id, "user-a", "mine")

        assert await livestream_service.delete_note(db, note.id, "user-b") == 0
        assert await livestream_service.delete_note(db, note.id, "user-a") == 1


class TestDetections:

    @pytest.mark.asyncio
    async def test_detected_hymn_matches_title(self, db):
        db.add(Hymn(title="Amazing Grace", lyrics="Amazing grace, how sweet the sound", tags=["grace"]))
        await db.flush()
        stream = await _stream(db)

        matched = await livestream_service.add_detected_hymn(db, stream.id, "user-a", title="amazing grace")
        unmatched = await livestream_service.add_detected_hymn(db, stream.id, "user-a", title="Unknown Song")

        assert matched.hymn_id is not None
        assert matched.title == "amazing grace"
        assert unmatched.hymn_id is None

    @pytest.mark.asyncio
    async def test_explicit_unknown_hymn_id(self, db):
        stream = await _stream(db)
        with pytest.raises(NotFoundError):
            await livestream_service.add_detected_hymn(db, stream.id, "user-a", title="X", hymn_id=999)

    @pytest.mark.asyncio
    async def test_detected_verse_requires_ownership(self, db):
        stream = await _stream(db)
        with pytest.raises(NotFoundError):
            await livestream_service.add_detected_verse(db, stream.id, "user-b", "John 3:16")


class TestCascadeDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_all_children(self, db):
        stream = await _stream(db)
        keep = await _stream(db)
        for target in (stream, keep):
            await livestream_service.create_note(db, target.id, "user-a", "John 3:16", timestamp_seconds=10)
            await livestream_service.add_detected_verse(db, target.id, "user-a", "John 3:16", 10)
            await livestream_service.add_detected_hymn(db, target.id, "user-a", title="Amazing Grace")
            transcript = Transcript(livestream_id=target.id, status="completed", raw_text="...")
            db.add(transcript)
            await db.flush()
            db.add(TranscriptSegment(transcript_id=transcript.id, start_seconds=0, end_seconds=5, text="..."))
            await db.flush()

        assert await livestream_service.delete_livestream(db, stream.id, "user-a") == 1

        for model in (LivestreamNote, DetectedVerse, DetectedHymn, Transcript, TranscriptSegment):
            assert await _count(db, model) == 1, model.__name__
        assert await _count(db, Livestream) == 1

        with pytest.raises(NotFoundError):
            await livestream_service.list_notes(db, stream.id, "user-a")

    @pytest.mark.asyncio
    async def test_delete_by_other_user_is_noop(self, db):
        stream = await _stream(db)
        await livestream_service.create_note(db, stream.id, "user-a", "keep me")

        assert await livestream_service.delete_livestream(db, stream.id, "user-b") == 0
        assert await _count(db, LivestreamNote) == 1
        assert await _count(db, Livestream) == 1
