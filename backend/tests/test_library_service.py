"""
Selah Backend — Hymnal, Library & Preferences Service Tests
============================================================
"""

from datetime import date

import pytest
import pytest_asyncio

from app.exceptions import NotFoundError
from app.models.hymn import Hymn
from app.models.library import DailyDevotional
from app.services.hymn_service import hymn_service
from app.services.library_service import library_service
from app.services.preferences_service import preferences_service


@pytest_asyncio.fixture
async def hymns(db):
    rows = [
        Hymn(title="Amazing Grace", lyrics="Amazing grace...", composer="John Newton", tags=["grace", "Classic"]),
        Hymn(title="Be Thou My Vision", lyrics="Be Thou my vision...", tags=["worship"]),
        Hymn(title="It Is Well", lyrics="When peace like a river...", composer="Horatio Spafford", tags=["peace"]),
    ]
    db.add_all(rows)
    await db.commit()
    return rows


class TestHymnal:

    @pytest.mark.asyncio
    async def test_search_title_or_composer(self, db, hymns):
        assert [h.title for h in await hymn_service.list_hymns(db, q="spafford")] == ["It Is Well"]
        assert [h.title for h in await hymn_service.list_hymns(db, q="grace")] == ["Amazing Grace"]

    @pytest.mark.asyncio
    async def test_tag_filter_is_case_insensitive(self, db, hymns):
        assert [h.title for h in await hymn_service.list_hymns(db, tag="classic")] == ["Amazing Grace"]

    @pytest.mark.asyncio
    async def test_list_tags(self, db, hymns):
        assert await hymn_service.list_tags(db) == ["Classic", "grace", "peace", "worship"]

    @pytest.mark.asyncio
    async def test_save_is_idempotent_and_unsave_by_hymn_id(self, db, hymns):
        first = await hymn_service.save_hymn(db, "user-a", hymns[0].id)
        second = await hymn_service.save_hymn(db, "user-a", hymns[0].id)
        assert first.id == second.id

        assert await hymn_service.unsave_hymn(db, hymns[0].id, "user-b") == 0
        assert await hymn_service.unsave_hymn(db, hymns[0].id, "user-a") == 1
        assert await hymn_service.list_saved(db, "user-a") == []

    @pytest.mark.asyncio
    async def test_save_unknown_hymn(self, db):
        with pytest.raises(NotFoundError):
            await hymn_service.save_hymn(db, "user-a", 404)


class TestPlaylists:

    @pytest.mark.asyncio
    async def test_items_keep_order_and_allow_repeats(self, db, hymns):
        playlist = await hymn_service.create_playlist(db, "user-a", "  Sunday  ")
        for hymn in (hymns[2], hymns[0], hymns[2]):
            await hymn_service.add_hymn_to_playlist(db, playlist.id, "user-a", hymn.id)

        detail = await hymn_service.get_playlist(db, playlist.id, "user-a")
        assert detail.title == "Sunday"
        assert [h.title for h in detail.hymns] == ["It Is Well", "Amazing Grace", "It Is Well"]

    @pytest.mark.asyncio
    async def test_other_users_playlist(self, db, hymns):
        playlist = await hymn_service.create_playlist(db, "user-a", "Mine")

        with pytest.raises(NotFoundError):
            await hymn_service.get_playlist(db, playlist.id, "user-b")
        with pytest.raises(NotFoundError):
            await hymn_service.add_hymn_to_playlist(db, playlist.id, "user-b", hymns[0].id)
        assert await hymn_service.delete_playlist(db, playlist.id, "user-b") == 0
        assert await hymn_service.delete_playlist(db, playlist.id, "user-a") == 1


class TestLibrary:

    @pytest.mark.asyncio
    async def test_progress_upsert(self, db):
        book = await library_service.create_book(db, title="Psalms Daily", chapters=[("One", "a"), ("Two", "b")])
        _, chapters = await library_service.get_book(db, book.id, "user-a")

        first = await library_service.save_progress(db, "user-a", book.id, chapters[0].id)
        second = await library_service.save_progress(db, "user-a", book.id, chapters[1].id)
        assert first.id == second.id
        assert (await library_service.get_progress(db, "user-a", book.id)).current_chapter_id == chapters[1].id

    @pytest.mark.asyncio
    async def test_progress_chapter_must_belong_to_book(self, db):
        book = await library_service.create_book(db, title="A", chapters=[("One", "a")])
        other = await library_service.create_book(db, title="B", chapters=[("One", "b")])
        _, other_chapters = await library_service.get_book(db, other.id, None)

        with pytest.raises(NotFoundError):
            await library_service.save_progress(db, "user-a", book.id, other_chapters[0].id)

    @pytest.mark.asyncio
    async def test_book_highlights_are_scoped(self, db):
        book = await library_service.create_book(db, title="A", chapters=[("One", "some text")])
        _, [chapter] = await library_service.get_book(db, book.id, None)

        highlight = await library_service.create_highlight(db, "user-a", chapter.id, 0, 4)
        assert await library_service.delete_highlight(db, highlight.id, "user-b") == 0
        assert [h.id for h in await library_service.list_highlights(db, "user-a", chapter.id)] == [highlight.id]


class TestDailyDevotional:

    async def _seed(self, db, days):
        db.add_all(
            DailyDevotional(
                day_of_year=day,
                title=f"Day {day}",
                scripture_reference="Psalms 46:10",
                scripture_text="Be still, and know that I am God.",
                reflection="Stillness is an act of trust.",
                prayer="Lord, quiet my heart.",
            )
            for day in days
        )
        await db.flush()

    @pytest.mark.asyncio
    async def test_exact_day(self, db):
        await self._seed(db, [1, 2, 3])
        devotional = await library_service.get_devotional_for_day(db, today=date(2026, 1, 2))
        assert devotional.title == "Day 2"

    @pytest.mark.asyncio
    async def test_cycles_when_day_missing(self, db):
        await self._seed(db, [1, 2, 3])
        # Feb 1 is day 32: (32 - 1) % 3 == 1 → second reading
        devotional = await library_service.get_devotional_for_day(db, today=date(2026, 2, 1))
        assert devotional.title == "Day 2"

    @pytest.mark.asyncio
    async def test_none_seeded(self, db):
        with pytest.raises(NotFoundError):
            await library_service.get_devotional_for_day(db, today=date(2026, 1, 1))


class TestPreferences:

    @pytest.mark.asyncio
    async def test_defaults_are_not_persisted(self, db):
        prefs = await preferences_service.get_preferences(db, "user-a")
        assert (prefs.preferred_translation, prefs.theme_mode, prefs.font_size) == ("KJV", "light", "medium")

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, db):
        await preferences_service.save_preferences(db, "user-a", theme_mode="dark")
        prefs = await preferences_service.save_preferences(db, "user-a", font_size="large")
        assert (prefs.theme_mode, prefs.font_size) == ("dark", "large")
