"""
Selah Backend — Seeder Tests
=============================
"""

import aiosqlite
import pytest
from sqlalchemy import func, select

from app.config import settings
from app.models.bible import BibleVerse
from app.models.hymn import Hymn
from app.seed.data import DAILY_DEVOTIONALS, SAMPLE_HYMNS, SAMPLE_VERSES
from app.seed.seeder import (
    book_name,
    clean_verse_text,
    infer_tags,
    parse_hymn_file,
    run_seed,
    seed_bible,
    seed_hymns,
)

HYMN_FILE = """<song>
<title>Be Thou My Vision</title>
<aka>Rop tu mo baile</aka>
<lyrics>[V1]
 Be Thou my vision, O Lord of my heart;
[V2]
 Be Thou my wisdom, and Thou my true word;
</lyrics>
</song>
"""


@pytest.fixture
def no_seed_sources(monkeypatch):
    monkeypatch.setattr(settings, "seed_bible_sqlite_path", None)
    monkeypatch.setattr(settings, "seed_hymns_dir", None)


class TestParsing:

    def test_parse_hymn_file(self):
        parsed = parse_hymn_file(HYMN_FILE)
        assert parsed["title"] == "Be Thou My Vision"
        assert parsed["aka"] == "Rop tu mo baile"
        assert "[V1]" not in parsed["lyrics"]
        assert parsed["lyrics"].startswith("Be Thou my vision")

    def test_missing_title_is_skipped(self):
        assert parse_hymn_file("<song><lyrics>words</lyrics></song>") is None

    def test_infer_tags(self):
        assert "faith" in infer_tags("Trust and Obey", "When we walk with the Lord")
        assert infer_tags("Untitled", "la la") == ["hymn"]

    def test_clean_verse_text(self):
        assert clean_verse_text("¶ In the [beginning] God ") == "In the beginning God"

    def test_book_name(self):
        assert book_name(1) == "Genesis"
        assert book_name("43") == "John"
        assert book_name("Psalms") == "Psalms"


class TestRunSeed:

    @pytest.mark.asyncio
    async def test_first_run_inserts_samples(self, db, no_seed_sources):
        counts = await run_seed(db)
        assert counts == {
            "bible_verses": len(SAMPLE_VERSES),
            "hymns": len(SAMPLE_HYMNS),
            "devotional_books": 1,
            "daily_devotionals": len(DAILY_DEVOTIONALS),
        }

    @pytest.mark.asyncio
    async def test_second_run_inserts_nothing(self, db, no_seed_sources):
        await run_seed(db)
        await db.commit()

        counts = await run_seed(db)
        assert set(counts.values()) == {0}
        total = (await db.execute(select(func.count()).select_from(Hymn))).scalar_one()
        assert total == len(SAMPLE_HYMNS)


class TestExternalSources:

    @pytest.mark.asyncio
    async def test_bible_from_sqlite_file(self, db, tmp_path, monkeypatch):
        path = tmp_path / "bible.sqlite"
        async with aiosqlite.connect(path) as conn:
            await conn.execute("CREATE TABLE verses (book INTEGER, chapter INTEGER, verse INTEGER, text TEXT)")
            await conn.executemany(
                "INSERT INTO verses VALUES (?, ?, ?, ?)",
                [
                    (1, 1, 1, "¶ In the beginning God created the heaven and the earth."),
                    (43, 3, 16, "For God so loved the world"),
                ],
            )
            await conn.commit()
        monkeypatch.setattr(settings, "seed_bible_sqlite_path", str(path))

        assert await seed_bible(db) == 2
        rows = (await db.execute(select(BibleVerse).order_by(BibleVerse.id))).scalars().all()
        assert [(v.book, v.chapter, v.verse) for v in rows] == [("Genesis", 1, 1), ("John", 3, 16)]
        assert rows[0].text.startswith("In the beginning")

    @pytest.mark.asyncio
    async def test_missing_sqlite_file_falls_back_to_sample(self, db, tmp_path, monkeypatch):
        monkeypatch.setattr(settings, "seed_bible_sqlite_path", str(tmp_path / "absent.sqlite"))
        assert await seed_bible(db) == len(SAMPLE_VERSES)

    @pytest.mark.asyncio
    async def test_hymns_from_directory(self, db, tmp_path, monkeypatch):
        (tmp_path / "a.xml").write_text(HYMN_FILE, encoding="utf-8")
        (tmp_path / "b.xml").write_text(HYMN_FILE.replace("Be Thou", "BE THOU", 1), encoding="utf-8")
        (tmp_path / "broken.xml").write_text("<song><title>No lyrics</title></song>", encoding="utf-8")
        monkeypatch.setattr(settings, "seed_hymns_dir", str(tmp_path))

        assert await seed_hymns(db) == 1
        [hymn] = (await db.execute(select(Hymn))).scalars().all()
        assert hymn.title == "Be Thou My Vision"
        assert "kingship" in hymn.tags
