"""
Selah Backend — Seeder
=======================

What:  Idempotent population of the shared reference tables.
How:   Each step first asks the database whether its rows already exist
       and inserts only what is missing. Nothing is remembered between
       runs, so a wiped table is refilled on the next startup.

Sources:
    Bible verses   SEED_BIBLE_SQLITE_PATH (table `verses(book, chapter, verse, text)`,
                   numeric books mapped through BOOK_NAMES) via aiosqlite,
                   else the built-in KJV sample.
    Hymns          SEED_HYMNS_DIR of <song><title/><lyrics/></song> files read
                   with aiofiles, else the built-in sample hymns.
    Devotionals    built-in book and daily devotionals (app.seed.data).

The caller owns the transaction; run_seed() only flushes.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

import aiofiles
import aiosqlite
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.bible import BibleVerse
from app.models.hymn import Hymn
from app.models.library import DailyDevotional, DevotionalBook
from app.seed.data import (
    BOOK_NAMES,
    DAILY_DEVOTIONALS,
    SAMPLE_BOOK,
    SAMPLE_HYMNS,
    SAMPLE_VERSES,
)
from app.services.library_service import library_service

logger = logging.getLogger(__name__)

BATCH_SIZE = 500

_SECTION_TAG = re.compile(r"\[[VCBPETIO]\d*\]")
_BLANK_RUNS = re.compile(r"\n{3,}")
_VERSE_MARKS = re.compile(r"[¶\[\]]")

# (tag, trigger words) checked against the lowercased title + lyrics
TAG_KEYWORDS = (
    ("praise", ("praise", "glory", "hallelujah")),
    ("worship", ("worship", "bow", "adore")),
    ("grace", ("grace", "mercy", "forgive")),
    ("faith", ("faith", "believe", "trust")),
    ("prayer", ("prayer", "pray")),
    ("love", ("love",)),
    ("hope", ("hope",)),
    ("peace", ("peace", "rest")),
    ("joy", ("joy", "rejoice", "celebrate")),
    ("christmas", ("christmas",)),
    ("easter", ("cross", "calvary", "died")),
    ("heaven", ("heaven", "eternal")),
    ("holy spirit", ("holy", "spirit")),
    ("kingship", ("king", "lord")),
)


# ── Parsing helpers ───────────────────────────────────────────────────────

def _between(content: str, tag: str) -> Optional[str]:
    match = re.search(rf"<{tag}>([\s\S]*?)</{tag}>", content)
    return match.group(1).strip() if match else None


def parse_hymn_file(content: str) -> Optional[Dict[str, str]]:
    """
    Parse one hymn file. Returns {"title", "lyrics", "aka"?} or None when
    the title or lyrics element is missing.

    Section markers such as [V1] or [C] become line breaks.
    """
    title = _between(content, "title")
    lyrics = _between(content, "lyrics")
    if not title or lyrics is None:
        return None

    lyrics = _SECTION_TAG.sub("\n", lyrics)
    lyrics = _BLANK_RUNS.sub("\n\n", lyrics).strip()
    parsed = {"title": title, "lyrics": lyrics}
    aka = _between(content, "aka")
    if aka:
        parsed["aka"] = aka
    return parsed


def infer_tags(title: str, lyrics: str) -> List[str]:
    text = f"{title} {lyrics}".lower()
    tags = [tag for tag, words in TAG_KEYWORDS if any(w in text for w in words)]
    return tags or ["hymn"]


def clean_verse_text(text: str) -> str:
    return _VERSE_MARKS.sub("", text).strip()


def book_name(book) -> str:
    """Map a numeric book id (1-66) to its English name; names pass through."""
    if isinstance(book, int) or (isinstance(book, str) and book.isdigit()):
        number = int(book)
        return BOOK_NAMES.get(number, f"Book {number}")
    return str(book)


# ── Steps ─────────────────────────────────────────────────────────────────

async def _count(db: AsyncSession, stmt) -> int:
    return (await db.execute(stmt)).scalar_one()


async def _read_sqlite_verses(path: str, translation: str) -> List[BibleVerse]:
    async with aiosqlite.connect(path) as conn:
        cursor = await conn.execute(
            "SELECT book, chapter, verse, text FROM verses ORDER BY book, chapter, verse"
        )
        rows = await cursor.fetchall()
    return [
        BibleVerse(
            book=book_name(book),
            chapter=int(chapter),
            verse=int(verse),
            text=clean_verse_text(text),
            translation=translation,
        )
        for book, chapter, verse, text in rows
    ]


async def seed_bible(db: AsyncSession) -> int:
    translation = settings.seed_bible_translation
    existing = await _count(
        db,
        select(func.count()).select_from(BibleVerse).where(BibleVerse.translation == translation),
    )
    if existing:
        logger.info("Bible data already seeded (%d %s verses), skipping", existing, translation)
        return 0

    verses: List[BibleVerse] = []
    path = settings.seed_bible_sqlite_path
    if path and Path(path).is_file():
        try:
            verses = await _read_sqlite_verses(path, translation)
        except aiosqlite.Error as e:
            logger.warning("Could not read Bible SQLite file %s: %s", path, e)
    elif path:
        logger.warning("Bible SQLite file not found: %s", path)

    if not verses:
        logger.info("Using sample Bible data")
        verses = [
            BibleVerse(book=b, chapter=c, verse=v, text=t, translation=translation)
            for b, c, v, t in SAMPLE_VERSES
        ]

    for start in range(0, len(verses), BATCH_SIZE):
        db.add_all(verses[start:start + BATCH_SIZE])
        await db.flush()
    logger.info("Seeded %d Bible verses (%s)", len(verses), translation)
    return len(verses)


async def _read_hymn_dir(directory: Path) -> List[Hymn]:
    hymns: List[Hymn] = []
    seen_titles = set()
    for file_path in sorted(p for p in directory.iterdir() if p.is_file()):
        try:
            async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
                content = await f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable hymn file %s: %s", file_path.name, e)
            continue

        parsed = parse_hymn_file(content)
        if parsed is None or parsed["title"].lower() in seen_titles:
            continue
        seen_titles.add(parsed["title"].lower())
        hymns.append(
            Hymn(
                title=parsed["title"],
                lyrics=parsed["lyrics"],
                tags=infer_tags(parsed["title"], parsed["lyrics"]),
            )
        )
    return hymns


async def seed_hymns(db: AsyncSession) -> int:
    existing = await _count(db, select(func.count()).select_from(Hymn))
    if existing:
        logger.info("Hymns already seeded (%d), skipping", existing)
        return 0

    hymns: List[Hymn] = []
    if settings.seed_hymns_dir:
        directory = Path(settings.seed_hymns_dir)
        if directory.is_dir():
            hymns = await _read_hymn_dir(directory)
        else:
            logger.warning("Hymns directory not found: %s", directory)

    if not hymns:
        logger.info("Using sample hymns")
        hymns = [Hymn(**data) for data in SAMPLE_HYMNS]

    for start in range(0, len(hymns), BATCH_SIZE):
        db.add_all(hymns[start:start + BATCH_SIZE])
        await db.flush()
    logger.info("Seeded %d hymns", len(hymns))
    return len(hymns)


async def seed_devotional_books(db: AsyncSession) -> int:
    existing = await _count(
        db,
        select(func.count())
        .select_from(DevotionalBook)
        .where(DevotionalBook.owner_id.is_(None), DevotionalBook.title == SAMPLE_BOOK["title"]),
    )
    if existing:
        return 0

    await library_service.create_book(
        db,
        title=SAMPLE_BOOK["title"],
        chapters=SAMPLE_BOOK["chapters"],
        author=SAMPLE_BOOK["author"],
        description=SAMPLE_BOOK["description"],
        cover_color=SAMPLE_BOOK["cover_color"],
        is_public=True,
    )
    logger.info("Seeded devotional book %r", SAMPLE_BOOK["title"])
    return 1


async def seed_daily_devotionals(db: AsyncSession) -> int:
    present = set((await db.execute(select(DailyDevotional.day_of_year))).scalars().all())
    missing = [d for d in DAILY_DEVOTIONALS if d["day_of_year"] not in present]
    if not missing:
        return 0
    db.add_all(DailyDevotional(**data) for data in missing)
    await db.flush()
    logger.info("Seeded %d daily devotionals", len(missing))
    return len(missing)


async def run_seed(db: AsyncSession) -> Dict[str, int]:
    """Run every seeding step; returns the number of rows inserted per step."""
    return {
        "bible_verses": await seed_bible(db),
        "hymns": await seed_hymns(db),
        "devotional_books": await seed_devotional_books(db),
        "daily_devotionals": await seed_daily_devotionals(db),
    }
