"""
Selah Backend — Public Book Catalog (Project Gutenberg) Service
================================================================

What:  Search the Gutendex catalog and import a public-domain book into the
       caller's private devotional library.
How:   httpx.AsyncClient with explicit timeouts. Upstream failures surface as
       ExternalServiceError (→ 502); an unknown book id is NotFoundError (→ 404).
Who:   Called by routes/gutenberg.py.

Import pipeline:
    1. GET /books/{id}                 → catalog entry (title, authors, formats)
    2. pick a text/plain format        → prefer utf-8, never a .zip
    3. download the text               → follows redirects
    4. strip_boilerplate()             → drop the "*** START/END OF ..." license wrapper
    5. split_chapters()                → "CHAPTER <roman|number>" headings, or 10 "Part N" chunks
    6. persist a private DevotionalBook owned by the caller

Re-importing a book the caller already imported returns the existing copy.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import ExternalServiceError, NotFoundError, ValidationError
from app.models.library import DevotionalBook
from app.schemas.library import CatalogBook
from app.services.library_service import library_service

logger = logging.getLogger(__name__)

SERVICE_NAME = "gutenberg"
SOURCE = "gutenberg"
IMPORT_COVER_COLOR = "#5b4636"
MIN_CHAPTER_HEADINGS = 3
FALLBACK_PARTS = 10

_START_MARKER = re.compile(r"^\*\*\*\s*START OF.*?\*\*\*\s*$", re.IGNORECASE | re.MULTILINE)
_END_MARKER = re.compile(r"^\*\*\*\s*END OF.*?\*\*\*\s*$", re.IGNORECASE | re.MULTILINE)
_CHAPTER_HEADING = re.compile(
    r"^[ \t]*CHAPTER[ \t]+([IVXLCDM]+|\d+)\b[^\n]*$", re.IGNORECASE | re.MULTILINE
)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


# ══════════════════════════════════════════════════════════════════════════
# Text processing (pure functions)
# ══════════════════════════════════════════════════════════════════════════

def strip_boilerplate(text: str) -> str:
    """Keep only what lies between the START and END markers (either may be missing)."""
    text = text.replace("\r\n", "\n")
    start = _START_MARKER.search(text)
    if start:
        text = text[start.end():]
    end = _END_MARKER.search(text)
    if end:
        text = text[: end.start()]
    return text.strip()


def split_chapters(text: str) -> List[Tuple[str, str]]:
    """
    Split a book body into (title, content) chapters.

    With at least three "CHAPTER <roman|number>" headings (case-insensitive,
    at line start) each heading starts a chapter and text before the first
    heading is dropped. Otherwise the paragraphs are grouped into ten chunks
    (fewer when there are fewer paragraphs) titled "Part 1".."Part N", sizes
    differing by at most one paragraph.
    """
    headings = list(_CHAPTER_HEADING.finditer(text))
    if len(headings) >= MIN_CHAPTER_HEADINGS:
        chapters: List[Tuple[str, str]] = []
        for i, heading in enumerate(headings):
            end = headings[i + 1].start() if i + 1 < len(headings) else len(text)
            content = text[heading.end():end].strip()
            if content:
                chapters.append((heading.group(0).strip(), content))
        return chapters

    paragraphs = [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
    if not paragraphs:
        return []
    parts = min(FALLBACK_PARTS, len(paragraphs))
    size, extra = divmod(len(paragraphs), parts)
    chapters = []
    start = 0
    for n in range(1, parts + 1):
        # The first `extra` parts take one paragraph more
        end = start + size + (1 if n <= extra else 0)
        chapters.append((f"Part {n}", "\n\n".join(paragraphs[start:end])))
        start = end
    return chapters


def pick_plain_text_url(formats: Dict[str, str]) -> Optional[str]:
    candidates = [
        (mime, url) for mime, url in formats.items()
        if mime.startswith("text/plain") and not url.endswith(".zip")
    ]
    if not candidates:
        return None
    candidates.sort(key=lambda pair: 0 if "utf-8" in pair[0].lower() else 1)
    return candidates[0][1]


def _to_catalog_book(entry: Dict[str, Any]) -> CatalogBook:
    return CatalogBook(
        gutenberg_id=entry["id"],
        title=entry.get("title") or "Untitled",
        authors=[a.get("name", "") for a in entry.get("authors", []) if a.get("name")],
        languages=list(entry.get("languages", [])),
        has_plain_text=pick_plain_text_url(entry.get("formats", {})) is not None,
    )


# ══════════════════════════════════════════════════════════════════════════
# Catalog client
# ══════════════════════════════════════════════════════════════════════════

class GutenbergService:
    """
    Args:
        transport: Optional httpx transport; tests pass httpx.MockTransport.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=settings.gutenberg_api_url,
            timeout=httpx.Timeout(settings.gutenberg_timeout),
            follow_redirects=True,
            transport=self.transport,
        )

    async def _get(self, client: httpx.AsyncClient, url: str, **kwargs) -> httpx.Response:
        try:
            response = await client.get(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Catalog request to %s failed: %s", url, str(e))
            raise ExternalServiceError(
                message="The book catalog could not be reached. Please try again later.",
                service=SERVICE_NAME,
                context={"url": url, "error_type": type(e).__name__},
            )
        return response

    async def search(self, query: str) -> List[CatalogBook]:
        needle = query.strip()
        if not needle:
            raise ValidationError(message="Search query must not be empty", field="q")

        async with self._client() as client:
            response = await self._get(client, "/books", params={"search": needle})
            if response.status_code != 200:
                raise ExternalServiceError(
                    message="The book catalog returned an error.",
                    service=SERVICE_NAME,
                    context={"status_code": response.status_code},
                )
            try:
                results = response.json().get("results", [])
            except ValueError:
                raise ExternalServiceError(
                    message="The book catalog returned an unreadable response.",
                    service=SERVICE_NAME,
                )

        logger.info("Catalog search '%s' returned %d results", needle, len(results))
        return [_to_catalog_book(entry) for entry in results[: settings.gutenberg_search_limit]]

    async def fetch_entry(self, client: httpx.AsyncClient, gutenberg_id: int) -> Dict[str, Any]:
        response = await self._get(client, f"/books/{gutenberg_id}")
        if response.status_code == 404:
            raise NotFoundError(resource="catalog book", resource_id=str(gutenberg_id))
        if response.status_code != 200:
            raise ExternalServiceError(
                message="The book catalog returned an error.",
                service=SERVICE_NAME,
                context={"status_code": response.status_code, "gutenberg_id": gutenberg_id},
            )
        try:
            return response.json()
        except ValueError:
            raise ExternalServiceError(
                message="The book catalog returned an unreadable response.",
                service=SERVICE_NAME,
                context={"gutenberg_id": gutenberg_id},
            )

    async def import_book(
        self, db: AsyncSession, user_id: str, gutenberg_id: int
    ) -> DevotionalBook:
        """
        Import a catalog book as a private book owned by `user_id`.

        Raises:
            NotFoundError: The catalog has no such book
            ValidationError: The book has no plain-text edition, or no text
            ExternalServiceError: Any other upstream failure
        """
        existing = await db.execute(
            select(DevotionalBook).where(
                DevotionalBook.owner_id == user_id,
                DevotionalBook.source == SOURCE,
                DevotionalBook.source_id == str(gutenberg_id),
            )
        )
        already = existing.scalars().first()
        if already is not None:
            logger.info("Catalog book %d already imported as book %d", gutenberg_id, already.id)
            return already

        async with self._client() as client:
            entry = await self.fetch_entry(client, gutenberg_id)
            text_url = pick_plain_text_url(entry.get("formats", {}))
            if text_url is None:
                raise ValidationError(
                    message="This book has no plain-text edition to import.",
                    field="gutenbergId",
                    context={"gutenberg_id": gutenberg_id},
                )
            response = await self._get(client, text_url)
            if response.status_code != 200:
                raise ExternalServiceError(
                    message="The book text could not be downloaded.",
                    service=SERVICE_NAME,
                    context={"status_code": response.status_code, "gutenberg_id": gutenberg_id},
                )
            raw_text = response.text

        chapters = split_chapters(strip_boilerplate(raw_text))
        if not chapters:
            raise ValidationError(
                message="The downloaded book contains no readable text.",
                field="gutenbergId",
            )

        book_info = _to_catalog_book(entry)
        return await library_service.create_book(
            db,
            title=book_info.title[:255],
            chapters=chapters,
            owner_id=user_id,
            author=", ".join(book_info.authors)[:255] or None,
            description="Imported from Project Gutenberg",
            cover_color=IMPORT_COVER_COLOR,
            is_public=False,
            source=SOURCE,
            source_id=str(gutenberg_id),
        )


gutenberg_service = GutenbergService()
