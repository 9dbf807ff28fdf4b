"""
Selah Backend — AI Transcript Annotator
========================================

What:  Turns a raw sermon/service transcript into detected Bible references
       and detected hymns for a livestream.
How:   One prompt to the LLM asking for strict JSON
       {"bibleReferences": [...], "hymnTitles": [...]}; the answer is parsed
       leniently and each item is persisted as a detected row.
Who:   Called by POST /api/livestreams/{id}/transcript.

Transcript state machine:
    pending ──(model answered)──▶ completed
       └────(model call raised)──▶ failed      (terminal; re-running creates a new transcript)

    A model answer that contains no parseable JSON still completes, with
    nothing detected. Only a failed model call marks the transcript failed.

Timestamps:
    The model is not asked where in the transcript a reference occurred, so
    every AI-detected row is stored with timestamp_seconds = 0.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFoundError, SelahError
from app.models._columns import utcnow
from app.models.livestream import (
    TRANSCRIPT_COMPLETED,
    TRANSCRIPT_FAILED,
    TRANSCRIPT_PENDING,
    DetectedHymn,
    DetectedVerse,
    Transcript,
    TranscriptSegment,
)
from app.services.gemini_service import gemini_service
from app.services.livestream_service import livestream_service
from app.services.llm_base import LLMService
from app.services.reference_extractor import canonical_key

logger = logging.getLogger(__name__)

ANNOTATION_PROMPT = '''You are analyzing a sermon or worship service transcript. Please extract:

1. Bible references mentioned (book chapter:verse format like "John 3:16", "Romans 10:9-13")
2. Hymn or song titles mentioned or sung

Transcript:
"""
{transcript}
"""

Respond in JSON format:
{{
  "bibleReferences": ["John 3:16", "Romans 10:9"],
  "hymnTitles": ["Amazing Grace", "How Great Thou Art"]
}}

Only include actual Bible references and hymn titles found. If none found, return empty arrays.'''

# Greedy: first "{" through last "}" of the answer
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")


def parse_annotation(text: Optional[str]) -> Tuple[List[str], List[str]]:
    """
    Extract (bible_references, hymn_titles) from a model answer.

    Never raises: missing or malformed JSON, wrong value types and blank
    entries all degrade to empty results. Entries are de-duplicated on their
    canonical form, keeping the first spelling.
    """
    if not text:
        return [], []
    match = _JSON_SPAN.search(text)
    if not match:
        return [], []
    try:
        payload = json.loads(match.group(0))
    except (json.JSONDecodeError, ValueError):
        logger.debug("Annotation answer contained unparseable JSON")
        return [], []
    if not isinstance(payload, dict):
        return [], []

    return _clean(payload.get("bibleReferences")), _clean(payload.get("hymnTitles"))


def _clean(values) -> List[str]:
    if not isinstance(values, list):
        return []
    seen = set()
    cleaned: List[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            continue
        key = canonical_key(value)
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(value.strip())
    return cleaned


@dataclass
class AnnotationResult:
    transcript: Transcript
    segments: List[TranscriptSegment] = field(default_factory=list)
    detected_verses: List[DetectedVerse] = field(default_factory=list)
    detected_hymns: List[DetectedHymn] = field(default_factory=list)


class AnnotationService:
    """
    Orchestrates transcript → LLM → detected rows.

    The LLM is injected so tests can drive the state machine with a fake.
    """

    def __init__(self, llm: LLMService):
        self.llm = llm

    async def annotate(
        self,
        db: AsyncSession,
        livestream_id: int,
        user_id: str,
        raw_text: str,
        segments: Sequence[Tuple[int, int, str]] = (),
    ) -> AnnotationResult:
        """
        Create a transcript for the livestream and run the annotator on it.

        Args:
            segments: Optional (start_seconds, end_seconds, text) tuples stored
                      alongside the transcript.

        Returns:
            AnnotationResult with the completed transcript and detected rows.

        Raises:
            NotFoundError: Livestream missing or not owned by the caller
            LLMServiceError / CircuitBreakerOpenError: The model call failed.
                The transcript has already been flushed as `failed` when this
                propagates; the caller decides whether to commit that state.
        """
        await livestream_service.get_livestream(db, livestream_id, user_id)

        transcript = Transcript(
            livestream_id=livestream_id,
            status=TRANSCRIPT_PENDING,
            raw_text=raw_text,
        )
        db.add(transcript)
        await db.flush()

        stored_segments = [
            TranscriptSegment(
                transcript_id=transcript.id,
                start_seconds=start,
                end_seconds=end,
                text=text,
            )
            for start, end, text in segments
        ]
        db.add_all(stored_segments)
        await db.flush()

        logger.info(
            "Transcript %d created for livestream %d (%d chars, %d segments)",
            transcript.id, livestream_id, len(raw_text), len(stored_segments),
        )

        try:
            answer = await self.llm.generate(ANNOTATION_PROMPT.format(transcript=raw_text))
        except SelahError as e:
            transcript.status = TRANSCRIPT_FAILED
            transcript.error_message = e.message
            await db.flush()
            logger.warning("Transcript %d failed: %s", transcript.id, e.message)
            raise

        references, hymn_titles = parse_annotation(answer)

        result = AnnotationResult(transcript=transcript, segments=stored_segments)
        for reference in references:
            result.detected_verses.append(
                await livestream_service.record_detected_verse(db, livestream_id, reference, 0)
            )
        for title in hymn_titles:
            result.detected_hymns.append(
                await livestream_service.record_detected_hymn(db, livestream_id, title, None, 0)
            )

        transcript.status = TRANSCRIPT_COMPLETED
        transcript.completed_at = utcnow()
        await db.flush()

        logger.info(
            "Transcript %d completed: %d references, %d hymns",
            transcript.id, len(result.detected_verses), len(result.detected_hymns),
        )
        return result

    async def get_latest_transcript(
        self, db: AsyncSession, livestream_id: int, user_id: str
    ) -> Tuple[Transcript, List[TranscriptSegment]]:
        """Most recent transcript of the livestream with its segments in time order."""
        await livestream_service.get_livestream(db, livestream_id, user_id)

        result = await db.execute(
            select(Transcript)
            .where(Transcript.livestream_id == livestream_id)
            .order_by(Transcript.created_at.desc(), Transcript.id.desc())
            .limit(1)
        )
        transcript = result.scalar_one_or_none()
        if transcript is None:
            raise NotFoundError(resource="transcript", context={"livestream_id": livestream_id})

        seg_result = await db.execute(
            select(TranscriptSegment)
            .where(TranscriptSegment.transcript_id == transcript.id)
            .order_by(TranscriptSegment.start_seconds, TranscriptSegment.id)
        )
        return transcript, list(seg_result.scalars().all())


annotation_service = AnnotationService(llm=gemini_service)
