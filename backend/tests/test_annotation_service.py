"""
Selah Backend — Transcript Annotator Tests
===========================================

The LLM is replaced by a fake implementing LLMService, so the transcript
state machine runs without network access:

    pending → completed   model answered (even with unusable JSON)
    pending → failed      model call raised; error_message recorded
"""

import pytest

from app.exceptions import CircuitBreakerOpenError, LLMServiceError, NotFoundError
from app.models.hymn import Hymn
from app.services.annotation_service import (
    ANNOTATION_PROMPT,
    AnnotationService,
    parse_annotation,
)
from app.services.livestream_service import livestream_service
from app.services.llm_base import LLMService


class FakeLLM(LLMService):
    def __init__(self, answer=None, error=None):
        self.answer = answer
        self.error = error
        self.prompts = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer

    async def health_check(self) -> bool:
        return self.error is None


async def _stream(db, user_id="user-a"):
    return await livestream_service.create_livestream(
        db, user_id, title="Evening Service", source_url="https://vimeo.com/76979871"
    )


class TestParseAnnotation:

    def test_json_inside_prose(self):
        answer = 'Sure! ```json\n{"bibleReferences": ["John 3:16"], "hymnTitles": ["Amazing Grace"]}\n```'
        assert parse_annotation(answer) == (["John 3:16"], ["Amazing Grace"])

    def test_dedup_and_blank_entries(self):
        answer = '{"bibleReferences": ["John 3:16", "john  3:16", " ", 7], "hymnTitles": []}'
        assert parse_annotation(answer) == (["John 3:16"], [])

    @pytest.mark.parametrize("answer", [None, "", "no json here", "{not json}", "[1, 2]"])
    def test_unusable_answers_give_empty(self, answer):
        assert parse_annotation(answer) == ([], [])

    def test_missing_keys(self):
        assert parse_annotation('{"bibleReferences": "John 3:16"}') == ([], [])


class TestAnnotate:

    @pytest.mark.asyncio
    async def test_completed_with_detections(self, db):
        db.add(Hymn(title="Amazing Grace", lyrics="...", tags=[]))
        await db.flush()
        stream = await _stream(db)
        llm = FakeLLM(
            answer='{"bibleReferences": ["John 3:16", "Romans 8:28"], "hymnTitles": ["Amazing Grace", "Unknown Hymn"]}'
        )
        service = AnnotationService(llm=llm)

        result = await service.annotate(
            db, stream.id, "user-a", "Open your Bibles to John 3:16...", segments=[(0, 12, "Open your Bibles")]
        )

        assert result.transcript.status == "completed"
        assert result.transcript.completed_at is not None
        assert [v.bible_reference for v in result.detected_verses] == ["John 3:16", "Romans 8:28"]
        assert all(v.timestamp_seconds == 0 for v in result.detected_verses)
        assert result.detected_hymns[0].hymn_id is not None
        assert result.detected_hymns[1].hymn_id is None
        assert [s.text for s in result.segments] == ["Open your Bibles"]
        assert "Open your Bibles to John 3:16..." in llm.prompts[0]

    @pytest.mark.asyncio
    async def test_malformed_answer_still_completes(self, db):
        stream = await _stream(db)
        service = AnnotationService(llm=FakeLLM(answer="I could not find anything."))

        result = await service.annotate(db, stream.id, "user-a", "Welcome everyone")

        assert result.transcript.status == "completed"
        assert result.detected_verses == []
        assert result.detected_hymns == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [LLMServiceError(message="Gemini down"), CircuitBreakerOpenError(recovery_time=30)],
    )
    async def test_llm_failure_marks_transcript_failed(self, db, error):
        stream = await _stream(db)
        service = AnnotationService(llm=FakeLLM(error=error))

        with pytest.raises(type(error)):
            await service.annotate(db, stream.id, "user-a", "Welcome everyone")

        transcript, _ = await service.get_latest_transcript(db, stream.id, "user-a")
        assert transcript.status == "failed"
        assert transcript.error_message == error.message
        assert await livestream_service.list_detected_verses(db, stream.id, "user-a") == []

    @pytest.mark.asyncio
    async def test_not_owner(self, db):
        stream = await _stream(db)
        llm = FakeLLM(answer="{}")
        with pytest.raises(NotFoundError):
            await AnnotationService(llm=llm).annotate(db, stream.id, "user-b", "text")
        assert llm.prompts == []

    @pytest.mark.asyncio
    async def test_latest_transcript_missing(self, db):
        stream = await _stream(db)
        with pytest.raises(NotFoundError):
            await AnnotationService(llm=FakeLLM()).get_latest_transcript(db, stream.id, "user-a")


def test_prompt_template_formats():
    prompt = ANNOTATION_PROMPT.format(transcript="hello")
    assert '"bibleReferences"' in prompt
    assert "hello" in prompt
