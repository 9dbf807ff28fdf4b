"""POST /api/references/extract — run the Bible reference extractor over free text."""

from fastapi import APIRouter

from app.schemas.bible import ExtractReferencesRequest, ExtractReferencesResponse
from app.services.reference_extractor import extract_references

router = APIRouter(prefix="/api", tags=["References"])


@router.post("/references/extract", response_model=ExtractReferencesResponse)
async def extract(body: ExtractReferencesRequest) -> ExtractReferencesResponse:
    return ExtractReferencesResponse(references=extract_references(body.text))
