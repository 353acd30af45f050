from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status

from app.config import Settings
from app.errors import (
    ExtractionError, FileTooLargeError, GenerationError, MissingInputError, UnsupportedFileTypeError
)
from app.models import (
    FlashcardsRequest, FlashcardsResponse, QuizRequest, QuizResponse,
    SummarizeRequest, SummaryResponse, UploadResponse
)
from app.services.extraction import extract_text_from_upload, file_extension
from app.services.logging import get_logger
from app.services.monitoring import UPLOADS
from app.services.study_tools import StudyToolService


logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["study"])


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_study_tools(settings: Settings = Depends(get_settings)) -> StudyToolService:
    return StudyToolService(settings)


@router.get("/health")
def health():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


@router.post("/upload", response_model=UploadResponse)
async def upload(file: Optional[UploadFile] = File(None), settings: Settings = Depends(get_settings)):
    """Extract the text of an uploaded PDF, DOCX or plain-text document"""
    try:
        if file is None or not file.filename:
            raise MissingInputError('No file uploaded. Use field name "file".')
        content = await file.read()
        if len(content) > settings.max_upload_bytes:
            raise FileTooLargeError(f"Upload error: file exceeds {settings.max_upload_mb}MB limit")
        text = extract_text_from_upload(file.filename, file.content_type, content)
    except FileTooLargeError as e:
        UPLOADS.labels(kind="unknown", status="too_large").inc()
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    except (MissingInputError, UnsupportedFileTypeError, ExtractionError) as e:
        UPLOADS.labels(kind="unknown", status="rejected").inc()
        logger.warning("upload_rejected", error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    UPLOADS.labels(kind=file_extension(file.filename) or "text", status="success").inc()
    return UploadResponse(
        filename=file.filename,
        text_length=len(text),
        text=text[: settings.upload_preview_chars],
    )


@router.post("/summarize", response_model=SummaryResponse, response_model_exclude_none=True)
def summarize(body: SummarizeRequest, tools: StudyToolService = Depends(get_study_tools)):
    try:
        return tools.summarize(body.text, body.sentences)
    except MissingInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except GenerationError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate summary")


@router.post("/flashcards", response_model=FlashcardsResponse, response_model_exclude_none=True)
def flashcards(body: FlashcardsRequest, tools: StudyToolService = Depends(get_study_tools)):
    try:
        return tools.flashcards(body.text, body.count, track_sources=body.track_sources)
    except MissingInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except GenerationError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate flashcards")


@router.post("/quiz", response_model=QuizResponse, response_model_exclude_none=True)
def quiz(body: QuizRequest, tools: StudyToolService = Depends(get_study_tools)):
    try:
        return tools.quiz(body.text, body.count, difficulty=body.difficulty, track_sources=body.track_sources)
    except MissingInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except GenerationError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate quiz")
