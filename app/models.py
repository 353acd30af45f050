from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field


Difficulty = Literal["easy", "medium", "hard"]


class Flashcard(BaseModel):
    question: str
    answer: str
    source: Optional[str] = None


class QuizItem(BaseModel):
    question: str
    options: List[str]
    answer: str
    difficulty: Optional[str] = None
    source: Optional[str] = None


# ----------------- Requests -----------------

class SummarizeRequest(BaseModel):
    text: Optional[str] = None
    sentences: Optional[Any] = None


class FlashcardsRequest(BaseModel):
    text: Optional[str] = None
    count: Optional[Any] = None
    track_sources: bool = False


class QuizRequest(BaseModel):
    text: Optional[str] = None
    count: Optional[Any] = None
    difficulty: Difficulty = "medium"
    track_sources: bool = False


# ----------------- Responses -----------------

class SummaryResponse(BaseModel):
    summary: str
    note: Optional[str] = None


class FlashcardsResponse(BaseModel):
    cards: List[Flashcard] = Field(default_factory=list)
    note: Optional[str] = None


class QuizResponse(BaseModel):
    quiz: List[QuizItem] = Field(default_factory=list)
    note: Optional[str] = None


class UploadResponse(BaseModel):
    filename: str
    text_length: int
    text: str
