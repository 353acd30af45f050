from __future__ import annotations

import random
from typing import Any, Optional

from app.config import Settings
from app.errors import GenerationError, MissingInputError
from app.models import FlashcardsResponse, QuizResponse, SummaryResponse
from app.services import heuristics
from app.services.llm import CompletionClient
from app.services.logging import get_logger
from app.services.monitoring import GENERATION_REQUESTS


logger = get_logger(__name__)

# (default, maximum) per artifact
SUMMARY_SENTENCES = (5, 10)
FLASHCARD_COUNT = (8, 20)
QUIZ_COUNT = (5, 10)


def clamp_count(value: Any, default: int, maximum: int) -> int:
    """Missing, zero or non-numeric counts fall back to the default; others are bounded to [1, maximum]."""
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    if number == 0:
        return default
    return max(1, min(maximum, number))


def _heuristic_note(artifact: str) -> str:
    return f"Heuristic {artifact} used (no AI API key set)"


class StudyToolService:
    """
    Routes each request to the completion provider or to the local heuristics.

    The choice is made on every call from the settings the service was built
    with; a single response never mixes the two.
    """

    def __init__(self, settings: Settings, completion: Optional[CompletionClient] = None,
                 rng: Optional[random.Random] = None):
        self.settings = settings
        self._completion = completion
        self._rng = rng

    @property
    def completion(self) -> CompletionClient:
        if self._completion is None:
            self._completion = CompletionClient(self.settings)
        return self._completion

    def _strategy(self) -> str:
        return "ai" if self.settings.ai_enabled else "heuristic"

    def _require_text(self, text: Optional[str]) -> str:
        if not text or not text.strip():
            raise MissingInputError('Missing "text" in body')
        return text

    def _record(self, artifact: str, strategy: str, status: str, **extra):
        GENERATION_REQUESTS.labels(artifact=artifact, strategy=strategy, status=status).inc()
        log = logger.info if status == "success" else logger.error
        log("generation_finished", artifact=artifact, strategy=strategy, status=status, **extra)

    def summarize(self, text: Optional[str], sentences: Any = None) -> SummaryResponse:
        text = self._require_text(text)
        n = clamp_count(sentences, *SUMMARY_SENTENCES)
        strategy = self._strategy()
        if strategy == "heuristic":
            summary = heuristics.summarize_text(text, n)
            self._record("summary", strategy, "success", sentences=n)
            return SummaryResponse(summary=summary, note=_heuristic_note("summary"))
        try:
            summary = self.completion.summarize(text, sentences=n)
        except Exception as e:
            self._record("summary", strategy, "error", error=str(e))
            raise GenerationError("summary", e) from e
        self._record("summary", strategy, "success", sentences=n)
        return SummaryResponse(summary=summary)

    def flashcards(self, text: Optional[str], count: Any = None, track_sources: bool = False) -> FlashcardsResponse:
        text = self._require_text(text)
        n = clamp_count(count, *FLASHCARD_COUNT)
        strategy = self._strategy()
        if strategy == "heuristic":
            cards = heuristics.generate_flashcards(text, n)
            self._record("flashcards", strategy, "success", count=len(cards))
            return FlashcardsResponse(cards=cards, note=_heuristic_note("flashcards"))
        try:
            cards = self.completion.flashcards(text, count=n, track_sources=track_sources)
        except Exception as e:
            self._record("flashcards", strategy, "error", error=str(e))
            raise GenerationError("flashcards", e) from e
        self._record("flashcards", strategy, "success", count=len(cards))
        return FlashcardsResponse(cards=cards)

    def quiz(self, text: Optional[str], count: Any = None, difficulty: str = "medium",
             track_sources: bool = False) -> QuizResponse:
        text = self._require_text(text)
        n = clamp_count(count, *QUIZ_COUNT)
        strategy = self._strategy()
        if strategy == "heuristic":
            # difficulty only shapes the AI prompt
            quiz = heuristics.generate_quiz(text, n, rng=self._rng)
            self._record("quiz", strategy, "success", count=len(quiz))
            return QuizResponse(quiz=quiz, note=_heuristic_note("quiz"))
        try:
            quiz = self.completion.quiz(text, count=n, difficulty=difficulty, track_sources=track_sources)
        except Exception as e:
            self._record("quiz", strategy, "error", error=str(e))
            raise GenerationError("quiz", e) from e
        self._record("quiz", strategy, "success", count=len(quiz))
        return QuizResponse(quiz=quiz)
