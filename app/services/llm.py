from __future__ import annotations

import json
from typing import Any, List, Optional

from openai import OpenAI

from app.config import Settings
from app.models import Flashcard, QuizItem
from app.services.logging import get_logger


logger = get_logger(__name__)

CHUNK_SIZE = 6000

DIFFICULTY_FOCUS = {
    "easy": "basic recall",
    "medium": "application & analysis",
    "hard": "evaluation & synthesis",
}


def _build_client(settings: Settings) -> OpenAI:
    if not settings.ai_enabled:
        raise RuntimeError("No AI provider configured. Set OPENROUTER_API_KEY or OPENAI_API_KEY.")
    client = OpenAI(
        api_key=settings.api_key,
        base_url=settings.base_url,
        default_headers=settings.default_headers or None,
    )
    if settings.ai_timeout_seconds:
        client = client.with_options(timeout=settings.ai_timeout_seconds)
    return client


def _clean_json_like(content: str) -> str:
    # Strip common code fences ```json ... ``` or ``` ... ```
    text = content.strip()
    if text.startswith("```"):
        first_nl = text.find("\n")
        if first_nl != -1:
            text = text[first_nl + 1 :]
        if text.endswith("```"):
            text = text[:-3]
    return text.strip()


def _parse_collection(content: Optional[str], key: str) -> List[Any]:
    """The list stored under `key` in a JSON object reply, or [] if the reply is unusable."""
    try:
        data = json.loads(_clean_json_like(content or "{}"))
    except ValueError:
        logger.warning("completion_json_invalid", key=key)
        return []
    if not isinstance(data, dict):
        return []
    items = data.get(key)
    if not isinstance(items, list):
        return []
    return items


def chunk_text(text: str, max_len: int = CHUNK_SIZE) -> List[str]:
    return [text[i : i + max_len] for i in range(0, len(text), max_len)]


class CompletionClient:
    """Chat-completion backed generators for summaries, flashcards and quizzes."""

    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        self.settings = settings
        self.model = settings.model
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = _build_client(self.settings)
        return self._client

    def _complete(self, system: str, prompt: str, temperature: float, json_mode: bool = False) -> str:
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        rsp = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            temperature=temperature,
            **kwargs,
        )
        if not rsp.choices:
            return ""
        return (rsp.choices[0].message.content or "").strip()

    def summarize(self, text: str, sentences: int = 6, track_sources: bool = False) -> str:
        sources_hint = " Include source references if possible." if track_sources else ""
        partials = []
        for chunk in chunk_text(text):
            prompt = f"Summarize in {sentences} clear sentences.{sources_hint}\n\nCONTENT:\n{chunk}"
            partials.append(self._complete(
                "You are an expert academic summarizer producing concise summaries.",
                prompt,
                temperature=0.2,
            ))
        logger.info("summary_chunks_completed", chunks=len(partials), provider=self.settings.provider)

        if len(partials) == 1:
            return partials[0]

        combine_hint = "Include sources if present." if track_sources else ""
        combine_prompt = (
            f"Combine these partial summaries into one cohesive summary of {sentences} sentences.\n"
            f"{combine_hint}\n\n" + "\n".join(partials)
        )
        final = self._complete(
            "You are an expert summarizer producing cohesive final summaries.",
            combine_prompt,
            temperature=0.2,
        )
        return final or "\n".join(partials)

    def flashcards(self, text: str, count: int = 8, track_sources: bool = False) -> List[Flashcard]:
        source_field = ',"source":string' if track_sources else ""
        source_hint = ' Include a "source" field.' if track_sources else ""
        prompt = (
            f"Create {count} flashcards from the content.\n"
            "Each flashcard should have a concise question and answer.\n"
            f"{source_hint}\n"
            f'Return JSON in shape: {{"cards":[{{"question":string,"answer":string{source_field}}}...]}}\n\n'
            f"CONTENT:\n{text}"
        )
        content = self._complete(
            "You are an expert educator creating effective flashcards.",
            prompt,
            temperature=0.3,
            json_mode=True,
        )
        cards = []
        for item in _parse_collection(content, "cards"):
            if not isinstance(item, dict):
                continue
            question = str(item.get("question") or "").strip()
            answer = str(item.get("answer") or "").strip()
            if question and answer:
                source = item.get("source")
                cards.append(Flashcard(question=question, answer=answer, source=str(source) if source else None))
        return cards

    def quiz(self, text: str, count: int = 5, difficulty: str = "medium", track_sources: bool = False) -> List[QuizItem]:
        if difficulty not in DIFFICULTY_FOCUS:
            difficulty = "medium"
        source_field = ',"source":string' if track_sources else ""
        source_hint = '- Include a "source" field if possible.' if track_sources else ""
        prompt = (
            f"Create {count} multiple-choice questions at {difficulty} level.\n"
            f"- Test {DIFFICULTY_FOCUS[difficulty]}\n"
            "- Each has 1 correct answer + 3 distractors\n"
            f"{source_hint}\n"
            'Return JSON in shape: {"quiz":[{"question":string,"options":string[],"answer":string,'
            f'"difficulty":"{difficulty}"{source_field}}}...]}}\n\n'
            f"CONTENT:\n{text}"
        )
        content = self._complete(
            "You are an expert assessment designer creating fair MCQs.",
            prompt,
            temperature=0.4,
            json_mode=True,
        )
        items = []
        for item in _parse_collection(content, "quiz"):
            if not isinstance(item, dict):
                continue
            question = str(item.get("question") or "").strip()
            options = item.get("options", [])
            answer = str(item.get("answer") or "").strip()
            if question and isinstance(options, list) and len(options) >= 2 and answer:
                source = item.get("source")
                items.append(QuizItem(
                    question=question,
                    options=[str(o) for o in options],
                    answer=answer,
                    difficulty=str(item.get("difficulty") or difficulty),
                    source=str(source) if source else None,
                ))
        return items
