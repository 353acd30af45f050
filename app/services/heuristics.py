import random
import re
from typing import List, NamedTuple, Optional

from app.models import Flashcard, QuizItem
from app.services.logging import log_performance


# -------------------- SENTENCES --------------------

WHITESPACE_RE = re.compile(r"\s+")
SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
LINE_SPLIT_RE = re.compile(r"[\r\n]+")

MIN_SENTENCE_LENGTH = 20


def collapse_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text or "").strip()


def split_sentences(text: str) -> List[str]:
    """Split on terminal punctuation, keeping the punctuation with its sentence."""
    collapsed = collapse_whitespace(text)
    if not collapsed:
        return []
    return [s.strip() for s in SENTENCE_BOUNDARY_RE.split(collapsed) if s.strip()]


# -------------------- SUMMARY --------------------

SUMMARY_KEYWORDS = ("important", "key", "main", "summary", "therefore", "because")
KEYWORD_BONUS = 0.5
LENGTH_NORMALIZER = 200.0


class ScoredSentence(NamedTuple):
    index: int
    text: str
    score: float


def score_sentence(sentence: str, index: int, total: int) -> float:
    length_score = min(len(sentence) / LENGTH_NORMALIZER, 1.0)
    lowered = sentence.lower()
    keyword_score = sum(KEYWORD_BONUS for kw in SUMMARY_KEYWORDS if kw in lowered)
    position_score = 1 - index / total
    return length_score + keyword_score + position_score


def rank_sentences(sentences: List[str]) -> List[ScoredSentence]:
    total = len(sentences)
    scored = [ScoredSentence(i, s, score_sentence(s, i, total)) for i, s in enumerate(sentences)]
    # sorted() is stable, so exact ties keep source order
    return sorted(scored, key=lambda item: item.score, reverse=True)


@log_performance("heuristic_summary")
def summarize_text(text: str, sentence_count: int = 5) -> str:
    """
    Extractive summary: pick the highest scoring sentences of the text.

    When the text has no more eligible sentences than requested, all of them
    are returned in their original order without scoring.
    """
    sentences = [s for s in split_sentences(text) if len(s) > MIN_SENTENCE_LENGTH]
    if len(sentences) <= sentence_count:
        return " ".join(sentences)

    top = rank_sentences(sentences)[:sentence_count]
    return " ".join(item.text for item in top)


# -------------------- FLASHCARDS --------------------

MIN_SEGMENT_LENGTH = 20
MAX_SUBJECT_LENGTH = 80
MAX_ANSWER_LENGTH = 200
BACKFILL_WINDOW = 180
ELLIPSIS = "…"
EXPLAIN_QUESTION = "Explain the following concept:"


def _truncate(text: str, limit: int = MAX_ANSWER_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def split_segments(text: str) -> List[str]:
    """Lines of the text, further split at sentence boundaries, de-duplicated."""
    seen = set()
    segments = []
    for line in LINE_SPLIT_RE.split(text or ""):
        for part in SENTENCE_BOUNDARY_RE.split(line.strip()):
            part = part.strip()
            if len(part) < MIN_SEGMENT_LENGTH:
                continue
            key = part.lower()
            if key in seen:
                continue
            seen.add(key)
            segments.append(part)
    return segments


def card_from_segment(segment: str) -> Flashcard:
    if ":" in segment:
        subject, rest = segment.split(":", 1)
        subject, rest = subject.strip(), rest.strip()
        if subject and rest:
            return Flashcard(
                question=f'What is "{subject[:MAX_SUBJECT_LENGTH]}"?',
                answer=_truncate(rest),
            )
    if " is " in segment:
        subject, definition = segment.split(" is ", 1)
        subject, definition = subject.strip(), definition.strip()
        if subject and definition:
            return Flashcard(
                question=f"What is {subject[:MAX_SUBJECT_LENGTH]}?",
                answer=_truncate(definition),
            )
    return Flashcard(question=EXPLAIN_QUESTION, answer=_truncate(segment))


def backfill_windows(text: str, start_index: int, count: int) -> List[str]:
    """Fixed-stride snippets for cards start_index..count-1; card i starts i/count into the text."""
    collapsed = collapse_whitespace(text)
    if len(collapsed) < MIN_SEGMENT_LENGTH:
        return []
    windows = []
    for i in range(start_index, count):
        start = i * len(collapsed) // count
        snippet = collapsed[start:start + BACKFILL_WINDOW].strip()
        if snippet:
            windows.append(snippet + ELLIPSIS)
    return windows


@log_performance("heuristic_flashcards")
def generate_flashcards(text: str, count: int = 8) -> List[Flashcard]:
    cards: List[Flashcard] = []
    for segment in split_segments(text):
        if len(cards) >= count:
            break
        cards.append(card_from_segment(segment))

    if len(cards) < count:
        answers = {card.answer for card in cards}
        for snippet in backfill_windows(text, len(cards), count):
            if snippet in answers:
                continue
            answers.add(snippet)
            cards.append(Flashcard(question=EXPLAIN_QUESTION, answer=snippet))

    return cards[:count]


# -------------------- QUIZ --------------------

MIN_QUIZ_WORDS = 6
BLANK = "____"
OPTION_COUNT = 4
# Known limitation: the distractors are generic words, not drawn from the text
DISTRACTOR_POOL = ("concept", "process", "theory", "model", "system")


def clean_token(token: str) -> str:
    return "".join(ch for ch in token if ch.isalnum() or ch == "-")


def pick_mask_index(word_count: int, rng: random.Random) -> int:
    """An index in the middle third of the sentence."""
    low = word_count // 3
    high = max(low + 1, (2 * word_count) // 3)
    return rng.randrange(low, high)


def build_options(answer: str, rng: random.Random) -> List[str]:
    options = [answer]
    seen = {answer.lower()}
    for word in DISTRACTOR_POOL:
        if len(options) >= OPTION_COUNT:
            break
        if word.lower() in seen:
            continue
        seen.add(word.lower())
        options.append(word)
    rng.shuffle(options)
    return options


def quiz_item_from_sentence(sentence: str, rng: random.Random) -> Optional[QuizItem]:
    words = sentence.split()
    if len(words) < MIN_QUIZ_WORDS or BLANK in sentence:
        return None
    idx = pick_mask_index(len(words), rng)
    answer = clean_token(words[idx])
    if not answer:
        return None
    prompt = list(words)
    prompt[idx] = BLANK
    return QuizItem(
        question=" ".join(prompt),
        options=build_options(answer, rng),
        answer=answer,
    )


@log_performance("heuristic_quiz")
def generate_quiz(text: str, count: int = 5, rng: Optional[random.Random] = None) -> List[QuizItem]:
    """Fill-in-the-blank questions, one per eligible sentence, in document order."""
    rng = rng or random.Random()
    questions: List[QuizItem] = []
    for sentence in split_sentences(text):
        if len(questions) >= count:
            break
        item = quiz_item_from_sentence(sentence, rng)
        if item is not None:
            questions.append(item)
    return questions
