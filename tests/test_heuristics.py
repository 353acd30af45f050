"""
Unit tests for the heuristic summary, flashcard and quiz generators
"""
import random

import pytest

from app.services.heuristics import (
    BLANK, ELLIPSIS, EXPLAIN_QUESTION, MAX_ANSWER_LENGTH, OPTION_COUNT,
    build_options, clean_token, generate_flashcards, generate_quiz, pick_mask_index,
    rank_sentences, score_sentence, split_segments, split_sentences, summarize_text
)

LECTURE = (
    "Cells are the basic unit of life in every organism. "
    "The main function of the nucleus is to store genetic material. "
    "Mitochondria release energy through a process called respiration. "
    "Ribosomes assemble proteins from amino acids in the cytoplasm. "
    "It is important to remember that plant cells also contain chloroplasts. "
    "Therefore plants can make their own food from sunlight and water."
)


class TestSentenceSplitting:
    def test_split_keeps_terminal_punctuation(self):
        """Sentences keep their punctuation and newlines are collapsed"""
        text = "First line\ncontinues here. Second one!  Third?"
        assert split_sentences(text) == ["First line continues here.", "Second one!", "Third?"]

    def test_split_empty(self):
        assert split_sentences("") == []
        assert split_sentences("   \n ") == []


class TestSummarizer:
    def test_empty_input_returns_empty_string(self):
        assert summarize_text("", 3) == ""

    def test_all_sentences_too_short(self):
        """Noise-only text yields an empty summary rather than an error"""
        assert summarize_text("Hi there. Ok. Short one.", 2) == ""

    def test_scenario_two_eligible_sentences(self):
        text = (
            "The cat sat. It was important because the sun was warm. "
            "Therefore it slept soundly afterward in peace."
        )
        summary = summarize_text(text, 2)
        assert summary == (
            "It was important because the sun was warm. "
            "Therefore it slept soundly afterward in peace."
        )

    def test_fewer_sentences_than_requested_keeps_source_order(self):
        summary = summarize_text(LECTURE, 10)
        assert summary == " ".join(split_sentences(LECTURE))

    def test_output_never_exceeds_requested_count(self):
        for n in range(1, 7):
            summary = summarize_text(LECTURE, n)
            assert len(split_sentences(summary)) <= n

    def test_keyword_and_position_ranking(self):
        text = (
            "The weather report covered many regions today. "
            "Rain fell in the northern valleys overnight. "
            "The main point is that farmers need water."
        )
        assert summarize_text(text, 1) == "The weather report covered many regions today."
        assert summarize_text(text, 2) == (
            "The weather report covered many regions today. "
            "The main point is that farmers need water."
        )

    def test_summary_is_idempotent(self):
        assert summarize_text(LECTURE, 3) == summarize_text(LECTURE, 3)

    def test_score_components(self):
        assert score_sentence("z" * 400, 0, 4) == pytest.approx(2.0)
        # 36 chars, three keywords, third of four sentences
        assert score_sentence("This is important because it is key.", 2, 4) == pytest.approx(0.18 + 1.5 + 0.5)

    def test_exact_ties_keep_source_order(self):
        first = "z" * 250
        second = "key " + "z" * 250
        ranked = rank_sentences([first, second])
        assert ranked[0].score == ranked[1].score
        assert [item.index for item in ranked] == [0, 1]


class TestFlashcards:
    def test_colon_scenario(self):
        cards = generate_flashcards("Photosynthesis: plants convert light into energy.", 1)
        assert len(cards) == 1
        assert "Photosynthesis" in cards[0].question
        assert "plants convert light into energy." in cards[0].answer

    def test_is_definition(self):
        cards = generate_flashcards("Mitochondria is the powerhouse of the cell.", 1)
        assert cards[0].question == "What is Mitochondria?"
        assert cards[0].answer == "the powerhouse of the cell."

    def test_generic_question_fallback(self):
        cards = generate_flashcards("Plants need sunlight and water to grow well.", 1)
        assert cards[0].question == EXPLAIN_QUESTION
        assert cards[0].answer == "Plants need sunlight and water to grow well."

    def test_colon_without_answer_falls_back(self):
        cards = generate_flashcards("Chapter one introduction:", 1)
        assert cards[0].question == EXPLAIN_QUESTION
        assert cards[0].answer == "Chapter one introduction:"

    def test_long_answer_is_truncated(self):
        segment = " ".join(["word"] * 80)
        cards = generate_flashcards(segment, 1)
        assert cards[0].answer.endswith(ELLIPSIS)
        assert len(cards[0].answer) <= MAX_ANSWER_LENGTH + 1

    def test_duplicate_segments_collapse(self):
        text = "Osmosis: movement of water.\nosmosis: Movement of water."
        assert split_segments(text) == ["Osmosis: movement of water."]

    def test_backfill_reaches_requested_count(self):
        text = " ".join(f"token{i}" for i in range(200))
        cards = generate_flashcards(text, 5)
        assert len(cards) == 5
        assert all(card.answer for card in cards)
        assert all(card.question == EXPLAIN_QUESTION for card in cards)
        assert cards == generate_flashcards(text, 5)

    def test_too_short_text_yields_no_cards(self):
        assert generate_flashcards("Too short.", 4) == []

    def test_count_and_answers(self):
        for n in (1, 3, 8, 20):
            cards = generate_flashcards(LECTURE, n)
            assert len(cards) <= n
            assert all(card.answer.strip() for card in cards)


class TestQuiz:
    def test_item_invariants(self):
        quiz = generate_quiz(LECTURE, 10, rng=random.Random(7))
        assert 0 < len(quiz) <= 10
        for item in quiz:
            assert item.options.count(item.answer) == 1
            assert len(item.options) == OPTION_COUNT
            assert item.question.count(BLANK) == 1

    def test_returns_only_available_items(self):
        text = "Short one. The mitochondria produces energy for the living cell."
        quiz = generate_quiz(text, 3, rng=random.Random(1))
        assert len(quiz) == 1
        assert quiz[0].answer in {"produces", "energy", "for"}

    def test_count_limits_items(self):
        assert len(generate_quiz(LECTURE, 2, rng=random.Random(3))) == 2

    def test_answer_is_stripped_of_punctuation(self):
        quiz = generate_quiz("One two (three), (four), (five) six.", 1, rng=random.Random(0))
        assert quiz[0].answer in {"three", "four"}
        assert "(" + quiz[0].answer not in quiz[0].question

    def test_sentence_without_usable_answer_is_skipped(self):
        assert generate_quiz("Alpha beta ** ;; gamma delta epsilon", 3, rng=random.Random(0)) == []

    def test_sentence_with_existing_blank_is_skipped(self):
        assert generate_quiz("Fill in the ____ for this sentence please now.", 1) == []

    def test_seeded_generation_is_repeatable(self):
        assert generate_quiz(LECTURE, 5, rng=random.Random(42)) == generate_quiz(LECTURE, 5, rng=random.Random(42))

    def test_clean_token(self):
        assert clean_token("(well-known),") == "well-known"
        assert clean_token("café.") == "café"
        assert clean_token("--") == "--"
        assert clean_token("...") == ""

    def test_distractors_dedupe_against_answer(self):
        options = build_options("Process", random.Random(0))
        assert len(options) == OPTION_COUNT
        assert options.count("Process") == 1
        assert "process" not in options

    def test_mask_index_in_middle_third(self):
        for words in range(6, 30):
            idx = pick_mask_index(words, random.Random(words))
            assert words // 3 <= idx < max(words // 3 + 1, 2 * words // 3)
