"""Tests for the keyword-based question classifier."""

from __future__ import annotations

import pytest

from interview_chat.services.question_classifier import (
    QuestionClassifier,
    QUESTION_TYPES,
    RESPONSE_FORMATS,
)


@pytest.fixture
def classifier() -> QuestionClassifier:
    return QuestionClassifier()


def test_sql_vs_nosql_is_technical_comparison(classifier: QuestionClassifier) -> None:
    result = classifier.classify("What is the difference between SQL and NoSQL databases?")
    assert result.type == "technical"
    assert result.suggested_format == "comparison"
    assert result.category == "Database Systems"
    assert result.confidence == pytest.approx(0.7)
    assert result.complexity == "intermediate"
    assert result.estimated_time_seconds == 20
    assert result.requires_personal_context is False
    assert result.keywords[:2] == ["sql", "nosql"]


def test_conflict_story_is_behavioral_star(classifier: QuestionClassifier) -> None:
    result = classifier.classify("Tell me about a time you faced a conflict with a teammate")
    assert result.type == "behavioral"
    assert result.suggested_format == "star"
    assert result.confidence == pytest.approx(0.9)
    assert result.requires_personal_context is True


def test_personal_database_question(classifier: QuestionClassifier) -> None:
    result = classifier.classify("What database have you used?")
    assert result.type == "technical"
    assert result.suggested_format == "definition"
    assert result.requires_personal_context is True


def test_empty_string_is_low_confidence_general(classifier: QuestionClassifier) -> None:
    result = classifier.classify("")
    assert result.type == "general"
    assert result.suggested_format == "definition"
    assert result.confidence <= 0.3
    assert result.complexity == "beginner"
    assert result.estimated_time_seconds == 10
    assert result.keywords == []


def test_coding_phrase_wins_over_behavioral(classifier: QuestionClassifier) -> None:
    result = classifier.classify("Write a function to reverse a linked list")
    assert result.type == "coding"
    assert result.suggested_format == "step_by_step"
    assert result.confidence == pytest.approx(0.8)


def test_system_design_phrase(classifier: QuestionClassifier) -> None:
    result = classifier.classify("How would you design a URL shortener like bit.ly?")
    assert result.type == "system_design"
    assert result.suggested_format == "architecture"
    assert result.estimated_time_seconds == 35


def test_design_with_many_technical_terms_is_system_design(classifier: QuestionClassifier) -> None:
    result = classifier.classify("design storage with postgresql redis and api caching")
    assert result.type == "system_design"
    assert result.confidence == pytest.approx(0.6)


def test_many_technical_terms_make_question_advanced(classifier: QuestionClassifier) -> None:
    result = classifier.classify("explain docker kubernetes aws terraform")
    assert result.type == "technical"
    assert result.category == "DevOps & Cloud"
    assert result.complexity == "advanced"
    assert result.confidence == pytest.approx(0.8)
    assert result.estimated_time_seconds == 24


def test_advanced_signal_word(classifier: QuestionClassifier) -> None:
    result = classifier.classify("How do you optimize a slow endpoint?")
    assert result.type == "coding"
    assert result.complexity == "advanced"
    assert result.estimated_time_seconds == 32


def test_long_question_is_intermediate(classifier: QuestionClassifier) -> None:
    question = "Walk me through what happens, step by step, between typing a web address and seeing the page render on screen"
    assert len(question) > 100
    assert classifier.classify(question).complexity == "intermediate"


def test_behavioral_regex_pattern(classifier: QuestionClassifier) -> None:
    result = classifier.classify("Describe a situation where things went wrong")
    assert result.type == "behavioral"


@pytest.mark.parametrize(
    "question",
    [
        "",
        "   ",
        "?!?!",
        "hello there",
        "Design Twitter",
        "Implement binary search in python",
        "What is polymorphism?",
        "um uh hmm",
        "you you you you you you you",
        "docker docker docker docker docker docker docker docker docker",
    ],
)
def test_classification_is_always_well_formed(classifier: QuestionClassifier, question: str) -> None:
    result = classifier.classify(question)
    assert 0.0 <= result.confidence <= 1.0
    assert result.suggested_format in RESPONSE_FORMATS
    assert result.type in QUESTION_TYPES
    assert result.complexity in ("beginner", "intermediate", "advanced")
    assert result.estimated_time_seconds > 0


def test_to_dict_uses_client_field_names(classifier: QuestionClassifier) -> None:
    data = classifier.classify("What is Docker?").to_dict()
    assert data["suggestedFormat"] == "definition"
    assert data["requiresPersonalContext"] is False
    assert "estimatedTime" in data
