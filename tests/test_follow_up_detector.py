from __future__ import annotations

import pytest

from interview_chat.services.follow_up_detector import FollowUpDetector, is_garbled


@pytest.fixture
def detector() -> FollowUpDetector:
    return FollowUpDetector()


@pytest.fixture
def history(make_turn):
    return [
        make_turn("user", "What is a REST API?"),
        make_turn("assistant", "A REST API exposes resources over HTTP using standard verbs."),
    ]


def test_explain_that_is_clarification(detector, history) -> None:
    result = detector.analyze("Can you explain that in more detail?", history)
    assert result.is_follow_up is True
    assert result.context_type == "clarification"
    assert result.relevant_history == history


def test_what_about_is_continuation(detector, history) -> None:
    result = detector.analyze("What about GraphQL?", history)
    assert result.is_follow_up is True
    assert result.context_type == "continuation"


def test_short_acknowledgement_is_not_follow_up(detector, history) -> None:
    result = detector.analyze("ok", history)
    assert result.is_follow_up is False
    assert result.context_type == "new_topic"
    assert result.relevant_history == []


def test_no_history_means_new_topic(detector) -> None:
    result = detector.analyze("Can you explain that?", [])
    assert result.is_follow_up is False
    assert result.relevant_history == []


def test_pronoun_reference_without_signal_words_keeps_new_topic_label(detector, history) -> None:
    result = detector.analyze("Is that used in production?", history)
    assert result.is_follow_up is True
    assert result.context_type == "new_topic"
    assert result.relevant_history == history


def test_pronoun_must_be_a_whole_word(detector, history) -> None:
    result = detector.analyze("Tell me about iterators in Python", history)
    assert result.is_follow_up is False


def test_short_building_question(detector, history) -> None:
    result = detector.analyze("When should I pick Kafka?", history)
    assert result.is_follow_up is True


def test_long_question_starting_with_how_is_new(detector, history) -> None:
    question = "How would you approach designing a large-scale notification platform for mobile"
    assert len(question) > 50
    assert detector.analyze(question, history).is_follow_up is False


def test_garbled_input_is_never_follow_up(detector, history) -> None:
    assert detector.analyze("the the the the the", history).is_follow_up is False
    assert detector.analyze("um uh what about um kafka", history).is_follow_up is False


def test_only_last_two_turns_are_used(detector, make_turn) -> None:
    turns = [
        make_turn("user", "first question"),
        make_turn("assistant", "first answer"),
        make_turn("user", "second question"),
        make_turn("assistant", "second answer"),
    ]
    result = detector.analyze("What about caching?", turns)
    assert [t.content for t in result.relevant_history] == ["second question", "second answer"]


def test_single_turn_history(detector, make_turn) -> None:
    turns = [make_turn("assistant", "Welcome, let's start with databases.")]
    result = detector.analyze("What about indexes?", turns)
    assert result.is_follow_up is True
    assert result.relevant_history == turns


@pytest.mark.parametrize(
    "message, expected",
    [
        ("", True),
        ("hey", True),
        ("go go go go", True),
        ("um uh hmm okay", True),
        ("What is dependency injection?", False),
    ],
)
def test_is_garbled(message: str, expected: bool) -> None:
    assert is_garbled(message) is expected


def test_to_dict(detector, history) -> None:
    data = detector.analyze("What about GraphQL?", history).to_dict()
    assert data["isFollowUp"] is True
    assert data["contextType"] == "continuation"
    assert [t["role"] for t in data["relevantHistory"]] == ["user", "assistant"]
