from datetime import datetime

import pytest
from pydantic import ValidationError

from models.exam import Exam
from services.scoring import (
    DEFAULT_EXPECTED_FRACTION,
    MAX_MULTIPLIER,
    MIN_MULTIPLIER,
    difficulty_multiplier,
    expected_fraction,
    grants_skills,
    round_half_up,
    score,
)


def make_exam(points=(50, 50), expected_points=60, skills=("Blockchain", "Cryptography")):
    return Exam(
        examId="exam-1",
        uni="0xUNI",
        title="Blockchain Fundamentals",
        duration=30,
        questions=[
            {
                "questionId": f"q{i}",
                "questionText": f"Question {i}",
                "options": [{"id": 1, "text": "A"}, {"id": 2, "text": "B"}],
                "correctAnswer": 1,
                "points": p,
            }
            for i, p in enumerate(points, start=1)
        ],
        skills=list(skills),
        expectedPoints=expected_points,
    )


def test_all_correct_clamps_multiplier_and_grants_skills():
    result = score(make_exam(), {"q1": 1, "q2": 1}, "0xSTUDENT")

    assert result.totalPoints == 100
    assert result.earnedPoints == 100
    assert result.percentageScore == 100
    assert result.baseXP == 1000
    assert result.difficultyMultiplier == pytest.approx(1.2)
    assert result.finalXP == 1200
    assert result.earnedSkills == ["Blockchain", "Cryptography"]


def test_all_wrong_scores_zero_and_grants_nothing():
    result = score(make_exam(), {"q1": 2, "q2": 2}, "0xSTUDENT")

    assert result.earnedPoints == 0
    assert result.percentageScore == 0
    assert result.baseXP == 0
    assert result.difficultyMultiplier == pytest.approx(0.8)
    assert result.finalXP == 0
    assert result.earnedSkills == []


def test_zero_expected_points_never_grants_skills():
    result = score(make_exam(expected_points=0), {"q1": 1, "q2": 1}, "0xSTUDENT")

    # Full marks against the default 0.6 expectation
    assert result.difficultyMultiplier == pytest.approx(1.2)
    assert result.earnedSkills == []


def test_missing_answer_is_incorrect():
    result = score(make_exam(), {"q1": 1}, "0xSTUDENT")

    q2 = result.questionResults[1]
    assert q2.questionId == "q2"
    assert q2.userAnswer is None
    assert q2.isCorrect is False
    assert q2.pointsAwarded == 0
    assert q2.maxPoints == 50
    assert result.earnedPoints == 50


def test_unknown_question_ids_are_ignored():
    result = score(make_exam(), {"q1": 1, "nope": 1, "other": 2}, "0xSTUDENT")

    assert [r.questionId for r in result.questionResults] == ["q1", "q2"]
    assert result.earnedPoints == 50


def test_question_results_follow_definition_order():
    exam = make_exam(points=(10, 20, 30))
    result = score(exam, {"q3": 1, "q1": 2}, "0xSTUDENT")

    assert [r.questionId for r in result.questionResults] == ["q1", "q2", "q3"]
    assert [r.isCorrect for r in result.questionResults] == [False, False, True]
    assert result.earnedPoints == 30
    assert result.totalPoints == 60


def test_empty_exam_degrades_to_zero():
    exam = make_exam(points=())
    result = score(exam, {"q1": 1}, "0xSTUDENT")

    assert result.totalPoints == 0
    assert result.percentageScore == 0
    assert result.baseXP == 0
    assert result.finalXP == 0
    assert result.difficultyMultiplier == pytest.approx(MIN_MULTIPLIER)
    assert result.questionResults == []


def test_unclamped_multiplier_uses_expected_fraction():
    # 2 of 4 correct against an expected 40%
    exam = make_exam(points=(25, 25, 25, 25), expected_points=40)
    result = score(exam, {"q1": 1, "q2": 1}, "0xSTUDENT")

    assert result.baseXP == 500
    assert result.difficultyMultiplier == pytest.approx(1.1)
    assert result.finalXP == 550


def test_base_xp_rounds_half_up():
    exam = make_exam(points=(1,) * 16, expected_points=0)
    result = score(exam, {"q1": 1}, "0xSTUDENT")

    # 1/16 of 1000 is 62.5
    assert result.baseXP == 63
    assert result.finalXP == 50


def test_skill_threshold_is_sixty_percent_of_expected_points():
    exam = make_exam(points=(18, 18, 64), expected_points=60)

    # 36 points is exactly 0.6 * 60
    assert score(exam, {"q1": 1, "q2": 1}, "0xS").earnedSkills == ["Blockchain", "Cryptography"]
    assert score(exam, {"q1": 1}, "0xS").earnedSkills == []


def test_submission_metadata():
    submitted_at = datetime(2025, 3, 1, 12, 0)
    result = score(make_exam(), {}, "0xSTUDENT", submitted_at=submitted_at)

    assert result.examId == "exam-1"
    assert result.studentAccount == "0xSTUDENT"
    assert result.submittedAt == submitted_at


def test_result_is_immutable():
    result = score(make_exam(), {"q1": 1}, "0xSTUDENT")

    with pytest.raises(ValidationError):
        result.finalXP = 5000


@pytest.mark.parametrize("student_fraction", [0, 0.1, 0.35, 0.5, 0.75, 0.9, 1])
@pytest.mark.parametrize("expected", [0.05, 0.3, 0.6, 0.95, 1])
def test_multiplier_bounds(student_fraction, expected):
    multiplier = difficulty_multiplier(student_fraction, expected)

    assert MIN_MULTIPLIER <= multiplier <= MAX_MULTIPLIER


def test_expected_fraction_defaults():
    assert expected_fraction(0, 100) == DEFAULT_EXPECTED_FRACTION
    assert expected_fraction(60, 0) == DEFAULT_EXPECTED_FRACTION
    assert expected_fraction(30, 120) == pytest.approx(0.25)


def test_skill_grant_is_monotonic_in_earned_points():
    granted = [grants_skills(earned, 50) for earned in range(0, 101, 5)]

    assert granted == sorted(granted)
    assert not grants_skills(100, 0)


def test_percentage_and_xp_bounds_over_all_answer_patterns():
    exam = make_exam(points=(5, 15, 30, 50), expected_points=70)
    for mask in range(16):
        answers = {f"q{i + 1}": 1 if mask & (1 << i) else 2 for i in range(4)}
        result = score(exam, answers, "0xS")

        assert 0 <= result.percentageScore <= 100
        assert result.finalXP >= 0
        assert MIN_MULTIPLIER <= result.difficultyMultiplier <= MAX_MULTIPLIER


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2
    assert round_half_up(0) == 0


def test_answers_must_be_integer_option_ids():
    result = score(make_exam(points=(25, 25, 25, 25)), {"q1": "1", "q2": True, "q3": "abc", "q4": 1}, "0xS")

    assert [r.isCorrect for r in result.questionResults] == [False, False, False, True]
    assert [r.userAnswer for r in result.questionResults] == ["1", True, "abc", 1]
    assert result.earnedPoints == 25
