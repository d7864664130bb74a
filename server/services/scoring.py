"""
Exam scoring and experience-point (XP) calculation.

``score`` turns an exam definition and a student's answer map into a
``SubmissionResult``. It is a pure function: it never touches the database
and never raises for well-typed input. Eligibility (active exam, first
attempt, private access) is checked by the caller before scoring.

XP model:
    baseXP     = round(studentFraction * MAX_XP)
    multiplier = clamp(1 + SENSITIVITY * (studentFraction - expectedFraction),
                       MIN_MULTIPLIER, MAX_MULTIPLIER)
    finalXP    = round(baseXP * multiplier)

where ``expectedFraction`` is ``expectedPoints / totalPoints`` when the exam
declares expected points, otherwise ``DEFAULT_EXPECTED_FRACTION``.
"""
import math
from datetime import datetime
from typing import Any, Dict, Optional

from models.exam import Exam
from models.result import QuestionResult, SubmissionResult

MAX_XP = 1000
SENSITIVITY = 1.0
MIN_MULTIPLIER = 0.8
MAX_MULTIPLIER = 1.2

# Mastery assumed for exams without expectedPoints
DEFAULT_EXPECTED_FRACTION = 0.6

# Share of expectedPoints needed to earn the exam's skills.
# Kept separate from DEFAULT_EXPECTED_FRACTION.
SKILL_GRANT_RATIO = 0.6


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negative values."""
    return int(math.floor(value + 0.5))


def is_option_id(value: Any) -> bool:
    # Answers compare strictly: "1" and True never match option 1
    return isinstance(value, int) and not isinstance(value, bool)


def expected_fraction(expected_points: float, total_points: float) -> float:
    if expected_points > 0 and total_points > 0:
        return expected_points / total_points
    return DEFAULT_EXPECTED_FRACTION


def difficulty_multiplier(student_fraction: float, expected: float) -> float:
    raw = 1 + SENSITIVITY * (student_fraction - expected)
    return max(MIN_MULTIPLIER, min(MAX_MULTIPLIER, raw))


def grants_skills(earned_points: float, expected_points: float) -> bool:
    return expected_points > 0 and earned_points >= SKILL_GRANT_RATIO * expected_points


def score(
    exam: Exam,
    answers: Dict[str, Any],
    student_account: str,
    submitted_at: Optional[datetime] = None,
) -> SubmissionResult:
    """Score a submission.

    Questions are evaluated in definition order. A question missing from
    ``answers`` (or answered with anything but an integer option id) is
    incorrect; answer keys that match no question are ignored.
    """
    answers = answers or {}
    question_results = []
    total_points = 0.0
    earned_points = 0.0

    for question in exam.questions:
        user_answer = answers.get(question.questionId)
        is_correct = is_option_id(user_answer) and user_answer == question.correctAnswer
        points_awarded = question.points if is_correct else 0

        total_points += question.points
        earned_points += points_awarded

        question_results.append(
            QuestionResult(
                questionId=question.questionId,
                userAnswer=user_answer,
                correctAnswer=question.correctAnswer,
                isCorrect=is_correct,
                pointsAwarded=points_awarded,
                maxPoints=question.points,
            )
        )

    percentage_score = (earned_points / total_points) * 100 if total_points > 0 else 0
    student_fraction = earned_points / total_points if total_points > 0 else 0

    base_xp = round_half_up(student_fraction * MAX_XP)
    multiplier = difficulty_multiplier(
        student_fraction, expected_fraction(exam.expectedPoints, total_points)
    )
    final_xp = round_half_up(base_xp * multiplier)

    earned_skills = list(exam.skills) if grants_skills(earned_points, exam.expectedPoints) else []

    return SubmissionResult(
        examId=exam.examId,
        studentAccount=student_account,
        questionResults=question_results,
        totalPoints=total_points,
        earnedPoints=earned_points,
        percentageScore=percentage_score,
        earnedSkills=earned_skills,
        baseXP=base_xp,
        difficultyMultiplier=multiplier,
        finalXP=final_xp,
        submittedAt=submitted_at or datetime.utcnow(),
    )
