from datetime import datetime

from models.exam import Exam
from models.result import SubmissionResult
from services.projection import project_result
from services.scoring import score


def make_exam():
    return Exam(
        examId="exam-1",
        uni="0xUNI",
        title="Wallets",
        duration=15,
        questions=[
            {
                "questionId": "q1",
                "questionText": "Which key signs transactions?",
                "options": [{"id": 0, "text": "Private key"}, {"id": 1, "text": "Public key"}],
                "correctAnswer": 0,
                "points": 2,
            },
            {
                "questionId": "q2",
                "questionText": "What is a nonce?",
                "options": [{"id": 0, "text": "A counter"}, {"id": 1, "text": "A fee"}],
                "correctAnswer": 0,
                "points": 3,
            },
        ],
        expectedPoints=3,
    )


def test_projection_reads_stored_outcome():
    exam = make_exam()
    result = score(exam, {"q1": 0, "q2": 1}, "0xSTUDENT")

    qna = project_result(exam, result)

    assert [item.question for item in qna] == ["Which key signs transactions?", "What is a nonce?"]
    assert qna[0].correct is True
    assert qna[0].option == 0
    assert qna[0].actualOption == 0
    assert qna[1].correct is False
    assert qna[1].option == 1
    assert [o.text for o in qna[1].options] == ["A counter", "A fee"]


def test_projection_is_idempotent():
    exam = make_exam()
    result = score(exam, {"q1": 0}, "0xSTUDENT")

    first = [item.model_dump() for item in project_result(exam, result)]
    second = [item.model_dump() for item in project_result(exam, result)]

    assert first == second


def test_projection_does_not_rescore():
    exam = make_exam()
    # Stored outcome disagrees with what scoring would say now
    stored = SubmissionResult(
        examId="exam-1",
        studentAccount="0xSTUDENT",
        questionResults=[
            {"questionId": "q1", "userAnswer": 1, "correctAnswer": 1, "isCorrect": True, "pointsAwarded": 2, "maxPoints": 2},
        ],
        totalPoints=5,
        earnedPoints=2,
        percentageScore=40,
        baseXP=400,
        difficultyMultiplier=0.8,
        finalXP=320,
        submittedAt=datetime(2025, 3, 1),
    )

    qna = project_result(exam, stored)

    assert qna[0].correct is True
    assert qna[0].option == 1
    # Questions without a stored outcome show as unanswered
    assert qna[1].correct is False
    assert qna[1].option is None
