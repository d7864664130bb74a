from typing import List

from models.exam import Exam
from models.result import QnAItem, SubmissionResult


def project_result(exam: Exam, result: SubmissionResult) -> List[QnAItem]:
    """Question-by-question view of a stored result.

    Reads the stored per-question outcome; nothing is re-scored. Questions
    missing from the stored result show as unanswered.
    """
    results_by_question = {r.questionId: r for r in result.questionResults}

    qna = []
    for question in exam.questions:
        question_result = results_by_question.get(question.questionId)
        qna.append(
            QnAItem(
                question=question.questionText,
                options=question.options,
                correct=question_result.isCorrect if question_result else False,
                option=question_result.userAnswer if question_result else None,
                actualOption=question.correctAnswer,
            )
        )
    return qna
