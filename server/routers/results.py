from fastapi import APIRouter, HTTPException, Depends, Body
from typing import Optional
from pymongo.errors import DuplicateKeyError
from models.result import SubmissionRequest, SubmissionResult
from database import get_database
from services.eligibility import check_eligibility, load_student, load_exam
from services.projection import project_result
from services.queries import find_submission, cohort_average_xp
from services.scoring import score
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/{exam_id}/submit")
async def submit_exam(exam_id: str, submission: SubmissionRequest, db=Depends(get_database)):
    try:
        if not submission.account:
            raise HTTPException(status_code=401, detail="Student account is required")

        if submission.answers is None:
            raise HTTPException(status_code=400, detail="Answers are required")

        student, exam = await check_eligibility(db, exam_id, submission.account)

        result = score(exam, submission.answers, submission.account)

        # The unique (examId, studentAccount) index rejects concurrent duplicates
        try:
            inserted = await db.results.insert_one(result.model_dump())
        except DuplicateKeyError:
            logger.info(f"Duplicate submission rejected for {submission.account} on exam {exam_id}")
            raise HTTPException(status_code=409, detail="You have already taken this exam")

        result_id = str(inserted.inserted_id)

        # Link result to the student's history
        await db.students.update_one(
            {"_id": student["_id"]},
            {"$push": {"examStats": result_id}}
        )

        logger.info(
            f"Student {submission.account} submitted exam {exam_id}: "
            f"{result.earnedPoints}/{result.totalPoints} points, {result.finalXP} XP"
        )

        return {
            "success": True,
            "id": result_id,
            "data": {
                "totalPoints": result.totalPoints,
                "earnedPoints": result.earnedPoints,
                "percentageScore": result.percentageScore,
                "xp": result.finalXP,
                "earnedSkills": result.earnedSkills,
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Submit exam error for {exam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to submit exam")

@router.post("/{exam_id}/results")
async def get_exam_results(exam_id: str, account: Optional[str] = Body(None, embed=True), db=Depends(get_database)):
    try:
        await load_student(db, account)
        exam = await load_exam(db, exam_id)

        stored = await find_submission(db, exam_id, account)
        if not stored:
            raise HTTPException(status_code=404, detail="You have not taken this exam yet")

        result = SubmissionResult(**stored)
        qna = project_result(exam, result)
        average_xp = await cohort_average_xp(db, exam_id, account)

        return {
            "success": True,
            "data": {
                "qna": [item.model_dump() for item in qna],
                "points": result.earnedPoints,
                "totalPoints": result.totalPoints,
                "percentageScore": result.percentageScore,
                "earnedSkills": result.earnedSkills,
                "xp": result.finalXP,
                "avgXp": average_xp,
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Exam results error for {exam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch results")
