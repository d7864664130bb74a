from fastapi import APIRouter, HTTPException, Depends, Body
from typing import Optional
from models.exam import ExamCreate, ExamStatusUpdate
from database import get_database, serialize_id
from services.eligibility import check_eligibility
import config
from datetime import datetime
import uuid
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

LISTING_FIELDS = {
    "_id": 1, "examId": 1, "uni": 1, "title": 1, "description": 1, "duration": 1,
    "isActive": 1, "private": 1, "skills": 1, "expectedPoints": 1, "createdAt": 1,
}

def _is_integer(value):
    return isinstance(value, int) and not isinstance(value, bool)

def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def validate_exam(exam: ExamCreate):
    if not exam.title or not isinstance(exam.title, str):
        return "Exam title is required"

    if not _is_number(exam.duration) or exam.duration <= 0:
        return "Valid exam duration is required (in minutes)"

    if not exam.questions:
        return "Exam must contain at least one question"

    if exam.skills is not None and (
        not isinstance(exam.skills, list) or not all(isinstance(s, str) for s in exam.skills)
    ):
        return "Skills must be an array"

    if exam.expectedPoints is not None and (not _is_number(exam.expectedPoints) or exam.expectedPoints < 0):
        return "Expected points must be a non-negative number"

    for question in exam.questions:
        if not question.questionText or not isinstance(question.questionText, str):
            return "Each question must have question text"

        if not isinstance(question.options, list) or len(question.options) < 2:
            return "Each question must have at least two options"

        for option in question.options:
            if not isinstance(option, dict) or not _is_integer(option.get("id")) or not option.get("text"):
                return "Each option must have id (number) and text"

        if not _is_integer(question.correctAnswer):
            return "Each question must have a correct answer (option id)"

        if not any(option["id"] == question.correctAnswer for option in question.options):
            return "Correct answer must match an option id"

        if not _is_number(question.points) or question.points <= 0:
            return "Each question must have valid points"

    supplied_ids = [q.questionId for q in exam.questions if q.questionId]
    if len(supplied_ids) != len(set(supplied_ids)):
        return "Question ids must be unique"

    return None

@router.post("/", status_code=201)
async def create_exam(exam: ExamCreate, db=Depends(get_database)):
    try:
        if not exam.account or not isinstance(exam.account, str):
            raise HTTPException(status_code=400, detail="Invalid university account address")

        university = await db.universities.find_one({"account": exam.account})
        if not university:
            raise HTTPException(status_code=404, detail="University not found")

        error = validate_exam(exam)
        if error:
            raise HTTPException(status_code=400, detail=error)

        questions = [
            {
                "questionId": q.questionId or str(uuid.uuid4()),
                "questionText": q.questionText,
                "options": [{"id": int(o["id"]), "text": str(o["text"])} for o in q.options],
                "correctAnswer": int(q.correctAnswer),
                "points": q.points,
            }
            for q in exam.questions
        ]

        now = datetime.utcnow()
        exam_data = {
            "examId": str(uuid.uuid4()),
            "uni": university["account"],
            "title": exam.title,
            "description": exam.description or "",
            "duration": exam.duration,
            "questions": questions,
            "isActive": True,
            "private": exam.private is True,
            "skills": list(dict.fromkeys(exam.skills or [])),
            "expectedPoints": exam.expectedPoints or 0,
            "createdAt": now,
            "updatedAt": now,
        }
        await db.exams.insert_one(exam_data)

        # Link exam to its university
        await db.universities.update_one(
            {"_id": university["_id"]},
            {"$push": {"exams": exam_data["examId"]}}
        )

        total_points = sum(q["points"] for q in questions)
        logger.info(f"University {university['account']} created exam {exam_data['examId']} with {len(questions)} questions")

        return {
            "success": True,
            "data": {
                "id": exam_data["examId"],
                "title": exam_data["title"],
                "description": exam_data["description"],
                "duration": exam_data["duration"],
                "totalQuestions": len(questions),
                "totalPoints": total_points,
                "skills": exam_data["skills"],
                "expectedPoints": exam_data["expectedPoints"],
                "createdAt": exam_data["createdAt"],
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Exam creation error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create exam")

@router.get("/")
async def get_exams(
    university: Optional[str] = None,
    public: Optional[bool] = None,
    active: Optional[bool] = None,
    limit: int = config.DEFAULT_PAGE_LIMIT,
    skip: int = 0,
    db=Depends(get_database)
):
    try:
        if limit < 1 or skip < 0:
            raise HTTPException(status_code=400, detail="Invalid pagination parameters")

        query = {}
        if university:
            query["uni"] = university
        if public is not None:
            query["private"] = not public
        if active is not None:
            query["isActive"] = active

        total = await db.exams.count_documents(query)

        cursor = db.exams.find(query, LISTING_FIELDS).sort("createdAt", -1).skip(skip).limit(limit)
        exams = await cursor.to_list(length=None)

        # Convert ObjectId to string
        for exam in exams:
            serialize_id(exam)

        return {
            "success": True,
            "data": {
                "exams": exams,
                "pagination": {
                    "total": total,
                    "limit": limit,
                    "skip": skip,
                    "hasMore": skip + len(exams) < total
                }
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Get exams error: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch exams")

@router.post("/{exam_id}")
async def get_exam_for_student(exam_id: str, account: Optional[str] = Body(None, embed=True), db=Depends(get_database)):
    try:
        _, exam = await check_eligibility(db, exam_id, account)

        # Send questions without correct answers
        questions = [
            question.model_dump(exclude={"correctAnswer"})
            for question in exam.questions
        ]

        return {
            "success": True,
            "data": {
                "id": exam.examId,
                "title": exam.title,
                "description": exam.description,
                "duration": exam.duration,
                "questions": questions
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Fetch exam error for {exam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch exam")

@router.put("/{exam_id}/status")
async def update_exam_status(exam_id: str, update: ExamStatusUpdate, db=Depends(get_database)):
    try:
        if not update.account:
            raise HTTPException(status_code=401, detail="University account is required")

        exam = await db.exams.find_one({"examId": exam_id})
        if not exam:
            raise HTTPException(status_code=404, detail="Exam not found")

        if exam["uni"] != update.account:
            raise HTTPException(status_code=403, detail="Only the owning university can change this exam")

        await db.exams.update_one(
            {"examId": exam_id},
            {"$set": {"isActive": update.isActive, "updatedAt": datetime.utcnow()}}
        )
        logger.info(f"Exam {exam_id} isActive set to {update.isActive}")

        return {
            "success": True,
            "data": {"id": exam_id, "isActive": update.isActive}
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Update exam status error for {exam_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update exam")
