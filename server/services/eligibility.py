from bson import ObjectId
from fastapi import HTTPException

from models.exam import Exam
from services.queries import find_submission


async def load_student(db, account):
    if not account or not isinstance(account, str):
        raise HTTPException(status_code=401, detail="Student account is required")

    student = await db.students.find_one({"account": account})
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


async def load_exam(db, exam_id: str) -> Exam:
    exam = await db.exams.find_one({"examId": exam_id})
    if not exam:
        raise HTTPException(status_code=404, detail="Exam not found")
    return Exam(**exam)


async def load_university(db, uni_id):
    if not uni_id or not ObjectId.is_valid(uni_id):
        return None
    return await db.universities.find_one({"_id": ObjectId(uni_id)})


async def check_eligibility(db, exam_id: str, account):
    """Resolve the student and exam for taking or submitting.

    Raises HTTPException when the student is unknown, has already taken the
    exam, the exam is missing or inactive, or the exam is private to another
    university.
    """
    student = await load_student(db, account)

    if await find_submission(db, exam_id, account):
        raise HTTPException(status_code=403, detail="You have already taken this exam")

    exam = await load_exam(db, exam_id)

    if not exam.isActive:
        raise HTTPException(status_code=403, detail="This exam is no longer active")

    if exam.private:
        exam_uni = await db.universities.find_one({"account": exam.uni})
        if not exam_uni:
            raise HTTPException(status_code=404, detail="Exam university not found")
        if student.get("uniId") != str(exam_uni["_id"]):
            raise HTTPException(status_code=403, detail="You do not have access to this private exam")

    return student, exam
