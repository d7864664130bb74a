"""Read-side queries over the results, exams and students collections."""
from datetime import datetime
from typing import Optional

from database import serialize_id
from services.scoring import round_half_up


def month_bounds(now: datetime):
    start = datetime(now.year, now.month, 1)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1)
    else:
        end = datetime(now.year, now.month + 1, 1)
    return start, end


async def find_submission(db, exam_id: str, account: str) -> Optional[dict]:
    return await db.results.find_one({"examId": exam_id, "studentAccount": account})


async def cohort_average_xp(db, exam_id: str, exclude_account: str) -> int:
    """Mean finalXP of everyone else who took the exam, 0 if nobody did."""
    cursor = db.results.aggregate([
        {"$match": {"examId": exam_id, "studentAccount": {"$ne": exclude_account}}},
        {"$group": {"_id": None, "avgXp": {"$avg": "$finalXP"}, "count": {"$sum": 1}}},
    ])
    groups = await cursor.to_list(length=None)
    if not groups or groups[0].get("avgXp") is None:
        return 0
    return round_half_up(groups[0]["avgXp"])


async def university_exam_ids(db, uni_account: str):
    return await db.exams.distinct("examId", {"uni": uni_account})


async def count_monthly_exams(db, uni_account: str, now: datetime) -> int:
    start, end = month_bounds(now)
    return await db.exams.count_documents({
        "uni": uni_account,
        "createdAt": {"$gte": start, "$lt": end},
    })


async def count_monthly_students(db, uni_account: str, now: datetime) -> int:
    """Distinct students with a result on this university's exams this month."""
    start, end = month_bounds(now)
    exam_ids = await university_exam_ids(db, uni_account)
    if not exam_ids:
        return 0
    students = await db.results.distinct("studentAccount", {
        "examId": {"$in": exam_ids},
        "submittedAt": {"$gte": start, "$lt": end},
    })
    return len(students)


async def recent_students(db, uni_account: str, uni_id: str, limit: int = 20):
    """Latest students of a university, each with their results on its exams."""
    cursor = db.students.find({"uniId": uni_id}).sort("createdAt", -1).limit(limit)
    students = await cursor.to_list(length=None)

    exam_ids = await university_exam_ids(db, uni_account)
    for student in students:
        serialize_id(student)
        results = []
        if exam_ids:
            results_cursor = db.results.find({
                "studentAccount": student["account"],
                "examId": {"$in": exam_ids},
            }).sort("submittedAt", -1)
            results = [serialize_id(r) for r in await results_cursor.to_list(length=None)]
        student["examStats"] = results
    return students


async def count_attended_exams(db, student_account: str, uni_account: str) -> int:
    exam_ids = await university_exam_ids(db, uni_account)
    if not exam_ids:
        return 0
    attended = await db.results.distinct("examId", {
        "studentAccount": student_account,
        "examId": {"$in": exam_ids},
    })
    return len(attended)


async def exam_summary(db, exam_id: str):
    cursor = db.results.find({"examId": exam_id})
    results = await cursor.to_list(length=None)

    if not results:
        return {
            "attempts": 0,
            "averagePercentage": 0,
            "highestPercentage": 0,
            "lowestPercentage": 0,
            "averageXp": 0,
            "skillGrantRate": 0,
        }

    percentages = [r["percentageScore"] for r in results]
    attempts = len(results)
    granted = len([r for r in results if r.get("earnedSkills")])

    return {
        "attempts": attempts,
        "averagePercentage": round(sum(percentages) / attempts, 2),
        "highestPercentage": round(max(percentages), 2),
        "lowestPercentage": round(min(percentages), 2),
        "averageXp": round_half_up(sum(r["finalXP"] for r in results) / attempts),
        "skillGrantRate": round((granted / attempts) * 100, 2),
    }
