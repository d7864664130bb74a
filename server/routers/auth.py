from fastapi import APIRouter, HTTPException, Depends
from pymongo.errors import DuplicateKeyError
from bson import ObjectId
from models.student import AccountRequest, StudentAuthRequest
from database import get_database, serialize_id
from services.eligibility import load_university
from services import queries
import config
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

LISTING_PROJECTION = {"questions": 0}

@router.post("/university")
async def authenticate_university(request: AccountRequest, db=Depends(get_database)):
    try:
        account = request.account
        if not account:
            raise HTTPException(status_code=400, detail="Invalid account address")

        if await db.students.find_one({"account": account}):
            raise HTTPException(status_code=409, detail="Account address is already associated with a student")

        # Find or create university with this account
        university = await db.universities.find_one({"account": account})
        if not university:
            university = {
                "account": account,
                "students": [],
                "exams": [],
                "createdAt": datetime.utcnow(),
            }
            try:
                inserted = await db.universities.insert_one(university)
                university["_id"] = inserted.inserted_id
                logger.info(f"Registered university {account}")
            except DuplicateKeyError:
                university = await db.universities.find_one({"account": account})

        now = datetime.utcnow()
        uni_id = str(university["_id"])

        cursor = db.exams.find({"uni": account}).sort("createdAt", -1)
        exams = [serialize_id(exam) for exam in await cursor.to_list(length=None)]

        return {
            "success": True,
            "data": {
                "id": uni_id,
                "exams": exams,
                "totalExams": await queries.count_monthly_exams(db, account, now),
                "totalStudents": await queries.count_monthly_students(db, account, now),
                "students": await queries.recent_students(db, account, uni_id, config.RECENT_LIMIT),
            }
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"University authentication error: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.post("/student")
async def authenticate_student(request: StudentAuthRequest, db=Depends(get_database)):
    try:
        account = request.account
        if not account:
            raise HTTPException(status_code=400, detail="Invalid account address")

        if await db.universities.find_one({"account": account}):
            raise HTTPException(status_code=409, detail="Account address is already associated with a university")

        student = await db.students.find_one({"account": account})

        if student:
            university = await load_university(db, student.get("uniId"))
            if not university:
                raise HTTPException(status_code=404, detail="Student's university not found")
        else:
            # New students must name an existing university
            if not request.uniId or not ObjectId.is_valid(request.uniId):
                raise HTTPException(status_code=400, detail="University ID is required for new students")

            university = await load_university(db, request.uniId)
            if not university:
                raise HTTPException(status_code=404, detail="University not found")

            student = {
                "account": account,
                "examStats": [],
                "uniId": str(university["_id"]),
                "createdAt": datetime.utcnow(),
            }
            await db.students.insert_one(student)

            await db.universities.update_one(
                {"_id": university["_id"]},
                {"$push": {"students": account}}
            )
            logger.info(f"Registered student {account} at university {university['account']}")

        uni_cursor = db.exams.find({"uni": university["account"]}, LISTING_PROJECTION).sort("createdAt", -1).limit(config.RECENT_LIMIT)
        uni_exams = [serialize_id(exam) for exam in await uni_cursor.to_list(length=None)]

        other_cursor = db.exams.find(
            {"uni": {"$ne": university["account"]}, "private": False, "isActive": True},
            LISTING_PROJECTION
        ).sort("createdAt", -1)
        other_exams = [serialize_id(exam) for exam in await other_cursor.to_list(length=None)]

        return {
            "success": True,
            "data": {
                "uniExams": uni_exams,
                "otherExams": other_exams,
                "exams": await db.exams.count_documents({"uni": university["account"]}),
                "attendedExams": await queries.count_attended_exams(db, account, university["account"]),
            }
        }
    except HTTPException:
        raise
    except DuplicateKeyError:
        raise HTTPException(status_code=409, detail="Account address is already registered")
    except Exception as e:
        logger.error(f"Student authentication error: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")
