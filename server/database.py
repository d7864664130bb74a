import logging

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient

import config

logger = logging.getLogger(__name__)


def connect():
    client = AsyncIOMotorClient(config.MONGODB_URL)
    database = client.get_database(config.DATABASE_NAME)
    return client, database


async def ensure_indexes(db):
    # An account is registered once per role
    await db.universities.create_index("account", unique=True)
    await db.students.create_index("account", unique=True)
    await db.exams.create_index("examId", unique=True)
    await db.exams.create_index([("uni", 1), ("createdAt", -1)])
    # One result per (exam, student); a second insert raises DuplicateKeyError
    await db.results.create_index([("examId", 1), ("studentAccount", 1)], unique=True)
    logger.info("Database indexes ensured")


def get_database(request: Request):
    return request.app.state.database


def serialize_id(document):
    if document is not None and "_id" in document:
        document["_id"] = str(document["_id"])
    return document
