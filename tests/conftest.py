import asyncio

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from database import ensure_indexes, get_database
from main import app


def run(coro):
    return asyncio.run(coro)


def exam_payload(account, **overrides):
    payload = {
        "account": account,
        "title": "Blockchain Fundamentals",
        "description": "Consensus, hashing and wallets",
        "duration": 30,
        "questions": [
            {
                "questionId": "q1",
                "questionText": "Which structure links blocks together?",
                "options": [{"id": 1, "text": "Hash pointers"}, {"id": 2, "text": "Foreign keys"}],
                "correctAnswer": 1,
                "points": 50,
            },
            {
                "questionId": "q2",
                "questionText": "What secures a wallet?",
                "options": [{"id": 1, "text": "A username"}, {"id": 2, "text": "A private key"}],
                "correctAnswer": 2,
                "points": 50,
            },
        ],
        "skills": ["Blockchain", "Cryptography"],
        "expectedPoints": 60,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def db():
    database = AsyncMongoMockClient()["blockexam_test"]
    run(ensure_indexes(database))
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_database] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def university(client):
    response = client.post("/api/auth/university", json={"account": "0xUNI"})
    assert response.status_code == 200
    return {"account": "0xUNI", "id": response.json()["data"]["id"]}


@pytest.fixture
def student(client, university):
    response = client.post("/api/auth/student", json={"account": "0xSTUDENT", "uniId": university["id"]})
    assert response.status_code == 200
    return {"account": "0xSTUDENT"}


@pytest.fixture
def exam_id(client, university):
    response = client.post("/api/exams/", json=exam_payload(university["account"]))
    assert response.status_code == 201
    return response.json()["data"]["id"]
