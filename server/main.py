from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
import uvicorn
import logging
from contextlib import asynccontextmanager
from datetime import datetime

import config
from database import connect, ensure_indexes
from routers import auth, exams, results, reports

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    client, database = connect()
    await ensure_indexes(database)
    logger.info(f"MongoDB connected successfully at {datetime.utcnow().isoformat()}")
    app.state.database = database
    yield
    client.close()
    logger.info(f"MongoDB connection closed at {datetime.utcnow().isoformat()}")

app = FastAPI(
    title="BlockExam API",
    description="Backend API for university exams, scored submissions and student XP",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(exams.router, prefix="/api/exams", tags=["exams"])
app.include_router(results.router, prefix="/api/exams", tags=["results"])
app.include_router(reports.router, prefix="/api/exams", tags=["reports"])

# Health check endpoint
@app.get("/api/health")
async def health_check():
    return {
        "status": "OK",
        "timestamp": datetime.utcnow().isoformat()
    }

# Error handling
@app.exception_handler(DuplicateKeyError)
async def duplicate_key_handler(request: Request, exc: DuplicateKeyError):
    logger.warning(f"Duplicate key on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=409,
        content={"success": False, "message": "Duplicate entry error"}
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Server error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "message": "Internal server error",
            "timestamp": datetime.utcnow().isoformat()
        }
    )

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=config.PORT,
        reload=True
    )
