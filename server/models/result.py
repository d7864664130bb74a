from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional
from datetime import datetime
from models.exam import OptionItem

class SubmissionRequest(BaseModel):
    account: Optional[str] = None
    answers: Optional[Dict[str, Any]] = None

class QuestionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    questionId: str
    userAnswer: Optional[Any] = None
    correctAnswer: int
    isCorrect: bool
    pointsAwarded: float
    maxPoints: float

class SubmissionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    examId: str
    studentAccount: str
    questionResults: List[QuestionResult] = Field(default_factory=list)
    totalPoints: float
    earnedPoints: float
    percentageScore: float
    earnedSkills: List[str] = Field(default_factory=list)
    baseXP: int
    difficultyMultiplier: float
    finalXP: int
    submittedAt: datetime

class QnAItem(BaseModel):
    question: str
    options: List[OptionItem]
    correct: bool
    option: Optional[Any] = None
    actualOption: int
