from pydantic import BaseModel, Field
from typing import Optional, List, Any
from datetime import datetime

class OptionItem(BaseModel):
    id: int
    text: str

class QuestionCreate(BaseModel):
    questionId: Optional[str] = None
    questionText: Optional[str] = None
    options: Optional[List[Any]] = None
    correctAnswer: Optional[Any] = None
    points: Optional[Any] = None

class ExamCreate(BaseModel):
    account: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = ""
    duration: Optional[Any] = None
    questions: Optional[List[QuestionCreate]] = None
    private: bool = False
    skills: Optional[Any] = None
    expectedPoints: Optional[Any] = None

class ExamStatusUpdate(BaseModel):
    account: Optional[str] = None
    isActive: bool

class Question(BaseModel):
    questionId: str
    questionText: str
    options: List[OptionItem]
    correctAnswer: int
    points: float = 1

class Exam(BaseModel):
    examId: str
    uni: str
    title: str
    description: str = ""
    duration: float
    questions: List[Question] = Field(default_factory=list)
    isActive: bool = True
    private: bool = False
    skills: List[str] = Field(default_factory=list)
    expectedPoints: float = 0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
