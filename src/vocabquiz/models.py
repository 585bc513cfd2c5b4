import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuizStatus(str, Enum):
    ACTIVE = "active"
    ANSWERED_CORRECT = "answered_correct"
    ANSWERED_WRONG = "answered_wrong"
    FINISHED = "finished"


class QuestionItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    correct_answer: str
    options: List[str]


class QuizSession(BaseModel):
    """One run through a lesson's questions.

    Instances are never mutated in place; the transition functions in
    ``vocabquiz.session`` return updated copies that keep the same ``id``.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    lesson_id: str
    reverse: bool = False
    questions: List[QuestionItem]
    current_index: int = 0
    score: int = 0
    status: QuizStatus = QuizStatus.ACTIVE
    last_choice: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> QuestionItem:
        return self.questions[self.current_index]


class ScoreRecord(BaseModel):
    lesson_id: str
    reverse: bool
    score: int
    correct_answers: int
    total_questions: int
    outcome: str  # finished, wrong, timeout or abandoned
    recorded_at: datetime = Field(default_factory=datetime.now)


class LessonSummary(BaseModel):
    id: str
    name: str
    count: int


# --- API payloads ---
class StartQuizRequest(BaseModel):
    lesson_id: str
    reverse: bool = False


class AnswerRequest(BaseModel):
    choice: Optional[str] = None


class QuizView(BaseModel):
    lesson_id: str
    reverse: bool
    status: QuizStatus
    current_index: int
    total_questions: int
    score: int
    prompt: str
    options: List[str]
    last_choice: Optional[str] = None
    correct_answer: Optional[str] = None
    seconds_remaining: Optional[float] = None
    advance_in: Optional[float] = None
