import logging
import uuid
from typing import Dict, List, Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response
from fastapi.responses import HTMLResponse

from .config import settings
from .errors import InsufficientPairs, LessonNotFound, QuizStateError
from .globals import get_lesson_store, get_quiz_service, templates
from .lessons import LessonStore
from .models import (
    AnswerRequest,
    LessonSummary,
    QuizSession,
    QuizStatus,
    QuizView,
    ScoreRecord,
    StartQuizRequest,
)
from .service import QuizService

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_client_id(
    client_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return client_id


def _quiz_view(service: QuizService, client_id: str, session: QuizSession) -> QuizView:
    question = session.current_question
    answered = session.status is not QuizStatus.ACTIVE
    seconds_remaining = None
    advance_in = None
    if session.status is QuizStatus.ACTIVE and service.time_limit > 0:
        seconds_remaining = service.timers.remaining(client_id)
    elif session.status in (QuizStatus.ANSWERED_CORRECT, QuizStatus.ANSWERED_WRONG):
        advance_in = service.timers.remaining(client_id)

    return QuizView(
        lesson_id=session.lesson_id,
        reverse=session.reverse,
        status=session.status,
        current_index=session.current_index,
        total_questions=session.total_questions,
        score=session.score,
        prompt=question.prompt,
        options=question.options,
        last_choice=session.last_choice,
        correct_answer=question.correct_answer if answered else None,
        seconds_remaining=seconds_remaining,
        advance_in=advance_in,
    )


def _require_session(service: QuizService, client_id: Optional[str]) -> QuizSession:
    session = service.get(client_id) if client_id else None
    if session is None:
        raise HTTPException(status_code=404, detail="no_active_quiz")
    return session


# --- Lessons ---
@router.get("/lessons", response_model=List[str])
async def list_lessons(store: LessonStore = Depends(get_lesson_store)):
    return store.list_lessons()


@router.get("/lessons/{lesson_id}", response_model=Dict[str, str])
async def get_lesson(lesson_id: str, store: LessonStore = Depends(get_lesson_store)):
    try:
        return store.get_lesson(lesson_id)
    except LessonNotFound:
        raise HTTPException(status_code=404, detail="lesson_not_found")


@router.get("/api/topics", response_model=List[LessonSummary])
async def get_topics(store: LessonStore = Depends(get_lesson_store)):
    return store.describe_lessons()


# --- Pages ---
@router.get("/", response_class=HTMLResponse)
async def home(request: Request, store: LessonStore = Depends(get_lesson_store)):
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "topics": store.describe_lessons(),
            "points": settings.POINTS_PER_CORRECT,
            "root_path": request.scope.get("root_path", ""),
        },
    )


# --- Quiz ---
@router.post("/api/quiz/start", response_model=QuizView)
async def start_quiz(
    payload: StartQuizRequest,
    response: Response,
    client_id: Optional[str] = Depends(get_client_id),
    service: QuizService = Depends(get_quiz_service),
):
    client_id = client_id or str(uuid.uuid4())
    try:
        session = service.start(client_id, payload.lesson_id, payload.reverse)
    except LessonNotFound:
        raise HTTPException(status_code=404, detail="lesson_not_found")
    except InsufficientPairs as e:
        logger.warning(f"Cannot start quiz for lesson {payload.lesson_id}: {e}")
        raise HTTPException(status_code=422, detail="insufficient_pairs")

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=client_id,
        httponly=True,
        samesite="lax",
    )
    return _quiz_view(service, client_id, session)


@router.get("/api/quiz", response_model=QuizView)
async def get_quiz(
    client_id: Optional[str] = Depends(get_client_id),
    service: QuizService = Depends(get_quiz_service),
):
    session = _require_session(service, client_id)
    return _quiz_view(service, client_id, session)


@router.post("/api/quiz/answer", response_model=QuizView)
async def answer_question(
    payload: AnswerRequest,
    client_id: Optional[str] = Depends(get_client_id),
    service: QuizService = Depends(get_quiz_service),
):
    _require_session(service, client_id)
    try:
        session = service.answer(client_id, payload.choice)
    except QuizStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _quiz_view(service, client_id, session)


@router.post("/api/quiz/continue", response_model=Optional[QuizView])
async def continue_quiz(
    client_id: Optional[str] = Depends(get_client_id),
    service: QuizService = Depends(get_quiz_service),
):
    """Advance past the feedback state. ``null`` means the quiz ended on a miss."""
    _require_session(service, client_id)
    try:
        session = service.acknowledge(client_id)
    except QuizStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if session is None:
        return None
    return _quiz_view(service, client_id, session)


@router.post("/api/reset")
async def reset_quiz(
    client_id: Optional[str] = Depends(get_client_id),
    service: QuizService = Depends(get_quiz_service),
):
    record = service.abandon(client_id) if client_id else None
    return {"status": "success", "record": record}


@router.get("/api/history", response_model=List[ScoreRecord])
async def get_history(
    client_id: Optional[str] = Depends(get_client_id),
    service: QuizService = Depends(get_quiz_service),
):
    if not client_id:
        return []
    return service.history(client_id)
