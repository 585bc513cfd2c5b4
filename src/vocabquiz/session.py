"""Quiz session state machine.

A session starts ``active`` on its first question. Answering moves it to
``answered_correct`` or ``answered_wrong``; the acknowledgment step
(``advance``) then either moves to the next question, finishes the quiz, or
ends the session after a miss. Every function returns a new ``QuizSession``.
"""
from typing import List, Optional

from .config import settings
from .errors import QuizStateError
from .models import QuestionItem, QuizSession, QuizStatus, ScoreRecord


def start_session(
    lesson_id: str, questions: List[QuestionItem], reverse: bool = False
) -> QuizSession:
    if not questions:
        raise QuizStateError("Cannot start a quiz without questions")
    return QuizSession(lesson_id=lesson_id, reverse=reverse, questions=questions)


def submit_answer(session: QuizSession, choice: Optional[str]) -> QuizSession:
    if session.status is not QuizStatus.ACTIVE:
        raise QuizStateError(f"Not waiting for an answer (status: {session.status.value})")

    if choice is not None and choice == session.current_question.correct_answer:
        return session.model_copy(
            update={
                "score": session.score + settings.POINTS_PER_CORRECT,
                "status": QuizStatus.ANSWERED_CORRECT,
                "last_choice": choice,
            }
        )
    return session.model_copy(
        update={"status": QuizStatus.ANSWERED_WRONG, "last_choice": choice}
    )


def expire(session: QuizSession) -> QuizSession:
    """The countdown ran out before an answer arrived."""
    return submit_answer(session, None)


def advance(session: QuizSession) -> Optional[QuizSession]:
    """Leave the feedback state.

    Returns the session on its next question, the finished session after the
    last question, or ``None`` when a wrong answer ended the session.
    """
    if session.status is QuizStatus.ANSWERED_WRONG:
        return None
    if session.status is not QuizStatus.ANSWERED_CORRECT:
        raise QuizStateError(f"Nothing to acknowledge (status: {session.status.value})")

    if session.current_index + 1 < session.total_questions:
        return session.model_copy(
            update={
                "current_index": session.current_index + 1,
                "status": QuizStatus.ACTIVE,
                "last_choice": None,
            }
        )
    return session.model_copy(update={"status": QuizStatus.FINISHED})


def outcome_of(session: QuizSession) -> str:
    if session.status is QuizStatus.FINISHED:
        return "finished"
    if session.status is QuizStatus.ANSWERED_WRONG:
        return "timeout" if session.last_choice is None else "wrong"
    return "abandoned"


def to_record(session: QuizSession, outcome: Optional[str] = None) -> ScoreRecord:
    # Points earned before a miss are kept in the record.
    return ScoreRecord(
        lesson_id=session.lesson_id,
        reverse=session.reverse,
        score=session.score,
        correct_answers=session.score // settings.POINTS_PER_CORRECT,
        total_questions=session.total_questions,
        outcome=outcome or outcome_of(session),
    )
