import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .config import settings
from .errors import QuizStateError
from .generator import generate
from .lessons import LessonStore
from .models import QuizSession, QuizStatus, ScoreRecord
from .session import advance, expire, start_session, submit_answer, to_record
from .timers import SessionTimers

logger = logging.getLogger(__name__)


class QuizService:
    """Owns the active quiz per client, its timers and the score history.

    Timer callbacks carry the session id and question index they were
    scheduled for and do nothing if the client's session has moved on.
    """

    def __init__(
        self,
        lesson_store: LessonStore,
        timers: Optional[SessionTimers] = None,
        feedback_delay_correct: float = settings.FEEDBACK_DELAY_CORRECT,
        feedback_delay_wrong: float = settings.FEEDBACK_DELAY_WRONG,
        time_limit: float = settings.QUESTION_TIME_LIMIT,
        session_timeout: timedelta = timedelta(minutes=settings.SESSION_TIMEOUT_MINUTES),
    ):
        self.lesson_store = lesson_store
        self.timers = timers or SessionTimers()
        self.feedback_delay_correct = feedback_delay_correct
        self.feedback_delay_wrong = feedback_delay_wrong
        self.time_limit = time_limit
        self.session_timeout = session_timeout
        self.sessions: Dict[str, QuizSession] = {}
        self.histories: Dict[str, List[ScoreRecord]] = {}

    # --- Session lifecycle ---
    def start(self, client_id: str, lesson_id: str, reverse: bool = False) -> QuizSession:
        pairs = self.lesson_store.get_lesson(lesson_id)
        questions = generate(pairs, reverse)

        self.abandon(client_id)
        self.prune_idle()
        session = start_session(lesson_id, questions, reverse)
        self.sessions[client_id] = session
        self._arm_countdown(client_id, session)

        logger.info(
            f"New quiz for {client_id} [Lesson: {lesson_id}, Reverse: {reverse}, "
            f"Questions: {session.total_questions}]"
        )
        return session

    def get(self, client_id: str) -> Optional[QuizSession]:
        """Current session for a client.

        A finished session is handed out once more so the client can show the
        final score, then dropped.
        """
        session = self.sessions.get(client_id)
        if session is None:
            return None
        if datetime.now() - session.created_at > self.session_timeout:
            logger.info(f"Quiz for {client_id} expired")
            self._discard(client_id)
            return None
        if session.status is QuizStatus.FINISHED:
            self._discard(client_id)
        return session

    def abandon(self, client_id: str) -> Optional[ScoreRecord]:
        """Leave the quiz early; the partial score goes to the history."""
        session = self.sessions.get(client_id)
        if session is None:
            return None
        self._discard(client_id)
        if session.status is QuizStatus.FINISHED:
            return None
        return self._record(client_id, session)

    def history(self, client_id: str) -> List[ScoreRecord]:
        return list(self.histories.get(client_id, []))

    def prune_idle(self):
        """Drop expired sessions, then forget clients with no session and no
        record within the session timeout."""
        cutoff = datetime.now() - self.session_timeout
        for client_id in [c for c, s in self.sessions.items() if s.created_at < cutoff]:
            logger.info(f"Quiz for {client_id} expired")
            self._discard(client_id)

        stale = [
            client_id
            for client_id, records in self.histories.items()
            if client_id not in self.sessions
            and (not records or records[-1].recorded_at < cutoff)
        ]
        for client_id in stale:
            del self.histories[client_id]
        if stale:
            logger.info(f"Dropped history for {len(stale)} idle clients")

    def shutdown(self):
        self.timers.cancel_all()

    # --- Transitions ---
    def answer(self, client_id: str, choice: Optional[str]) -> QuizSession:
        session = self._require(client_id)
        updated = submit_answer(session, choice)
        self.sessions[client_id] = updated
        self._schedule_advance(client_id, updated)
        return updated

    def acknowledge(self, client_id: str) -> Optional[QuizSession]:
        """Skip the rest of the feedback delay."""
        session = self._require(client_id)
        if session.status not in (QuizStatus.ANSWERED_CORRECT, QuizStatus.ANSWERED_WRONG):
            raise QuizStateError(f"Nothing to acknowledge (status: {session.status.value})")
        self.timers.cancel(client_id)
        return self._advance(client_id, session)

    def feedback_delay(self, session: QuizSession) -> Optional[float]:
        if session.status is QuizStatus.ANSWERED_CORRECT:
            return self.feedback_delay_correct
        if session.status is QuizStatus.ANSWERED_WRONG:
            return self.feedback_delay_wrong
        return None

    def _advance(self, client_id: str, session: QuizSession) -> Optional[QuizSession]:
        updated = advance(session)
        if updated is None:
            self._record(client_id, session)
            self._discard(client_id)
            logger.info(f"Quiz for {client_id} ended on a miss with score {session.score}")
            return None

        if updated.status is QuizStatus.FINISHED:
            self._record(client_id, updated)
            self.timers.cancel(client_id)
            self.sessions[client_id] = updated
            logger.info(f"Quiz for {client_id} finished with score {updated.score}")
            return updated

        self.sessions[client_id] = updated
        self._arm_countdown(client_id, updated)
        return updated

    # --- Timers ---
    def _schedule_advance(self, client_id: str, session: QuizSession):
        self.timers.schedule(
            client_id,
            self.feedback_delay(session),
            self._on_feedback_elapsed,
            client_id,
            session.id,
            session.current_index,
        )

    def _arm_countdown(self, client_id: str, session: QuizSession):
        if self.time_limit <= 0:
            return
        self.timers.schedule(
            client_id,
            self.time_limit,
            self._on_time_up,
            client_id,
            session.id,
            session.current_index,
        )

    def _is_current(self, client_id: str, session_id: str, index: int) -> Optional[QuizSession]:
        session = self.sessions.get(client_id)
        if session is None or session.id != session_id or session.current_index != index:
            return None
        return session

    def _on_feedback_elapsed(self, client_id: str, session_id: str, index: int):
        session = self._is_current(client_id, session_id, index)
        if session is None or session.status is QuizStatus.ACTIVE:
            return
        self._advance(client_id, session)

    def _on_time_up(self, client_id: str, session_id: str, index: int):
        session = self._is_current(client_id, session_id, index)
        if session is None or session.status is not QuizStatus.ACTIVE:
            return
        logger.info(f"Time up for {client_id} on question {index + 1}")
        updated = expire(session)
        self.sessions[client_id] = updated
        self._schedule_advance(client_id, updated)

    # --- Helpers ---
    def _require(self, client_id: str) -> QuizSession:
        session = self.get(client_id)
        if session is None:
            raise QuizStateError("No active quiz")
        return session

    def _record(self, client_id: str, session: QuizSession, outcome: Optional[str] = None) -> ScoreRecord:
        record = to_record(session, outcome)
        history = self.histories.setdefault(client_id, [])
        history.append(record)
        del history[:-settings.HISTORY_LIMIT]
        return record

    def _discard(self, client_id: str):
        self.timers.cancel(client_id)
        self.sessions.pop(client_id, None)
