import asyncio
from datetime import datetime, timedelta

import pytest

from vocabquiz.errors import InsufficientPairs, LessonNotFound, QuizStateError
from vocabquiz.models import QuizStatus, ScoreRecord
from vocabquiz.service import QuizService
from vocabquiz.session import to_record


def correct(session):
    return session.current_question.correct_answer


def wrong(session):
    question = session.current_question
    return next(o for o in question.options if o != question.correct_answer)


@pytest.fixture
def service(store):
    return QuizService(store, feedback_delay_correct=0.01, feedback_delay_wrong=0.01, time_limit=0)


class TestQuizService:
    def test_start_unknown_lesson(self, service):
        with pytest.raises(LessonNotFound):
            service.start("c1", "doesnotexist")
        assert service.get("c1") is None

    def test_start_small_lesson(self, service):
        with pytest.raises(InsufficientPairs):
            service.start("c1", "tiny")

    def test_correct_answer_advances_after_delay(self, service):
        async def scenario():
            session = service.start("c1", "animals")
            answered = service.answer("c1", correct(session))
            assert answered.status is QuizStatus.ANSWERED_CORRECT
            assert service.timers.pending("c1")
            await asyncio.sleep(0.05)
            return service.get("c1")

        current = asyncio.run(scenario())
        assert current.status is QuizStatus.ACTIVE
        assert current.current_index == 1
        assert current.score == 10

    def test_wrong_answer_ends_quiz_and_keeps_score(self, service):
        async def scenario():
            session = service.start("c1", "animals")
            service.answer("c1", correct(session))
            session = service.acknowledge("c1")
            service.answer("c1", wrong(session))
            await asyncio.sleep(0.05)

        asyncio.run(scenario())
        assert service.get("c1") is None
        history = service.history("c1")
        assert len(history) == 1
        assert history[0].outcome == "wrong"
        assert history[0].score == 10

    def test_new_quiz_starts_from_zero(self, service):
        async def scenario():
            session = service.start("c1", "animals")
            service.answer("c1", correct(session))
            return service.start("c1", "colors")

        fresh = asyncio.run(scenario())
        assert fresh.score == 0
        assert fresh.lesson_id == "colors"
        assert [r.outcome for r in service.history("c1")] == ["abandoned"]
        assert service.history("c1")[0].score == 10

    def test_all_correct_finishes(self, service):
        async def scenario():
            session = service.start("c1", "animals")
            for _ in range(session.total_questions):
                service.answer("c1", correct(session))
                session = service.acknowledge("c1")
            return session

        finished = asyncio.run(scenario())
        assert finished.status is QuizStatus.FINISHED
        assert finished.score == 40
        # readable once more so the final score can be shown
        assert service.get("c1").status is QuizStatus.FINISHED
        assert service.get("c1") is None
        assert len(service.history("c1")) == 1
        record = service.history("c1")[-1]
        assert record.outcome == "finished"
        assert record.score == 40

    def test_acknowledge_requires_answer(self, service):
        service.start("c1", "animals")
        with pytest.raises(QuizStateError):
            service.acknowledge("c1")

    def test_replaced_session_ignores_stale_timer(self, store):
        service = QuizService(store, feedback_delay_correct=0.02, feedback_delay_wrong=0.02, time_limit=0)

        async def scenario():
            session = service.start("c1", "animals")
            service.answer("c1", correct(session))
            replacement = service.start("c1", "animals")
            assert not service.timers.pending("c1")
            await asyncio.sleep(0.06)
            return replacement, service.get("c1")

        replacement, current = asyncio.run(scenario())
        assert current.id == replacement.id
        assert current.status is QuizStatus.ACTIVE
        assert current.current_index == 0

    def test_abandon_cancels_pending_timer(self, service):
        async def scenario():
            session = service.start("c1", "animals")
            service.answer("c1", correct(session))
            record = service.abandon("c1")
            await asyncio.sleep(0.05)
            return record

        record = asyncio.run(scenario())
        assert record.score == 10
        assert service.get("c1") is None
        assert not service.timers.pending("c1")

    def test_countdown_expiry_counts_as_wrong(self, store):
        service = QuizService(store, feedback_delay_correct=0.01, feedback_delay_wrong=0.01, time_limit=0.05)

        async def scenario():
            service.start("c1", "animals")
            assert service.timers.remaining("c1") > 0
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        assert service.get("c1") is None
        assert service.history("c1")[-1].outcome == "timeout"

    def test_answer_in_time_cancels_countdown(self, store):
        service = QuizService(store, feedback_delay_correct=10, feedback_delay_wrong=10, time_limit=0.02)

        async def scenario():
            session = service.start("c1", "animals")
            service.answer("c1", correct(session))
            await asyncio.sleep(0.06)
            current = service.get("c1")
            assert service.timers.remaining("c1") > 5
            service.shutdown()
            return current

        current = asyncio.run(scenario())
        assert current.status is QuizStatus.ANSWERED_CORRECT
        assert current.score == 10

    def test_expired_sessions_are_dropped(self, store):
        service = QuizService(store, session_timeout=timedelta(seconds=-1), time_limit=0)
        service.start("c1", "animals")
        assert service.get("c1") is None

    def test_clients_are_independent(self, service):
        service.start("c1", "animals")
        service.start("c2", "colors")
        assert service.get("c1").lesson_id == "animals"
        assert service.get("c2").lesson_id == "colors"

    def test_finished_quiz_survives_the_feedback_timer(self, service):
        async def scenario():
            session = service.start("c1", "animals")
            for _ in range(session.total_questions):
                service.answer("c1", correct(session))
                await asyncio.sleep(0.05)
                session = service.get("c1")
            return session

        finished = asyncio.run(scenario())
        assert finished.status is QuizStatus.FINISHED
        assert finished.score == 40
        assert service.get("c1") is None

    def test_abandoning_finished_quiz_does_not_record_twice(self, service):
        session = service.start("c1", "animals")
        session = service.sessions["c1"] = session.model_copy(
            update={"status": QuizStatus.FINISHED, "score": 40}
        )
        service.histories["c1"] = [to_record(session)]
        assert service.abandon("c1") is None
        assert len(service.history("c1")) == 1


class TestPruneIdle:
    def test_drops_old_histories_and_expired_sessions(self, store):
        service = QuizService(store, session_timeout=timedelta(minutes=30), time_limit=0)
        old = datetime.now() - timedelta(hours=2)
        service.histories["gone"] = [
            ScoreRecord(
                lesson_id="animals",
                reverse=False,
                score=10,
                correct_answers=1,
                total_questions=4,
                outcome="wrong",
                recorded_at=old,
            )
        ]
        service.start("stale", "animals")
        service.sessions["stale"] = service.sessions["stale"].model_copy(update={"created_at": old})

        service.start("c1", "colors")

        assert "gone" not in service.histories
        assert "stale" not in service.sessions
        assert service.history("stale") == []
        assert service.get("c1").lesson_id == "colors"

    def test_keeps_recent_history(self, service):
        service.start("c1", "animals")
        service.abandon("c1")
        service.start("c2", "animals")
        assert len(service.history("c1")) == 1
