import pytest
from fastapi.testclient import TestClient

from vocabquiz.app import create_app
from vocabquiz.globals import get_lesson_store, get_quiz_service
from vocabquiz.lessons import LessonStore
from vocabquiz.service import QuizService

LESSONS = {
    "animals": {"犬": "dog", "猫": "cat", "水": "water", "火": "fire"},
    "colors": {"赤": "red", "青": "blue", "白": "white", "黒": "black", "緑": "green"},
    "tiny": {"はい": "yes", "いいえ": "no"},
}


def answer_for(lesson_id: str, prompt: str, reverse: bool = False) -> str:
    pairs = LESSONS[lesson_id]
    if reverse:
        return next(term for term, translation in pairs.items() if translation == prompt)
    return pairs[prompt]


@pytest.fixture
def store():
    return LessonStore.from_mapping(LESSONS)


@pytest.fixture
def api_service(store):
    # Long delays so tests advance explicitly through /api/quiz/continue.
    return QuizService(store, feedback_delay_correct=60, feedback_delay_wrong=60, time_limit=0)


@pytest.fixture
def client(store, api_service):
    app = create_app()
    app.dependency_overrides[get_lesson_store] = lambda: store
    app.dependency_overrides[get_quiz_service] = lambda: api_service
    with TestClient(app) as test_client:
        yield test_client
        api_service.shutdown()
