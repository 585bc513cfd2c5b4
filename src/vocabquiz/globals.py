from fastapi.templating import Jinja2Templates

from .config import settings
from .lessons import LessonStore
from .service import QuizService

templates = Jinja2Templates(directory=settings.TEMPLATE_DIR)
lesson_store = LessonStore(settings.DATA_FILE, settings.LESSON_DIR)
quiz_service = QuizService(lesson_store)


# --- Dependencies ---
def get_lesson_store() -> LessonStore:
    return lesson_store


def get_quiz_service() -> QuizService:
    return quiz_service
