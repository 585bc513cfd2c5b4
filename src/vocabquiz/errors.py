from typing import Optional


class VocabQuizError(Exception):
    """Base class for every error raised by vocabquiz."""


class LessonNotFound(VocabQuizError):
    def __init__(self, lesson_id: str):
        super().__init__(f"Lesson not found: {lesson_id}")
        self.lesson_id = lesson_id


class FetchFailure(VocabQuizError):
    """A lesson request to the server failed at the transport level."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class InsufficientPairs(VocabQuizError):
    """Not enough distinct answers in a lesson to build a full option list."""

    def __init__(self, available: int, required: int):
        super().__init__(
            f"Need at least {required} distinct answers, lesson has {available}"
        )
        self.available = available
        self.required = required


class QuizStateError(VocabQuizError):
    pass
