import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Settings:
    PROJECT_NAME: str = "vocabquiz"
    DEBUG: bool = os.environ.get("VOCABQUIZ_DEBUG", "false").lower() == "true"
    LOG_DIR: str = os.environ.get("VOCABQUIZ_LOG_DIR", "log")
    LOG_FILE: str = "vocabquiz.log"
    DATA_FILE: str = os.environ.get("VOCABQUIZ_DATA_FILE", "data/lessons.json")
    LESSON_DIR: str = os.environ.get("VOCABQUIZ_LESSON_DIR", "data/lessons")
    TEMPLATE_DIR: str = os.path.join(BASE_DIR, "templates")
    STATIC_DIR: str = os.path.join(BASE_DIR, "static")
    POINTS_PER_CORRECT: int = 10
    OPTION_COUNT: int = 4
    FEEDBACK_DELAY_CORRECT: float = 1.0
    FEEDBACK_DELAY_WRONG: float = 2.0
    # Seconds per question; 0 disables the countdown.
    QUESTION_TIME_LIMIT: float = float(os.environ.get("VOCABQUIZ_TIME_LIMIT", "0"))
    HISTORY_LIMIT: int = 50
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
