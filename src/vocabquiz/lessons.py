import glob
import json
import logging
import os
from typing import Dict, List, Optional

import pandas as pd

from .errors import LessonNotFound
from .models import LessonSummary

logger = logging.getLogger(__name__)


class LessonStore:
    """Read-only mapping of lesson id to word pairs (term -> translation).

    Lessons come from a JSON document shaped ``{lesson: {term: translation}}``
    and, optionally, from ``*.csv`` files with ``word`` and ``translation``
    columns, one lesson per file.
    """

    def __init__(self, data_file: Optional[str] = None, lesson_dir: Optional[str] = None):
        self.data_file = data_file
        self.lesson_dir = lesson_dir
        self.lessons: Dict[str, Dict[str, str]] = {}

    @classmethod
    def from_mapping(cls, lessons: Dict[str, Dict[str, str]]) -> "LessonStore":
        store = cls()
        store.lessons = {
            str(key): {str(k): str(v) for k, v in pairs.items()}
            for key, pairs in lessons.items()
        }
        return store

    def load_all(self):
        self.lessons = {}
        if self.data_file:
            self._load_json(self.data_file)
        if self.lesson_dir:
            self._load_csv_dir(self.lesson_dir)

        if not self.lessons:
            logger.warning("No lessons loaded; the lesson list will be empty.")
        else:
            logger.info(f"Loaded {len(self.lessons)} lessons")

    def _load_json(self, path: str):
        if not os.path.exists(path):
            logger.warning(f"Lesson file {path} not found.")
            return
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load {path}: {e}")
            return
        if not isinstance(data, dict):
            logger.error(f"Skipping {path}: top level must be an object.")
            return

        for lesson_id, pairs in data.items():
            if not isinstance(pairs, dict):
                logger.error(f"Skipping lesson {lesson_id}: pairs must be an object.")
                continue
            self.lessons[str(lesson_id)] = {str(k): str(v) for k, v in pairs.items()}

    def _load_csv_dir(self, directory: str):
        if not os.path.isdir(directory):
            return
        for file_path in sorted(glob.glob(os.path.join(directory, "*.csv"))):
            lesson_id = os.path.splitext(os.path.basename(file_path))[0]
            try:
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
            except Exception as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            if "word" not in df.columns or "translation" not in df.columns:
                logger.error(f"Skipping {lesson_id}: Missing columns.")
                continue
            df = df.dropna(subset=["word", "translation"])
            if lesson_id in self.lessons:
                logger.warning(f"CSV lesson {lesson_id} overrides the JSON lesson.")
            self.lessons[lesson_id] = dict(zip(df["word"], df["translation"]))
            logger.info(f"Loaded {len(df)} words from {lesson_id}")

    def list_lessons(self) -> List[str]:
        return list(self.lessons)

    def get_lesson(self, lesson_id: str) -> Dict[str, str]:
        if lesson_id not in self.lessons:
            raise LessonNotFound(lesson_id)
        return dict(self.lessons[lesson_id])

    def describe_lessons(self) -> List[LessonSummary]:
        summaries = [
            LessonSummary(
                id=key, name=key.replace("_", " ").title(), count=len(pairs)
            )
            for key, pairs in self.lessons.items()
        ]
        summaries.sort(key=lambda x: x.name)
        return summaries
