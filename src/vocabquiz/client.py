import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .errors import FetchFailure, LessonNotFound

logger = logging.getLogger(__name__)


class LessonClient:
    """Fetches lessons from a running vocabquiz server. No retries."""

    def __init__(self, base_url: str, timeout: float = 5.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = session or requests.Session()

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.http.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Fetch failed for {url}: {e}")
            raise FetchFailure(url, str(e)) from e

        if response.status_code != 200:
            logger.error(f"Fetch failed for {url}: HTTP {response.status_code}")
            raise FetchFailure(url, f"HTTP {response.status_code}", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise FetchFailure(url, "invalid JSON") from e

    def list_lessons(self) -> List[str]:
        data = self._get("/lessons")
        if not isinstance(data, list):
            raise FetchFailure(f"{self.base_url}/lessons", "unexpected payload")
        return [str(lesson) for lesson in data]

    def get_lesson(self, lesson_id: str) -> Dict[str, str]:
        path = f"/lessons/{quote(lesson_id, safe='')}"
        try:
            data = self._get(path)
        except FetchFailure as e:
            if e.status_code == 404:
                raise LessonNotFound(lesson_id) from e
            raise
        if not isinstance(data, dict):
            raise FetchFailure(f"{self.base_url}{path}", "unexpected payload")
        return {str(k): str(v) for k, v in data.items()}
