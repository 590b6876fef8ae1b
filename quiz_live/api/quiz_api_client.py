"""Blocking HTTP client for the quiz REST endpoints the live session needs."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from quiz_live.api.schemas import LeaderboardEntry, QuestionSummary
from quiz_live.constants.network_constants import API_TIMEOUT_SECONDS, API_URL
from quiz_live.constants.quiz_constants import DEFAULT_QUIZ_DURATION_MINUTES
from quiz_live.core.monitoring_models import LiveMonitoringSnapshot

logger = logging.getLogger(__name__)

_LEADERBOARD_ADAPTER = TypeAdapter(list[LeaderboardEntry])
_QUESTIONS_ADAPTER = TypeAdapter(list[QuestionSummary])


class QuizApiError(Exception):
    """Raised when a REST call fails or returns an unusable body."""


class QuizApiClient:
    """Thin typed wrapper over the quiz service; safe to call from worker threads."""

    def __init__(
        self,
        base_url: str = API_URL,
        token: str | None = None,
        timeout: float = API_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> QuizApiClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_leaderboard(self, quiz_id: int) -> list[LeaderboardEntry]:
        """Return the ranked leaderboard, best first."""
        body = self._get(f"/quizzes/{quiz_id}/leaderboard")
        entries = body.get("leaderboard", []) if isinstance(body, dict) else body
        try:
            return _LEADERBOARD_ADAPTER.validate_python(entries or [])
        except ValidationError as exc:
            raise QuizApiError(f"Malformed leaderboard for quiz {quiz_id}: {exc}") from exc

    def get_quiz_duration_minutes(self, quiz_id: int) -> int:
        body = self._get(f"/quizzes/{quiz_id}")
        duration: Any = None
        if isinstance(body, dict):
            quiz = body.get("quiz")
            if isinstance(quiz, dict):
                duration = quiz.get("duration")
            if not duration:
                duration = body.get("duration")
        if not duration:
            return DEFAULT_QUIZ_DURATION_MINUTES
        try:
            return int(duration)
        except (TypeError, ValueError) as exc:
            raise QuizApiError(f"Quiz {quiz_id} has an invalid duration: {duration!r}") from exc

    def get_questions(self, quiz_id: int) -> list[QuestionSummary]:
        body = self._get(f"/quizzes/{quiz_id}/questions")
        questions = body.get("questions", []) if isinstance(body, dict) else body
        try:
            return _QUESTIONS_ADAPTER.validate_python(questions or [])
        except ValidationError as exc:
            raise QuizApiError(f"Malformed question list for quiz {quiz_id}: {exc}") from exc

    def get_teacher_dashboard(self, quiz_id: int) -> LiveMonitoringSnapshot:
        body = self._get(f"/quizzes/{quiz_id}/teacher/dashboard")
        if not isinstance(body, dict):
            raise QuizApiError(f"Unexpected dashboard body for quiz {quiz_id}")
        body.setdefault("quiz_id", quiz_id)
        try:
            return LiveMonitoringSnapshot.model_validate(body)
        except ValidationError as exc:
            raise QuizApiError(f"Malformed dashboard for quiz {quiz_id}: {exc}") from exc

    def _get(self, path: str) -> Any:
        try:
            response = self._client.get(path)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise QuizApiError(
                f"GET {path} failed with status {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise QuizApiError(f"GET {path} failed: {exc}") from exc
        logger.debug("GET %s ok", path)
        # Most endpoints wrap their payload as {"success": ..., "data": ...}.
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body
