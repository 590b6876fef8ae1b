"""Client for the quiz REST service."""

from .quiz_api_client import QuizApiClient, QuizApiError
from .schemas import LeaderboardEntry, QuestionSummary

__all__ = ["LeaderboardEntry", "QuestionSummary", "QuizApiClient", "QuizApiError"]
