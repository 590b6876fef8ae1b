"""Response shapes returned by the quiz REST service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    user_id: int | str
    score: float = 0
    name: str | None = None


class QuestionSummary(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    question_id: int
    question_text: str = ""
