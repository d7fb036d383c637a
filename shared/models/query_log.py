"""Pydantic models for the query log."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel


class Feedback(str, Enum):
    UP = "up"
    DOWN = "down"


def _parse_float(value: Any) -> float:
    """Lenient float parsing: upstream timings arrive as numbers or strings like "12.4"."""
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if parsed == parsed else 0.0  # NaN → 0


def _parse_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


class QueryLogEntry(BaseModel):
    """One question/answer transaction.

    id and created_at are assigned by the store on insert. Columns are
    nullable, so rows read back may carry None where a default applies on write.
    """

    id: int | None = None
    question: str
    answer: str | None = ""
    confidence: str | None = "MEDIUM"
    verdict: str | None = "NEEDS_EDIT"
    quality_score: float | None = 0.0
    category: str | None = "general"
    complexity: str | None = "complex"
    citation_count: int | None = 0
    routing: str | None = "human_review"
    processing_time_s: float | None = 0.0
    # plain text on read: rows written before feedback was validated may hold other values
    feedback: str | None = None
    created_at: datetime | None = None
    stale: bool = False
    stale_reason: str | None = None

    @classmethod
    def from_answer(cls, question: str, answer: dict) -> "QueryLogEntry":
        """Build a fresh entry from the answering workflow's response.

        Missing or empty fields fall back to the same defaults the form UI assumes.

        Args:
            question (str): The trimmed question that was asked.
            answer (dict): The normalized workflow response.

        Returns:
            QueryLogEntry: An unsaved entry.
        """
        return cls(
            question=question,
            answer=str(answer.get("answer") or ""),
            confidence=str(answer.get("confidence") or "MEDIUM"),
            verdict=str(answer.get("judge_verdict") or "NEEDS_EDIT"),
            quality_score=_parse_float(answer.get("judge_quality")),
            category=str(answer.get("category") or "general"),
            complexity=str(answer.get("complexity") or "complex"),
            citation_count=_parse_int(answer.get("citation_count")),
            routing=str(answer.get("routing") or "human_review"),
            processing_time_s=max(_parse_float(answer.get("processing_time_s")), 0.0),
        )


class QueryLogStats(BaseModel):
    """Aggregates over the whole log. Averages are None when the log is empty."""

    total: int = 0
    stale_count: int = 0
    thumbs_up: int = 0
    thumbs_down: int = 0
    avg_quality: float | None = None
    avg_time: float | None = None
