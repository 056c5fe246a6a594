from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """One conversation entry. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=_now)
    suggestions: tuple[str, ...] = ()


class Reply(BaseModel):
    """Non-streaming answer: main text plus extracted follow-up suggestions."""

    response: str
    suggestions: list[str] = Field(default_factory=list)
