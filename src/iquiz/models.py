import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, model_validator

from .config import settings


# --- Models ---
class Question(BaseModel):
    text: str
    # 1-based index into `answers`, kept as a string for wire compatibility.
    answer: str
    answers: List[str]

    @model_validator(mode="after")
    def check_answer_key(self) -> "Question":
        if not self.answer.isdecimal():
            raise ValueError(f"answer key {self.answer!r} is not a number")
        key = int(self.answer)
        if not 1 <= key <= len(self.answers):
            raise ValueError(
                f"answer key {key} out of range for {len(self.answers)} answers"
            )
        return self

    @property
    def correct_index(self) -> int:
        return int(self.answer) - 1

    @property
    def correct_answer(self) -> str:
        return self.answers[self.correct_index]


class Topic(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: str
    desc: str
    questions: List[Question]
    image_data: Optional[bytes] = Field(default=None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def drop_local_fields(cls, data: Any, info: ValidationInfo) -> Any:
        """Payloads read off the network never carry ids or images."""
        if info.context and info.context.get("wire") and isinstance(data, dict):
            data = {k: v for k, v in data.items() if k not in ("id", "image_data")}
        return data

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(include={"title", "desc", "questions"})


class Preferences(BaseModel):
    data_url: str = settings.DEFAULT_DATA_URL
    refresh_interval: float = Field(
        default=settings.DEFAULT_REFRESH_INTERVAL,
        gt=0,
        le=settings.MAX_REFRESH_INTERVAL,
        allow_inf_nan=False,
    )


class SessionState(str, Enum):
    ANSWERING = "answering"
    REVIEWING = "reviewing"
    FINISHED = "finished"


class SessionData(BaseModel):
    topic: Topic
    state: SessionState = SessionState.ANSWERING
    current_index: int = 0
    recorded_answers: List[Optional[str]] = Field(default_factory=list)
    score: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class AnswerRecord(BaseModel):
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool


class RefreshResult(BaseModel):
    ok: bool
    url: str
    topic_count: int = 0
    error: Optional[str] = None
