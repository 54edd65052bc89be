"""
Core data models for the timed quiz game.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class QuestionRecord:
    """A single prompt / correct-answer pair."""
    prompt: str
    correct_answer: str


@dataclass(frozen=True)
class AnsweredQuestion:
    """A question together with the user's response to it."""
    record: QuestionRecord
    user_answer: str
    is_correct: bool

    @property
    def prompt(self) -> str:
        return self.record.prompt

    @property
    def correct_answer(self) -> str:
        return self.record.correct_answer


class SessionState(Enum):
    """Enumeration of session engine states."""
    NOT_STARTED = "not_started"
    AWAITING_START = "awaiting_start"
    RUNNING = "running"
    FINISHED = "finished"


class CompletionType(Enum):
    """How a session reached the finished state."""
    NATURAL_COMPLETION = "natural_completion"
    TIMEOUT_EXPIRED = "timeout_expired"


@dataclass
class QuizSettings:
    """Configuration settings for a quiz session."""
    file_path: str = "problems.csv"
    shuffle: bool = False
    total_questions: int = 0  # 0 means use every record in the file
    time_limit: float = 30.0
    seed: Optional[int] = None
    delimiter: str = ","


@dataclass(frozen=True)
class SessionResult:
    """
    Final outcome of one quiz session.

    Counts and completion status are derived from ``answered`` so that
    ``correct_count + incorrect_count == len(answered)`` always holds.
    """
    total_questions: int
    answered: Tuple[AnsweredQuestion, ...]
    elapsed: float
    time_limit: float
    user_name: str
    completion: CompletionType
    unanswered: Tuple[QuestionRecord, ...] = field(default_factory=tuple)

    @property
    def correct_count(self) -> int:
        return sum(1 for answer in self.answered if answer.is_correct)

    @property
    def incorrect_count(self) -> int:
        return len(self.answered) - self.correct_count

    @property
    def completed_fully(self) -> bool:
        return len(self.answered) == self.total_questions


@dataclass(frozen=True)
class ScoreReport:
    """Score summary computed from a SessionResult."""
    user_name: str
    total_questions: int
    answered_count: int
    correct_count: int
    incorrect_count: int
    percent_correct: float
    elapsed: float
    time_limit: float
    completed_fully: bool
    remaining: Optional[float] = None
