"""
Builder Data Models
Answer sets, conversation turns and conversation snapshots
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

from webcraft.errors import ValidationError

# Generated content shorter than this is not a usable page
MIN_RESULT_LENGTH = 50

ANSWER_FIELDS = ("site_type", "site_name", "site_colors", "description")

RESULT_TEXT = "Here is the website that was generated:"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AnswerSet:
    """The four answers collected for one generation cycle"""

    site_type: Optional[str] = None
    site_name: Optional[str] = None
    site_colors: Optional[str] = None
    description: Optional[str] = None

    def value_at(self, index: int) -> Optional[str]:
        return getattr(self, ANSWER_FIELDS[index])

    def with_answer(self, index: int, value: str) -> "AnswerSet":
        """Return a copy with the slot at ``index`` filled; a slot is filled once"""
        name = ANSWER_FIELDS[index]
        if getattr(self, name) is not None:
            raise ValidationError(f"'{name}' has already been answered")
        return replace(self, **{name: value})

    @property
    def filled(self) -> int:
        return sum(1 for name in ANSWER_FIELDS if getattr(self, name) is not None)

    @property
    def is_complete(self) -> bool:
        return self.filled == len(ANSWER_FIELDS)

    def to_dict(self):
        return {name: getattr(self, name) for name in ANSWER_FIELDS}


class TurnKind(str, Enum):
    QUESTION = "question"
    USER_ANSWER = "user_answer"
    GENERATED_RESULT = "generated_result"
    ERROR_NOTICE = "error_notice"


@dataclass(frozen=True)
class Turn:
    """One entry of a conversation log"""

    kind: TurnKind
    text: str
    created_at: datetime = field(default_factory=utcnow)
    html: Optional[str] = None
    error_code: Optional[str] = None
    slot: Optional[str] = None

    def __post_init__(self):
        if self.slot is not None:
            if self.kind is not TurnKind.USER_ANSWER:
                raise ValueError(f"{self.kind.value} turns fill no answer slot")
            if self.slot not in ANSWER_FIELDS:
                raise ValueError(f"Unknown answer slot: {self.slot}")
        if self.html is not None:
            if self.kind is not TurnKind.GENERATED_RESULT:
                raise ValueError(f"{self.kind.value} turns carry no HTML payload")
            if len(self.html) < MIN_RESULT_LENGTH:
                raise ValueError(
                    f"Generated HTML must be at least {MIN_RESULT_LENGTH} characters"
                )

    @property
    def role(self) -> str:
        return "user" if self.kind is TurnKind.USER_ANSWER else "assistant"

    @classmethod
    def question(cls, text: str) -> "Turn":
        return cls(TurnKind.QUESTION, text)

    @classmethod
    def answer(cls, text: str, slot: Optional[str] = None) -> "Turn":
        return cls(TurnKind.USER_ANSWER, text, slot=slot)

    @classmethod
    def result(cls, html: str, text: str = RESULT_TEXT) -> "Turn":
        return cls(TurnKind.GENERATED_RESULT, text, html=html)

    @classmethod
    def error(cls, message: str, code: Optional[str] = None) -> "Turn":
        return cls(TurnKind.ERROR_NOTICE, f"Error: {message}", error_code=code)


@dataclass(frozen=True)
class Conversation:
    """
    Immutable snapshot of a conversation

    Every change produces a new snapshot; a snapshot already handed out
    never changes.
    """

    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    turns: Tuple[Turn, ...] = ()

    def with_turn(self, turn: Turn, now: datetime) -> "Conversation":
        return replace(self, turns=self.turns + (turn,), updated_at=now)

    def with_title(self, title: str, now: datetime) -> "Conversation":
        return replace(self, title=title, updated_at=now)

    @property
    def last_result(self) -> Optional[Turn]:
        for turn in reversed(self.turns):
            if turn.kind is TurnKind.GENERATED_RESULT and turn.html:
                return turn
        return None

    def turns_of(self, kind: TurnKind) -> Tuple[Turn, ...]:
        return tuple(turn for turn in self.turns if turn.kind is kind)
