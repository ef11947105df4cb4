"""
Step Controller
Finite-state machine over the four builder questions
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple, Union

from webcraft.builder.models import ANSWER_FIELDS, AnswerSet
from webcraft.errors import ValidationError

QUESTION_BY_FIELD = {
    "site_type": "What type of website do you want to create?",
    "site_name": "What is the name of your website?",
    "site_colors": "What colors would you like to use?",
    "description": "Describe your website in detail",
}

QUESTIONS = tuple(QUESTION_BY_FIELD[name] for name in ANSWER_FIELDS)

QUESTION_COUNT = len(ANSWER_FIELDS)


@dataclass(frozen=True)
class AwaitingField:
    """Waiting for the answer at ``index``"""

    index: int

    @property
    def field(self) -> str:
        return ANSWER_FIELDS[self.index]

    @property
    def question(self) -> str:
        return QUESTION_BY_FIELD[self.field]


@dataclass(frozen=True)
class Ready:
    """Every answer is in; the prompt can be built"""

    index: int = QUESTION_COUNT


StepState = Union[AwaitingField, Ready]


def state_for(index: int) -> StepState:
    if not 0 <= index <= QUESTION_COUNT:
        raise ValueError(f"Step index {index} is outside 0..{QUESTION_COUNT}")
    if index == QUESTION_COUNT:
        return Ready()
    return AwaitingField(index)


def transition(state: StepState, answers: AnswerSet, raw_input: str) -> Tuple[AnswerSet, StepState]:
    """
    Apply one user submission

    Args:
        state: Current step state
        answers: Answers collected so far
        raw_input: Text the user submitted

    Returns:
        (updated answers, next state)

    Raises:
        ValidationError: input is blank or every question is already answered
    """
    if isinstance(state, Ready):
        raise ValidationError("All questions have been answered; start a new conversation")

    value = (raw_input or "").strip()
    if not value:
        raise ValidationError(f"Please answer: {state.question}")

    updated = answers.with_answer(state.index, value)
    return updated, state_for(state.index + 1)


def submit(answers: AnswerSet, index: int, raw_input: str) -> Tuple[AnswerSet, int]:
    """Index-based form of :func:`transition`"""
    updated, next_state = transition(state_for(index), answers, raw_input)
    return updated, next_state.index


def replay(entries: Iterable[Tuple[Optional[str], str]]) -> Tuple[AnswerSet, int]:
    """
    Rebuild answers and step index from previously accepted answers

    Args:
        entries: (slot, value) pairs in the order they were accepted. A
                 slot of None stands for whichever slot was awaited.

    Entries recorded for a slot other than the awaited one are skipped, so
    the step index stops at the first slot with no recorded answer.
    """
    answers, index = AnswerSet(), 0
    for slot, value in entries:
        if index == QUESTION_COUNT:
            break
        if slot is not None and slot != ANSWER_FIELDS[index]:
            continue
        answers, index = submit(answers, index, value)
    return answers, index
