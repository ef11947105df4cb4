"""
Website Builder Agent
Coordinates the question flow, prompt building and completion calls
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from webcraft.builder.models import (
    ANSWER_FIELDS,
    MIN_RESULT_LENGTH,
    AnswerSet,
    Conversation,
    Turn,
    TurnKind,
)
from webcraft.builder.steps import QUESTION_COUNT, AwaitingField, replay, state_for, submit
from webcraft.builder.store import ConversationStore
from webcraft.config.settings import DEFAULT_MAX_RETRIES
from webcraft.errors import (
    ConfigurationError,
    EmptyResultError,
    RemoteCallFailure,
    RetryLimitReached,
    SessionBusyError,
    ValidationError,
)
from webcraft.llm.database import TranscriptArchive
from webcraft.llm.prompts import build_prompt
from webcraft.tools.utils import Logger, strip_code_fences

SITE_NAME_INDEX = 1


@dataclass
class BuilderSession:
    """
    Per-conversation builder state

    Only mutated while ``lock`` is held, so one action at a time runs
    against a conversation.
    """

    conversation_id: str
    answers: AnswerSet = field(default_factory=AnswerSet)
    index: int = 0
    prompt: Optional[str] = None
    retry_count: int = 0
    succeeded: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)

    @property
    def ready(self) -> bool:
        return self.index == QUESTION_COUNT

    @property
    def generating(self) -> bool:
        return self.lock.locked()

    @property
    def failed(self) -> bool:
        return self.ready and not self.succeeded

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "BuilderSession":
        """Rebuild session state from a stored conversation by replaying its answers"""
        answer_turns = conversation.turns_of(TurnKind.USER_ANSWER)
        answers, index = replay((turn.slot, turn.text) for turn in answer_turns)
        session = cls(conversation.id, answers=answers, index=index)
        if not session.ready:
            return session

        session.prompt = build_prompt(answers)

        last_answer = max(
            i for i, turn in enumerate(conversation.turns) if turn.kind is TurnKind.USER_ANSWER
        )
        outcomes = [
            turn for turn in conversation.turns[last_answer + 1:]
            if turn.kind in (TurnKind.GENERATED_RESULT, TurnKind.ERROR_NOTICE)
        ]
        if outcomes and outcomes[-1].kind is TurnKind.GENERATED_RESULT:
            session.succeeded = True
        else:
            session.retry_count = max(0, len(outcomes) - 1)
        return session


class SiteBuilderAgent:
    """
    Main agent that drives one builder session per conversation
    """

    def __init__(
        self,
        store: ConversationStore,
        client=None,
        archive: Optional[TranscriptArchive] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        configuration_error: Optional[str] = None,
    ):
        """
        Initialize the builder agent

        Args:
            store: Conversation store shared with the API layer
            client: Object with ``async complete(prompt, history)``; None when
                    the completion service is not configured
            archive: Optional transcript archive
            max_retries: Manual retries allowed per prompt
            configuration_error: Message shown when ``client`` is None
        """
        self.store = store
        self.client = client
        self.archive = archive
        self.max_retries = max_retries
        self.configuration_error = configuration_error or "The completion service is not configured"
        self.sessions: Dict[str, BuilderSession] = {}

    @property
    def configured(self) -> bool:
        return self.client is not None

    # ========================================================================
    # Conversations
    # ========================================================================

    def restore_from_archive(self) -> int:
        """Load archived conversations into the store"""
        if self.archive is None:
            return 0
        try:
            conversations = self.archive.load_conversations()
        except SQLAlchemyError as e:
            Logger.error(f"Could not load archived conversations: {str(e)}")
            return 0

        for conversation in conversations:
            self.store.restore(conversation)
        if conversations:
            if self.store.selected_id is None:
                self.store.select_conversation(self.store.list_conversations()[0].id)
            Logger.success(f"Restored {len(conversations)} archived conversation(s)")
        return len(conversations)

    def new_conversation(self) -> Conversation:
        """Start a conversation with an empty answer set and ask the first question"""
        conversation = self.store.create_conversation()
        self._archive_header(conversation)
        self.sessions[conversation.id] = BuilderSession(conversation.id)
        Logger.info(f"New conversation {conversation.id}")
        return self._append(conversation.id, Turn.question(state_for(0).question))

    def select_conversation(self, conversation_id: str) -> Conversation:
        return self.store.select_conversation(conversation_id)

    def session_for(self, conversation_id: str) -> BuilderSession:
        conversation = self.store.get(conversation_id)
        session = self.sessions.get(conversation_id)
        if session is None:
            session = BuilderSession.from_conversation(conversation)
            self.sessions[conversation_id] = session
        return session

    # ========================================================================
    # Actions
    # ========================================================================

    async def submit_answer(self, conversation_id: str, raw_input: str) -> Conversation:
        """
        Accept the answer to the current question

        The fourth answer triggers generation within the same action.

        Raises:
            NotFoundError: unknown conversation
            SessionBusyError: a generation is in flight
            ValidationError: blank answer, or every question is answered
        """
        session = self.session_for(conversation_id)
        if session.generating:
            raise SessionBusyError("A website is being generated for this conversation; please wait")

        async with session.lock:
            answers, index = submit(session.answers, session.index, raw_input)
            answered = index - 1
            session.answers, session.index = answers, index

            conversation = self._append(
                conversation_id,
                Turn.answer(answers.value_at(answered), slot=ANSWER_FIELDS[answered]),
            )
            if answered == SITE_NAME_INDEX:
                conversation = self._rename(conversation_id, answers.site_name)

            state = state_for(index)
            if isinstance(state, AwaitingField):
                return self._append(conversation_id, Turn.question(state.question))

            session.prompt = build_prompt(answers)
            return await self._generate(session)

    async def retry(self, conversation_id: str) -> Conversation:
        """
        Re-run the completion with the same prompt after a failure

        Raises:
            RetryLimitReached: every manual retry has been used
        """
        session = self.session_for(conversation_id)
        if session.generating:
            raise SessionBusyError("A website is being generated for this conversation; please wait")

        async with session.lock:
            if not session.ready:
                raise ValidationError("Answer the remaining questions before generating")
            if session.succeeded:
                raise ValidationError("This website has already been generated")
            if session.retry_count >= self.max_retries:
                raise RetryLimitReached(
                    f"No retries left ({self.max_retries} used); start a new conversation to try again"
                )

            session.retry_count += 1
            Logger.warning(f"Retry attempt {session.retry_count} for conversation {conversation_id}")
            return await self._generate(session)

    async def _generate(self, session: BuilderSession) -> Conversation:
        conversation_id = session.conversation_id

        try:
            if self.client is None:
                raise ConfigurationError(self.configuration_error)

            Logger.info(f"Generating website for conversation {conversation_id}...")
            raw = await self.client.complete(session.prompt, [])
            generated = strip_code_fences(raw)
            if len(generated) < MIN_RESULT_LENGTH:
                raise EmptyResultError("Generated HTML is too short or empty")

        except ConfigurationError as e:
            Logger.error(f"Generation blocked: {str(e)}")
            return self._append(conversation_id, Turn.error(str(e), code="configuration_error"))
        except RemoteCallFailure as e:
            Logger.error(f"Generation failed: {e.message}")
            return self._append(conversation_id, Turn.error(e.message, code=e.code))
        except Exception as e:
            Logger.error(f"Unexpected generation error: {type(e).__name__}: {str(e)}")
            return self._append(conversation_id, Turn.error(str(e) or type(e).__name__, code="unexpected_error"))

        session.succeeded = True
        session.retry_count = 0
        Logger.success(f"Website generated for conversation {conversation_id} ({len(generated)} chars)")
        return self._append(conversation_id, Turn.result(generated))

    # ========================================================================
    # Read side
    # ========================================================================

    def status(self, conversation_id: str) -> Dict[str, Any]:
        session = self.session_for(conversation_id)
        state = state_for(session.index)
        can_retry = (
            session.failed
            and not session.generating
            and session.retry_count < self.max_retries
        )
        return {
            "step": session.index,
            "question": state.question if isinstance(state, AwaitingField) else None,
            "ready": session.ready,
            "generating": session.generating,
            "succeeded": session.succeeded,
            "can_retry": can_retry,
            "retries_remaining": max(0, self.max_retries - session.retry_count),
            "answers": session.answers.to_dict(),
        }

    def latest_result(self, conversation_id: str) -> Optional[str]:
        turn = self.store.get(conversation_id).last_result
        return turn.html if turn else None

    def site_name(self, conversation_id: str) -> Optional[str]:
        return self.session_for(conversation_id).answers.site_name

    # ========================================================================
    # Store + archive helpers
    # ========================================================================

    def _append(self, conversation_id: str, turn: Turn) -> Conversation:
        conversation = self.store.append_turn(conversation_id, turn)
        if self.archive is not None:
            try:
                self.archive.save_turn(conversation, turn)
            except SQLAlchemyError as e:
                Logger.warning(f"Could not archive turn for {conversation_id}: {str(e)}")
        return conversation

    def _rename(self, conversation_id: str, title: str) -> Conversation:
        conversation = self.store.rename_conversation(conversation_id, title)
        self._archive_header(conversation)
        return conversation

    def _archive_header(self, conversation: Conversation):
        if self.archive is None:
            return
        try:
            self.archive.save_conversation(conversation)
        except SQLAlchemyError as e:
            Logger.warning(f"Could not archive conversation {conversation.id}: {str(e)}")
