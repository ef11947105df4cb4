import asyncio

import pytest

from webcraft.builder.models import ANSWER_FIELDS, TurnKind
from webcraft.builder.steps import QUESTIONS
from webcraft.builder.store import ConversationStore
from webcraft.errors import (
    NotFoundError,
    RemoteCallFailure,
    RetryLimitReached,
    SessionBusyError,
    ValidationError,
)
from webcraft.llm.agent import BuilderSession, SiteBuilderAgent
from webcraft.llm.prompts import build_prompt

ANSWERS = ["bakery", "Sweet Co", "pastel pink", "a cozy neighborhood bakery site"]
PAGE = "<section class=\"hero\"><h1>Sweet Co</h1><p>Fresh bread every morning.</p></section>"


class StubClient:
    """Plays back queued outcomes; an exception in the queue is raised"""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def complete(self, prompt, history=()):
        self.calls.append((prompt, list(history)))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _answer_all(agent, conversation_id, answers=ANSWERS):
    conversation = None
    for answer in answers:
        conversation = asyncio.run(agent.submit_answer(conversation_id, answer))
    return conversation


def test_new_conversation_asks_first_question() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient())
    conversation = agent.new_conversation()

    assert [turn.kind for turn in conversation.turns] == [TurnKind.QUESTION]
    assert conversation.turns[0].text == QUESTIONS[0]
    assert agent.status(conversation.id)["step"] == 0
    assert agent.store.selected_id == conversation.id


def test_full_flow_generates_site() -> None:
    client = StubClient(PAGE)
    agent = SiteBuilderAgent(ConversationStore(), client=client)
    conversation = agent.new_conversation()

    final = _answer_all(agent, conversation.id)

    kinds = [turn.kind for turn in final.turns]
    assert kinds == [
        TurnKind.QUESTION, TurnKind.USER_ANSWER,
        TurnKind.QUESTION, TurnKind.USER_ANSWER,
        TurnKind.QUESTION, TurnKind.USER_ANSWER,
        TurnKind.QUESTION, TurnKind.USER_ANSWER,
        TurnKind.GENERATED_RESULT,
    ]
    assert [t.text for t in final.turns_of(TurnKind.QUESTION)] == list(QUESTIONS)
    assert final.last_result.html == PAGE
    assert final.title == "Sweet Co"

    assert len(client.calls) == 1
    prompt, history = client.calls[0]
    assert prompt == build_prompt(agent.session_for(conversation.id).answers)
    assert history == []

    status = agent.status(conversation.id)
    assert status["step"] == 4
    assert status["ready"] and status["succeeded"]
    assert not status["can_retry"]


def test_blank_answer_leaves_state_unchanged() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient())
    conversation = agent.new_conversation()

    with pytest.raises(ValidationError):
        asyncio.run(agent.submit_answer(conversation.id, "   "))

    assert agent.store.get(conversation.id) == conversation
    assert agent.status(conversation.id)["step"] == 0


def test_answer_after_generation_is_rejected() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient(PAGE))
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    with pytest.raises(ValidationError):
        asyncio.run(agent.submit_answer(conversation.id, "one more"))
    assert agent.store.get(conversation.id) == final


def test_short_result_is_recorded_as_empty_result_error() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient("<p>hi</p>!"))
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    last = final.turns[-1]
    assert last.kind is TurnKind.ERROR_NOTICE
    assert last.error_code == "empty_result"
    assert final.last_result is None
    assert agent.status(conversation.id)["can_retry"]


def test_fenced_result_is_unwrapped() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient(f"```html\n{PAGE}\n```"))
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    assert final.last_result.html == PAGE


def test_crlf_fenced_result_is_unwrapped() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient(f"```html\r\n{PAGE}\r\n```\r\n"))
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    assert final.last_result.html == PAGE


def test_answer_turns_record_their_slot() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient(PAGE))
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    answers = final.turns_of(TurnKind.USER_ANSWER)
    assert [turn.slot for turn in answers] == list(ANSWER_FIELDS)
    assert all(turn.slot is None for turn in final.turns_of(TurnKind.QUESTION))


def test_network_failure_then_manual_retry_uses_same_prompt() -> None:
    client = StubClient(RemoteCallFailure("Connection reset by peer", code="network_error"), PAGE)
    agent = SiteBuilderAgent(ConversationStore(), client=client)
    conversation = agent.new_conversation()

    failed = _answer_all(agent, conversation.id)
    notice = failed.turns[-1]
    assert notice.kind is TurnKind.ERROR_NOTICE
    assert "Connection reset by peer" in notice.text
    assert notice.error_code == "network_error"

    retried = asyncio.run(agent.retry(conversation.id))

    assert len(client.calls) == 2
    assert client.calls[0] == client.calls[1]
    assert retried.turns[-1].kind is TurnKind.GENERATED_RESULT
    assert retried.turns[:len(failed.turns)] == failed.turns
    assert agent.session_for(conversation.id).retry_count == 0


def test_retries_are_capped() -> None:
    failures = [RemoteCallFailure(f"failure {i}") for i in range(4)]
    client = StubClient(*failures)
    agent = SiteBuilderAgent(ConversationStore(), client=client, max_retries=3)
    conversation = agent.new_conversation()
    _answer_all(agent, conversation.id)

    for remaining in (2, 1, 0):
        asyncio.run(agent.retry(conversation.id))
        assert agent.status(conversation.id)["retries_remaining"] == remaining

    assert not agent.status(conversation.id)["can_retry"]
    before = agent.store.get(conversation.id)
    with pytest.raises(RetryLimitReached):
        asyncio.run(agent.retry(conversation.id))

    assert len(client.calls) == 4
    assert agent.store.get(conversation.id) == before
    assert before.turns[-1].kind is TurnKind.ERROR_NOTICE


def test_retry_before_ready_is_rejected() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient())
    conversation = agent.new_conversation()
    with pytest.raises(ValidationError):
        asyncio.run(agent.retry(conversation.id))


def test_unconfigured_agent_records_configuration_error_without_calling() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=None, configuration_error="OpenAI API key is not configured")
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    notice = final.turns[-1]
    assert notice.kind is TurnKind.ERROR_NOTICE
    assert notice.error_code == "configuration_error"
    assert "OpenAI API key is not configured" in notice.text


def test_unexpected_client_error_becomes_notice() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient(RuntimeError("boom")))
    conversation = agent.new_conversation()
    final = _answer_all(agent, conversation.id)

    assert final.turns[-1].kind is TurnKind.ERROR_NOTICE
    assert final.turns[-1].error_code == "unexpected_error"


def test_answers_are_rejected_while_generating() -> None:
    async def scenario():
        release = asyncio.Event()

        class SlowClient:
            calls = 0

            async def complete(self, prompt, history=()):
                SlowClient.calls += 1
                await release.wait()
                return PAGE

        agent = SiteBuilderAgent(ConversationStore(), client=SlowClient())
        conversation = agent.new_conversation()
        for answer in ANSWERS[:3]:
            await agent.submit_answer(conversation.id, answer)

        generation = asyncio.ensure_future(agent.submit_answer(conversation.id, ANSWERS[3]))
        await asyncio.sleep(0)
        assert agent.status(conversation.id)["generating"]

        with pytest.raises(SessionBusyError):
            await agent.submit_answer(conversation.id, "sneaky")
        with pytest.raises(SessionBusyError):
            await agent.retry(conversation.id)

        release.set()
        final = await generation
        assert final.turns[-1].kind is TurnKind.GENERATED_RESULT
        assert SlowClient.calls == 1
        assert not agent.status(conversation.id)["generating"]

    asyncio.run(scenario())


def test_conversations_are_independent() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient(PAGE))
    first = agent.new_conversation()
    asyncio.run(agent.submit_answer(first.id, "blog"))
    second = agent.new_conversation()

    assert agent.status(second.id)["step"] == 0
    assert agent.status(first.id)["step"] == 1
    assert agent.store.selected_id == second.id
    assert agent.select_conversation(first.id).id == first.id


def test_unknown_conversation() -> None:
    agent = SiteBuilderAgent(ConversationStore(), client=StubClient())
    with pytest.raises(NotFoundError):
        asyncio.run(agent.submit_answer("missing", "bakery"))


def test_session_rebuilt_from_conversation() -> None:
    client = StubClient(RemoteCallFailure("down"), RemoteCallFailure("still down"))
    agent = SiteBuilderAgent(ConversationStore(), client=client)
    conversation = agent.new_conversation()
    _answer_all(agent, conversation.id)
    asyncio.run(agent.retry(conversation.id))

    rebuilt = BuilderSession.from_conversation(agent.store.get(conversation.id))
    live = agent.session_for(conversation.id)

    assert rebuilt.answers == live.answers
    assert rebuilt.index == 4
    assert rebuilt.prompt == live.prompt
    assert rebuilt.retry_count == live.retry_count == 1
    assert not rebuilt.succeeded
