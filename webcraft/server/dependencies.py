"""
FastAPI Dependencies
Shared dependencies for dependency injection
"""

from functools import lru_cache
from typing import Optional

from webcraft.builder.store import ConversationStore
from webcraft.config.settings import Settings, get_settings
from webcraft.errors import ConfigurationError
from webcraft.llm.agent import SiteBuilderAgent
from webcraft.llm.database import TranscriptArchive, init_archive
from webcraft.llm.generate import CompletionClient
from webcraft.tools.utils import Logger


@lru_cache()
def get_store() -> ConversationStore:
    return ConversationStore()


@lru_cache()
def get_archive() -> Optional[TranscriptArchive]:
    """Transcript archive, or None when DATABASE_URL is not set"""
    return init_archive(get_settings().database_url)


def build_agent(settings: Settings, store: ConversationStore, archive: Optional[TranscriptArchive] = None) -> SiteBuilderAgent:
    """
    Wire an agent from settings

    A missing credential leaves the agent without a client; every
    generation attempt then records the configuration error instead of
    calling out.
    """
    client = None
    configuration_error = None
    try:
        client = CompletionClient(settings)
    except ConfigurationError as e:
        configuration_error = str(e)
        Logger.error(f"Configuration error: {configuration_error}")

    agent = SiteBuilderAgent(
        store,
        client=client,
        archive=archive,
        max_retries=settings.max_retries,
        configuration_error=configuration_error,
    )
    agent.restore_from_archive()
    return agent


@lru_cache()
def get_agent() -> SiteBuilderAgent:
    """
    Get or create the builder agent (singleton)
    """
    return build_agent(get_settings(), get_store(), get_archive())
