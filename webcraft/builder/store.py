"""
Conversation Store
Arena of immutable conversation snapshots keyed by id, plus the selected id
"""

import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from webcraft.builder.models import Conversation, Turn, utcnow
from webcraft.errors import NotFoundError

DEFAULT_TITLE = "New Chat"


class ConversationStore:
    """
    In-memory conversation store with copy-on-write snapshots

    Readers holding an older snapshot keep seeing it unchanged; the arena
    entry is swapped for a new snapshot on every append.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._conversations: Dict[str, Conversation] = {}
        self._selected_id: Optional[str] = None
        self._last_id = 0
        self._lock = threading.Lock()

    def _next_id(self) -> str:
        # Millisecond timestamps, bumped so ids stay strictly increasing
        candidate = time.time_ns() // 1_000_000
        self._last_id = max(candidate, self._last_id + 1)
        return str(self._last_id)

    def _require(self, conversation_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError(conversation_id)
        return conversation

    def create_conversation(self, title: str = DEFAULT_TITLE) -> Conversation:
        """Create an empty conversation and make it the selected one"""
        with self._lock:
            now = self._clock()
            conversation = Conversation(
                id=self._next_id(),
                title=title,
                created_at=now,
                updated_at=now,
            )
            self._conversations[conversation.id] = conversation
            self._selected_id = conversation.id
            return conversation

    def append_turn(self, conversation_id: str, turn: Turn) -> Conversation:
        """
        Append a turn

        Returns:
            The new snapshot

        Raises:
            NotFoundError: unknown id; the store is left untouched
        """
        with self._lock:
            conversation = self._require(conversation_id)
            updated = conversation.with_turn(turn, self._clock())
            self._conversations[conversation_id] = updated
            return updated

    def rename_conversation(self, conversation_id: str, title: str) -> Conversation:
        with self._lock:
            conversation = self._require(conversation_id)
            updated = conversation.with_title(title, self._clock())
            self._conversations[conversation_id] = updated
            return updated

    def select_conversation(self, conversation_id: str) -> Conversation:
        with self._lock:
            conversation = self._require(conversation_id)
            self._selected_id = conversation_id
            return conversation

    def restore(self, conversation: Conversation) -> None:
        """Put an existing snapshot back into the arena (archive rehydration)"""
        with self._lock:
            self._conversations[conversation.id] = conversation
            if conversation.id.isdigit():
                self._last_id = max(self._last_id, int(conversation.id))

    def get(self, conversation_id: str) -> Conversation:
        with self._lock:
            return self._require(conversation_id)

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._conversations

    def __len__(self) -> int:
        return len(self._conversations)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected(self) -> Optional[Conversation]:
        with self._lock:
            if self._selected_id is None:
                return None
            return self._conversations.get(self._selected_id)

    def list_conversations(self) -> List[Conversation]:
        """All conversations, most recently created first"""
        with self._lock:
            snapshot = list(self._conversations.values())
        return sorted(snapshot, key=lambda c: (c.created_at, c.id), reverse=True)
