"""
Pydantic Schemas for Request/Response Models
"""

from typing import Optional, List, Dict
from pydantic import BaseModel, Field
from datetime import datetime

from webcraft.builder.models import Conversation, Turn


class AnswerRequest(BaseModel):
    """Request model for the answer endpoint"""
    answer: str = Field(..., description="Answer to the current question")


class TurnSchema(BaseModel):
    """One turn of a conversation"""
    kind: str = Field(..., description="question, user_answer, generated_result or error_notice")
    role: str = Field(..., description="'user' or 'assistant'")
    content: str
    timestamp: datetime
    html: Optional[str] = Field(None, description="Generated HTML for generated_result turns")
    error_code: Optional[str] = None
    slot: Optional[str] = Field(None, description="Answer slot filled by a user_answer turn")

    @classmethod
    def from_turn(cls, turn: Turn) -> "TurnSchema":
        return cls(
            kind=turn.kind.value,
            role=turn.role,
            content=turn.text,
            timestamp=turn.created_at,
            html=turn.html,
            error_code=turn.error_code,
            slot=turn.slot,
        )


class ConversationSummary(BaseModel):
    """Sidebar entry"""
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    turn_count: int = 0

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationSummary":
        return cls(
            id=conversation.id,
            title=conversation.title,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
            turn_count=len(conversation.turns),
        )


class SessionStatus(BaseModel):
    """Where the conversation is in the question flow"""
    step: int = Field(..., ge=0, le=4)
    question: Optional[str] = None
    ready: bool = False
    generating: bool = False
    succeeded: bool = False
    can_retry: bool = False
    retries_remaining: int = 0
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)


class ConversationDetail(BaseModel):
    """Full conversation with session status"""
    id: str
    title: str
    created_at: datetime
    updated_at: datetime
    selected: bool = False
    turns: List[TurnSchema]
    status: SessionStatus


class ConversationListResponse(BaseModel):
    """Response for the conversation list endpoint"""
    conversations: List[ConversationSummary]
    selected_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for the health endpoint"""
    status: str
    timestamp: str
    configured: bool
    mode: str
    archive: bool = False
    message: Optional[str] = None
