"""
FastAPI Server - Main Application
Builder page and API endpoints for the conversational website builder
"""

import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from webcraft.builder.models import Conversation
from webcraft.config.settings import Settings, get_settings
from webcraft.errors import (
    NotFoundError,
    RetryLimitReached,
    SessionBusyError,
    ValidationError,
)
from webcraft.llm.agent import SiteBuilderAgent
from webcraft.server.dependencies import get_agent
from webcraft.server.pages import BUILDER_PAGE
from webcraft.server.preview import (
    DOWNLOAD_MEDIA_TYPE,
    download_headers,
    preview_headers,
    render_document,
)
from webcraft.server.schemas import (
    AnswerRequest,
    ConversationDetail,
    ConversationListResponse,
    ConversationSummary,
    HealthResponse,
    SessionStatus,
    TurnSchema,
)
from webcraft.tools.utils import get_timestamp

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Webcraft Website Builder API",
    description="Answer four questions, get a generated landing page",
    version="1.0.0"
)

# Configure CORS - the builder page is served from this app; extra origins for local frontends
if get_settings().is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _detail(agent: SiteBuilderAgent, conversation: Conversation) -> ConversationDetail:
    return ConversationDetail(
        id=conversation.id,
        title=conversation.title,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        selected=agent.store.selected_id == conversation.id,
        turns=[TurnSchema.from_turn(turn) for turn in conversation.turns],
        status=SessionStatus(**agent.status(conversation.id)),
    )


def _handle_error(action: str, conversation_id: str, e: Exception):
    if isinstance(e, HTTPException):
        raise e
    if isinstance(e, NotFoundError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValidationError):
        raise HTTPException(status_code=422, detail=str(e))
    if isinstance(e, (SessionBusyError, RetryLimitReached)):
        raise HTTPException(status_code=409, detail=str(e))

    logger.error(f"Error {action} for conversation {conversation_id}: {str(e)}", exc_info=True)
    raise HTTPException(
        status_code=500,
        detail=f"Error {action}: {str(e)}"
    )


@app.get("/", response_class=HTMLResponse)
async def builder_page():
    """Builder UI"""
    return HTMLResponse(BUILDER_PAGE)


@app.get("/api/health", response_model=HealthResponse)
async def health_check(
    agent: SiteBuilderAgent = Depends(get_agent),
    settings: Settings = Depends(get_settings)
):
    """Health check with configuration status"""
    return HealthResponse(
        status="healthy" if agent.configured else "misconfigured",
        timestamp=get_timestamp(),
        configured=agent.configured,
        mode=settings.app_mode,
        archive=agent.archive is not None,
        message=None if agent.configured else agent.configuration_error,
    )


@app.get("/api/conversations", response_model=ConversationListResponse)
async def list_conversations(agent: SiteBuilderAgent = Depends(get_agent)):
    """
    Get all conversations, newest first
    """
    return ConversationListResponse(
        conversations=[
            ConversationSummary.from_conversation(conversation)
            for conversation in agent.store.list_conversations()
        ],
        selected_id=agent.store.selected_id,
    )


@app.post("/api/conversations", response_model=ConversationDetail)
async def create_conversation(agent: SiteBuilderAgent = Depends(get_agent)):
    """
    Start a new conversation; it becomes the selected one
    """
    try:
        conversation = agent.new_conversation()
        return _detail(agent, conversation)
    except Exception as e:
        _handle_error("creating conversation", "-", e)


@app.get("/api/conversations/{conversation_id}", response_model=ConversationDetail)
async def get_conversation(
    conversation_id: str,
    agent: SiteBuilderAgent = Depends(get_agent)
):
    """
    Get turns and session status for a conversation
    """
    try:
        return _detail(agent, agent.store.get(conversation_id))
    except Exception as e:
        _handle_error("fetching conversation", conversation_id, e)


@app.post("/api/conversations/{conversation_id}/select", response_model=ConversationDetail)
async def select_conversation(
    conversation_id: str,
    agent: SiteBuilderAgent = Depends(get_agent)
):
    """
    Make a conversation the selected one
    """
    try:
        return _detail(agent, agent.select_conversation(conversation_id))
    except Exception as e:
        _handle_error("selecting conversation", conversation_id, e)


@app.post("/api/conversations/{conversation_id}/answers", response_model=ConversationDetail)
async def submit_answer(
    conversation_id: str,
    request: AnswerRequest,
    agent: SiteBuilderAgent = Depends(get_agent)
):
    """
    Answer the current question

    The fourth answer generates the website before the response is sent.
    Generation failures come back as error_notice turns, not HTTP errors.
    """
    try:
        logger.info(f"Answer for conversation {conversation_id}: {request.answer[:100]}")
        conversation = await agent.submit_answer(conversation_id, request.answer)
        return _detail(agent, conversation)
    except Exception as e:
        _handle_error("submitting answer", conversation_id, e)


@app.post("/api/conversations/{conversation_id}/retry", response_model=ConversationDetail)
async def retry_generation(
    conversation_id: str,
    agent: SiteBuilderAgent = Depends(get_agent)
):
    """
    Retry a failed generation with the same prompt
    """
    try:
        conversation = await agent.retry(conversation_id)
        return _detail(agent, conversation)
    except Exception as e:
        _handle_error("retrying generation", conversation_id, e)


def _document(agent: SiteBuilderAgent, conversation_id: str) -> str:
    fragment = agent.latest_result(conversation_id)
    if fragment is None:
        raise HTTPException(status_code=404, detail="No website has been generated for this conversation yet")
    return render_document(fragment, agent.site_name(conversation_id))


@app.get("/api/conversations/{conversation_id}/preview")
async def preview_site(
    conversation_id: str,
    agent: SiteBuilderAgent = Depends(get_agent)
):
    """
    Generated website, sandboxed into an opaque origin
    """
    try:
        return HTMLResponse(_document(agent, conversation_id), headers=preview_headers())
    except Exception as e:
        _handle_error("rendering preview", conversation_id, e)


@app.get("/api/conversations/{conversation_id}/download")
async def download_site(
    conversation_id: str,
    agent: SiteBuilderAgent = Depends(get_agent)
):
    """
    Generated website as index.html
    """
    try:
        return Response(
            content=_document(agent, conversation_id),
            media_type=DOWNLOAD_MEDIA_TYPE,
            headers=download_headers(),
        )
    except Exception as e:
        _handle_error("downloading site", conversation_id, e)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("Starting Webcraft Website Builder API...")
    agent = get_agent()
    if agent.configured:
        logger.info("Completion service configured")
    else:
        logger.error(f"Configuration error: {agent.configuration_error}")
    logger.info("API Server ready!")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down Webcraft Website Builder API...")
