import asyncio
from fastapi import APIRouter, Depends, HTTPException, Response
from typing import Callable, Dict
from app.config import settings
from app.database import SessionLocal
from app.schemas.chat import (
    ChatMessageOut, ChatRequest, ChatResponse, ConversationOut, HandoffRequest, HandoffResponse
)
from app.services.chat_service import ConversationController
from app.services.session_store import SessionStore, SqlSessionStore
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

# In-memory controller registry
# Maps chat_session_id to the live ConversationController for that browsing session
_controllers: Dict[str, ConversationController] = {}


def get_store_factory() -> Callable[[str], SessionStore]:
    """Builds the persisted store for a chat_session_id (overridden in tests)"""
    return lambda chat_session_id: SqlSessionStore(SessionLocal, chat_session_id)


def get_presentation_delay() -> float:
    return settings.PRESENTATION_DELAY_SECONDS


def get_controller(
    chat_session_id: str,
    store_factory: Callable[[str], SessionStore] = Depends(get_store_factory),
    presentation_delay: float = Depends(get_presentation_delay),
) -> ConversationController:
    """Get or create the controller for a session; rehydrates from the store on first use"""
    controller = _controllers.get(chat_session_id)
    if controller is None or controller.is_closed:
        controller = ConversationController(
            store_factory(chat_session_id),
            presentation_delay=presentation_delay,
            on_handoff=lambda: logger.info(f"Handoff to {settings.HANDOFF_PAGE} for chat session {chat_session_id}"),
        )
        _controllers[chat_session_id] = controller
    return controller


def end_session(chat_session_id: str, store_factory: Callable[[str], SessionStore]):
    """Tear down and forget a session's controller (page unload / navigation away)"""
    controller = _controllers.pop(chat_session_id, None)
    if controller is not None:
        controller.teardown()
    else:
        # No live controller in this process, erase the persisted log directly
        store_factory(chat_session_id).clear()


@router.get("/{chat_session_id}/messages", response_model=ConversationOut)
async def get_messages(
    chat_session_id: str,
    controller: ConversationController = Depends(get_controller),
):
    """Current conversation; a new session starts with the welcome message"""
    return ConversationOut(
        chat_session_id=chat_session_id,
        messages=[ChatMessageOut.from_message(m) for m in controller.messages],
        is_loading=controller.is_loading,
    )


@router.post("/{chat_session_id}/messages", response_model=ChatResponse)
async def send_message(
    chat_session_id: str,
    request: ChatRequest,
    controller: ConversationController = Depends(get_controller),
):
    """
    Submit one user message and wait for the assistant reply.

    Blank input is ignored (accepted=false). A second message while the
    previous reply is still being presented is rejected with 409.
    """
    if controller.is_loading:
        raise HTTPException(status_code=409, detail="Previous reply is still being presented")

    task = controller.submit(request.message)
    if task is None:
        return ChatResponse(accepted=False)

    category = controller.last_category
    try:
        reply = await task
    except asyncio.CancelledError:
        if not controller.is_closed:
            raise
        reply = None
    if reply is None:
        # Session ended while the reply was pending
        raise HTTPException(status_code=410, detail="Chat session has ended")

    return ChatResponse(
        accepted=True,
        category=category.value if category else None,
        reply=ChatMessageOut.from_message(reply),
    )


@router.post("/{chat_session_id}/handoff", response_model=HandoffResponse)
async def request_handoff(
    chat_session_id: str,
    request: HandoffRequest,
    controller: ConversationController = Depends(get_controller),
):
    """User clicked "Contact Support" on an assistant reply"""
    if not controller.request_handoff(request.message_id):
        raise HTTPException(status_code=400, detail="Message does not offer contact support")
    _controllers.pop(chat_session_id, None)
    return HandoffResponse(navigate_to=settings.HANDOFF_PAGE)


@router.delete("/{chat_session_id}", status_code=204)
async def delete_session(
    chat_session_id: str,
    store_factory: Callable[[str], SessionStore] = Depends(get_store_factory),
):
    """Session-end signal from the host page"""
    end_session(chat_session_id, store_factory)
    return Response(status_code=204)
