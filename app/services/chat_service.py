"""
Chat service - the ConversationController that runs one turn end-to-end

Turn lifecycle: idle -> submitted -> composing -> presenting -> idle.
Composing is synchronous; the assistant reply is appended only after a fixed
presentation delay, during which is_loading rejects further submissions.
"""
import asyncio
import logging
from typing import Callable, Optional

from app.services.conversation_state import Category, ConversationState, Message
from app.services.name_extractor import extract_name
from app.services.repetition_tracker import is_repeat
from app.services.response_composer import ComposedReply, compose
from app.services.router import IntentRouter
from app.services.session_store import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_PRESENTATION_DELAY = 1.0


class ConversationController:
    """One instance per live browsing session"""

    def __init__(
        self,
        store: SessionStore,
        presentation_delay: float = DEFAULT_PRESENTATION_DELAY,
        on_handoff: Optional[Callable[[], None]] = None,
        router: Optional[IntentRouter] = None,
    ):
        self.store = store
        self.presentation_delay = presentation_delay
        self.on_handoff = on_handoff
        self.router = router or IntentRouter()

        self.state = self.store.load()
        if self.state is None:
            self.state = ConversationState.fresh()
            self.store.save(self.state)

        self.is_loading = False
        self.is_closed = False
        self.last_category: Optional[Category] = None
        self._pending: Optional[asyncio.Task] = None
        # Replaced on teardown so a late presentation callback becomes a no-op
        self._liveness = object()

    @property
    def messages(self):
        return list(self.state.messages)

    def submit(self, raw_text: str) -> Optional[asyncio.Future]:
        """
        Accept one user utterance.

        Returns a future resolving to the assistant Message, or None when the
        input was ignored: blank text, a turn still presenting, or a torn-down
        session. Cancelling the returned future does not cancel the reply;
        only teardown does. Must be called from a running event loop.
        """
        if self.is_closed or self.is_loading:
            return None
        if not raw_text or not raw_text.strip():
            return None

        # Repeat check must run before the utterance joins the history
        repeat = is_repeat(raw_text, self.state.history)
        self.state.append_message(raw_text, is_from_user=True)
        self.store.save(self.state)

        if self.state.remember_name(extract_name(raw_text)):
            logger.info("Learned user name from self-introduction")

        category = self.router.classify(raw_text)
        self.last_category = category
        reply = compose(category, repeat, self.state.known_name)
        logger.debug(f"Turn classified as {category.value} (repeat={repeat}, handoff={reply.suggests_handoff})")

        self.is_loading = True
        self._pending = asyncio.get_running_loop().create_task(
            self._present(reply, self._liveness)
        )
        return asyncio.shield(self._pending)

    async def _present(self, reply: ComposedReply, liveness: object) -> Optional[Message]:
        try:
            await asyncio.sleep(self.presentation_delay)
        except asyncio.CancelledError:
            if liveness is self._liveness:
                # Cancelled by something other than teardown: unblock the session
                self.is_loading = False
                self._pending = None
            raise
        if liveness is not self._liveness:
            return None

        message = self.state.append_message(
            reply.text,
            is_from_user=False,
            suggests_handoff=reply.suggests_handoff,
        )
        self.store.save(self.state)
        self.is_loading = False
        self._pending = None
        return message

    def request_handoff(self, message_id: int) -> bool:
        """
        The user activated "Contact Support" on an assistant message.

        Emits the handoff signal once and ends the session. Returns False (and
        does nothing) if that message does not offer a handoff.
        """
        if self.is_closed:
            return False
        message = self.state.find_message(message_id)
        if message is None or message.is_from_user or not message.suggests_handoff:
            return False

        logger.info("Routing user to human support")
        if self.on_handoff is not None:
            self.on_handoff()
        self.teardown()
        return True

    def teardown(self) -> None:
        """Session-end signal: cancel any pending reply and erase the persisted log"""
        if self.is_closed:
            return
        self.is_closed = True
        self._liveness = object()
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None
        self.is_loading = False
        self.store.clear()
        logger.info("Chat session torn down")
