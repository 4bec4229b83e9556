"""Conversation session: the chat flow behind the UI.

Hides the sequence of a turn: record the user's message, open a streaming
placeholder for the reply, feed it from the message source while
re-rendering after each chunk, then persist the conversation.
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..exceptions import MessageSourceError
from ..markdown.render import RenderDriver, RenderedBlock, RenderUpdate, render
from .models import ChatSessionState, Conversation, Message, Role
from .streaming import StreamingSession, TurnHandle

if TYPE_CHECKING:
    from ..sources.base import MessageSource
    from ..storage.repository import ChatRepository

logger = logging.getLogger(__name__)

RenderListener = Callable[[Message, RenderUpdate], None]


class ChatSession:
    """One active conversation bound to a message source.

    Args:
        source: Where reply text comes from
        repository: Optional persistence for history and the conversation list
        on_render: Called with the streaming message and its render update
            after every chunk and once more when the turn completes
        conversation_id: Identifier for the initial conversation
    """

    def __init__(
        self,
        source: "MessageSource",
        repository: "ChatRepository | None" = None,
        on_render: RenderListener | None = None,
        conversation_id: str | None = None,
    ) -> None:
        self._source = source
        self._repository = repository
        self._on_render = on_render
        self._driver = RenderDriver()
        self._streaming = StreamingSession(
            on_update=self._handle_update,
            on_complete=self._handle_complete,
        )
        self.state = (
            ChatSessionState(conversation_id=conversation_id)
            if conversation_id else ChatSessionState()
        )

    @property
    def conversation_id(self) -> str:
        return self.state.conversation_id

    @property
    def messages(self) -> list[Message]:
        return self.state.messages

    @property
    def is_typing(self) -> bool:
        return self.state.is_typing

    @property
    def streaming(self) -> StreamingSession:
        return self._streaming

    def _handle_update(self, handle: TurnHandle) -> None:
        update = self._driver.update(handle.buffer)
        if self._on_render is not None:
            self._on_render(handle.message, update)

    def _handle_complete(self, handle: TurnHandle) -> None:
        update = self._driver.update(handle.buffer, final=True)
        if self._on_render is not None:
            self._on_render(handle.message, update)

    async def send_message(self, text: str) -> Message | None:
        """Send a user message and stream the model's reply.

        Blank input, or input while a reply is still streaming, is ignored.
        If the source fails mid-stream the partial reply is kept and the
        failure is recorded in ``state.error``.

        Args:
            text: The user's message

        Returns:
            The model's reply message, or None if the input was ignored
        """
        prompt = text.strip()
        if not prompt or self.state.is_typing:
            return None

        conversation_id = self.state.conversation_id
        messages = self.state.messages
        history = list(messages)

        messages.append(Message(role=Role.USER, content=prompt))
        reply = Message(role=Role.MODEL)
        messages.append(reply)
        self.state.error = None
        self.state.is_typing = True

        self._driver.reset()
        handle = self._streaming.start_turn(reply)
        try:
            await self._streaming.consume(handle, self._source.stream(prompt, history))
        except MessageSourceError as e:
            logger.error("Reply %s failed: %s", reply.id, e)
            if self.state.conversation_id == conversation_id:
                self.state.error = str(e)
        finally:
            if self.state.conversation_id == conversation_id:
                self.state.is_typing = False
            await self._persist(conversation_id, messages)

        return reply

    def new_chat(self) -> str:
        """Abandon any in-flight reply and start an empty conversation.

        Returns:
            The new conversation identifier
        """
        self._streaming.reset()
        self._source.reset()
        self._driver.reset()
        self.state = ChatSessionState()
        logger.info("Started conversation %s", self.state.conversation_id)
        return self.state.conversation_id

    async def load_conversation(self, conversation_id: str) -> list[Message]:
        """Make a stored conversation the active one.

        Args:
            conversation_id: Conversation to load

        Returns:
            Its messages (empty if nothing is stored under that id)
        """
        self._streaming.reset()
        self._source.reset()
        self._driver.reset()
        messages = await self._repository.load_history(conversation_id) if self._repository else []
        for message in messages:
            # A reply interrupted by a crash is frozen as-is
            message.is_streaming = False
        self.state = ChatSessionState(conversation_id=conversation_id, messages=messages)
        return messages

    async def list_conversations(self) -> list[Conversation]:
        if self._repository is None:
            return []
        return await self._repository.load_conversations()

    async def delete_conversation(self, conversation_id: str) -> None:
        """Delete a stored conversation; deleting the active one starts a new chat."""
        if self._repository is not None:
            await self._repository.remove_conversation(conversation_id)
        if conversation_id == self.state.conversation_id:
            self.new_chat()

    def find_message(self, message_id: str) -> Message:
        """Return the message with ``message_id``.

        Raises:
            KeyError: If no message has that id
        """
        for message in self.state.messages:
            if message.id == message_id:
                return message
        raise KeyError(message_id)

    async def toggle_bookmark(self, message_id: str) -> bool:
        """Flip a message's bookmark flag and return the new value."""
        message = self.find_message(message_id)
        message.bookmarked = not message.bookmarked
        await self._persist(self.state.conversation_id, self.state.messages)
        return message.bookmarked

    async def add_reaction(self, message_id: str, reaction: str) -> list[str]:
        """Add a reaction to a message (once per distinct reaction)."""
        message = self.find_message(message_id)
        if reaction not in message.reactions:
            message.reactions.append(reaction)
            await self._persist(self.state.conversation_id, self.state.messages)
        return message.reactions

    async def edit_message(self, message_id: str, content: str) -> Message:
        """Replace the content of a completed message.

        Raises:
            KeyError: If no message has that id
            ValueError: If the message is still streaming
        """
        message = self.find_message(message_id)
        if message.is_streaming:
            raise ValueError("Cannot edit a message while it is streaming")
        message.content = content
        message.edited = True
        await self._persist(self.state.conversation_id, self.state.messages)
        return message

    def render_message(self, message_id: str) -> list[RenderedBlock]:
        """Render a message's content as markdown blocks."""
        message = self.find_message(message_id)
        return render(message.content, final=not message.is_streaming)

    async def _persist(self, conversation_id: str, messages: list[Message]) -> None:
        if self._repository is None or not messages:
            return
        await self._repository.save_history(conversation_id, messages)
        await self._repository.upsert_conversation(Conversation.summarize(conversation_id, messages))
