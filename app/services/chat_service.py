"""Chat turn orchestration: conversation assembly, streaming and persistence."""

import logging
from typing import AsyncIterator, Dict, Iterable, List, Optional
from pydantic import BaseModel

from app.exceptions import ThreadNotFoundError
from app.models.message import Message, MessageRole
from app.services.message_service import MessageService
from app.services.thread_service import ThreadService
from app.utils.llm_client import LLMClient

logger = logging.getLogger(__name__)


class ChatTurn(BaseModel):
    """One user message on its way to the LLM."""

    thread_id: str
    user_content: str
    is_first_exchange: bool
    conversation: List[Dict[str, str]]


def build_conversation(messages: Iterable[Message], system_prompt: str) -> List[Dict[str, str]]:
    """Stored history with the system prompt injected in front."""
    conversation = [{"role": MessageRole.SYSTEM.value, "content": system_prompt}]
    conversation.extend(
        {"role": message.role.value, "content": message.content}
        for message in messages
        if message.role != MessageRole.SYSTEM
    )
    return conversation


class ChatService:
    """Runs a chat turn against the LLM and records it in the stores."""

    def __init__(
        self,
        thread_service: ThreadService,
        message_service: MessageService,
        llm_client: LLMClient,
    ):
        self.thread_service = thread_service
        self.message_service = message_service
        self.llm_client = llm_client

    async def load_conversation(self, thread_id: str, system_prompt: Optional[str] = None) -> List[Dict[str, str]]:
        messages = await self.message_service.list_messages(thread_id)
        return build_conversation(messages, system_prompt or self.llm_client.settings.system_prompt)

    async def start_turn(
        self,
        user_id: str,
        thread_id: Optional[str],
        user_content: str,
        system_prompt: Optional[str] = None,
    ) -> ChatTurn:
        """
        Resolve the thread and build the prompt for a new user message.

        A missing ``thread_id`` creates the thread eagerly. On later exchanges
        the user message is stored right away; on the first exchange it waits
        for the reply so both are written together.

        Raises:
            ThreadNotFoundError: ``thread_id`` is unknown or owned by someone else
        """
        system_prompt = system_prompt or self.llm_client.settings.system_prompt
        if thread_id is None:
            thread_id = await self.thread_service.create_empty_thread(user_id)
        elif await self.thread_service.get_thread(thread_id, user_id) is None:
            raise ThreadNotFoundError(thread_id, "start_turn")

        history = await self.message_service.list_messages(thread_id)
        is_first = not any(message.role == MessageRole.ASSISTANT for message in history)

        if is_first:
            # user messages left by an interrupted first exchange are not context
            conversation = build_conversation([], system_prompt)
            conversation.append({"role": MessageRole.USER.value, "content": user_content})
        else:
            stored = await self.message_service.append_message(thread_id, MessageRole.USER, user_content)
            conversation = build_conversation([*history, stored], system_prompt)

        return ChatTurn(
            thread_id=thread_id,
            user_content=user_content,
            is_first_exchange=is_first,
            conversation=conversation,
        )

    async def stream_reply(self, turn: ChatTurn) -> AsyncIterator[str]:
        """Yield reply chunks, then persist the completed reply."""
        chunks = []
        async for chunk in self.llm_client.stream(turn.conversation):
            chunks.append(chunk)
            yield chunk

        reply = "".join(chunks)
        if not reply.strip():
            logger.warning(f"Empty reply in thread {turn.thread_id}, nothing stored")
            return

        if turn.is_first_exchange:
            await self.message_service.append_first_exchange(turn.thread_id, turn.user_content, reply)
        else:
            await self.message_service.append_message(turn.thread_id, MessageRole.ASSISTANT, reply)
        logger.info(f"Stored reply of {len(reply)} characters in thread {turn.thread_id}")
