"""
Completion client for the hosted generative model.

One request/response call per stage: a system instruction plus an ordered
list of role/content turns in, a single text payload out.
"""
import asyncio
import logging
import re
from typing import Dict, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from smarttrip.core.config import Settings
from smarttrip.core.exceptions import (
    CompletionError,
    CompletionTimeoutError,
    QuotaExhaustedError,
    RateLimitError,
)

logger = logging.getLogger("smarttrip.completion")

_STATUS_IN_MESSAGE = re.compile(r"\b(402|429)\b")

_ROLE_MESSAGES = {
    "user": HumanMessage,
    "assistant": AIMessage,
    "system": SystemMessage,
}


def _status_code(exc: Exception) -> Optional[int]:
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    if exc.__class__.__name__ == "ResourceExhausted":
        return 429
    match = _STATUS_IN_MESSAGE.search(str(exc))
    return int(match.group(1)) if match else None


def classify_provider_error(exc: Exception) -> CompletionError:
    """Map a provider exception onto the completion error taxonomy, keeping its message."""
    message = str(exc) or exc.__class__.__name__
    status = _status_code(exc)

    if status == 402:
        return QuotaExhaustedError(message, status_code=status)
    if status == 429:
        if "quota" in message.lower():
            return QuotaExhaustedError(message, status_code=status)
        return RateLimitError(message, status_code=status)
    return CompletionError(message, status_code=status)


def content_to_text(content) -> str:
    # Gemini may answer with a list of content parts
    if isinstance(content, list):
        content = ''.join([item.get('text', '') if isinstance(item, dict) else str(item) for item in content])
    elif not isinstance(content, str):
        content = str(content)
    return content


class CompletionClient:
    def __init__(self, llm: BaseChatModel, timeout: Optional[float] = None):
        self._llm = llm
        self._timeout = timeout

    def _build_messages(self, system_instruction: str, turns: List[Dict[str, str]]) -> List[BaseMessage]:
        messages: List[BaseMessage] = [SystemMessage(content=system_instruction)]
        for turn in turns:
            message_cls = _ROLE_MESSAGES.get(turn.get("role", "user"), HumanMessage)
            messages.append(message_cls(content=turn["content"]))
        return messages

    async def complete(self, system_instruction: str, turns: List[Dict[str, str]]) -> str:
        """
        Run one completion.

        Args:
            system_instruction: Persona and constraints for the model
            turns: Conversation as [{"role": ..., "content": ...}]

        Returns:
            The model's text response

        Raises:
            CompletionError: Provider error, rate limit, quota or timeout
        """
        messages = self._build_messages(system_instruction, turns)
        try:
            response = await asyncio.wait_for(self._llm.ainvoke(messages), timeout=self._timeout)
        except asyncio.TimeoutError:
            raise CompletionTimeoutError(f"Completion timed out after {self._timeout}s") from None
        except CompletionError:
            raise
        except Exception as e:
            error = classify_provider_error(e)
            logger.error("AI provider error: %s", error)
            raise error from e

        return content_to_text(response.content).strip()


def create_completion_client(settings: Settings) -> CompletionClient:
    llm = ChatGoogleGenerativeAI(
        model=settings.COMPLETION_MODEL,
        temperature=settings.COMPLETION_TEMPERATURE,
        google_api_key=settings.GOOGLE_API_KEY,
        max_retries=1,
    )
    return CompletionClient(llm, timeout=settings.COMPLETION_TIMEOUT_SECONDS)
