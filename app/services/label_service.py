"""Service for generating short thread titles using AI/LLM."""

import logging
from typing import Optional

from app.exceptions import GenerationError
from app.utils.llm_client import LLMClient

logger = logging.getLogger(__name__)

FALLBACK_TITLE_LENGTH = 50
TITLE_TEMPERATURE = 0.3
TITLE_MAX_TOKENS = 10

TITLE_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates very short (2-4 words) titles for "
    "conversations. The title should capture the main topic or intent of the conversation."
)


def first_four_words(text: str) -> str:
    """First four whitespace-separated words of ``text``, single-spaced."""
    return " ".join(text.split()[:4])


def truncate_title(text: str) -> str:
    """Deterministic title: the first 50 characters plus an ellipsis."""
    return text[:FALLBACK_TITLE_LENGTH] + "..."


def get_title_prompt(user_message: str, assistant_response: str) -> str:
    """Generate the title prompt for one exchange."""
    return (
        "Generate a very short (2-4 words) title for this conversation:\n\n"
        f"User: {user_message}\n\nAssistant: {assistant_response}"
    )


class LabelService:
    """Derives display labels for threads."""

    def __init__(self, llm_client: LLMClient, model: Optional[str] = None):
        self.llm_client = llm_client
        self.model = model or llm_client.settings.title_model

    async def generate_label(self, user_message: str, assistant_response: str) -> str:
        """
        Ask the LLM for a 2-4 word title, falling back to a truncated user message.

        Args:
            user_message: Opening user message
            assistant_response: Assistant reply to it

        Returns:
            str: A non-empty label; never raises for generation failures
        """
        try:
            title = await self.llm_client.complete(
                [
                    {"role": "system", "content": TITLE_SYSTEM_PROMPT},
                    {"role": "user", "content": get_title_prompt(user_message, assistant_response)},
                ],
                model=self.model,
                temperature=TITLE_TEMPERATURE,
                max_tokens=TITLE_MAX_TOKENS,
            )
        except GenerationError as e:
            logger.warning(f"Title generation failed, using fallback: {str(e)}")
            return truncate_title(user_message)

        title = title.strip()
        if not title:
            logger.warning("Title generation returned empty text, using fallback")
            return truncate_title(user_message)

        logger.info(f"Generated title: {title}")
        return title
