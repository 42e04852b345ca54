"""
Reply wording through the OpenAI chat completions API
"""
import logging

import openai
from openai import AsyncOpenAI

from .config import Settings
from .exceptions import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly flight search assistant. Rewrite the draft reply for the user "
    "in a warm, concise tone. Keep every airport code, airline, price, currency, "
    "duration and number exactly as written. Do not add flights, prices or facts that "
    "are not in the draft. Keep any question the draft asks. Use at most three sentences "
    "and no markdown."
)


class TextGenerator:
    """Single prompt-in/text-out call; no conversation state is kept here"""

    def __init__(self, client: AsyncOpenAI, model: str = "gpt-4o-mini"):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextGenerator":
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.http_timeout_seconds,
            max_retries=0,
        )
        return cls(client, model=settings.openai_model)

    async def elaborate(self, draft_reply: str, user_message: str) -> str:
        """Return the draft reworded for the user, raising GenerationError on any failure"""
        prompt = f"User message: {user_message}\n\nDraft reply: {draft_reply}"
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
                max_tokens=300,
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise GenerationError(f"Text generation failed: {e}")

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            raise GenerationError("Text generation returned an empty reply")

        reply = content.strip()
        logger.info(f"Generated reply: {reply[:100]}...")
        return reply

    async def close(self):
        await self.client.close()
