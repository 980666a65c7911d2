from typing import Optional
from sqlchat.core.config import settings
from sqlchat.core.exceptions import SQLChatError
from sqlchat.core.logging import get_logger
from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage, SystemMessage, AIMessage

logger = get_logger(__name__)


class LLMProvider:
    """OpenAI-compatible chat completion client that asks for JSON-object replies."""

    def __init__(self, system_message: Optional[str] = None, json_mode: bool = True):
        self.system_message = (
            system_message
            or "You are a SQL expert assistant. Generate safe, efficient SQL queries."
        )

        if not settings.OPENAI_API_KEY:
            raise SQLChatError("No OpenAI API key found. Please set OPENAI_API_KEY in .env")

        chat = ChatOpenAI(
            model=settings.DEFAULT_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.LLM_BASE_URL or None,
        )
        self.chat = chat.bind(response_format={"type": "json_object"}) if json_mode else chat

        logger.info(f"LLMProvider initialized using model: {settings.DEFAULT_MODEL}")

    async def generate_response(self, prompt: str) -> str:
        """Generate a complete response (non-streaming call)."""
        try:
            messages = [
                SystemMessage(content=self.system_message),
                HumanMessage(content=prompt)
            ]

            response = await self.chat.ainvoke(messages)

            if isinstance(response, AIMessage) and isinstance(response.content, str):
                return response.content.strip()
            elif hasattr(response, "content"):
                return str(response.content).strip()
            else:
                return str(response).strip()

        except Exception as e:
            logger.error(f"LLM generation failed: {e}")
            raise
