"""
Follow-up questions about a generated project plan
"""
import asyncio
import logging
from typing import Awaitable, Callable, List

from core.config import Settings
from schemas.projects import ChatMessage, ProjectPlan
from services.generation_client import GenerationClient, GenerationConfig, GenerationRequest, TextPart
from services.prompts import build_chat_prompt
from services.retry import retry_operation

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I'm having a little trouble connecting right now. Could you ask that again?"


class ChatOrchestrator:
    """Stateless: each call carries the plan and the whole history"""

    def __init__(
        self,
        client: GenerationClient,
        settings: Settings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.settings = settings
        self.sleep = sleep

    async def send_project_chat(self, plan: ProjectPlan, history: List[ChatMessage], message: str) -> str:
        request = GenerationRequest(
            model=self.settings.text_model,
            parts=[TextPart(build_chat_prompt(plan, history, message))],
            config=GenerationConfig(temperature=self.settings.chat_temperature),
        )

        async def _chat() -> str:
            return await self.client.generate_text(request) or FALLBACK_REPLY

        try:
            return await retry_operation(
                _chat,
                retries=self.settings.retry_max_retries,
                base_delay=self.settings.retry_base_delay,
                sleep=self.sleep,
            )
        except Exception as e:
            logger.error(f"Chat Error: {e}")
            raise
