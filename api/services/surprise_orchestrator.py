"""
Surprise Me flow: let the model propose styles and render one image for each
"""
import asyncio
import logging
from typing import Awaitable, Callable

from core.config import Settings
from core.exceptions import EmptyResponseError
from schemas.projects import CategoryOption, SurpriseAnalysis, SurpriseResult
from services.generation_client import (
    GenerationClient,
    GenerationConfig,
    GenerationRequest,
    ResponseFormat,
    TextPart,
)
from services.image_input import decode_image_input
from services.imagery import ImageryService
from services.prompts import SURPRISE_SCHEMA, build_surprise_prompt
from services.retry import retry_operation

logger = logging.getLogger(__name__)


class SurpriseOrchestrator:
    def __init__(
        self,
        client: GenerationClient,
        imagery: ImageryService,
        settings: Settings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.imagery = imagery
        self.settings = settings
        self.sleep = sleep

    async def analyze(self, image: str, category: CategoryOption) -> SurpriseAnalysis:
        """Item description plus five candidate styles"""
        request = GenerationRequest(
            model=self.settings.text_model,
            parts=[decode_image_input(image, self.settings), TextPart(build_surprise_prompt(category))],
            config=GenerationConfig(
                response_format=ResponseFormat.json,
                response_schema=SURPRISE_SCHEMA,
                temperature=self.settings.surprise_temperature,
            ),
        )

        async def _analyze() -> SurpriseAnalysis:
            text = await self.client.generate_text(request)
            if not text:
                raise EmptyResponseError("No text response received.")
            return SurpriseAnalysis.from_response_text(text)

        try:
            return await retry_operation(
                _analyze,
                retries=self.settings.retry_max_retries,
                base_delay=self.settings.retry_base_delay,
                sleep=self.sleep,
            )
        except Exception as e:
            logger.error(f"Error generating surprise analysis: {e}")
            raise

    async def run(self, image: str, category: CategoryOption) -> SurpriseResult:
        analysis = await self.analyze(image, category)
        suggestions = await self.imagery.generate_surprise_images(
            analysis.styles, category, analysis.item_description
        )
        return SurpriseResult(item_description=analysis.item_description, suggestions=suggestions)
