"""
Project plan generation: structured plan first, then inspiration images
"""
import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.config import Settings
from core.exceptions import EmptyResponseError
from schemas.projects import CategoryOption, GeneratedResult, ProjectPlan
from services.generation_client import (
    GenerationClient,
    GenerationConfig,
    GenerationRequest,
    ResponseFormat,
    TextPart,
)
from services.image_input import decode_image_input
from services.imagery import ImageryService
from services.prompts import (
    ADDITIONAL_VIEWS,
    PLAN_SCHEMA,
    PLAN_SYSTEM_INSTRUCTION,
    build_plan_prompt,
    build_style_analysis_prompt,
)
from services.retry import retry_operation

logger = logging.getLogger(__name__)


class PlanState(str, Enum):
    idle = "idle"
    planning = "planning"
    success = "success"
    failed = "failed"


class PlanOrchestrator:
    """
    Runs one plan request: idle -> planning -> success | failed.

    A plan failure fails the whole run. Image failures only shorten the list of
    inspiration images. Create one orchestrator per request.
    """

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
        self.state = PlanState.idle
        self.error: Optional[BaseException] = None

    async def _with_retry(self, operation):
        return await retry_operation(
            operation,
            retries=self.settings.retry_max_retries,
            base_delay=self.settings.retry_base_delay,
            sleep=self.sleep,
        )

    async def generate_project_plan(self, image: str, style: str, category: CategoryOption) -> ProjectPlan:
        """Ask the text model for a schema-constrained plan for the photographed item or room"""
        request = GenerationRequest(
            model=self.settings.text_model,
            parts=[decode_image_input(image, self.settings), TextPart(build_plan_prompt(category, style))],
            config=GenerationConfig(
                response_format=ResponseFormat.json,
                response_schema=PLAN_SCHEMA,
                system_instruction=PLAN_SYSTEM_INSTRUCTION,
                temperature=self.settings.plan_temperature,
            ),
        )

        async def _generate() -> ProjectPlan:
            text = await self.client.generate_text(request)
            if not text:
                raise EmptyResponseError("No text response received from Gemini.")
            return ProjectPlan.from_response_text(text)

        try:
            return await self._with_retry(_generate)
        except Exception as e:
            logger.error(f"Error generating project plan: {e}")
            raise

    async def analyze_style_from_image(self, inspiration_image: str) -> str:
        """Describe the style of an inspiration photo in a short phrase"""
        request = GenerationRequest(
            model=self.settings.text_model,
            parts=[decode_image_input(inspiration_image, self.settings), TextPart(build_style_analysis_prompt())],
            config=GenerationConfig(temperature=self.settings.style_analysis_temperature),
        )

        async def _analyze() -> str:
            text = (await self.client.generate_text(request)).strip()
            if not text:
                raise EmptyResponseError("Could not analyze inspiration image.")
            return text

        try:
            return await self._with_retry(_analyze)
        except Exception as e:
            logger.error(f"Error analyzing inspiration image: {e}")
            raise

    async def run(
        self,
        image: str,
        style: str,
        category: CategoryOption,
        initial_image: Optional[str] = None,
    ) -> GeneratedResult:
        """
        Generate the plan, then the inspiration images.

        When initial_image is given (the picture chosen from a surprise
        suggestion) it becomes the first image and only the remaining views are
        generated.
        """
        self.state = PlanState.planning
        try:
            plan = await self.generate_project_plan(image, style, category)
        except Exception as e:
            self._fail(e)
            raise

        if initial_image:
            additional_images = await self.imagery.generate_inspiration_images(
                style, category, plan.item_description, ADDITIONAL_VIEWS
            )
            images = [initial_image, *additional_images]
        else:
            images = await self.imagery.generate_inspiration_images(style, category, plan.item_description)

        self.state = PlanState.success
        return GeneratedResult(plan=plan, inspiration_images=images)

    async def run_from_inspiration(
        self, image: str, inspiration_image: str, category: CategoryOption
    ) -> GeneratedResult:
        """Derive the style from an inspiration photo, then run the plan flow with it"""
        self.state = PlanState.planning
        try:
            style = await self.analyze_style_from_image(inspiration_image)
        except Exception as e:
            self._fail(e)
            raise

        logger.info(f"Derived style from inspiration image: {style}")
        return await self.run(image, style, category)

    def _fail(self, error: BaseException):
        self.state = PlanState.failed
        self.error = error
