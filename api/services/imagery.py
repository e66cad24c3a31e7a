"""
Reference lookup and image generation for plans, surprise styles and steps.

Batches are generated strictly one image at a time with a pause between
requests (see SequentialThrottle). A failed item is logged and skipped; the
returned list keeps the successful items in their original order.
"""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from core.config import Settings
from schemas.projects import CategoryOption, SurpriseSuggestion
from services.generation_client import (
    GenerationClient,
    GenerationConfig,
    GenerationRequest,
    ImageStatus,
    TextPart,
)
from services.prompts import (
    DEFAULT_VIEWS,
    IMAGE_ASPECT_RATIO,
    SURPRISE_VIEW,
    build_inspiration_image_prompt,
    build_reference_search_prompt,
    build_step_image_prompt,
)
from services.retry import retry_operation
from services.throttle import SequentialThrottle

logger = logging.getLogger(__name__)


class ImageryService:
    """Grounded reference search and sequential image generation"""

    def __init__(
        self,
        client: GenerationClient,
        settings: Settings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.client = client
        self.settings = settings
        self.sleep = sleep

    def _image_request(self, prompt: str) -> GenerationRequest:
        return GenerationRequest(
            model=self.settings.image_model,
            parts=[TextPart(prompt)],
            config=GenerationConfig(aspect_ratio=IMAGE_ASPECT_RATIO, response_modalities=["IMAGE"]),
        )

    async def _generate_image(self, request: GenerationRequest, label: str) -> Optional[str]:
        """One image attempt; rate limits raise so the caller's retry loop can back off"""
        result = await self.client.generate_image(request)
        if result.status == ImageStatus.rate_limited:
            raise result.error
        if result.status == ImageStatus.failed:
            logger.error(f"Error generating image for {label}: {result.error}")
        return result.image

    async def get_real_world_references(
        self, style: str, category: CategoryOption, description: str, count: int = 3
    ) -> List[str]:
        """
        Up to `count` real-world URLs from a Google Search grounded call.

        Always returns exactly `count` entries, padding with "" when fewer URLs
        were found or the search failed.
        """
        request = GenerationRequest(
            model=self.settings.text_model,
            parts=[TextPart(build_reference_search_prompt(style, category, description, count))],
            config=GenerationConfig(use_search_grounding=True),
        )

        async def _search() -> List[str]:
            response = await self.client.invoke(request)
            return self.client.grounding_uris(response)

        try:
            urls = await retry_operation(
                _search,
                retries=self.settings.retry_max_retries,
                base_delay=self.settings.retry_base_delay,
                sleep=self.sleep,
            )
        except Exception as e:
            logger.warning(f"Reference search failed for style '{style}', continuing without references: {e}")
            urls = []

        urls = [url for url in urls if url][:count]
        return urls + [""] * (count - len(urls))

    async def generate_single_image(
        self,
        style: str,
        category: CategoryOption,
        description: str,
        view: str,
        reference_url: Optional[str] = None,
    ) -> Optional[str]:
        """
        Generate one "after" image.

        Returns None when the model produced no image or failed for a reason
        other than rate limiting. Rate limits are retried with backoff and raise
        once the retry budget is spent.
        """
        request = self._image_request(
            build_inspiration_image_prompt(style, category, description, view, reference_url or None)
        )
        return await retry_operation(
            lambda: self._generate_image(request, style),
            retries=self.settings.retry_max_retries,
            base_delay=self.settings.retry_base_delay,
            sleep=self.sleep,
        )

    async def generate_inspiration_images(
        self,
        style: str,
        category: CategoryOption,
        description: str,
        views: Optional[List[str]] = None,
    ) -> List[str]:
        """Images for each view, generated sequentially with a pause between requests"""
        references = await self.get_real_world_references(
            style, category, description, self.settings.inspiration_reference_count
        )
        views = views if views is not None else DEFAULT_VIEWS
        throttle = SequentialThrottle(self.settings.inspiration_image_delay, sleep=self.sleep)

        images = []
        for i, view in enumerate(views):
            reference = references[i % len(references)] if references else ""
            await throttle.acquire()
            try:
                image = await self.generate_single_image(style, category, description, view, reference)
            except Exception as e:
                logger.error(f"Skipping image {i} ({view}) due to error: {e}")
                continue
            if image:
                images.append(image)

        logger.info(f"Generated {len(images)}/{len(views)} inspiration images for style '{style}'")
        return images

    async def generate_surprise_images(
        self, styles: List[str], category: CategoryOption, description: str
    ) -> List[SurpriseSuggestion]:
        """One image per style; styles without an image are left out"""
        throttle = SequentialThrottle(self.settings.surprise_image_delay, sleep=self.sleep)

        suggestions = []
        for style in styles:
            await throttle.acquire()
            try:
                references = await self.get_real_world_references(style, category, description, 1)
                image = await self.generate_single_image(style, category, description, SURPRISE_VIEW, references[0])
            except Exception as e:
                logger.error(f"Skipping surprise style {style}: {e}")
                continue
            if image:
                suggestions.append(SurpriseSuggestion(style=style, image=image))
            else:
                logger.warning(f"Skipping surprise style {style}: no image produced")

        logger.info(f"Generated {len(suggestions)}/{len(styles)} surprise suggestions")
        return suggestions

    async def generate_step_image(self, description: str, style: str) -> Optional[str]:
        """Best-effort illustration for one plan step; None on any failure"""
        request = self._image_request(build_step_image_prompt(description, style))
        try:
            return await retry_operation(
                lambda: self._generate_image(request, f"step '{description}'"),
                retries=self.settings.step_image_max_retries,
                base_delay=self.settings.step_image_base_delay,
                sleep=self.sleep,
            )
        except Exception as e:
            logger.warning(f"Could not generate step image for: {description} ({e})")
            return None
