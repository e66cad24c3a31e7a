"""
Project API routes: plan generation, surprise suggestions, images and plan chat
"""
from fastapi import APIRouter, Depends, HTTPException, Request

from core.config import Settings, settings
from core.exceptions import EmptyResponseError, InvalidImageError, MalformedResponseError
from schemas.projects import (
    ChatRequest,
    ChatResponse,
    GeneratedResult,
    ImageAnalysisRequest,
    InspirationImagesRequest,
    InspirationImagesResponse,
    InspirationPlanRequest,
    PlanRequest,
    ProjectOptionsResponse,
    StepImageRequest,
    StepImageResponse,
    StepParseRequest,
    StepParseResponse,
    StyleAnalysisResponse,
    SurpriseAnalysis,
    SurpriseImagesRequest,
    SurpriseRequest,
    SurpriseResult,
    SurpriseSuggestion,
    parse_step,
)
from middleware.logging_middleware import get_logger
from services.chat_orchestrator import ChatOrchestrator
from services.generation_client import GenerationClient
from services.imagery import ImageryService
from services.plan_orchestrator import PlanOrchestrator
from services.retry import is_rate_limit_error
from services.surprise_orchestrator import SurpriseOrchestrator

logger = get_logger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])


# Dependencies


def get_settings() -> Settings:
    return settings


def get_generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


def get_imagery_service(
    client: GenerationClient = Depends(get_generation_client), config: Settings = Depends(get_settings)
) -> ImageryService:
    return ImageryService(client, config)


def get_plan_orchestrator(
    client: GenerationClient = Depends(get_generation_client),
    imagery: ImageryService = Depends(get_imagery_service),
    config: Settings = Depends(get_settings),
) -> PlanOrchestrator:
    return PlanOrchestrator(client, imagery, config)


def get_surprise_orchestrator(
    client: GenerationClient = Depends(get_generation_client),
    imagery: ImageryService = Depends(get_imagery_service),
    config: Settings = Depends(get_settings),
) -> SurpriseOrchestrator:
    return SurpriseOrchestrator(client, imagery, config)


def get_chat_orchestrator(
    client: GenerationClient = Depends(get_generation_client), config: Settings = Depends(get_settings)
) -> ChatOrchestrator:
    return ChatOrchestrator(client, config)


def _http_error(error: Exception, action: str) -> HTTPException:
    """Map a service failure to the status code the UI shows"""
    if isinstance(error, InvalidImageError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (MalformedResponseError, EmptyResponseError)):
        return HTTPException(status_code=502, detail=f"{action} returned an unusable response: {error}")
    if is_rate_limit_error(error):
        return HTTPException(status_code=429, detail=f"{action} is rate limited, please try again shortly: {error}")
    return HTTPException(status_code=502, detail=f"{action} failed: {error}")


# Routes


@router.post("/plan", response_model=GeneratedResult)
async def generate_plan(request: PlanRequest, orchestrator: PlanOrchestrator = Depends(get_plan_orchestrator)):
    """Generate a DIY plan plus inspiration images for the uploaded photo"""
    try:
        return await orchestrator.run(request.image, request.style, request.category, request.initial_image)
    except Exception as e:
        logger.error(f"Plan generation failed: {e}", exc_info=True)
        raise _http_error(e, "Plan generation")


@router.post("/inspiration/plan", response_model=GeneratedResult)
async def generate_plan_from_inspiration(
    request: InspirationPlanRequest, orchestrator: PlanOrchestrator = Depends(get_plan_orchestrator)
):
    """Derive a style from an inspiration photo and generate the plan with it"""
    try:
        return await orchestrator.run_from_inspiration(request.image, request.inspiration_image, request.category)
    except Exception as e:
        logger.error(f"Inspiration plan generation failed: {e}", exc_info=True)
        raise _http_error(e, "Inspiration analysis")


@router.post("/style/analyze", response_model=StyleAnalysisResponse)
async def analyze_style(request: ImageAnalysisRequest, orchestrator: PlanOrchestrator = Depends(get_plan_orchestrator)):
    try:
        style = await orchestrator.analyze_style_from_image(request.image)
    except Exception as e:
        raise _http_error(e, "Style analysis")
    return StyleAnalysisResponse(style=style)


@router.post("/surprise", response_model=SurpriseResult)
async def surprise_me(request: SurpriseRequest, orchestrator: SurpriseOrchestrator = Depends(get_surprise_orchestrator)):
    """Propose five styles for the photo and render one image for each"""
    try:
        return await orchestrator.run(request.image, request.category)
    except Exception as e:
        logger.error(f"Surprise generation failed: {e}", exc_info=True)
        raise _http_error(e, "Surprise analysis")


@router.post("/surprise/analyze", response_model=SurpriseAnalysis)
async def analyze_surprise(
    request: SurpriseRequest, orchestrator: SurpriseOrchestrator = Depends(get_surprise_orchestrator)
):
    try:
        return await orchestrator.analyze(request.image, request.category)
    except Exception as e:
        raise _http_error(e, "Surprise analysis")


@router.post("/inspiration-images", response_model=InspirationImagesResponse)
async def generate_inspiration_images(
    request: InspirationImagesRequest, imagery: ImageryService = Depends(get_imagery_service)
):
    images = await imagery.generate_inspiration_images(request.style, request.category, request.description, request.views)
    return InspirationImagesResponse(images=images)


@router.post("/surprise-images", response_model=list[SurpriseSuggestion])
async def generate_surprise_images(request: SurpriseImagesRequest, imagery: ImageryService = Depends(get_imagery_service)):
    return await imagery.generate_surprise_images(request.styles, request.category, request.description)


@router.post("/step-image", response_model=StepImageResponse)
async def generate_step_image(request: StepImageRequest, imagery: ImageryService = Depends(get_imagery_service)):
    """Illustration for a single step; image is null when none could be generated"""
    image = await imagery.generate_step_image(request.description, request.style)
    return StepImageResponse(image=image)


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator)):
    try:
        reply = await orchestrator.send_project_chat(request.plan, request.history, request.message)
    except Exception as e:
        logger.error(f"Plan chat failed: {e}", exc_info=True)
        raise _http_error(e, "Chat")
    return ChatResponse(reply=reply)


@router.post("/steps/parse", response_model=StepParseResponse)
async def parse_steps(request: StepParseRequest):
    """Split plan steps into tool/material callouts and image placeholders"""
    return StepParseResponse(steps=[parse_step(step) for step in request.steps])


@router.get("/options", response_model=ProjectOptionsResponse)
async def get_project_options():
    """Project categories and preset styles; free-text styles are accepted too"""
    return ProjectOptionsResponse()
