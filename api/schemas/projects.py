"""
Pydantic schemas for DIY project plans, surprise suggestions and plan chat
"""
import json
import re
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import MalformedResponseError


class CategoryOption(str, Enum):
    """Project categories offered to the user"""

    furniture_flipping = "Furniture Flipping"
    room_refresh = "Room Refresh Ideas"


class StyleOption(str, Enum):
    """Preset styles. Any free-text style is accepted as well."""

    transitional = "Transitional"
    japandi = "Japandi"
    mid_century = "Mid-Century Modern"
    organic_modern = "Organic Modern"
    farmhouse = "Farmhouse"
    insta_trendy = "Insta-Trendy (Current Viral)"
    surprise_me = "Surprise Me!"


class ProjectPlan(BaseModel):
    """Structured DIY plan returned by the plan model"""

    style_summary: str = Field(..., alias="styleSummary")
    steps: List[str] = Field(..., description="Steps with **TOOL:**/**MATERIAL:** callouts and [Image of: ...] markers")
    cost_estimate: str = Field(..., alias="costEstimate")
    time_estimate: str = Field(..., alias="timeEstimate")
    materials: List[str]
    tools: List[str]
    safety: List[str]
    item_description: str = Field(..., alias="itemDescription")

    class Config:
        frozen = True
        populate_by_name = True

    @classmethod
    def from_response_text(cls, text: str) -> "ProjectPlan":
        """Parse the model's JSON output, raising MalformedResponseError on bad or incomplete JSON"""
        return _parse_json_model(cls, text)


class SurpriseAnalysis(BaseModel):
    """Item description plus the style names proposed for Surprise Me mode"""

    item_description: str = Field(..., alias="itemDescription")
    styles: List[str]

    class Config:
        frozen = True
        populate_by_name = True

    @classmethod
    def from_response_text(cls, text: str) -> "SurpriseAnalysis":
        return _parse_json_model(cls, text)


class SurpriseSuggestion(BaseModel):
    """One proposed style and its generated image (base64 data URL)"""

    style: str
    image: str


class SurpriseResult(BaseModel):
    type: Literal["surprise"] = "surprise"
    item_description: str = Field(..., alias="itemDescription")
    suggestions: List[SurpriseSuggestion] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class GeneratedResult(BaseModel):
    type: Literal["standard"] = "standard"
    plan: ProjectPlan
    inspiration_images: List[str] = Field(default_factory=list, alias="inspirationImages")

    class Config:
        populate_by_name = True


class ChatMessage(BaseModel):
    """A single turn in a plan chat"""

    role: Literal["user", "assistant"]
    text: str

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value):
        # The browser client labels assistant turns "model"
        if value == "model":
            return "assistant"
        return value


def _parse_json_model(model_cls, text: str):
    try:
        data = json.loads(text)
    except (TypeError, json.JSONDecodeError) as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e

    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Response does not match {model_cls.__name__}: {e}") from e


# =============================================================================
# Step markup
# =============================================================================

_LEADING_ORDINAL = re.compile(r"^(\d+\.|Step\s+\d+:?|-|\*(?!\*))\s*", re.IGNORECASE)
_IMAGE_PLACEHOLDER = re.compile(r"\[Image of:\s*(.*?)\]", re.IGNORECASE)
_IMAGE_ONLY = re.compile(r"^\[Image of:.*?\]$", re.IGNORECASE)
# "**TOOL:** Miter Saw (e.g., DeWalt DWS780)" or "**TOOL: Miter Saw**"
_RESOURCE_CALLOUT = re.compile(
    r"\*\*(TOOL|MATERIAL):\*\*\s*([^,.;\[\*(]+(?:\([^)]*\))?)"
    r"|\*\*(TOOL|MATERIAL):\s*([^*]+?)\*\*"
)


class StepResource(BaseModel):
    type: Literal["TOOL", "MATERIAL"]
    name: str


class ParsedStep(BaseModel):
    text: str
    resources: List[StepResource] = Field(default_factory=list)
    image_descriptions: List[str] = Field(default_factory=list, alias="imageDescriptions")
    image_only: bool = Field(default=False, alias="imageOnly")

    class Config:
        populate_by_name = True


def parse_step(step: str) -> ParsedStep:
    """Break a plan step into its tool/material callouts and image placeholders"""
    text = _LEADING_ORDINAL.sub("", step.strip(), count=1).strip()

    resources = []
    for match in _RESOURCE_CALLOUT.finditer(text):
        resource_type = match.group(1) or match.group(3)
        name = (match.group(2) or match.group(4) or "").strip().rstrip(",.;:")
        if name:
            resources.append(StepResource(type=resource_type, name=name))

    return ParsedStep(
        text=text,
        resources=resources,
        image_descriptions=[description.strip() for description in _IMAGE_PLACEHOLDER.findall(text)],
        image_only=bool(_IMAGE_ONLY.match(text)),
    )


# =============================================================================
# API request / response models
# =============================================================================


class PlanRequest(BaseModel):
    image: str = Field(..., description="Base64 photo of the furniture or room (data URL prefix allowed)")
    style: str
    category: CategoryOption
    initial_image: Optional[str] = Field(default=None, alias="initialImage", description="Image picked from a surprise suggestion")

    class Config:
        populate_by_name = True


class InspirationPlanRequest(BaseModel):
    image: str
    inspiration_image: str = Field(..., alias="inspirationImage")
    category: CategoryOption

    class Config:
        populate_by_name = True


class ImageAnalysisRequest(BaseModel):
    image: str


class StyleAnalysisResponse(BaseModel):
    style: str


class SurpriseRequest(BaseModel):
    image: str
    category: CategoryOption


class InspirationImagesRequest(BaseModel):
    style: str
    category: CategoryOption
    description: str
    views: Optional[List[str]] = None


class InspirationImagesResponse(BaseModel):
    images: List[str]


class SurpriseImagesRequest(BaseModel):
    styles: List[str]
    category: CategoryOption
    description: str


class StepImageRequest(BaseModel):
    description: str
    style: str


class StepImageResponse(BaseModel):
    image: Optional[str] = None


class ChatRequest(BaseModel):
    plan: ProjectPlan
    history: List[ChatMessage] = Field(default_factory=list)
    message: str


class ChatResponse(BaseModel):
    reply: str


class StepParseRequest(BaseModel):
    steps: List[str]


class StepParseResponse(BaseModel):
    steps: List[ParsedStep]


class ProjectOptionsResponse(BaseModel):
    """Choices the UI offers before a plan is generated"""

    categories: List[CategoryOption] = Field(default_factory=lambda: list(CategoryOption))
    styles: List[StyleOption] = Field(default_factory=lambda: list(StyleOption))
