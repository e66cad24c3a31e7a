"""
Prompt and response-schema builders for Homey's Gemini requests.

Everything here is pure: inputs are the user's category/style/description values,
outputs are instruction strings or google-genai response schemas.
"""
from typing import List, Optional

from google.genai import types

from schemas.projects import CategoryOption, ChatMessage, ProjectPlan

DEFAULT_VIEWS = ["straight on view", "slightly angled view", "detail focused view"]
# Used when the first image already exists (picked from a surprise suggestion)
ADDITIONAL_VIEWS = ["slightly angled view", "detail focused view"]
SURPRISE_VIEW = "straight on view, photorealistic"

SURPRISE_STYLE_COUNT = 5

IMAGE_ASPECT_RATIO = "1:1"

PLAN_SYSTEM_INSTRUCTION = (
    "You are a helpful, warm, and safety-conscious DIY expert. You strictly adhere to the VIBE formatting rules."
)


def _string_field(description: str) -> types.Schema:
    return types.Schema(type=types.Type.STRING, description=description)


def _string_list_field(description: str, count: Optional[int] = None) -> types.Schema:
    return types.Schema(
        type=types.Type.ARRAY,
        items=types.Schema(type=types.Type.STRING),
        description=description,
        min_items=count,
        max_items=count,
    )


PLAN_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "styleSummary": _string_field(
            "A 1-2 sentence evocative summary of the design vibe/style (e.g., 'A warm, grounded aesthetic "
            "featuring raw oak textures and matte black hardware to create a serene focal point.')."
        ),
        "steps": _string_list_field(
            "Detailed step-by-step execution instructions. Must strictly follow the VIBE format with "
            "**TOOL:** and **MATERIAL:** callouts and [Image of: ...] placeholders."
        ),
        "costEstimate": _string_field("Estimated cost range in USD (e.g., '$50 - $100')."),
        "timeEstimate": _string_field("Estimated time to complete (e.g., '3-4 hours')."),
        "materials": _string_list_field("Summary list of materials (for shopping list purposes)."),
        "tools": _string_list_field("Summary list of tools required."),
        "safety": _string_list_field("Important safety warnings."),
        "itemDescription": _string_field(
            "A concise visual description of the furniture or room found in the image, capturing shape, "
            "material, and key features."
        ),
    },
    required=[
        "styleSummary",
        "steps",
        "costEstimate",
        "timeEstimate",
        "materials",
        "tools",
        "safety",
        "itemDescription",
    ],
)

SURPRISE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "itemDescription": _string_field(
            "A concise visual description of the furniture or room found in the image."
        ),
        "styles": _string_list_field(
            "A list of 5 distinct, creative, and aesthetically pleasing styles suitable for this item.",
            count=SURPRISE_STYLE_COUNT,
        ),
    },
    required=["itemDescription", "styles"],
)


def _category_value(category) -> str:
    return category.value if isinstance(category, CategoryOption) else str(category)


def build_plan_prompt(category: CategoryOption, style: str) -> str:
    """Plan instructions, including the step markup contract the UI renders"""
    return f"""You are Homey, a DIY furniture flipping and home renovation expert.
Analyze this image. The user wants to improve this item/space.

SELECTED CATEGORY: {_category_value(category)}
DESIRED STYLE: {style}

**Objective:** Generate a complete, step-by-step guide for this DIY project. The guide must prioritize **maximum scannability** and **ease of use** by presenting tools and materials *only* when they are first required, using highly detailed specifications and clear visual cues.

**VIBE Code Requirements:**

**I. Step-by-Step Instructions:**
* Output the steps as a clean JSON array of strings.
* **CRITICAL: Do NOT include numbers (e.g., "1.", "Step 1") or list bullets (e.g., "-") at the start of the text.** The UI handles the numbering.
* Keep steps concise.
* Include all necessary measurements and safety notes.

**II. Integrated Materials & Tools Callouts:**
* **Before the first use** of any tool or material in a step, introduce it using a clear, **bolded** callout.
* The callout **must** include the item's name and its specific **Brand Name**, **Model/Product Name**, or **Key Specification/Supplier Link** (e.g., "**TOOL:** Miter Saw (e.g., DeWalt DWS780 12-inch)," or "**MATERIAL:** 2-inch exterior-grade deck screws (e.g., GRK R4 Multi-Purpose Screws)").
* Prioritize providing Brand/Model names that are easily searchable on Google (e.g., 'Behr Premium Plus Ultra Pure White' instead of just 'White Paint').

**III. Visual Cue Integration:**
* For **every 1-2 steps**, or whenever a new technique or component is introduced, insert a clear, descriptive placeholder for an image/diagram.
* The placeholder **must** use the exact format: [Image of: brief, precise description of the visual]

**Instructions:**
1. Identify the item or room in the image.
2. Provide a "itemDescription" summarizing visual features.
3. Generate a "styleSummary" that succinctly captures the mood, colors, and textures of the proposed design.
4. Generate the "steps" array following the VIBE format exactly.
5. Populate "materials" and "tools" arrays as a summary checklist.

Output must be pure JSON adhering to the schema."""


def build_style_analysis_prompt() -> str:
    return """You are an expert interior designer.
Analyze this inspiration image provided by the user.

Describe the specific "Style Name" and "Vibe" of this image.
Include the color palette, material textures, and key aesthetic features.

Output a single concise string that describes this style (e.g., "Moody Industrial with brass accents and dark teal walls" or "Airy Coastal with bleached oak and linen").
Keep it under 20 words."""


def build_surprise_prompt(category: CategoryOption) -> str:
    return f"""You are Homey, a DIY design assistant.
The user selected the "Surprise Me" style.
Category: {_category_value(category)}

Analyze the image provided.
1. Extract a description of the furniture or room ("itemDescription").
2. Automatically generate {SURPRISE_STYLE_COUNT} different style suggestions that would look amazing for this specific item.

Output JSON with:
- itemDescription
- styles: array of {SURPRISE_STYLE_COUNT} distinct style names."""


def build_reference_search_prompt(style: str, category: CategoryOption, description: str, count: int) -> str:
    subject = "furniture product" if category == CategoryOption.furniture_flipping else "interior design"
    return (
        f"Find {count} high-quality, real-world {subject} images that match this description: "
        f'"{description}" and are in the style of "{style}". Return ONLY a JSON array of image URLs.'
    )


def build_inspiration_image_prompt(
    style: str,
    category: CategoryOption,
    description: str,
    view: str,
    reference_url: Optional[str] = None,
) -> str:
    """Prompt for one "after" image; furniture flips keep the item's silhouette, room refreshes restyle the room"""
    reference_context = f"\nReference this real-world product style: {reference_url}\n" if reference_url else ""

    if category == CategoryOption.furniture_flipping:
        return f"""You are Homey, a DIY and furniture flipping design assistant.

Below is a description of the user's furniture extracted from their photo:
"{description}"
{reference_context}
Using this description, generate a realistic "after" inspiration image.

Your task:
- Keep the furniture's core shape, proportions, and structure the same.
- Apply the style: {style}.
- The result should look like a redesigned version of the same item, not a different piece of furniture.
- Maintain coherence with the uploaded item's size, silhouette, leg shape, drawer count, hardware position, etc.
- Enhance finishes, materials, colors, and visual details to match the chosen style.
- Use warm, cozy lighting and a clean, simple background (no full room environments).
- Avoid generating unrelated furniture or scenes.
- The generated image must clearly resemble the original item, just transformed.
- View: {view}
- Composition: Compact, centered, clear detail suitable for gallery display (400x400px equivalent).

Constraints:
- The furniture must remain recognizable as the same item.
- The redesign should be realistic, DIY-friendly, and achievable by the user."""

    return f"""High quality, photorealistic interior design photography.
A beautiful "after" shot of a room refresh project.

Room Description: "{description}"
Target Style: {style}
{reference_context}
The image should show the room transformed with {style} decor, colors, and furniture arrangement.
Warm, cozy, clean, earthy tones.
Professional architectural digest style photography.
View: {view}
Composition: Compact, centered, clear detail suitable for gallery display (400x400px equivalent)."""


def build_step_image_prompt(description: str, style: str) -> str:
    return f"""Create a helpful, clear, and photorealistic DIY tutorial image.
Subject: {description}
Context: DIY workshop or home renovation setting.
Style: Clean, bright, instructional photography. Matches the vibe of "{style}".

Focus: Close-up and clear visibility of the action or tool described.
Background: Simple, uncluttered, neutral (white or light wood).
Aspect Ratio: Square (1:1).

CRITICAL: Do NOT include any text, numbers, arrows, watermarks, or overlay graphics in the image.
The image must be a pure, clean photograph or realistic 3D render illustrating the step."""


def format_chat_history(history: List[ChatMessage]) -> str:
    return "\n".join(f"{'User' if message.role == 'user' else 'Homey'}: {message.text}" for message in history)


def build_chat_prompt(plan: ProjectPlan, history: List[ChatMessage], message: str) -> str:
    """Single-turn prompt carrying the plan snapshot, the transcript so far and the new question"""
    return f"""You are Homey, the user's friendly DIY assistant.
The user is currently looking at a specific project plan you generated.

CONTEXT - CURRENT PROJECT PLAN:
{plan.model_dump_json(by_alias=True, indent=2)}

CHAT HISTORY:
{format_chat_history(history)}

USER'S NEW QUESTION:
{message}

INSTRUCTIONS:
- Answer the user's question specifically based on the Context provided above.
- Be helpful, encouraging, and concise.
- If they ask for clarification on a step, explain it in more simple terms.
- If they ask about materials, refer to the specific brands/items listed in the plan.
- Keep the tone warm, earthy, and professional."""
