"""Outfit flows: suggestion with image, inspiration list, visualization."""

import logging

from closet.gemini import ModelGateway, PromptPart, get_gateway
from closet.media import parse_data_uri
from closet.models import (
    OutfitInspirationRequest,
    OutfitInspirationResult,
    OutfitSuggestionRequest,
    OutfitSuggestionResult,
    OutfitSuggestionText,
    OutfitVisualizationRequest,
    OutfitVisualizationResult,
)
from closet.pipeline import request_media, request_structured, run_structured_flow
from closet.retry import RetryPolicy
from closet.validation import validate

logger = logging.getLogger(__name__)

SUGGESTION_PROMPT = """You are a personal stylist that generates outfit suggestions.

Consider the following information when making your suggestion:

User Closet: {closet_description}
Weather: {weather_condition}
Style Preferences: {style_preferences}
Fashion Trends: {fashion_trends}

Suggest the main clothing items (top, bottom, outerwear) in detail and give a brief reasoning.
Also suggest SHOES that go well with this outfit.
Only if socks are visible or matter for the style (e.g. with certain shoes or skirts), suggest SOCKS as well.
All text must be in Dutch. Return only JSON matching the schema."""

SUGGESTION_IMAGE_PROMPT = (
    "Generate a high-quality, realistic image of a person wearing the following outfit: "
    "{outfit}. The person should also be wearing {footwear}. "
    "Ensure the style is fashionable and clear, and that the shoes and any visible socks "
    "are clearly depicted. The image should be suitable for a fashion app."
)

INSPIRATION_PROMPT = """You are a personal stylist that provides outfit inspiration.

Generate outfit suggestions based on the user's body type, style preferences and the clothing items they own.
Consider outfits worn by other people with similar body types and styles.

Body Type: {body_type}
Style Preferences: {style_preferences}
Clothing Items: {clothing_items}"""

VISUALIZATION_PROMPT = (
    "Generate a high-quality, realistic image of a person wearing the following outfit: {description}."
)
VISUALIZATION_STYLE_NOTE = "Ensure the style is fashionable and clear. The image should be suitable for a fashion app."
VISUALIZATION_ITEMS_INTRO = (
    "\n\nFor additional context, here are some of the items included "
    "(prioritize the main description above):"
)


# --- Outfit suggestion ---


def render_suggestion_prompt(request: OutfitSuggestionRequest) -> list[PromptPart]:
    return [SUGGESTION_PROMPT.format(**request.model_dump())]


def render_suggestion_image_prompt(text: OutfitSuggestionText) -> list[PromptPart]:
    footwear = text.suggested_shoes
    if text.suggested_socks:
        footwear = f"{footwear} with {text.suggested_socks}"
    return [SUGGESTION_IMAGE_PROMPT.format(outfit=text.outfit_suggestion, footwear=footwear)]


async def generate_outfit_suggestion(
    request: OutfitSuggestionRequest | dict,
    *,
    gateway: ModelGateway | None = None,
    policy: RetryPolicy | None = None,
) -> OutfitSuggestionResult:
    """Suggest an outfit in text, then render it as an image."""
    checked = validate(OutfitSuggestionRequest, request)
    gateway = gateway or get_gateway()

    # Stage 1: text. An incomplete answer fails here, before any image call.
    text = await request_structured(
        render_suggestion_prompt(checked),
        OutfitSuggestionText,
        gateway=gateway,
        policy=policy,
        label="Outfit suggestion text",
    )

    # Stage 2: image seeded with the stage 1 text.
    image_url = await request_media(
        render_suggestion_image_prompt(text),
        gateway=gateway,
        policy=policy,
        label="Outfit suggestion image",
        failure_message="Failed to generate outfit image.",
    )

    return validate(OutfitSuggestionResult, {**text.model_dump(), "outfit_image_url": image_url})


# --- Outfit inspiration ---


def render_inspiration_prompt(request: OutfitInspirationRequest) -> list[PromptPart]:
    return [
        INSPIRATION_PROMPT.format(
            body_type=request.body_type,
            style_preferences=request.style_preferences,
            clothing_items=", ".join(request.clothing_items),
        )
    ]


async def generate_outfit_inspiration(
    request: OutfitInspirationRequest | dict,
    *,
    gateway: ModelGateway | None = None,
    policy: RetryPolicy | None = None,
) -> OutfitInspirationResult:
    return await run_structured_flow(
        request,
        OutfitInspirationRequest,
        OutfitInspirationResult,
        render_inspiration_prompt,
        gateway=gateway,
        policy=policy,
        label="Outfit inspiration",
    )


# --- Outfit visualization ---


def render_visualization_prompt(request: OutfitVisualizationRequest) -> list[PromptPart]:
    """
    Build the multimodal prompt for a visualization.

    Item images that are not inline ``data:image/...`` URIs are never sent to
    the model; the item is mentioned in text instead.
    """
    parts: list[PromptPart] = [
        VISUALIZATION_PROMPT.format(description=request.description),
        VISUALIZATION_STYLE_NOTE,
    ]
    if not request.items:
        return parts

    parts.append(VISUALIZATION_ITEMS_INTRO)
    for item in request.items:
        if not item.image_url:
            parts.append(f"- {item.description}")
            continue
        image = parse_data_uri(item.image_url)
        if image is not None and image.is_image:
            parts.append(image)
            parts.append(f"This is a {item.description}.")
        else:
            logger.warning("Skipping invalid image reference for %r", item.description)
            parts.append(f"(Image for {item.description} was not in correct data URI format)")
    return parts


async def generate_outfit_visualization(
    request: OutfitVisualizationRequest | dict,
    *,
    gateway: ModelGateway | None = None,
    policy: RetryPolicy | None = None,
) -> OutfitVisualizationResult:
    """Render an outfit description, optionally with item photos, as one image."""
    checked = validate(OutfitVisualizationRequest, request)
    gateway = gateway or get_gateway()

    image_url = await request_media(
        render_visualization_prompt(checked),
        gateway=gateway,
        policy=policy,
        safety=True,
        label="Outfit visualization",
        failure_message=(
            "Failed to generate outfit visualization image. The model may have "
            "declined the request or an unknown error occurred."
        ),
    )
    return validate(OutfitVisualizationResult, {"visualization_url": image_url})
