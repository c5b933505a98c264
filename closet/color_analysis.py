"""Seasonal color analysis from a face photo."""

import copy
import logging
from typing import Any

from closet.gemini import ModelGateway, PromptPart
from closet.media import parse_data_uri
from closet.models import (
    MIN_AVOID_COLORS,
    MIN_RECOMMENDED_COLORS,
    UNDETERMINED,
    ColorAnalysisRequest,
    ColorAnalysisResult,
    Season,
)
from closet.pipeline import run_structured_flow
from closet.retry import RetryPolicy

logger = logging.getLogger(__name__)

UNDETERMINED_KEYWORDS = (
    "niet te bepalen",
    "onvoldoende informatie",
    "kan niet analyseren",
    "geen gezicht",
    "onmogelijk te bepalen",
)

FALLBACK_DESCRIPTION = (
    "De AI kon geen betrouwbare kleuranalyse uitvoeren op basis van de verstrekte afbeelding. "
    "Zorg voor een duidelijke foto van het gezicht bij goed daglicht, zonder zware make-up "
    "en met een neutrale achtergrond."
)

COLOR_ANALYSIS_PROMPT = f"""You are an expert in seasonal color analysis for fashion and styling. Analyze the attached photo of a person's face.
Identify their skin tone (note the undertone: warm, cool, neutral), natural hair color and eye color.
From these characteristics determine the person's color season: Lente, Zomer, Herfst or Winter.

Important:
- If no season can be determined with confidence (face not clearly visible, no person in the photo, poor lighting, wrong focus), set season_type to "{UNDETERMINED}".
- When season_type is "{UNDETERMINED}":
    - recommended_colors and avoid_colors must be empty lists.
    - analysis_description must explain why no analysis was possible.
    - skin_tone, hair_color and eye_color must be "{UNDETERMINED}".
    - palette_description must be "{UNDETERMINED}".
- Only when a season is determined, give at least {MIN_RECOMMENDED_COLORS} recommended colors, at least {MIN_AVOID_COLORS} colors to avoid, detailed characteristics and a general description of the matching palette.

All text must be in Dutch. Hex codes must be formatted as #RRGGBB.
Return only JSON matching the schema, respecting the rules above."""


def _mentions_undetermined(text: Any) -> bool:
    if not isinstance(text, str):
        return False
    lowered = text.lower()
    return any(keyword in lowered for keyword in UNDETERMINED_KEYWORDS)


def normalize_color_analysis(raw: dict[str, Any]) -> dict[str, Any]:
    """
    Force the undetermined shape when the model says it could not decide.

    The model sometimes declares the season undetermined and still returns
    colors or characteristics. Those are cleared here. A determined season is
    passed through untouched: too few colors is left to the validator to
    reject, never padded or truncated.

    ``raw`` itself is never modified.
    """
    season = raw.get("season_type")
    if not (_mentions_undetermined(season) or Season.coerce(season) is Season.UNDETERMINED):
        return raw

    result = copy.deepcopy(raw)
    result["season_type"] = UNDETERMINED
    result["recommended_colors"] = []
    result["avoid_colors"] = []
    if not _mentions_undetermined(result.get("analysis_description")):
        result["analysis_description"] = FALLBACK_DESCRIPTION
    result["characteristics"] = {
        "skin_tone": UNDETERMINED,
        "hair_color": UNDETERMINED,
        "eye_color": UNDETERMINED,
    }
    result["palette_description"] = UNDETERMINED
    if result != raw:
        logger.info("Color analysis undetermined; cleared inconsistent fields")
    return result


def render_color_analysis_prompt(request: ColorAnalysisRequest) -> list[PromptPart]:
    return [COLOR_ANALYSIS_PROMPT, parse_data_uri(request.user_data_uri)]


async def perform_color_analysis(
    request: ColorAnalysisRequest | dict,
    *,
    gateway: ModelGateway | None = None,
    policy: RetryPolicy | None = None,
) -> ColorAnalysisResult:
    """Determine the color season of the person in the photo."""
    return await run_structured_flow(
        request,
        ColorAnalysisRequest,
        ColorAnalysisResult,
        render_color_analysis_prompt,
        gateway=gateway,
        policy=policy,
        normalize=normalize_color_analysis,
        safety=True,
        label="Color analysis",
    )
