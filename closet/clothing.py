"""Describe a single clothing item from a photo."""

from closet.gemini import ModelGateway, PromptPart
from closet.media import parse_data_uri
from closet.models import ClothingItemAnalysisRequest, ClothingItemAnalysisResult
from closet.pipeline import run_structured_flow
from closet.retry import RetryPolicy

ANALYZE_PROMPT = """You are an expert fashion assistant for a Dutch-speaking user. Analyze the attached image of a clothing item.
Identify its key characteristics and return, in Dutch: a suggested name (item_name), type (item_type), primary color (item_color), style (item_style) and a concise overall description (full_description).

For item_type:
- Tops must be specific: 'T-shirt', 'T-shirt met lange mouwen', 'Mouwloos T-shirt', 'Polo', 'Tanktop', 'Hemdje', 'Croptop', 'Blouse', 'Overhemd', 'Sweater', 'Hoodie', 'Trui', 'Spencer', 'Sporttop', 'Body'.
- Other clothing uses common Dutch terms: 'Jeans', 'Jurk', 'Rok', 'Jas', 'Broek', 'Schoenen'.
- Jewelry: 'Ketting', 'Armband', 'Oorbellen', 'Ring', or 'Sieraad' when unclear.
- Headwear: 'Pet' for caps, 'Muts' for beanies, or 'Hoofddeksel' when unclear.
- Other accessories: 'Tas', 'Riem', 'Sjaal', or 'Accessoire'.

For item_style use terms like 'Casual', 'Zakelijk', 'Bohemian', 'Stoer', 'Elegant'.
full_description should fit the notes field of a digital closet app.

Return only JSON matching the schema."""


def render_analysis_prompt(request: ClothingItemAnalysisRequest) -> list[PromptPart]:
    return [ANALYZE_PROMPT, parse_data_uri(request.photo_data_uri)]


async def analyze_clothing_item(
    request: ClothingItemAnalysisRequest | dict,
    *,
    gateway: ModelGateway | None = None,
    policy: RetryPolicy | None = None,
) -> ClothingItemAnalysisResult:
    """Classify the pictured item into name, type, color, style and description."""
    return await run_structured_flow(
        request,
        ClothingItemAnalysisRequest,
        ClothingItemAnalysisResult,
        render_analysis_prompt,
        gateway=gateway,
        policy=policy,
        label="Clothing item analysis",
    )
