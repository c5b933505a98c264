from enum import Enum
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
)

from closet.media import DATA_URI_PATTERN, is_data_uri

UNDETERMINED = "Niet te bepalen"
MIN_RECOMMENDED_COLORS = 5
MIN_AVOID_COLORS = 3


def _decodable(value: str) -> str:
    if not is_data_uri(value):
        raise ValueError("payload is not valid base64")
    return value


DataUriStr = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=DATA_URI_PATTERN),
    AfterValidator(_decodable),
]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
HexColor = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^#[0-9A-Fa-f]{6}$")]


class FlowModel(BaseModel):
    # Instances handed back in are checked again, never trusted as-is.
    model_config = ConfigDict(revalidate_instances="always")


class Season(str, Enum):
    SPRING = "Lente"
    SUMMER = "Zomer"
    AUTUMN = "Herfst"
    WINTER = "Winter"
    UNDETERMINED = "Niet te bepalen"

    @classmethod
    def coerce(cls, value: Any) -> Any:
        """Match a season by value or English name, ignoring case."""
        if isinstance(value, cls) or not isinstance(value, str):
            return value
        lowered = value.strip().lower()
        for member in cls:
            if lowered in (member.value.lower(), member.name.lower()):
                return member
        return value


# --- Clothing item analysis ---


class ClothingItemAnalysisRequest(FlowModel):
    photo_data_uri: DataUriStr


class ClothingItemAnalysisResult(FlowModel):
    item_name: str = Field(description='Suggested Dutch name, e.g. "Blauwe Katoenen T-shirt".')
    item_type: str = Field(description="Dutch item category, e.g. 'T-shirt', 'Jeans', 'Ketting', 'Pet'.")
    item_color: str = Field(description='Primary color in Dutch, e.g. "Marineblauw".')
    item_style: str = Field(description='Style in Dutch, e.g. "Casual", "Zakelijk", "Elegant".')
    full_description: str = Field(description="Concise Dutch description suitable for a notes field.")


# --- Outfit suggestion ---


class OutfitSuggestionRequest(FlowModel):
    closet_description: NonEmptyStr
    weather_condition: NonEmptyStr
    style_preferences: NonEmptyStr
    fashion_trends: NonEmptyStr


class OutfitSuggestionText(FlowModel):
    outfit_suggestion: NonEmptyStr = Field(
        description="Outfit for the main items (top, bottom, outerwear). Shoes and socks are separate."
    )
    reasoning: NonEmptyStr = Field(description="Why this outfit fits the closet, weather and style.")
    suggested_shoes: NonEmptyStr = Field(description="Shoes that complement the outfit, e.g. 'Witte sneakers'.")
    suggested_socks: str | None = Field(
        default=None,
        description="Socks, only when visible or relevant, e.g. 'Onzichtbare sokken'.",
    )


class OutfitSuggestionResult(OutfitSuggestionText):
    outfit_image_url: DataUriStr


# --- Outfit inspiration ---


class OutfitInspirationRequest(FlowModel):
    body_type: NonEmptyStr
    style_preferences: NonEmptyStr
    clothing_items: list[str]


class OutfitInspirationResult(FlowModel):
    inspired_outfits: list[str] = Field(description="Outfit suggestions based on similar users.")


# --- Outfit visualization ---


class ClothingItemVisual(FlowModel):
    description: NonEmptyStr
    image_url: str | None = None


class OutfitVisualizationRequest(FlowModel):
    description: NonEmptyStr
    items: list[ClothingItemVisual] = Field(default_factory=list)


class OutfitVisualizationResult(FlowModel):
    visualization_url: DataUriStr


# --- Seasonal color analysis ---


class ColorAnalysisRequest(FlowModel):
    user_data_uri: DataUriStr


class ColorInfo(FlowModel):
    name: str = Field(description="Dutch color name, e.g. 'Warm Oranje'.")
    hex: HexColor = Field(description="Hex color code, e.g. #FF5733.")


class Characteristics(FlowModel):
    skin_tone: str = Field(description=f"Skin tone with undertone, or '{UNDETERMINED}'.")
    hair_color: str = Field(description=f"Natural hair color, or '{UNDETERMINED}'.")
    eye_color: str = Field(description=f"Eye color, or '{UNDETERMINED}'.")


class ColorAnalysisResult(FlowModel):
    season_type: Season = Field(description="Detected color season.")
    analysis_description: str = Field(
        description="Detailed Dutch explanation; if undetermined, explain why."
    )
    characteristics: Characteristics
    recommended_colors: list[ColorInfo] = Field(
        description=f"At least {MIN_RECOMMENDED_COLORS} flattering colors; empty if undetermined."
    )
    avoid_colors: list[ColorInfo] = Field(
        description=f"At least {MIN_AVOID_COLORS} colors to avoid; empty if undetermined."
    )
    palette_description: str = Field(
        description=f"General description of the palette, or '{UNDETERMINED}'."
    )

    @field_validator("season_type", mode="before")
    @classmethod
    def _match_season(cls, value: Any) -> Any:
        return Season.coerce(value)

    @field_validator("characteristics")
    @classmethod
    def _characteristics_match_season(
        cls, value: Characteristics, info: ValidationInfo
    ) -> Characteristics:
        if info.data.get("season_type") is Season.UNDETERMINED:
            wrong = [name for name, field in value if field != UNDETERMINED]
            if wrong:
                raise ValueError(
                    f"{', '.join(wrong)} must be '{UNDETERMINED}' when the season is undetermined"
                )
        return value

    @field_validator("recommended_colors")
    @classmethod
    def _enough_recommended(cls, value: list[ColorInfo], info: ValidationInfo) -> list[ColorInfo]:
        return _check_color_count(value, info, MIN_RECOMMENDED_COLORS)

    @field_validator("avoid_colors")
    @classmethod
    def _enough_avoid(cls, value: list[ColorInfo], info: ValidationInfo) -> list[ColorInfo]:
        return _check_color_count(value, info, MIN_AVOID_COLORS)

    @field_validator("palette_description")
    @classmethod
    def _palette_matches_season(cls, value: str, info: ValidationInfo) -> str:
        if info.data.get("season_type") is Season.UNDETERMINED and value != UNDETERMINED:
            raise ValueError(f"must be '{UNDETERMINED}' when the season is undetermined")
        return value

    @property
    def is_undetermined(self) -> bool:
        return self.season_type is Season.UNDETERMINED


def _check_color_count(
    colors: list[ColorInfo], info: ValidationInfo, minimum: int
) -> list[ColorInfo]:
    season = info.data.get("season_type")
    if season is None:
        # season itself failed validation and is reported there
        return colors
    if season is Season.UNDETERMINED:
        if colors:
            raise ValueError("must be empty when the season is undetermined")
    elif len(colors) < minimum:
        raise ValueError(
            f"expected at least {minimum} colors for season {season.value}, got {len(colors)}"
        )
    return colors


# --- API envelopes ---


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    status: str = "error"
    error: str
