"""Clothing item analysis flow."""

import pytest

from closet.clothing import ANALYZE_PROMPT, analyze_clothing_item
from closet.errors import ValidationError
from closet.media import DataUri
from closet.models import ClothingItemAnalysisRequest, ClothingItemAnalysisResult

from conftest import PNG_BYTES, PNG_DATA_URI

ANALYSIS = {
    "item_name": "Blauwe Katoenen T-shirt",
    "item_type": "T-shirt",
    "item_color": "Marineblauw",
    "item_style": "Casual",
    "full_description": "Marineblauw T-shirt van katoen met ronde hals.",
}


@pytest.mark.asyncio
async def test_analysis_sends_prompt_and_image(gateway) -> None:
    gateway.structured.append(ANALYSIS)

    result = await analyze_clothing_item(
        ClothingItemAnalysisRequest(photo_data_uri=PNG_DATA_URI), gateway=gateway
    )

    assert result == ClothingItemAnalysisResult(**ANALYSIS)
    call = gateway.structured_calls[0]
    assert call["parts"] == [ANALYZE_PROMPT, DataUri(mime_type="image/png", data=PNG_BYTES)]
    assert call["model"] is ClothingItemAnalysisResult
    assert call["safety"] is False


@pytest.mark.asyncio
async def test_analysis_reports_all_missing_fields(gateway) -> None:
    gateway.structured.append({"item_name": "Trui"})

    with pytest.raises(ValidationError) as exc_info:
        await analyze_clothing_item({"photo_data_uri": PNG_DATA_URI}, gateway=gateway)

    assert exc_info.value.paths == ["item_type", "item_color", "item_style", "full_description"]


@pytest.mark.asyncio
async def test_rate_limited_twice_then_succeeds(gateway, sleep_mock) -> None:
    gateway.structured.extend(
        [RuntimeError("429 rate limit"), RuntimeError("429 rate limit"), ANALYSIS]
    )

    result = await analyze_clothing_item({"photo_data_uri": PNG_DATA_URI}, gateway=gateway)

    assert result.item_type == "T-shirt"
    assert len(gateway.structured_calls) == 3
    assert [c.args[0] for c in sleep_mock.await_args_list] == [2.0, 4.0]


@pytest.mark.asyncio
async def test_invalid_argument_fails_after_one_call(gateway, sleep_mock) -> None:
    gateway.structured.append(ValueError("400 INVALID_ARGUMENT: invalid argument"))

    with pytest.raises(ValueError, match="invalid argument"):
        await analyze_clothing_item({"photo_data_uri": PNG_DATA_URI}, gateway=gateway)

    assert len(gateway.structured_calls) == 1
    sleep_mock.assert_not_awaited()
