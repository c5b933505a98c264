"""Shared fixtures: a scripted stand-in for the Gemini gateway."""

import base64
from collections import deque
from typing import Any

import pytest

from closet.retry import RetryPolicy

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"
PNG_DATA_URI = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")
JPEG_DATA_URI = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xffjpeg").decode("ascii")


class FakeGateway:
    """Replays queued answers. Exceptions in the queue are raised instead."""

    def __init__(self) -> None:
        self.structured: deque[Any] = deque()
        self.media: deque[Any] = deque()
        self.structured_calls: list[dict[str, Any]] = []
        self.media_calls: list[dict[str, Any]] = []

    @staticmethod
    def _next(queue: deque[Any]) -> Any:
        answer = queue.popleft()
        if isinstance(answer, BaseException):
            raise answer
        return answer

    async def generate_structured(self, parts, output_model, *, safety=False):
        self.structured_calls.append({"parts": list(parts), "model": output_model, "safety": safety})
        return self._next(self.structured)

    async def generate_media(self, parts, *, modalities=("TEXT", "IMAGE"), safety=False):
        self.media_calls.append({"parts": list(parts), "modalities": modalities, "safety": safety})
        return self._next(self.media)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def sleep_mock(mocker):
    return mocker.patch("closet.retry.asyncio.sleep", new_callable=mocker.AsyncMock)


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy()


def color(name: str, hex_code: str) -> dict[str, str]:
    return {"name": name, "hex": hex_code}


@pytest.fixture
def spring_analysis() -> dict[str, Any]:
    return {
        "season_type": "Lente",
        "analysis_description": "Warme, heldere uitstraling met gouden ondertoon.",
        "characteristics": {
            "skin_tone": "Warm met gouden ondertoon",
            "hair_color": "Goudblond",
            "eye_color": "Helderblauw",
        },
        "recommended_colors": [
            color("Koraal", "#FF7F50"),
            color("Warm Geel", "#FFD700"),
            color("Perzik", "#FFDAB9"),
            color("Appelgroen", "#8DB600"),
            color("Turquoise", "#40E0D0"),
        ],
        "avoid_colors": [
            color("Zwart", "#000000"),
            color("IJsgrijs", "#D3D3D3"),
            color("Bordeaux", "#800020"),
        ],
        "palette_description": "Heldere, warme kleuren",
    }
