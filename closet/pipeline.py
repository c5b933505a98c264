"""Shared flow envelope: validate -> prompt -> call with retry -> normalize -> validate."""

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel

from closet.errors import EmptyResponseError, GenerationFailedError
from closet.gemini import ModelGateway, PromptPart, get_gateway
from closet.retry import RetryPolicy, call_with_retry
from closet.validation import validate

logger = logging.getLogger(__name__)

RequestT = TypeVar("RequestT", bound=BaseModel)
ResultT = TypeVar("ResultT", bound=BaseModel)

EMPTY_RESPONSE_MESSAGE = "The model answered, but the output was empty or not in the expected format."


async def request_structured(
    parts: Sequence[PromptPart],
    output_model: type[ResultT],
    *,
    gateway: ModelGateway,
    policy: RetryPolicy | None = None,
    normalize: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    safety: bool = False,
    label: str,
) -> ResultT:
    """One structured call through the retry controller, then the output gate."""

    async def attempt() -> dict[str, Any]:
        raw = await gateway.generate_structured(parts, output_model, safety=safety)
        if not raw:
            raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)
        return raw

    raw = await call_with_retry(attempt, policy, label=label)
    if normalize is not None:
        raw = normalize(raw)
    return validate(output_model, raw)


async def request_media(
    parts: Sequence[PromptPart],
    *,
    gateway: ModelGateway,
    policy: RetryPolicy | None = None,
    safety: bool = False,
    label: str,
    failure_message: str,
) -> str:
    """One image call through the retry controller. Returns the image data URI."""
    media_url = await call_with_retry(
        lambda: gateway.generate_media(parts, safety=safety),
        policy,
        label=label,
    )
    if not media_url:
        raise GenerationFailedError(failure_message)
    return media_url


async def run_structured_flow(
    request: RequestT | dict[str, Any],
    request_model: type[RequestT],
    result_model: type[ResultT],
    render: Callable[[RequestT], Sequence[PromptPart]],
    *,
    gateway: ModelGateway | None = None,
    policy: RetryPolicy | None = None,
    normalize: Callable[[dict[str, Any]], dict[str, Any]] | None = None,
    safety: bool = False,
    label: str,
) -> ResultT:
    """Run a single-call flow end to end."""
    checked = validate(request_model, request)
    gateway = gateway or get_gateway()
    logger.info("Running %s", label)
    return await request_structured(
        render(checked),
        result_model,
        gateway=gateway,
        policy=policy,
        normalize=normalize,
        safety=safety,
        label=label,
    )
