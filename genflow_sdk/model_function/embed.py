from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ..core.options import FunctionCallOptions, FunctionOptions
from .events import ModelCallMetadata
from .execute_standard_call import StandardCallResponse, execute_standard_call
from .model import EmbeddingModel, EmbeddingModelResponse

Vector = List[float]


@dataclass
class EmbedResponse:
    embedding: Vector
    raw_response: Any
    metadata: ModelCallMetadata


@dataclass
class EmbedManyResponse:
    embeddings: List[Vector]
    raw_response: List[Any]
    metadata: ModelCallMetadata


def _chunk(values: List[Any], size: Optional[int]) -> List[List[Any]]:
    if size is None or size <= 0:
        return [values]
    return [values[i:i + size] for i in range(0, len(values), size)]


def _merge_usage(responses: List[EmbeddingModelResponse]) -> Optional[dict]:
    usages = [response.usage for response in responses if response.usage]
    if not usages:
        return None
    merged: dict = {}
    for usage in usages:
        for key, value in usage.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                merged[key] = merged.get(key, 0) + value
    return merged


async def _embed_values(
    model: EmbeddingModel,
    values: List[Any],
    call_options: FunctionCallOptions,
) -> StandardCallResponse[List[Vector]]:
    chunks = _chunk(values, model.max_values_per_call)

    if model.is_parallelizable:
        responses = list(await asyncio.gather(*(model.do_embed_values(chunk, call_options) for chunk in chunks)))
    else:
        responses = [await model.do_embed_values(chunk, call_options) for chunk in chunks]

    return StandardCallResponse(
        raw_response=[response.raw_response for response in responses],
        extracted_value=[embedding for response in responses for embedding in response.embeddings],
        usage=_merge_usage(responses),
    )


async def embed_many(
    model: EmbeddingModel,
    values: List[Any],
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[List[Vector], EmbedManyResponse]:
    """
    Embed several values.

    Values are split into chunks of `model.max_values_per_call`; chunks are
    embedded concurrently when the model is parallelizable. Embeddings are
    returned in input order.
    """

    async def generate_response(call_options: FunctionCallOptions) -> StandardCallResponse[List[Vector]]:
        return await _embed_values(model, list(values), call_options)

    result = await execute_standard_call("embed", values, model, generate_response, options)

    if full_response:
        return EmbedManyResponse(embeddings=result.value, raw_response=result.raw_response, metadata=result.metadata)
    return result.value


async def embed(
    model: EmbeddingModel,
    value: Any,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[Vector, EmbedResponse]:
    """Embed one value."""

    async def generate_response(call_options: FunctionCallOptions) -> StandardCallResponse[Vector]:
        response = await model.do_embed_values([value], call_options)
        return StandardCallResponse(
            raw_response=response.raw_response,
            extracted_value=response.embeddings[0],
            usage=response.usage,
        )

    result = await execute_standard_call("embed", value, model, generate_response, options)

    if full_response:
        return EmbedResponse(embedding=result.value, raw_response=result.raw_response, metadata=result.metadata)
    return result.value
