from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Union

from ..core.errors import JSONParseError, ObjectValidationError
from ..core.options import FunctionCallOptions, FunctionOptions
from ..core.schema import Schema, parse_json
from .events import ModelCallMetadata
from .execute_standard_call import StandardCallResponse, execute_standard_call
from .model import ObjectGenerationModel

T = TypeVar("T")


@dataclass
class GenerateObjectResponse:
    value: Any
    raw_response: Any
    metadata: ModelCallMetadata


async def generate_object(
    model: ObjectGenerationModel,
    schema: Schema[T],
    prompt: Any,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[T, GenerateObjectResponse]:
    """
    Generate an object that satisfies `schema`.

    Raises:
        ObjectValidationError: If the generated value does not parse or does
            not satisfy the schema (reported as an error in the finished event)
    """

    async def generate_response(call_options: FunctionCallOptions) -> StandardCallResponse[T]:
        response = await model.do_generate_object(schema, prompt, call_options)

        value = response.value
        if value is None and response.value_text is not None:
            try:
                value = parse_json(response.value_text)
            except JSONParseError as e:
                raise ObjectValidationError(value_text=response.value_text, value=None, cause=e) from e

        result = schema.validate(value)
        if not result.success:
            raise ObjectValidationError(value_text=response.value_text, value=value, cause=result.error)

        return StandardCallResponse(
            raw_response=response.raw_response,
            extracted_value=result.value,
            usage=response.usage,
        )

    result = await execute_standard_call("generate-object", prompt, model, generate_response, options)

    if full_response:
        return GenerateObjectResponse(value=result.value, raw_response=result.raw_response, metadata=result.metadata)
    return result.value
