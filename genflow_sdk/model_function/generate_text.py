from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ..core.options import FunctionCallOptions, FunctionOptions
from .events import ModelCallMetadata
from .execute_standard_call import StandardCallResponse, execute_standard_call
from .model import TextGenerationModel


@dataclass
class GenerateTextResponse:
    text: str
    texts: List[str]
    raw_response: Any
    metadata: ModelCallMetadata


async def generate_text(
    model: TextGenerationModel,
    prompt: Any,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[str, GenerateTextResponse]:
    """
    Generate text for a prompt.

    Returns:
        The first generated text, or a GenerateTextResponse when
        `full_response` is set
    """

    async def generate_response(call_options: FunctionCallOptions) -> StandardCallResponse[List[str]]:
        response = await model.do_generate_texts(prompt, call_options)
        return StandardCallResponse(
            raw_response=response.raw_response,
            extracted_value=response.texts,
            usage=response.usage,
        )

    result = await execute_standard_call("generate-text", prompt, model, generate_response, options)

    texts = result.value
    text = texts[0] if texts else ""

    if full_response:
        return GenerateTextResponse(text=text, texts=texts, raw_response=result.raw_response, metadata=result.metadata)
    return text
