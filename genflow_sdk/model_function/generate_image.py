from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, List, Optional, Union

from ..core.options import FunctionCallOptions, FunctionOptions
from .events import ModelCallMetadata
from .execute_standard_call import StandardCallResponse, execute_standard_call
from .model import ImageGenerationModel


@dataclass
class GenerateImageResponse:
    image: bytes
    images: List[bytes]
    image_base64: str
    images_base64: List[str]
    raw_response: Any
    metadata: ModelCallMetadata


async def generate_image(
    model: ImageGenerationModel,
    prompt: Any,
    options: Optional[FunctionOptions] = None,
    full_response: bool = False,
) -> Union[bytes, GenerateImageResponse]:
    """
    Generate images for a prompt.

    Returns:
        The first image as bytes, or a GenerateImageResponse with all images
        when `full_response` is set
    """

    async def generate_response(call_options: FunctionCallOptions) -> StandardCallResponse[List[str]]:
        response = await model.do_generate_images(prompt, call_options)
        return StandardCallResponse(
            raw_response=response.raw_response,
            extracted_value=response.base64_images,
            usage=response.usage,
        )

    result = await execute_standard_call("generate-image", prompt, model, generate_response, options)

    images_base64 = result.value
    images = [base64.b64decode(image) for image in images_base64]

    if full_response:
        return GenerateImageResponse(
            image=images[0],
            images=images,
            image_base64=images_base64[0],
            images_base64=images_base64,
            raw_response=result.raw_response,
            metadata=result.metadata,
        )
    return images[0]
