from __future__ import annotations

import base64
import logging
from typing import Optional, Protocol, Sequence

from . import prompts
from .canvas import mask_from_alpha
from .encoding import decode_payload, file_to_part
from .llm.response import handle_response
from .schema import (
    AdjustRequest,
    BackgroundMode,
    CompositeRequest,
    EditRequest,
    ExpandRequest,
    FilterRequest,
    Hotspot,
    ImagePart,
    ImageSource,
    ModelResponse,
    OperationRequest,
    RemoveBackgroundRequest,
)

logger = logging.getLogger(__name__)


class Gateway(Protocol):
    def generate(self, images: Sequence[ImagePart], instruction: str) -> ModelResponse: ...


def _call(gateway: Gateway, images: Sequence[ImagePart], instruction: str, context: str) -> str:
    response = gateway.generate(images, instruction)
    logger.info(f"Received response from model for {context}.")
    return handle_response(response, context)


def generate_edited_image(gateway: Gateway, original_image: ImageSource, user_prompt: str, hotspot: Hotspot) -> str:
    """Localized edit around ``hotspot``; returns the edited image as a data URL."""
    logger.info(f"Starting generative edit at: {hotspot}")
    image_part = file_to_part(original_image)
    return _call(gateway, [image_part], prompts.build_edit_prompt(user_prompt, hotspot), "edit")


def generate_filtered_image(gateway: Gateway, original_image: ImageSource, filter_prompt: str) -> str:
    logger.info(f"Starting filter generation: {filter_prompt}")
    image_part = file_to_part(original_image)
    return _call(gateway, [image_part], prompts.build_filter_prompt(filter_prompt), "filter")


def generate_adjusted_image(gateway: Gateway, original_image: ImageSource, adjustment_prompt: str) -> str:
    logger.info(f"Starting global adjustment generation: {adjustment_prompt}")
    image_part = file_to_part(original_image)
    return _call(gateway, [image_part], prompts.build_adjust_prompt(adjustment_prompt), "adjustment")


def generate_expanded_image(
    gateway: Gateway,
    original_image: ImageSource,
    user_prompt: str = "",
    mask_image: Optional[ImageSource] = None,
) -> str:
    """Fill the transparent areas of ``original_image`` (outpainting).

    The request always carries base image then mask. Without ``mask_image`` the
    mask is derived from the base image's alpha channel and the instruction
    tells the model that transparency marks the fill region.
    """
    logger.info(f"Starting generative fill/expand: {user_prompt}")
    image_part = file_to_part(original_image)
    if mask_image is not None:
        mask_part = file_to_part(mask_image)
    else:
        mask_png = mask_from_alpha(decode_payload(image_part.data))
        mask_part = ImagePart(mime_type="image/png", data=base64.b64encode(mask_png).decode("ascii"))
    instruction = prompts.build_expand_prompt(user_prompt, has_mask=mask_image is not None)
    return _call(gateway, [image_part, mask_part], instruction, "expansion")


def generate_composited_image(gateway: Gateway, background_image: ImageSource, insert_image: ImageSource) -> str:
    logger.info("Starting generative composition.")
    background_part = file_to_part(background_image)
    insert_part = file_to_part(insert_image)
    return _call(gateway, [background_part, insert_part], prompts.build_composite_prompt(), "composition")


def generate_background_removed_image(
    gateway: Gateway,
    original_image: ImageSource,
    background: BackgroundMode = "transparent",
    color: Optional[str] = None,
) -> str:
    logger.info(f"Starting background removal ({background}{' ' + color if color else ''})")
    image_part = file_to_part(original_image)
    instruction = prompts.build_remove_background_prompt(background, color)
    return _call(gateway, [image_part], instruction, "background removal")


def run(gateway: Gateway, request: OperationRequest) -> str:
    """Dispatch a request object to its operation."""
    if isinstance(request, EditRequest):
        return generate_edited_image(gateway, request.image, request.prompt, request.hotspot)
    if isinstance(request, FilterRequest):
        return generate_filtered_image(gateway, request.image, request.prompt)
    if isinstance(request, AdjustRequest):
        return generate_adjusted_image(gateway, request.image, request.prompt)
    if isinstance(request, ExpandRequest):
        return generate_expanded_image(gateway, request.image, request.prompt, request.mask)
    if isinstance(request, CompositeRequest):
        return generate_composited_image(gateway, request.background, request.insert)
    if isinstance(request, RemoveBackgroundRequest):
        return generate_background_removed_image(gateway, request.image, request.background, request.color)
    raise TypeError(f"Unsupported request type: {type(request).__name__}")
