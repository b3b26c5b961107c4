from __future__ import annotations

import logging

from ..errors import AbnormalFinish, BlockedByPolicy, NoImageReturned
from ..schema import ModelResponse

logger = logging.getLogger(__name__)

NORMAL_FINISH = "STOP"


def handle_response(response: ModelResponse, context: str) -> str:
    """Classify a model reply: return the image as a data URL or raise.

    Checks run in a fixed order: prompt blocking, then the first inline image,
    then an abnormal finish reason, then "no image" with any text the model sent.

    context: operation name used in messages, e.g. "edit", "filter", "expansion"
    """
    # 1) prompt blocking
    if response.block_reason:
        message = f"Request was blocked. Reason: {response.block_reason}. {response.block_reason_message or ''}"
        logger.error(f"{message} (context={context})")
        raise BlockedByPolicy(message)

    # 2) first part carrying an image
    for part in response.parts:
        if part.inline_data is not None:
            logger.info(f"Received image data ({part.inline_data.mime_type}) for {context}")
            return part.inline_data.to_data_url()

    # 3) stopped for some other reason
    if response.finish_reason and response.finish_reason != NORMAL_FINISH:
        message = (
            f"Image generation for {context} stopped unexpectedly. Reason: {response.finish_reason}. "
            "This often relates to safety settings."
        )
        logger.error(message)
        raise AbnormalFinish(message)

    text_feedback = (response.text or "").strip()
    message = f"The AI model did not return an image for the {context}. " + (
        f'The model responded with text: "{text_feedback}"'
        if text_feedback
        else "This can happen due to safety filters or if the request is too complex. "
        "Please try rephrasing your prompt to be more direct."
    )
    logger.error(f"Model response did not contain an image part for {context}.")
    raise NoImageReturned(message)
