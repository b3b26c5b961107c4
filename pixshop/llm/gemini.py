from __future__ import annotations

import base64
import logging
from typing import Any, List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import load_settings
from ..encoding import decode_payload
from ..errors import TransportFailure
from ..schema import ImagePart, ModelResponse, ResponsePart

logger = logging.getLogger(__name__)


class GeminiGateway:
    """One-shot access to the Gemini image model.

    The caller owns the gateway and passes it into every operation. The API key
    is resolved when the first request is made, not at construction time.
    """

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None) -> None:
        settings = load_settings()
        self._api_key = api_key
        self.model = model or settings.model
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            api_key = self._api_key or load_settings().api_key
            if not api_key:
                raise TransportFailure("GEMINI_API_KEY is not set. Set it in the environment or a .env file.")
            self._client = genai.Client(api_key=api_key)
        return self._client

    def generate(self, images: Sequence[ImagePart], instruction: str) -> ModelResponse:
        """Send the images (in order) followed by the instruction text and return the reply."""
        parts = [
            types.Part(inline_data=types.Blob(mime_type=im.mime_type, data=decode_payload(im.data)))
            for im in images
        ]
        parts.append(types.Part(text=instruction))

        logger.info(f"Sending {len(images)} image part(s) and prompt to {self.model}")
        try:
            resp = self.client.models.generate_content(
                model=self.model,
                contents=[types.Content(role="user", parts=parts)],
            )
        except genai_errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            raise TransportFailure(f"Gemini API request failed: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Network error talking to Gemini: {e}")
            raise TransportFailure(f"Network error while contacting the model: {e}") from e
        logger.debug(f"Received response from model: {resp}")
        return to_model_response(resp)


def to_model_response(resp: Any) -> ModelResponse:
    """Flatten an SDK response into a ModelResponse; only the first candidate counts."""
    out = ModelResponse()

    feedback = getattr(resp, "prompt_feedback", None)
    if feedback is not None:
        out.block_reason = _reason_name(getattr(feedback, "block_reason", None))
        out.block_reason_message = getattr(feedback, "block_reason_message", None)

    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return out
    first = candidates[0]
    out.finish_reason = _reason_name(getattr(first, "finish_reason", None))

    content = getattr(first, "content", None)
    raw_parts = (getattr(content, "parts", None) or []) if content is not None else []
    texts: List[str] = []
    for part in raw_parts:
        inline = getattr(part, "inline_data", None)
        image: Optional[ImagePart] = None
        if inline is not None and getattr(inline, "data", None):
            data = inline.data
            if isinstance(data, (bytes, bytearray)):
                data = base64.b64encode(data).decode("ascii")
            image = ImagePart(mime_type=getattr(inline, "mime_type", None) or "image/png", data=data)
        text = getattr(part, "text", None)
        if text:
            texts.append(text)
        out.parts.append(ResponsePart(inline_data=image, text=text))
    if texts:
        out.text = "".join(texts)
    return out


def _reason_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(getattr(value, "value", value))
