from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Literal, Optional, Union

from .errors import ErrorKind, PixshopError

# Anything the encoder can read: a path, raw bytes or a binary file object.
ImageSource = Any

BackgroundMode = Literal["transparent", "color"]


@dataclass(frozen=True)
class ImagePart:
    mime_type: str
    data: str  # base64 payload

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class Hotspot:
    x: int
    y: int


# ------------------------- Operation requests -------------------------

@dataclass
class EditRequest:
    image: ImageSource
    prompt: str
    hotspot: Hotspot
    kind: str = field(default="edit", init=False)


@dataclass
class FilterRequest:
    image: ImageSource
    prompt: str
    kind: str = field(default="filter", init=False)


@dataclass
class AdjustRequest:
    image: ImageSource
    prompt: str
    kind: str = field(default="adjustment", init=False)


@dataclass
class ExpandRequest:
    image: ImageSource
    prompt: str = ""
    mask: Optional[ImageSource] = None
    kind: str = field(default="expansion", init=False)


@dataclass
class CompositeRequest:
    background: ImageSource
    insert: ImageSource
    kind: str = field(default="composition", init=False)


@dataclass
class RemoveBackgroundRequest:
    image: ImageSource
    background: BackgroundMode = "transparent"
    color: Optional[str] = None
    kind: str = field(default="background removal", init=False)


OperationRequest = Union[
    EditRequest,
    FilterRequest,
    AdjustRequest,
    ExpandRequest,
    CompositeRequest,
    RemoveBackgroundRequest,
]


# ------------------------- Model response -------------------------

@dataclass
class ResponsePart:
    inline_data: Optional[ImagePart] = None
    text: Optional[str] = None


@dataclass
class ModelResponse:
    """What the interpreter needs from a model reply.

    Every field is optional; the SDK may omit any of them.
    """

    block_reason: Optional[str] = None
    block_reason_message: Optional[str] = None
    parts: List[ResponsePart] = field(default_factory=list)
    finish_reason: Optional[str] = None
    text: Optional[str] = None


# ------------------------- Outcome -------------------------

@dataclass(frozen=True)
class Outcome:
    value: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, data_url: str) -> "Outcome":
        return cls(value=data_url)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Outcome":
        return cls(error_kind=kind, message=message)

    @classmethod
    def capture(cls, fn: Callable[..., str], *args: Any, **kwargs: Any) -> "Outcome":
        """Run an operation and fold a raised PixshopError into a failure."""
        try:
            return cls.success(fn(*args, **kwargs))
        except PixshopError as e:
            return cls.failure(e.kind, e.message)
