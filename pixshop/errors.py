from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    BLOCKED_BY_POLICY = "blocked_by_policy"
    ABNORMAL_FINISH = "abnormal_finish"
    NO_IMAGE_RETURNED = "no_image_returned"
    TRANSPORT_FAILURE = "transport_failure"


class PixshopError(Exception):
    """Base error for every failed operation; ``str(err)`` is shown to the user."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BlockedByPolicy(PixshopError):
    # the whole request was rejected; only a different prompt helps
    kind = ErrorKind.BLOCKED_BY_POLICY


class AbnormalFinish(PixshopError):
    kind = ErrorKind.ABNORMAL_FINISH


class NoImageReturned(PixshopError):
    kind = ErrorKind.NO_IMAGE_RETURNED


class TransportFailure(PixshopError):
    # unreadable input, malformed encoding, missing key or network error
    kind = ErrorKind.TRANSPORT_FAILURE
