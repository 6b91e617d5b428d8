# fstrm/protocol/errors.py
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fstrm.protocol.core.frames import FrameType


class ProtocolError(Exception):
    """Base for protocol-level failures (framing/control field semantics)."""

class DecodeError(ProtocolError):
    pass

class InvalidControlTypeError(DecodeError):
    def __init__(self, code: int):
        super().__init__(f"invalid control frame type: {code}")
        self.code = code

class InvalidContentTypeError(DecodeError):
    def __init__(self, content_type: int):
        super().__init__(f"invalid control content type: {content_type}")
        self.content_type = content_type

class InvalidContentLengthError(DecodeError):
    def __init__(self, declared: int, available: int):
        super().__init__(f"invalid content length: {declared} > {available} remaining")
        self.declared = declared
        self.available = available

class UnexpectedFrameError(ProtocolError):
    def __init__(self, expected: "FrameType", actual: "FrameType"):
        kind = "data" if expected.is_data else "control"
        super().__init__(f"unexpected {kind} frame received: {actual.value}")
        self.expected = expected
        self.actual = actual


class FrameNotReadyError(RuntimeError):
    """decode() was called before the in-flight frame was complete."""
