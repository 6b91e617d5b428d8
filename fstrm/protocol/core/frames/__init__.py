# fstrm/protocol/core/frames/__init__.py

from .base import ContentArg, Frame, FrameType, normalize_content_types

__all__ = [
    "ContentArg",
    "Frame",
    "FrameType",
    "normalize_content_types",
]
