# protocol/core/__init__.py

from .defs import Protocol, default_protocol, load_protocol
from .frames import Frame, FrameType
from .result import DecodeResult, DecodeStatus
from .codec import FstrmCodec

__all__ = [
    "Protocol", "default_protocol", "load_protocol",
    "Frame", "FrameType",
    "DecodeResult", "DecodeStatus",
    "FstrmCodec",
]
