# protocol/__init__.py

from .core import (
    Protocol, default_protocol, load_protocol,
    Frame, FrameType,
    DecodeResult, DecodeStatus,
    FstrmCodec,
)
from .errors import (
    ProtocolError, DecodeError,
    InvalidControlTypeError, InvalidContentTypeError, InvalidContentLengthError,
    UnexpectedFrameError, FrameNotReadyError,
)

__all__ = [
    "Protocol", "default_protocol", "load_protocol",
    "Frame", "FrameType",
    "DecodeResult", "DecodeStatus",
    "FstrmCodec",
    "ProtocolError", "DecodeError",
    "InvalidControlTypeError", "InvalidContentTypeError", "InvalidContentLengthError",
    "UnexpectedFrameError", "FrameNotReadyError",
]
