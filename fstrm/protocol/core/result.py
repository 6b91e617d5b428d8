from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .frames import Frame
from ..errors import ProtocolError


class DecodeStatus(str, Enum):
    INCOMPLETE = "incomplete"
    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of FstrmCodec.try_decode().

    Lets a reader loop tell "needs more bytes" from "malformed input"
    without catching exceptions.
    """

    status: DecodeStatus
    frame: Optional[Frame] = None
    error: Optional[ProtocolError] = None

    @classmethod
    def incomplete(cls) -> "DecodeResult":
        return cls(DecodeStatus.INCOMPLETE)

    @classmethod
    def of(cls, frame: Frame) -> "DecodeResult":
        return cls(DecodeStatus.OK, frame=frame)

    @classmethod
    def failed(cls, error: ProtocolError) -> "DecodeResult":
        return cls(DecodeStatus.ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.status is DecodeStatus.OK

    @property
    def is_incomplete(self) -> bool:
        return self.status is DecodeStatus.INCOMPLETE

    @property
    def is_error(self) -> bool:
        return self.status is DecodeStatus.ERROR
