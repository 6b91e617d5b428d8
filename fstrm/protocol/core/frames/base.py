from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple, Union


class FrameType(Enum):
    DATA = "DATA"
    CONTROL_ACCEPT = "ACCEPT"
    CONTROL_START = "START"
    CONTROL_STOP = "STOP"
    CONTROL_READY = "READY"
    CONTROL_FINISH = "FINISH"

    @property
    def is_data(self) -> bool:
        return self is FrameType.DATA

    @property
    def is_control(self) -> bool:
        return self is not FrameType.DATA

    @classmethod
    def from_control_name(cls, name: str) -> "FrameType":
        """Map a frames.yml key (ACCEPT, READY, ...) to its control type."""
        for member in cls:
            if member.is_control and member.value == str(name).upper():
                return member
        raise ValueError(f"Unknown control frame name '{name}'")


ContentArg = Union[bytes, bytearray, str, Iterable[Union[bytes, bytearray, str]]]


def normalize_content_types(content: ContentArg) -> Tuple[bytes, ...]:
    """
    Accept a single content-type value or an iterable of them.
    str values are encoded as ASCII ("protobuf:dnstap.Dnstap").
    Empty values are dropped: a field without a value is never read back.
    """
    if isinstance(content, (bytes, bytearray, str)):
        content = (content,)

    out = []
    for value in content:
        if isinstance(value, str):
            value = value.encode("ascii")
        if value:
            out.append(bytes(value))
    return tuple(out)


@dataclass(eq=False, frozen=True)
class Frame:
    """
    One Frame Streams frame.

    content:       concatenation of all control content-type values
    content_types: the individual non-empty values, one per content-type field
    payload:       data frames: the application payload
                   control frames: the control body after the type word

    Data frames carry no content. Equality and hashing only look at payload.
    """

    frame_type: FrameType
    content: bytes = b""
    payload: bytes = b""
    content_types: Tuple[bytes, ...] = ()

    def __post_init__(self) -> None:
        content = bytes(self.content)
        content_types = normalize_content_types(self.content_types)

        if self.frame_type.is_data and (content or content_types):
            raise ValueError("data frames carry no control content")

        if content_types and not content:
            content = b"".join(content_types)
        elif content and not content_types:
            content_types = (content,)
        elif content != b"".join(content_types):
            raise ValueError("content does not match the concatenated content_types")

        object.__setattr__(self, "content", content)
        object.__setattr__(self, "payload", bytes(self.payload))
        object.__setattr__(self, "content_types", content_types)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Frame):
            return NotImplemented
        return self.payload == other.payload

    def __hash__(self) -> int:
        return hash(self.payload)

    @classmethod
    def data(cls, payload: bytes) -> "Frame":
        return cls(FrameType.DATA, payload=payload)

    @classmethod
    def control(cls, frame_type: FrameType, content: ContentArg = ()) -> "Frame":
        if not frame_type.is_control:
            raise ValueError(f"{frame_type} is not a control frame type")
        return cls(frame_type, content_types=normalize_content_types(content))

    @property
    def is_control(self) -> bool:
        return self.frame_type.is_control

    @property
    def type_name(self) -> str:
        return self.frame_type.value

    def __repr__(self) -> str:
        if self.is_control:
            return f"Frame({self.type_name}, content_types={list(self.content_types)!r})"
        return f"Frame(DATA, payload={self.payload.hex(' ') if self.payload else '(empty)'})"
