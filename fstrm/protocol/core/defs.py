from __future__ import annotations

import struct
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from .types import BYTE_ORDER_TO_STRUCT, U32_FORMAT
from .header import parse_u32, build_u32
from .frames import FrameType
from ..errors import InvalidControlTypeError
from ..loader import ProtocolLoader


class Protocol:
    """Runtime access to the Frame Streams wire constants."""

    def __init__(self, loader: ProtocolLoader, *, byte_order: Optional[str] = None):
        self.constants: Dict[str, Any] = loader.constants
        self.frames: Dict[str, Dict[str, Any]] = loader.frames
        self.file_hashes: Dict[str, str] = dict(loader.file_hashes)

        self.byte_order = str(byte_order or self.constants.get("byte_order", "big")).lower()
        if self.byte_order not in BYTE_ORDER_TO_STRUCT:
            raise ValueError(
                f"Invalid byte_order {self.byte_order!r}; expected one of {sorted(BYTE_ORDER_TO_STRUCT)}"
            )
        self.u32_struct = struct.Struct(BYTE_ORDER_TO_STRUCT[self.byte_order] + U32_FORMAT)

        try:
            self.content_type_field = int(self.constants.get("content_type_field", 0x01))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid content_type_field in constants.yml: {e}") from e

        # Fast lookup maps
        self.control_codes: Dict[FrameType, int] = {}
        self.control_types_by_code: Dict[int, FrameType] = {}
        for name, frame_def in self.frames.items():
            ftype = FrameType.from_control_name(name)
            code = int(frame_def["code"])
            if code in self.control_types_by_code:
                raise ValueError(
                    f"Duplicate control code={code} for '{name}' and '{self.control_types_by_code[code].value}'"
                )
            self.control_codes[ftype] = code
            self.control_types_by_code[code] = ftype

        missing = [t.value for t in FrameType if t.is_control and t not in self.control_codes]
        if missing:
            raise ValueError(f"frames.yml is missing control frame codes for: {', '.join(missing)}")

    def control_code(self, frame_type: FrameType) -> int:
        if frame_type not in self.control_codes:
            raise ValueError(f"{frame_type} has no control code")
        return self.control_codes[frame_type]

    def control_type(self, code: int) -> FrameType:
        ftype = self.control_types_by_code.get(int(code))
        if ftype is None:
            raise InvalidControlTypeError(code)
        return ftype

    # Delegated
    def parse_u32(self, raw: bytes, offset: int = 0) -> int:
        return parse_u32(self, raw, offset)

    def build_u32(self, value: int) -> bytes:
        return build_u32(self, value)


def load_protocol(protocol_dir: Optional[Path] = None, *, byte_order: Optional[str] = None) -> Protocol:
    loader = ProtocolLoader(protocol_dir)
    loader.load_all()
    return Protocol(loader, byte_order=byte_order)


@lru_cache(maxsize=None)
def default_protocol() -> Protocol:
    """Shared definition loaded from the packaged YAML files (read-only)."""
    return load_protocol()
