# fstrm/protocol/core/header.py
from __future__ import annotations

import struct


def parse_u32(proto, raw: bytes, offset: int = 0) -> int:
    if len(raw) - offset < proto.u32_struct.size:
        raise ValueError(f"Need {proto.u32_struct.size} bytes at offset {offset}, have {len(raw) - offset}")
    return proto.u32_struct.unpack_from(raw, offset)[0]

def build_u32(proto, value: int) -> bytes:
    try:
        return proto.u32_struct.pack(int(value))
    except struct.error as e:
        raise ValueError(f"Value {value} does not fit a 32-bit field") from e
