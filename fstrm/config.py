# fstrm/config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CodecConfig:
    protocol_dir: Optional[str] = None  # None = packaged definitions
    byte_order: Optional[str] = None    # overrides constants.yml when set
