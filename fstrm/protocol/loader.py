# fstrm/protocol/loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from fstrm.utils.hashing import sha256_file


def default_protocol_dir() -> Path:
    # Definitions shipped with the package (fstrm reference values)
    return Path(__file__).resolve().parent / "definitions"


class ProtocolLoader:
    """Load the Frame Streams definition YAML files + keep per-file SHA256 hashes."""

    REQUIRED_FILES = (
        "constants.yml",
        "frames.yml",
    )

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = Path(config_dir) if config_dir is not None else default_protocol_dir()

        # Full documents
        self.constants_doc: Dict[str, Any] = {}
        self.frames_doc: Dict[str, Any] = {}

        # Extracted structures used by Protocol(...)
        self.constants: Dict[str, Any] = {}
        self.frames: Dict[str, Any] = {}

        # File fingerprints (filename -> sha256 hex)
        self.file_hashes: Dict[str, str] = {}

    def load_all(self) -> None:
        self.file_hashes.clear()
        for fn in self.REQUIRED_FILES:
            path = self.config_dir / fn
            if not path.exists():
                raise FileNotFoundError(f"Protocol file not found: {path}")
            self.file_hashes[fn] = sha256_file(path)

        self.constants_doc = self._load_yaml("constants.yml")
        self.frames_doc = self._load_yaml("frames.yml")

        self.constants = self.constants_doc
        self.frames = self.frames_doc.get("frames", {}) or {}

        if not isinstance(self.constants, dict):
            raise ValueError("constants.yml must be a mapping")
        if not isinstance(self.frames, dict) or not self.frames:
            raise ValueError("frames.yml must contain a non-empty 'frames' mapping")

        for name, frame_def in self.frames.items():
            if not isinstance(frame_def, dict) or "code" not in frame_def:
                raise ValueError(f"frames.yml entry '{name}' must define a 'code'")

    def protocol_version(self) -> int:
        """
        Version of the definition files.
        Defaults to 0 if not specified.
        """
        v = self.constants.get("protocol_version", 0)
        try:
            return int(v)
        except Exception:
            raise ValueError(f"Invalid protocol version in constants.yml: {v!r}")

    def _load_yaml(self, filename: str) -> Dict[str, Any]:
        path = self.config_dir / filename
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
