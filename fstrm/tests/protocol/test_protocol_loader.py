from pathlib import Path

import pytest

from fstrm.config import CodecConfig
from fstrm.protocol.core.codec import FstrmCodec
from fstrm.protocol.core.defs import Protocol, default_protocol, load_protocol
from fstrm.protocol.core.frames import Frame, FrameType
from fstrm.protocol.errors import InvalidControlTypeError
from fstrm.protocol.loader import ProtocolLoader, default_protocol_dir

FRAMES_YML = """\
frames:
  ACCEPT: {code: 11}
  START: {code: 12}
  STOP: {code: 13}
  READY: {code: 14}
  FINISH: {code: 15}
"""


def _write(dirp: Path, name: str, text: str) -> None:
    (dirp / name).write_text(text, encoding="utf-8")


def _write_valid_protocol(dirp: Path, *, constants: str = "protocol_version: 2\n") -> None:
    _write(dirp, "constants.yml", constants)
    _write(dirp, "frames.yml", FRAMES_YML)


def test_packaged_definitions_load():
    loader = ProtocolLoader()
    loader.load_all()

    assert loader.config_dir == default_protocol_dir()
    assert loader.protocol_version() == 1
    assert set(loader.file_hashes) == set(loader.REQUIRED_FILES)


def test_default_protocol_uses_fstrm_values():
    proto = default_protocol()

    assert proto.byte_order == "big"
    assert proto.content_type_field == 0x01
    assert proto.control_code(FrameType.CONTROL_ACCEPT) == 0x01
    assert proto.control_code(FrameType.CONTROL_READY) == 0x04
    assert proto.control_type(0x05) is FrameType.CONTROL_FINISH
    assert default_protocol() is proto


def test_load_all_requires_all_files(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    (tmp_path / "frames.yml").unlink()

    with pytest.raises(FileNotFoundError):
        ProtocolLoader(tmp_path).load_all()


def test_load_all_populates_structures_and_hashes(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)

    loader = ProtocolLoader(tmp_path)
    loader.load_all()

    assert loader.protocol_version() == 2
    assert loader.frames["READY"] == {"code": 14}
    for h in loader.file_hashes.values():
        assert isinstance(h, str) and len(h) == 64


def test_load_all_rejects_missing_frames_key(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    _write(tmp_path, "frames.yml", "invalid: true\n")

    with pytest.raises(ValueError):
        ProtocolLoader(tmp_path).load_all()


def test_load_all_rejects_frame_without_code(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    _write(tmp_path, "frames.yml", "frames:\n  READY: {}\n")

    with pytest.raises(ValueError):
        ProtocolLoader(tmp_path).load_all()


def test_invalid_protocol_version(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path, constants="protocol_version: abc\n")

    loader = ProtocolLoader(tmp_path)
    loader.load_all()
    with pytest.raises(ValueError):
        loader.protocol_version()


def test_custom_control_codes_used_on_the_wire(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    codec = FstrmCodec.from_config(CodecConfig(protocol_dir=str(tmp_path)))

    raw = codec.encode_ready()
    assert raw[8:12] == (14).to_bytes(4, "big")

    codec.append(raw)
    assert codec.is_frame_complete()
    assert codec.decode().frame_type is FrameType.CONTROL_READY


def test_peers_with_different_codes_do_not_agree(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    custom = FstrmCodec(proto=load_protocol(tmp_path))

    codec = FstrmCodec()
    codec.append(custom.encode_ready())
    assert codec.is_frame_complete()
    with pytest.raises(InvalidControlTypeError):
        codec.decode()


def test_byte_order_from_constants(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path, constants="byte_order: little\n")
    proto = load_protocol(tmp_path)

    assert proto.byte_order == "little"
    assert proto.build_u32(1) == b"\x01\x00\x00\x00"
    assert proto.parse_u32(b"\x00\x01\x00\x00\x00", 1) == 1


def test_byte_order_override_wins(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path, constants="byte_order: little\n")
    codec = FstrmCodec.from_config(CodecConfig(protocol_dir=str(tmp_path), byte_order="big"))

    assert codec.proto.byte_order == "big"
    assert codec.encode(Frame.data(b"a")) == b"\x00\x00\x00\x01a"


def test_invalid_byte_order_rejected():
    with pytest.raises(ValueError):
        load_protocol(byte_order="middle")


def test_duplicate_control_codes_rejected(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    _write(tmp_path, "frames.yml", FRAMES_YML.replace("code: 15", "code: 11"))

    loader = ProtocolLoader(tmp_path)
    loader.load_all()
    with pytest.raises(ValueError):
        Protocol(loader)


def test_missing_control_code_rejected(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    _write(tmp_path, "frames.yml", "frames:\n  READY: {code: 4}\n")

    loader = ProtocolLoader(tmp_path)
    loader.load_all()
    with pytest.raises(ValueError):
        Protocol(loader)


def test_unknown_frame_name_rejected(tmp_path: Path) -> None:
    _write_valid_protocol(tmp_path)
    _write(tmp_path, "frames.yml", FRAMES_YML + "  HELLO: {code: 99}\n")

    loader = ProtocolLoader(tmp_path)
    loader.load_all()
    with pytest.raises(ValueError):
        Protocol(loader)


def test_build_u32_rejects_out_of_range():
    proto = default_protocol()
    with pytest.raises(ValueError):
        proto.build_u32(1 << 32)
    with pytest.raises(ValueError):
        proto.parse_u32(b"\x00\x01")
