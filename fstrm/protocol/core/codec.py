from __future__ import annotations

import logging
from typing import Iterator, Optional

from .defs import Protocol, default_protocol, load_protocol
from .frames import ContentArg, Frame, FrameType
from .result import DecodeResult
from ..errors import (
    DecodeError,
    FrameNotReadyError,
    InvalidContentLengthError,
    InvalidContentTypeError,
    ProtocolError,
    UnexpectedFrameError,
)
from fstrm.config import CodecConfig

FRAME_LENGTH_SIZE = 4
CONTROL_TYPE_SIZE = 4
CONTENT_TYPE_SIZE = 4
CONTENT_LENGTH_SIZE = 4
CONTENT_FIELD_HEADER_SIZE = CONTENT_TYPE_SIZE + CONTENT_LENGTH_SIZE


class FstrmCodec:
    """
    Incremental Frame Streams decoder plus stateless encoder.

    Data frame:     [payload length][payload]
    Control frame:  [0][control length][control type]
                    {[content type][content length][content value]}*

    Bytes are appended as they arrive. is_frame_complete() reads the length
    markers once and keeps them in data_frame_length / control_frame_length,
    so probing again without new bytes never consumes anything twice.
    """

    def __init__(
        self,
        data: bytes = b"",
        *,
        proto: Optional[Protocol] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.proto = proto or default_protocol()
        self.buffer = bytearray(data)
        self.data_frame_length: Optional[int] = None
        self.control_frame_length: Optional[int] = None
        self._log = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: CodecConfig, *, logger: Optional[logging.Logger] = None) -> "FstrmCodec":
        if config.protocol_dir is None and config.byte_order is None:
            proto = default_protocol()
        else:
            proto = load_protocol(config.protocol_dir, byte_order=config.byte_order)
        return cls(proto=proto, logger=logger)

    # ---------------- State ----------------
    def reset(self) -> None:
        """Forget the in-flight frame lengths; buffered bytes are kept."""
        self.data_frame_length = None
        self.control_frame_length = None

    @property
    def buffered_byte_count(self) -> int:
        return len(self.buffer)

    def pending_byte_count(self) -> int:
        """
        Bytes still needed before the current frame could complete.
        Best effort: unread length markers are counted as one marker only.
        """
        buffered = len(self.buffer)
        if self.data_frame_length:
            return max(self.data_frame_length - buffered, 0)
        if self.control_frame_length is not None:
            return max(self.control_frame_length - buffered, 0)
        return max(FRAME_LENGTH_SIZE - buffered, 0)

    # ---------------- Decode ----------------
    def append(self, data: bytes) -> None:
        self.buffer.extend(data)
        self._log.debug("CODEC_APPEND len=%d buffer_len=%d", len(data), len(self.buffer))

    def is_frame_complete(self) -> bool:
        if self.data_frame_length is None:
            if len(self.buffer) < FRAME_LENGTH_SIZE:
                return False
            self.data_frame_length = self._take_u32()
            self._log.debug(
                "FRAME_LENGTH len=%d control=%s",
                self.data_frame_length,
                self.data_frame_length == 0,
            )

        if self.data_frame_length == 0:
            if self.control_frame_length is None:
                if len(self.buffer) < FRAME_LENGTH_SIZE:
                    return False
                self.control_frame_length = self._take_u32()
                self._log.debug("CONTROL_FRAME_LENGTH len=%d", self.control_frame_length)
            return len(self.buffer) >= self.control_frame_length

        return len(self.buffer) >= self.data_frame_length

    def append_and_process(self, data: bytes) -> bool:
        self.append(data)
        return self.is_frame_complete()

    def decode(self) -> Frame:
        """
        Remove the completed frame from the buffer and return it.

        Only valid after is_frame_complete() returned True. A malformed control
        frame is still consumed before the ProtocolError is raised, so the next
        frame can be read from the remaining bytes.
        """
        if not self._frame_ready():
            raise FrameNotReadyError(
                f"Frame incomplete: {self.pending_byte_count()} more bytes needed"
            )

        is_control = self.data_frame_length == 0
        size = self.control_frame_length if is_control else self.data_frame_length
        body = bytes(self.buffer[:size])
        del self.buffer[:size]

        self.reset()

        if not is_control:
            self._log.debug("DECODED_DATA_FRAME len=%d remaining=%d", len(body), len(self.buffer))
            return Frame(FrameType.DATA, payload=body)

        frame = self._decode_control(body)
        self._log.debug(
            "DECODED_CONTROL_FRAME type=%s content_types=%d remaining=%d",
            frame.type_name,
            len(frame.content_types),
            len(self.buffer),
        )
        return frame

    def try_decode(self) -> DecodeResult:
        """Probe and decode in one step, reporting malformed input as a result."""
        if not self.is_frame_complete():
            return DecodeResult.incomplete()
        try:
            return DecodeResult.of(self.decode())
        except ProtocolError as e:
            self._log.warning("CONTROL_FRAME_DROPPED reason=%s", e)
            return DecodeResult.failed(e)

    def frames(self) -> Iterator[Frame]:
        """Yield every frame that is complete in the current buffer."""
        while self.is_frame_complete():
            yield self.decode()

    def flush(self) -> Optional[Frame]:
        """
        Resolve the in-flight frame at end of input.

        A lone zero length marker with nothing after it is an empty data frame
        (that is how encode() writes one). Returns None when no frame is in
        flight; raises FrameNotReadyError when input stopped mid-frame.
        """
        if self.is_frame_complete():
            return self.decode()
        if self.data_frame_length == 0 and self.control_frame_length is None and not self.buffer:
            self.reset()
            return Frame(FrameType.DATA, payload=b"")
        if self.data_frame_length is None and not self.buffer:
            return None
        raise FrameNotReadyError(f"Truncated frame: {self.pending_byte_count()} more bytes needed")

    # ---------------- Encode ----------------
    def encode(self, frame: Frame) -> bytes:
        if frame.frame_type is FrameType.DATA:
            return self.proto.build_u32(len(frame.payload)) + frame.payload

        body = bytearray(self.proto.build_u32(self.proto.control_code(frame.frame_type)))
        for value in frame.content_types:
            body += self.proto.build_u32(self.proto.content_type_field)
            body += self.proto.build_u32(len(value))
            body += value

        return self.proto.build_u32(0) + self.proto.build_u32(len(body)) + bytes(body)

    def encode_ready(self, content: ContentArg = ()) -> bytes:
        return self.encode(Frame.control(FrameType.CONTROL_READY, content))

    def encode_accept(self, content: ContentArg = ()) -> bytes:
        return self.encode(Frame.control(FrameType.CONTROL_ACCEPT, content))

    def encode_start(self, content: ContentArg = ()) -> bytes:
        return self.encode(Frame.control(FrameType.CONTROL_START, content))

    def encode_stop(self, content: ContentArg = ()) -> bytes:
        return self.encode(Frame.control(FrameType.CONTROL_STOP, content))

    def encode_finish(self, content: ContentArg = ()) -> bytes:
        return self.encode(Frame.control(FrameType.CONTROL_FINISH, content))

    # ---------------- Handshake checks ----------------
    def expect_ready(self, data: bytes) -> bool:
        return self._expect_control(data, FrameType.CONTROL_READY)

    def expect_accept(self, data: bytes) -> bool:
        return self._expect_control(data, FrameType.CONTROL_ACCEPT)

    def expect_start(self, data: bytes) -> bool:
        return self._expect_control(data, FrameType.CONTROL_START)

    def expect_data(self, data: bytes) -> Optional[bytes]:
        """Payload of the next data frame, or None until it is complete."""
        if not self.append_and_process(data):
            return None

        frame = self.decode()
        if frame.frame_type is not FrameType.DATA:
            raise UnexpectedFrameError(FrameType.DATA, frame.frame_type)
        return frame.payload

    # ---------------- Helpers ----------------
    def _expect_control(self, data: bytes, expected: FrameType) -> bool:
        if not self.append_and_process(data):
            return False

        frame = self.decode()
        if frame.frame_type is not expected:
            raise UnexpectedFrameError(expected, frame.frame_type)
        return True

    def _frame_ready(self) -> bool:
        if self.data_frame_length is None:
            return False
        if self.data_frame_length == 0:
            return self.control_frame_length is not None and len(self.buffer) >= self.control_frame_length
        return len(self.buffer) >= self.data_frame_length

    def _take_u32(self) -> int:
        value = self.proto.parse_u32(self.buffer)
        del self.buffer[:FRAME_LENGTH_SIZE]
        return value

    def _decode_control(self, body: bytes) -> Frame:
        """The returned payload is the whole field region after the type word, not only the unparsed tail."""
        if len(body) < CONTROL_TYPE_SIZE:
            raise DecodeError(f"control frame too short: {len(body)} bytes")

        frame_type = self.proto.control_type(self.proto.parse_u32(body))
        fields = body[CONTROL_TYPE_SIZE:]

        content_types = []
        pos = 0
        # A field needs more than its 8 header bytes to be parsed
        while len(fields) - pos > CONTENT_FIELD_HEADER_SIZE:
            content_type = self.proto.parse_u32(fields, pos)
            content_length = self.proto.parse_u32(fields, pos + CONTENT_TYPE_SIZE)
            pos += CONTENT_FIELD_HEADER_SIZE

            if content_type != self.proto.content_type_field:
                raise InvalidContentTypeError(content_type)
            if content_length > len(fields) - pos:
                raise InvalidContentLengthError(content_length, len(fields) - pos)

            content_types.append(fields[pos: pos + content_length])
            pos += content_length

        return Frame(frame_type, payload=fields, content_types=tuple(content_types))
