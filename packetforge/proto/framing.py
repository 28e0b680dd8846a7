"""Packet framing for protocol messages.

A packet starts with a 16-bit header holding the message id in its upper 14
bits and the width of the length field (0 to 3 bytes) in its lower 2 bits,
followed by the big-endian payload length and the payload itself.
"""

from .buffer import DataReader, DataWriter
from .serialization import SerializationError

MAX_MESSAGE_ID = 0x3FFF
MAX_PAYLOAD_LENGTH = 0xFFFFFF


class FrameError(RuntimeError):
    """Base exception for framing errors."""


class EncodeError(FrameError):
    """Raised when packet encoding fails."""


class DecodeError(FrameError):
    """Raised when packet decoding fails."""


def length_type(length: int) -> int:
    """Return the number of bytes needed to store a payload length."""
    if length > MAX_PAYLOAD_LENGTH:
        raise EncodeError(f"payload of {length} bytes exceeds {MAX_PAYLOAD_LENGTH}")
    if length > 0xFFFF:
        return 3
    if length > 0xFF:
        return 2
    if length > 0:
        return 1
    return 0


def write_packet(output: DataWriter, message_id: int, payload: bytes) -> None:
    """Write a packet header followed by the payload."""
    if not 0 <= message_id <= MAX_MESSAGE_ID:
        raise EncodeError(f"message id {message_id} does not fit in a packet header")

    size = length_type(len(payload))
    output.write_short((message_id << 2) | size)
    output.write_bytes(len(payload).to_bytes(size, byteorder="big"))
    output.write_bytes(payload)


def read_packet_header(input: DataReader) -> tuple[int, int]:
    """Read a packet header, returning ``(message_id, payload_length)``."""
    try:
        header = input.read_unsigned_short()
        length = int.from_bytes(input.read_bytes(header & 0b11), byteorder="big")
    except SerializationError as err:
        raise DecodeError(str(err)) from err
    return header >> 2, length


def read_packet(input: DataReader) -> tuple[int, bytes]:
    """Read a complete packet, returning ``(message_id, payload)``."""
    message_id, length = read_packet_header(input)
    try:
        payload = input.read_bytes(length)
    except SerializationError as err:
        raise DecodeError(str(err)) from err
    return message_id, payload


class Framer:
    """Buffers incoming bytes and splits them into packets."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def append_buffer(self, data: bytes) -> None:
        """Append data to the receive buffer."""
        self._buffer.extend(data)

    def clear_buffer(self) -> None:
        """Clear the receive buffer."""
        self._buffer.clear()

    def encode_packet(self, message_id: int, payload: bytes) -> bytes:
        """Frame a payload as a complete packet."""
        output = DataWriter()
        write_packet(output, message_id, payload)
        return output.getvalue()

    def decode_packet(self) -> tuple[int, bytes] | None:
        """Return the next complete packet from the buffer, if any."""
        if len(self._buffer) < 2:
            return None

        size = self._buffer[1] & 0b11
        if len(self._buffer) < 2 + size:
            return None

        length = int.from_bytes(self._buffer[2 : 2 + size], byteorder="big")
        end = 2 + size + length
        if len(self._buffer) < end:
            return None

        message_id, payload = read_packet(DataReader(self._buffer[:end]))
        del self._buffer[:end]
        return message_id, payload
