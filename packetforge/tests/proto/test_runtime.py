"""Tests for id dispatch and message receiving."""

from dataclasses import dataclass
from typing import ClassVar

import pytest

from packetforge.proto.buffer import DataReader, DataWriter
from packetforge.proto.framing import write_packet
from packetforge.proto.runtime import (
    MessageReceiver,
    MessageRegistry,
    ProtocolError,
    RegistryError,
    TypeRegistry,
    UnknownMessageError,
    UnknownTypeError,
)
from packetforge.proto.serialization import NetworkMessage, NetworkType, SerializationError


@dataclass
class Point(NetworkType):
    ID: ClassVar[int] = 2
    x: int = 0

    def reset(self):
        self.x = 0

    def serialize(self, writer):
        writer.write_short(self.x)

    def deserialize(self, reader):
        self.x = reader.read_short()


@dataclass
class Echo(NetworkMessage):
    ID: ClassVar[int] = 9
    value: int = 0

    def get_message_id(self):
        return Echo.ID

    def reset(self):
        self.value = 0

    def pack(self, output):
        payload = DataWriter()
        self.serialize(payload)
        write_packet(output, self.get_message_id(), payload.getvalue())

    def unpack(self, input):
        self.deserialize(input)

    def serialize(self, writer):
        writer.write_int(self.value)

    def deserialize(self, reader):
        self.value = reader.read_int()


@pytest.fixture
def messages():
    registry = MessageRegistry()
    registry.register(Echo.ID, Echo)
    return registry


def describe_type_registry():
    def creates_fresh_instances(expect):
        types = TypeRegistry()
        types.register(Point.ID, Point)
        first = types.get_instance(2)
        first.x = 5
        expect(types.get_instance(2)) == Point()
        expect(2 in types) == True
        expect(len(types)) == 1

    def rejects_unknown_ids(expect):
        with pytest.raises(UnknownTypeError) as exinfo:
            TypeRegistry().get_instance(7)

        expect(str(exinfo.value)) == "Type with id 7 is unknown"

    def rejects_duplicate_registration(expect):
        types = TypeRegistry()
        types.register(2, Point)
        with pytest.raises(RegistryError):
            types.register(2, Point)


def describe_message_registry():
    def creates_messages_by_id(expect, messages):
        expect(messages.create(9)) == Echo()
        expect(messages.ids()) == [9]

    def parses_payloads(expect, messages):
        message = messages.parse(DataReader(b"\x00\x00\x00\x2a"), 9)
        expect(message) == Echo(value=42)

    def rejects_unknown_ids(expect, messages):
        with pytest.raises(UnknownMessageError) as exinfo:
            messages.create(10)

        expect(str(exinfo.value)) == "Message with id 10 is unknown"
        expect(isinstance(exinfo.value, ProtocolError)) == True


def describe_message_receiver():
    def encodes_framed_packets(expect, messages):
        receiver = MessageReceiver(messages)
        expect(receiver.encode(Echo(value=5))) == b"\x00\x25\x04\x00\x00\x00\x05"

    def decodes_buffered_packets(expect, messages):
        receiver = MessageReceiver(messages)
        data = receiver.encode(Echo(value=1)) + receiver.encode(Echo(value=2))

        expect(receiver.poll()) == None
        receiver.append_buffer(data[:4])
        expect(receiver.poll()) == None
        receiver.append_buffer(data[4:])
        expect(list(receiver.messages())) == [Echo(value=1), Echo(value=2)]
        expect(receiver.poll()) == None

    def rejects_unread_payload_bytes(expect, messages):
        receiver = MessageReceiver(messages)
        with pytest.raises(ProtocolError) as exinfo:
            receiver.parse(9, b"\x00\x00\x00\x05\x00")

        expect(str(exinfo.value)).includes("1 unread byte(s)")

    def fails_on_short_payloads(expect, messages):
        with pytest.raises(SerializationError):
            MessageReceiver(messages).parse(9, b"\x00\x01")

    def fails_on_unknown_message_ids(expect, messages):
        receiver = MessageReceiver(messages)
        receiver.append_buffer(b"\x00\x04")
        with pytest.raises(UnknownMessageError):
            receiver.poll()


def describe_base_classes():
    def require_type_id(expect):
        @dataclass
        class Anonymous(NetworkType):
            pass

        with pytest.raises(SerializationError):
            Anonymous().get_type_id()
        expect(Point().get_type_id()) == 2

    def leave_codecs_to_generated_code(expect):
        with pytest.raises(NotImplementedError):
            NetworkType().serialize(DataWriter())
        with pytest.raises(NotImplementedError):
            NetworkMessage().pack(DataWriter())
