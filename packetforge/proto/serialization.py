"""Base classes for generated network types and messages."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .buffer import DataReader, DataWriter


class SerializationError(RuntimeError):
    """Raised when serialization or deserialization fails."""


class NetworkType:
    """Base class for generated custom types.

    Subclasses are @dataclass decorated. Types that can appear in polymorphic
    fields define ``ID``, the type id written in front of their payload.

    Example:
        @dataclass
        class EntityLook(NetworkType):
            ID: ClassVar[int] = 55
            bones_id: int = 0
    """

    ID: ClassVar[int | None] = None

    def get_type_id(self) -> int:
        type_id = type(self).ID
        if type_id is None:
            raise SerializationError(f"{type(self).__name__} has no type id")
        return type_id

    def reset(self) -> None:
        """Restore every field to its default. Generated code overrides this."""
        raise NotImplementedError("reset() must be implemented by generated code")

    def serialize(self, writer: DataWriter) -> None:
        """Write fields to the writer. Generated code overrides this."""
        raise NotImplementedError("serialize() must be implemented by generated code")

    def deserialize(self, reader: DataReader) -> None:
        """Read fields from the reader. Generated code overrides this."""
        raise NotImplementedError("deserialize() must be implemented by generated code")


class NetworkMessage:
    """Base class for generated messages.

    ``pack`` frames the serialized payload with the message id, ``unpack``
    reads the payload of a packet whose header was already consumed.
    """

    ID: ClassVar[int]

    def get_message_id(self) -> int:
        raise NotImplementedError("get_message_id() must be implemented by generated code")

    def reset(self) -> None:
        raise NotImplementedError("reset() must be implemented by generated code")

    def pack(self, output: DataWriter) -> None:
        raise NotImplementedError("pack() must be implemented by generated code")

    def unpack(self, input: DataReader) -> None:
        raise NotImplementedError("unpack() must be implemented by generated code")

    def serialize(self, writer: DataWriter) -> None:
        raise NotImplementedError("serialize() must be implemented by generated code")

    def deserialize(self, reader: DataReader) -> None:
        raise NotImplementedError("deserialize() must be implemented by generated code")
