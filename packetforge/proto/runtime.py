"""Runtime support for dispatching protocol messages."""

from collections.abc import Callable, Iterator
from typing import Generic, TypeVar

from .buffer import DataReader, DataWriter
from .framing import Framer
from .serialization import NetworkMessage, NetworkType


class ProtocolError(RuntimeError):
    """Raised when protocol operations fail."""


class RegistryError(ProtocolError):
    """Raised when two factories are registered under the same id."""


class UnknownMessageError(ProtocolError):
    """Raised when a message id has no registered factory."""


class UnknownTypeError(ProtocolError):
    """Raised when a type id has no registered factory."""


T = TypeVar("T")


class FactoryRegistry(Generic[T]):
    """Maps numeric ids to zero-argument factories."""

    kind = "entry"

    def __init__(self) -> None:
        self._factories: dict[int, Callable[[], T]] = {}

    def __contains__(self, id_: object) -> bool:
        return id_ in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def ids(self) -> list[int]:
        return list(self._factories)

    def register(self, id_: int, factory: Callable[[], T]) -> None:
        if id_ in self._factories:
            raise RegistryError(f"{self.kind} id {id_} is already registered")
        self._factories[id_] = factory

    def _unknown(self, id_: int) -> ProtocolError:
        return ProtocolError(f"{self.kind} with id {id_} is unknown")

    def _create(self, id_: int) -> T:
        factory = self._factories.get(id_)
        if factory is None:
            raise self._unknown(id_)
        return factory()


class TypeRegistry(FactoryRegistry[NetworkType]):
    """Resolves type ids read from the wire to fresh type instances."""

    kind = "type"

    def _unknown(self, id_: int) -> ProtocolError:
        return UnknownTypeError(f"Type with id {id_} is unknown")

    def get_instance(self, type_id: int) -> NetworkType:
        return self._create(type_id)


class MessageRegistry(FactoryRegistry[NetworkMessage]):
    """Resolves message ids to fresh message instances."""

    kind = "message"

    def _unknown(self, id_: int) -> ProtocolError:
        return UnknownMessageError(f"Message with id {id_} is unknown")

    def create(self, message_id: int) -> NetworkMessage:
        return self._create(message_id)

    def parse(self, reader: DataReader, message_id: int) -> NetworkMessage:
        """Construct the message for ``message_id`` and fill it from the reader."""
        message = self._create(message_id)
        message.unpack(reader)
        return message


class MessageReceiver:
    """Encodes messages to packets and decodes buffered packets to messages.

    Example:
        receiver = MessageReceiver(MESSAGES, TYPES)
        receiver.append_buffer(data)
        for msg in receiver.messages():
            handle(msg)
    """

    def __init__(
        self,
        messages: MessageRegistry,
        types: TypeRegistry | None = None,
        framer: Framer | None = None,
    ) -> None:
        self._messages = messages
        self._types = types
        self._framer = framer if framer else Framer()

    def encode(self, message: NetworkMessage) -> bytes:
        """Pack a message into a framed packet."""
        output = DataWriter()
        message.pack(output)
        return output.getvalue()

    def parse(self, message_id: int, payload: bytes) -> NetworkMessage:
        """Decode a packet payload into the message registered for its id."""
        reader = DataReader(payload, types=self._types)
        message = self._messages.parse(reader, message_id)
        if reader.remaining:
            raise ProtocolError(
                f"{type(message).__name__} left {reader.remaining} unread byte(s)"
            )
        return message

    def append_buffer(self, data: bytes) -> None:
        self._framer.append_buffer(data)

    def poll(self) -> NetworkMessage | None:
        """Decode the next buffered packet, if a complete one is available."""
        packet = self._framer.decode_packet()
        if packet is None:
            return None
        message_id, payload = packet
        return self.parse(message_id, payload)

    def messages(self) -> Iterator[NetworkMessage]:
        """Iterate over every complete packet currently buffered."""
        while True:
            message = self.poll()
            if message is None:
                return
            yield message
