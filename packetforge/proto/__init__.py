"""Runtime support for packetforge generated code."""

from .buffer import DataReader as DataReader
from .buffer import DataWriter as DataWriter
from .framing import Framer as Framer
from .runtime import MessageReceiver as MessageReceiver
from .runtime import MessageRegistry as MessageRegistry
from .runtime import ProtocolError as ProtocolError
from .runtime import TypeRegistry as TypeRegistry
from .runtime import UnknownMessageError as UnknownMessageError
from .runtime import UnknownTypeError as UnknownTypeError
from .serialization import NetworkMessage as NetworkMessage
from .serialization import NetworkType as NetworkType
from .serialization import SerializationError as SerializationError
