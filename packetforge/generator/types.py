"""Type definitions for protocol schemas and code generation."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin, config


@dataclass
class FieldSpec(DataClassJsonMixin):
    """Represents one field of a message or custom type.

    For primitive fields ``write_method`` names the writer operation
    (e.g. ``writeVarShort``); the reader operation is derived from it.
    ``bbw_position`` is only meaningful for flag fields (``use_bbw``).
    """

    name: str
    type: str
    is_vector: bool = field(default=False, metadata=config(field_name="isVector"))
    use_type_manager: bool = field(default=False, metadata=config(field_name="useTypeManager"))
    use_bbw: bool = field(default=False, metadata=config(field_name="useBBW"))
    bbw_position: int | None = field(default=None, metadata=config(field_name="bbwPosition"))
    write_method: str | None = field(default=None, metadata=config(field_name="writeMethod"))

    def __post_init__(self) -> None:
        if not self.write_method:
            self.write_method = None


@dataclass
class MessageType(DataClassJsonMixin):
    """Represents a network message definition."""

    name: str
    protocol_id: int = field(metadata=config(field_name="protocolId"))
    package: str = ""
    parent: str | None = None
    fields: list[FieldSpec] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.parent:
            self.parent = None


@dataclass
class CustomTypeDecl(DataClassJsonMixin):
    """Represents a custom (non-primitive) type definition.

    ``protocol_id`` is the type id written before polymorphic payloads; types
    without one can only be used statically.
    """

    name: str
    package: str = ""
    protocol_id: int | None = field(default=None, metadata=config(field_name="protocolId"))
    parent: str | None = None
    fields: list[FieldSpec] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.parent:
            self.parent = None


@dataclass
class ProtocolSchema(DataClassJsonMixin):
    """Represents a complete protocol definition."""

    messages: list[MessageType] = field(default_factory=list)
    types: list[CustomTypeDecl] = field(default_factory=list)


Record = MessageType | CustomTypeDecl


@dataclass(frozen=True)
class PrimitiveType:
    """Python rendering of a primitive schema type."""

    python_type: str
    default: str


PRIMITIVE_TYPES = {
    "int": PrimitiveType("int", "0"),
    "uint": PrimitiveType("int", "0"),
    "Number": PrimitiveType("float", "0.0"),
    "Boolean": PrimitiveType("bool", "False"),
    "String": PrimitiveType("str", '""'),
}


def primitive_types() -> list[str]:
    """Return a list of primitive type names."""
    return list(PRIMITIVE_TYPES)


def is_primitive(type_name: str) -> bool:
    """Check if a type is a primitive type."""
    return type_name in PRIMITIVE_TYPES
