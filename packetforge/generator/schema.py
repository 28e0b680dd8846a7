"""Schema loading, lookup and validation."""

from collections.abc import Iterable
from pathlib import Path

from packetforge.proto.buffer import DataReader, DataWriter
from packetforge.proto.flags import FLAG_BITS

from .types import CustomTypeDecl, FieldSpec, MessageType, ProtocolSchema, Record, is_primitive
from .util import to_field_name, to_snake_case

# Writer operations usable by primitive fields; write_bytes needs a size on read
WRITE_METHODS = frozenset(
    name for name in vars(DataWriter) if name.startswith("write_") and name != "write_bytes"
)


class ValidationError(RuntimeError):
    """Raised when protocol validation fails."""


class UnresolvedReferenceError(ValidationError):
    """Raised when a parent or custom type name cannot be found in the schema."""

    def __init__(self, owner: str, kind: str, reference: str) -> None:
        super().__init__(f"{owner} references unknown {kind} {reference}")
        self.owner = owner
        self.kind = kind
        self.reference = reference


class DuplicateProtocolIdError(ValidationError):
    """Raised when two records share a protocol id."""

    def __init__(self, kind: str, protocol_id: int, names: tuple[str, str]) -> None:
        super().__init__(
            f"{kind} id {protocol_id} is used by both {names[0]} and {names[1]}"
        )
        self.kind = kind
        self.protocol_id = protocol_id
        self.names = names


def loads(text: str) -> ProtocolSchema:
    """Parse a protocol schema from JSON text."""
    try:
        return ProtocolSchema.from_json(text)
    except (ValueError, KeyError, TypeError) as err:
        raise ValidationError(f"malformed schema: {err}") from err


def load(path: str | Path) -> ProtocolSchema:
    """Read a protocol schema from a JSON file."""
    with open(path, encoding="utf-8") as f:
        return loads(f.read())


def check_unique_ids(records: Iterable[Record], kind: str) -> None:
    """Raise DuplicateProtocolIdError if two records share a protocol id."""
    seen: dict[int, str] = {}
    for record in records:
        if record.protocol_id is None:
            continue
        if record.protocol_id in seen:
            raise DuplicateProtocolIdError(
                kind, record.protocol_id, (seen[record.protocol_id], record.name)
            )
        seen[record.protocol_id] = record.name


def read_method(write_method: str) -> str:
    """Return the reader operation paired with a writer operation."""
    return to_snake_case(write_method).replace("write", "read", 1)


def check_field(owner: str, spec: FieldSpec) -> None:
    """Validate the parts of a field that do not depend on other records."""
    if spec.use_bbw:
        if spec.bbw_position is None or not 0 <= spec.bbw_position < FLAG_BITS:
            raise ValidationError(
                f"{owner}.{spec.name} flag position {spec.bbw_position} must be within "
                f"0..{FLAG_BITS - 1}"
            )
        return

    if not is_primitive(spec.type):
        return

    if spec.use_type_manager:
        raise ValidationError(
            f"{owner}.{spec.name} is primitive {spec.type} and cannot be polymorphic"
        )
    if spec.write_method is None:
        raise ValidationError(f"{owner}.{spec.name} has no write method")

    writer = to_snake_case(spec.write_method)
    if writer not in WRITE_METHODS:
        raise ValidationError(
            f"{owner}.{spec.name} uses unsupported write method {spec.write_method}"
        )
    if not hasattr(DataReader, read_method(spec.write_method)):
        raise ValidationError(
            f"{owner}.{spec.name} write method {spec.write_method} has no paired read method"
        )


def check_field_names(record: Record, ancestors: Iterable[Record]) -> None:
    """Raise if two fields of a record, inherited ones included, share an attribute name."""
    seen: dict[str, str] = {}
    for owner in [*ancestors, record]:
        for spec in owner.fields:
            ident = to_field_name(spec.name)
            if ident in seen:
                raise ValidationError(
                    f"{record.name}: {owner.name}.{spec.name} and {seen[ident]} "
                    f"both map to attribute {ident}"
                )
            seen[ident] = f"{owner.name}.{spec.name}"


class SchemaIndex:
    """Name lookups over a protocol schema."""

    def __init__(self, schema: ProtocolSchema) -> None:
        self.schema = schema
        self._messages = {m.name: m for m in schema.messages}
        self._types = {t.name: t for t in schema.types}

    def message(self, name: str, owner: str) -> MessageType:
        try:
            return self._messages[name]
        except KeyError:
            raise UnresolvedReferenceError(owner, "message", name) from None

    def type(self, name: str, owner: str) -> CustomTypeDecl:
        try:
            return self._types[name]
        except KeyError:
            raise UnresolvedReferenceError(owner, "type", name) from None

    def parent(self, record: Record) -> Record | None:
        """Return the record's parent, looked up among records of the same kind."""
        if record.parent is None:
            return None
        if isinstance(record, MessageType):
            return self.message(record.parent, record.name)
        return self.type(record.parent, record.name)

    def ancestors(self, record: Record) -> list[Record]:
        """Return the inheritance chain of a record, root first, excluding itself."""
        chain: list[Record] = []
        seen = {record.name}
        parent = self.parent(record)
        while parent is not None:
            if parent.name in seen:
                raise ValidationError(f"{record.name} has an inheritance cycle through {parent.name}")
            seen.add(parent.name)
            chain.append(parent)
            parent = self.parent(parent)
        chain.reverse()
        return chain


def validate(schema: ProtocolSchema) -> None:
    """Check every schema invariant, raising on the first violation."""
    check_unique_ids(schema.messages, "message")
    check_unique_ids(schema.types, "type")

    index = SchemaIndex(schema)
    records: list[Record] = [*schema.types, *schema.messages]
    for record in records:
        check_field_names(record, index.ancestors(record))
        for spec in record.fields:
            check_field(record.name, spec)
            if not spec.use_bbw and not is_primitive(spec.type):
                index.type(spec.type, f"{record.name}.{spec.name}")
