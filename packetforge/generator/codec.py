"""Codec emission: reset/serialize/deserialize bodies of generated records.

Bodies are lists of unindented Python source lines operating on ``obj`` with
``writer`` (a DataWriter) or ``reader`` (a DataReader) in scope.
"""

from dataclasses import dataclass

from .layout import EncodingStrategy, FieldPlan, FlagPlan, RecordLayout

PARENT_MODULE_ALIAS = "_parent"

# Width of vector counts and polymorphic type ids on the wire
COUNT_WRITE = "write_short"
COUNT_READ = "read_unsigned_short"


@dataclass(frozen=True)
class CodecBodies:
    """Ordered instruction sequences of one record."""

    reset: list[str]
    serialize: list[str]
    deserialize: list[str]


def _gen_reset_flag(flag: FlagPlan) -> list[str]:
    return [f"obj.{flag.name} = False"]


def _gen_serialize_flag(flag: FlagPlan) -> list[str]:
    return [f"writer.write_byte(set_flag(0, {flag.position}, obj.{flag.name}))"]


def _gen_deserialize_flag(flag: FlagPlan) -> list[str]:
    return [f"obj.{flag.name} = get_flag(reader.read_unsigned_byte(), {flag.position})"]


def _gen_reset_field(plan: FieldPlan) -> list[str]:
    return [f"obj.{plan.name} = {plan.init_expression}"]


def _gen_serialize_field(plan: FieldPlan) -> list[str]:
    """Generate serialize code for an ordinary field."""
    name = plan.name
    strategy = plan.strategy

    if strategy == EncodingStrategy.PRIMITIVE:
        return [f"writer.{plan.write_method}(obj.{name})"]

    if strategy == EncodingStrategy.CUSTOM:
        return [f"obj.{name}.serialize(writer)"]

    if strategy == EncodingStrategy.POLYMORPHIC:
        return [
            f"writer.{COUNT_WRITE}(obj.{name}.get_type_id())",
            f"obj.{name}.serialize(writer)",
        ]

    lines = [f"writer.{COUNT_WRITE}(len(obj.{name}))", f"for _item in obj.{name}:"]
    if strategy == EncodingStrategy.PRIMITIVE_VECTOR:
        lines.append(f"    writer.{plan.write_method}(_item)")
        return lines

    if plan.polymorphic:
        lines.append(f"    writer.{COUNT_WRITE}(_item.get_type_id())")
    lines.append("    _item.serialize(writer)")
    return lines


def _gen_deserialize_field(plan: FieldPlan) -> list[str]:
    """Generate deserialize code for an ordinary field."""
    name = plan.name
    strategy = plan.strategy

    if strategy == EncodingStrategy.PRIMITIVE:
        return [f"obj.{name} = reader.{plan.read_method}()"]

    if strategy == EncodingStrategy.CUSTOM:
        return [f"obj.{name} = {plan.element_type}()", f"obj.{name}.deserialize(reader)"]

    if strategy == EncodingStrategy.POLYMORPHIC:
        return [
            f"obj.{name} = reader.types.get_instance(reader.{COUNT_READ}())",
            f"obj.{name}.deserialize(reader)",
        ]

    lines = [
        f"_len_{name} = reader.{COUNT_READ}()",
        f"obj.{name} = []",
        f"for _ in range(_len_{name}):",
    ]
    if strategy == EncodingStrategy.PRIMITIVE_VECTOR:
        lines.append(f"    obj.{name}.append(reader.{plan.read_method}())")
        return lines

    if plan.polymorphic:
        lines.append(f"    _item = reader.types.get_instance(reader.{COUNT_READ}())")
    else:
        lines.append(f"    _item = {plan.element_type}()")
    lines.append("    _item.deserialize(reader)")
    lines.append(f"    obj.{name}.append(_item)")
    return lines


def build_codec(layout: RecordLayout) -> CodecBodies:
    """Build the reset, serialize and deserialize bodies of a record.

    Each body delegates to the parent record first, then handles flag fields
    in bit position order, then ordinary fields in authoring order. A body
    with nothing to do is a single ``pass``.
    """
    reset: list[str] = []
    serialize: list[str] = []
    deserialize: list[str] = []

    if layout.parent is not None:
        reset.append(f"{PARENT_MODULE_ALIAS}.reset_fields(obj)")
        serialize.append(f"{PARENT_MODULE_ALIAS}.serialize_fields(obj, writer)")
        deserialize.append(f"{PARENT_MODULE_ALIAS}.deserialize_fields(obj, reader)")

    for flag in layout.flags:
        reset.extend(_gen_reset_flag(flag))
        serialize.extend(_gen_serialize_flag(flag))
        deserialize.extend(_gen_deserialize_flag(flag))

    for plan in layout.fields:
        reset.extend(_gen_reset_field(plan))
        serialize.extend(_gen_serialize_field(plan))
        deserialize.extend(_gen_deserialize_field(plan))

    return CodecBodies(
        reset=reset or ["pass"],
        serialize=serialize or ["pass"],
        deserialize=deserialize or ["pass"],
    )
