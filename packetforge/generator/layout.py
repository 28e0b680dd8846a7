"""Field layout planning for messages and custom types.

The planner splits a record's fields into the flag group, written first and
ordered by bit position, and the ordinary group, written in authoring order.
Every ordinary field is classified into one of five encoding strategies that
the codec emitter turns into wire operations.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum, auto

from .config import GeneratorConfig
from .schema import SchemaIndex, check_field, check_field_names, read_method
from .types import PRIMITIVE_TYPES, FieldSpec, MessageType, ProtocolSchema, Record
from .util import namespace_to_module, to_field_name, to_snake_case

logger = logging.getLogger(__name__)


class EncodingStrategy(StrEnum):
    """How an ordinary field is put on the wire."""

    PRIMITIVE = auto()  # write method / paired read method
    CUSTOM = auto()  # nested type, statically known
    POLYMORPHIC = auto()  # nested type resolved from a type id
    PRIMITIVE_VECTOR = auto()  # count, then primitives
    OBJECT_VECTOR = auto()  # count, then nested types (static or polymorphic)


@dataclass(frozen=True)
class TypeImport:
    """A custom type referenced by a generated module."""

    name: str
    module: str


@dataclass(frozen=True)
class FlagPlan:
    """A boolean field stored in its own flag byte."""

    spec: FieldSpec
    name: str
    position: int


@dataclass(frozen=True)
class FieldPlan:
    """Classification of an ordinary field."""

    spec: FieldSpec
    name: str
    resolved_type: str
    is_custom_type: bool
    init_expression: str
    strategy: EncodingStrategy

    @property
    def element_type(self) -> str:
        """Declared type of the field, or of its elements for vectors."""
        if self.is_custom_type:
            return self.spec.type
        return PRIMITIVE_TYPES[self.spec.type].python_type

    @property
    def polymorphic(self) -> bool:
        return self.spec.use_type_manager

    @property
    def write_method(self) -> str:
        assert self.spec.write_method is not None
        return to_snake_case(self.spec.write_method)

    @property
    def read_method(self) -> str:
        assert self.spec.write_method is not None
        return read_method(self.spec.write_method)


@dataclass(frozen=True)
class Declaration:
    """A dataclass field of a generated class."""

    name: str
    annotation: str
    default: str | None = None
    default_factory: str | None = None


@dataclass(frozen=True)
class ParentRef:
    """The record whose codec functions a generated module delegates to."""

    name: str
    module: str

    @property
    def package(self) -> str:
        return self.module.rpartition(".")[0]

    @property
    def module_name(self) -> str:
        return self.module.rpartition(".")[2]


@dataclass(frozen=True)
class RecordLayout:
    """Everything needed to emit the module of one message or custom type."""

    name: str
    module: str
    is_message: bool
    protocol_id: int | None
    parent: ParentRef | None
    flags: tuple[FlagPlan, ...]
    fields: tuple[FieldPlan, ...]
    declarations: tuple[Declaration, ...]
    imports: tuple[TypeImport, ...]

    @property
    def has_factories(self) -> bool:
        return any(d.default_factory is not None for d in self.declarations)


def select_strategy(spec: FieldSpec, is_custom_type: bool) -> EncodingStrategy:
    """Pick the encoding strategy of an ordinary field."""
    if spec.is_vector:
        if spec.use_type_manager or is_custom_type:
            return EncodingStrategy.OBJECT_VECTOR
        return EncodingStrategy.PRIMITIVE_VECTOR
    if spec.use_type_manager:
        return EncodingStrategy.POLYMORPHIC
    if is_custom_type:
        return EncodingStrategy.CUSTOM
    return EncodingStrategy.PRIMITIVE


def _declare_flag(flag: FlagPlan) -> Declaration:
    return Declaration(flag.name, "bool", default="False")


def _declare_field(plan: FieldPlan) -> Declaration:
    if plan.spec.is_vector:
        return Declaration(plan.name, plan.resolved_type, default_factory="list")
    if plan.is_custom_type:
        return Declaration(plan.name, plan.resolved_type, default_factory=plan.spec.type)
    return Declaration(plan.name, plan.resolved_type, default=plan.init_expression)


class _ImportSet:
    """Custom type imports of one generated module, deduplicated by name."""

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._imports: dict[str, TypeImport] = {}

    def add(self, name: str, module: str) -> None:
        if name == self._owner or name in self._imports:
            return
        self._imports[name] = TypeImport(name, module)

    def __iter__(self):
        return iter(self._imports.values())


class Planner:
    """Plans the layout of records from one protocol schema."""

    def __init__(self, schema: ProtocolSchema, config: GeneratorConfig | None = None) -> None:
        self.index = SchemaIndex(schema)
        self.config = config if config else GeneratorConfig()

    def module_of(self, record: Record) -> str:
        """Return the dotted module path generated for a record."""
        return namespace_to_module(
            record.package, record.name, self.config.package, self.config.namespace_prefix
        )

    def partition(self, record: Record) -> tuple[list[FieldSpec], list[FieldSpec]]:
        """Split fields into (flags sorted by bit position, others in authoring order)."""
        flags = [f for f in record.fields if f.use_bbw]
        others = [f for f in record.fields if not f.use_bbw]
        for spec in flags:
            check_field(record.name, spec)
        flags.sort(key=lambda f: f.bbw_position)
        return flags, others

    def classify(self, record: Record, spec: FieldSpec, imports: _ImportSet) -> FieldPlan:
        """Resolve an ordinary field's type, default and encoding strategy."""
        check_field(record.name, spec)

        primitive = PRIMITIVE_TYPES.get(spec.type)
        if primitive is not None:
            is_custom_type = False
            resolved_type = primitive.python_type
            init_expression = primitive.default
        else:
            custom = self.index.type(spec.type, f"{record.name}.{spec.name}")
            imports.add(custom.name, self.module_of(custom))
            is_custom_type = True
            resolved_type = custom.name
            init_expression = f"{custom.name}()"

        if spec.is_vector:
            resolved_type = f"list[{resolved_type}]"
            init_expression = "[]"

        return FieldPlan(
            spec=spec,
            name=to_field_name(spec.name),
            resolved_type=resolved_type,
            is_custom_type=is_custom_type,
            init_expression=init_expression,
            strategy=select_strategy(spec, is_custom_type),
        )

    def _own_plans(
        self, record: Record, imports: _ImportSet
    ) -> tuple[tuple[FlagPlan, ...], tuple[FieldPlan, ...]]:
        flag_specs, other_specs = self.partition(record)
        flags = tuple(
            FlagPlan(spec=f, name=to_field_name(f.name), position=f.bbw_position or 0)
            for f in flag_specs
        )
        fields = tuple(self.classify(record, f, imports) for f in other_specs)
        return flags, fields

    def plan(self, record: Record) -> RecordLayout:
        """Plan the module of a message or custom type."""
        imports = _ImportSet(record.name)

        ancestors = self.index.ancestors(record)
        check_field_names(record, ancestors)

        # Inherited fields are redeclared on the generated class, root first
        declarations: list[Declaration] = []
        for ancestor in ancestors:
            flags, fields = self._own_plans(ancestor, imports)
            declarations.extend(_declare_flag(f) for f in flags)
            declarations.extend(_declare_field(f) for f in fields)

        flags, fields = self._own_plans(record, imports)
        declarations.extend(_declare_flag(f) for f in flags)
        declarations.extend(_declare_field(f) for f in fields)

        parent_record = self.index.parent(record)
        parent = None
        if parent_record is not None:
            parent = ParentRef(parent_record.name, self.module_of(parent_record))

        logger.debug(
            "Planned %s: %d flag(s), %d field(s), %d inherited",
            record.name,
            len(flags),
            len(fields),
            len(declarations) - len(flags) - len(fields),
        )

        return RecordLayout(
            name=record.name,
            module=self.module_of(record),
            is_message=isinstance(record, MessageType),
            protocol_id=record.protocol_id,
            parent=parent,
            flags=flags,
            fields=fields,
            declarations=tuple(declarations),
            imports=tuple(imports),
        )
