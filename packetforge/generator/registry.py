"""Dispatch table and re-export index planning."""

from dataclasses import dataclass

from .layout import Planner
from .schema import check_unique_ids


@dataclass(frozen=True)
class RegistryEntry:
    """One exported class; ``protocol_id`` is its dispatch key, if it has one."""

    protocol_id: int | None
    name: str
    module: str


@dataclass(frozen=True)
class RegistryPlan:
    """Dispatch tables and flat exports of a whole protocol."""

    messages: tuple[RegistryEntry, ...]
    types: tuple[RegistryEntry, ...]

    @property
    def dispatched_types(self) -> tuple[RegistryEntry, ...]:
        """Types that can be resolved from a type id."""
        return tuple(t for t in self.types if t.protocol_id is not None)


def build_registry(planner: Planner) -> RegistryPlan:
    """Build the protocol-wide registries.

    Raises DuplicateProtocolIdError when two messages, or two identified
    custom types, share an id; nothing is overwritten.
    """
    schema = planner.index.schema
    check_unique_ids(schema.messages, "message")
    check_unique_ids(schema.types, "type")

    return RegistryPlan(
        messages=tuple(
            RegistryEntry(m.protocol_id, m.name, planner.module_of(m)) for m in schema.messages
        ),
        types=tuple(
            RegistryEntry(t.protocol_id, t.name, planner.module_of(t)) for t in schema.types
        ),
    )
