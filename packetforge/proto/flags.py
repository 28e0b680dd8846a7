"""Boolean packing into flag bytes."""

from .serialization import SerializationError

FLAG_BITS = 8


def _check_position(position: int) -> None:
    if not 0 <= position < FLAG_BITS:
        raise SerializationError(f"flag position {position} does not fit in a byte")


def set_flag(flags: int, position: int, value: bool) -> int:
    """Return ``flags`` with the bit at ``position`` set or cleared."""
    _check_position(position)
    if value:
        return flags | (1 << position)
    return flags & ~(1 << position) & 0xFF


def get_flag(flags: int, position: int) -> bool:
    """Return the bit at ``position`` of ``flags``."""
    _check_position(position)
    return bool(flags & (1 << position))
