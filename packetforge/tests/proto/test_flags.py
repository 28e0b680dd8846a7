"""Tests for flag byte packing."""

import pytest

from packetforge.proto.flags import get_flag, set_flag
from packetforge.proto.serialization import SerializationError


def describe_set_flag():
    def sets_bit_at_position(expect):
        expect(set_flag(0, 0, True)) == 0b1
        expect(set_flag(0, 3, True)) == 0b1000
        expect(set_flag(0b1, 7, True)) == 0b10000001

    def clears_bit_at_position(expect):
        expect(set_flag(0xFF, 0, False)) == 0xFE
        expect(set_flag(0, 5, False)) == 0

    def rejects_positions_outside_a_byte(expect):
        with pytest.raises(SerializationError):
            set_flag(0, 8, True)
        with pytest.raises(SerializationError):
            set_flag(0, -1, True)


def describe_get_flag():
    def reads_bit_at_position(expect):
        expect(get_flag(0b1000, 3)) == True
        expect(get_flag(0b1000, 2)) == False

    def reads_back_every_position(expect):
        for position in range(8):
            expect(get_flag(set_flag(0, position, True), position)) == True
            expect(get_flag(set_flag(0xFF, position, False), position)) == False

    def rejects_positions_outside_a_byte(expect):
        with pytest.raises(SerializationError):
            get_flag(0, 8)
