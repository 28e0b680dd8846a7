"""Tests for the big-endian data reader and writer."""

import pytest

from packetforge.proto.buffer import DataReader, DataWriter
from packetforge.proto.serialization import SerializationError


def written(method, *args):
    writer = DataWriter()
    getattr(writer, method)(*args)
    return writer.getvalue()


def describe_data_writer():
    def writes_big_endian(expect):
        expect(written("write_short", 0x0102)) == b"\x01\x02"
        expect(written("write_int", 0x01020304)) == b"\x01\x02\x03\x04"
        expect(written("write_double", 42.0)) == bytes.fromhex("4045000000000000")
        expect(written("write_float", 1.0)) == bytes.fromhex("3f800000")

    def writes_signed_and_unsigned_alike(expect):
        expect(written("write_short", -1)) == written("write_short", 0xFFFF)
        expect(written("write_byte", -1)) == b"\xff"
        expect(written("write_int", -2)) == b"\xff\xff\xff\xfe"

    def rejects_values_out_of_range(expect):
        with pytest.raises(SerializationError):
            written("write_short", 0x10000)
        with pytest.raises(SerializationError):
            written("write_byte", 256)
        with pytest.raises(SerializationError):
            written("write_unsigned_int", -1)

    def writes_length_prefixed_utf8(expect):
        expect(written("write_utf", "")) == b"\x00\x00"
        expect(written("write_utf", "hi")) == b"\x00\x02hi"
        expect(written("write_utf", "é")) == b"\x00\x02\xc3\xa9"

    def rejects_oversized_strings(expect):
        with pytest.raises(SerializationError):
            written("write_utf", "x" * 0x10000)

    def writes_booleans_as_bytes(expect):
        expect(written("write_boolean", True)) == b"\x01"
        expect(written("write_boolean", False)) == b"\x00"

    def writes_var_length_ints_in_7_bit_groups(expect):
        expect(written("write_var_int", 0)) == b"\x00"
        expect(written("write_var_int", 127)) == b"\x7f"
        expect(written("write_var_int", 300)) == b"\xac\x02"
        expect(written("write_var_int", -1)) == b"\xff\xff\xff\xff\x0f"
        expect(written("write_var_short", -1)) == b"\xff\xff\x03"

    def tracks_length(expect):
        writer = DataWriter()
        writer.write_int(1)
        writer.write_utf("ab")
        expect(len(writer)) == 8


def describe_data_reader():
    def reads_what_was_written(expect):
        writer = DataWriter()
        writer.write_byte(-3)
        writer.write_short(-300)
        writer.write_unsigned_int(0xFFFFFFFF)
        writer.write_double(-0.5)
        writer.write_utf("hello")
        writer.write_var_long(-(2**40))
        writer.write_boolean(True)

        reader = DataReader(writer.getvalue())
        expect(reader.read_byte()) == -3
        expect(reader.read_short()) == -300
        expect(reader.read_unsigned_int()) == 0xFFFFFFFF
        expect(reader.read_double()) == -0.5
        expect(reader.read_utf()) == "hello"
        expect(reader.read_var_long()) == -(2**40)
        expect(reader.read_boolean()) == True
        expect(reader.remaining) == 0

    def reads_unsigned_variants(expect):
        reader = DataReader(b"\xff\xff" b"\xff\xff\x03" b"\xff")
        expect(reader.read_unsigned_short()) == 0xFFFF
        expect(reader.read_var_uh_short()) == 0xFFFF
        expect(reader.read_unsigned_byte()) == 0xFF

    def decodes_var_ints(expect):
        expect(DataReader(b"\xac\x02").read_var_int()) == 300
        expect(DataReader(b"\xff\xff\xff\xff\x0f").read_var_int()) == -1
        expect(DataReader(b"\xff\xff\xff\xff\x0f").read_var_uh_int()) == 0xFFFFFFFF

    def rejects_overlong_var_ints(expect):
        with pytest.raises(SerializationError) as exinfo:
            DataReader(b"\xff\xff\xff\x01").read_var_short()

        expect(str(exinfo.value)).includes("exceeds 16 bits")

    def fails_on_short_reads(expect):
        reader = DataReader(b"\x00\x01")
        with pytest.raises(SerializationError) as exinfo:
            reader.read_int()

        expect(str(exinfo.value)).includes("unexpected end of data")

    def fails_on_truncated_strings(expect):
        with pytest.raises(SerializationError):
            DataReader(b"\x00\x05hi").read_utf()

    def starts_at_offset(expect):
        reader = DataReader(b"\x00\x00\x01\x02", offset=2)
        expect(reader.read_short()) == 0x0102
        expect(reader.offset) == 4

    def requires_bound_type_registry(expect):
        with pytest.raises(SerializationError) as exinfo:
            DataReader(b"").types

        expect(str(exinfo.value)).includes("no type registry")
