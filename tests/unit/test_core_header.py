"""Unit tests for header entries and the binary header."""

from decimal import Decimal

import pytest

from sealkit.core.exceptions import EntryNotFoundError, FormatError, InvalidArgumentError
from sealkit.core.header import BinaryHeader, EntryType, HeaderEntry, infer_entry_type


# ==============================================================================
# Fixtures
# ==============================================================================

@pytest.fixture
def small_header():
    """byte / int16 / int32 header, the same shape the envelope tests use."""
    return BinaryHeader([
        HeaderEntry("entry1", 1, EntryType.BYTE),
        HeaderEntry("entry2", 2, EntryType.INT16),
        HeaderEntry("entry3", 3, EntryType.INT32),
    ])


@pytest.fixture
def mixed_entries():
    return [
        HeaderEntry("b", 255, EntryType.BYTE),
        HeaderEntry("sb", -128, EntryType.SBYTE),
        HeaderEntry("i16", -32768, EntryType.INT16),
        HeaderEntry("u16", 65535, EntryType.UINT16),
        HeaderEntry("i32", -1, EntryType.INT32),
        HeaderEntry("u32", 2**32 - 1, EntryType.UINT32),
        HeaderEntry("i64", -(2**63), EntryType.INT64),
        HeaderEntry("u64", 2**64 - 1, EntryType.UINT64),
        HeaderEntry("c", "é", EntryType.CHAR),
        HeaderEntry("f32", 1.5, EntryType.FLOAT32),
        HeaderEntry("f64", -2.25, EntryType.FLOAT64),
        HeaderEntry("d", Decimal("-12345.6789"), EntryType.DECIMAL128),
        HeaderEntry("flag", True, EntryType.BOOL),
    ]


# ==============================================================================
# Tests: EntryType widths and codecs
# ==============================================================================

@pytest.mark.parametrize(
    "entry_type, size",
    [
        (EntryType.BYTE, 1),
        (EntryType.SBYTE, 1),
        (EntryType.INT16, 2),
        (EntryType.UINT16, 2),
        (EntryType.INT32, 4),
        (EntryType.UINT32, 4),
        (EntryType.INT64, 8),
        (EntryType.UINT64, 8),
        (EntryType.CHAR, 2),
        (EntryType.FLOAT32, 4),
        (EntryType.FLOAT64, 8),
        (EntryType.DECIMAL128, 16),
        (EntryType.BOOL, 1),
    ],
)
def test_entry_type_sizes(entry_type, size):
    """Every type has a fixed width, and its zero value encodes to that width."""
    assert entry_type.size == size
    assert len(entry_type.encode(entry_type.default)) == size


def test_integers_are_little_endian():
    assert EntryType.INT32.encode(3) == b"\x03\x00\x00\x00"
    assert EntryType.INT16.encode(-2) == b"\xfe\xff"
    assert EntryType.UINT16.encode(0x0102) == b"\x02\x01"
    assert EntryType.UINT64.encode(2**64 - 1) == b"\xff" * 8


@pytest.mark.parametrize(
    "entry_type, value",
    [
        (EntryType.BYTE, 0),
        (EntryType.BYTE, 255),
        (EntryType.SBYTE, -128),
        (EntryType.SBYTE, 127),
        (EntryType.INT16, -32768),
        (EntryType.UINT16, 65535),
        (EntryType.INT32, -(2**31)),
        (EntryType.INT32, 2**31 - 1),
        (EntryType.UINT32, 2**32 - 1),
        (EntryType.INT64, 2**63 - 1),
        (EntryType.UINT64, 0),
        (EntryType.FLOAT32, -0.5),
        (EntryType.FLOAT64, 1e308),
    ],
)
def test_boundary_values_survive(entry_type, value):
    assert entry_type.decode(entry_type.encode(value)) == value


@pytest.mark.parametrize(
    "entry_type, value",
    [
        (EntryType.BYTE, 256),
        (EntryType.BYTE, -1),
        (EntryType.SBYTE, 128),
        (EntryType.INT16, 2**15),
        (EntryType.UINT32, -1),
        (EntryType.INT64, 2**63),
        (EntryType.UINT64, 2**64),
        (EntryType.FLOAT32, 1e300),
    ],
)
def test_out_of_range_values_rejected(entry_type, value):
    with pytest.raises(InvalidArgumentError):
        entry_type.encode(value)


@pytest.mark.parametrize(
    "entry_type, value",
    [
        (EntryType.INT32, "3"),
        (EntryType.INT32, 3.0),
        (EntryType.INT32, True),
        (EntryType.FLOAT64, "1.0"),
        (EntryType.BOOL, 1),
        (EntryType.CHAR, "ab"),
        (EntryType.CHAR, "\U0001F600"),
        (EntryType.DECIMAL128, object()),
    ],
)
def test_wrong_python_type_rejected(entry_type, value):
    with pytest.raises(InvalidArgumentError):
        entry_type.encode(value)


@pytest.mark.parametrize("entry_type", list(EntryType))
def test_decode_rejects_wrong_length(entry_type):
    with pytest.raises(FormatError):
        entry_type.decode(b"\x00" * (entry_type.size + 1))
    with pytest.raises(FormatError):
        entry_type.decode(b"\x00" * (entry_type.size - 1))


def test_char_is_one_utf16_code_unit():
    assert EntryType.CHAR.encode("A") == b"A\x00"
    assert EntryType.CHAR.decode(b"\xe9\x00") == "é"


def test_bool_decodes_any_nonzero_byte_as_true():
    assert EntryType.BOOL.encode(True) == b"\x01"
    assert EntryType.BOOL.encode(False) == b"\x00"
    assert EntryType.BOOL.decode(b"\x07") is True
    assert EntryType.BOOL.decode(b"\x00") is False


# ==============================================================================
# Tests: decimal128
# ==============================================================================

def test_decimal_layout():
    """Coefficient in the low 96 bits, scale in bits 16-23 of flags, sign in bit 31."""
    encoded = EntryType.DECIMAL128.encode(Decimal("1.5"))
    assert encoded == b"\x0f\x00\x00\x00" + b"\x00" * 8 + b"\x00\x00\x01\x00"

    negative = EntryType.DECIMAL128.encode(Decimal("-1.5"))
    assert negative[12:] == b"\x00\x00\x01\x80"


@pytest.mark.parametrize(
    "value",
    [
        Decimal("0"),
        Decimal("-12345.6789"),
        Decimal("79228162514264337593543950335"),
        Decimal("-79228162514264337593543950335"),
        Decimal("0.0000000000000000000000000001"),
        Decimal("1E+5"),
    ],
)
def test_decimal_values_survive(value):
    decoded = EntryType.DECIMAL128.decode(EntryType.DECIMAL128.encode(value))
    assert decoded == value


def test_decimal_keeps_scale():
    decoded = EntryType.DECIMAL128.decode(EntryType.DECIMAL128.encode(Decimal("2.50")))
    assert str(decoded) == "2.50"


def test_decimal_accepts_int_and_float():
    assert EntryType.DECIMAL128.decode(EntryType.DECIMAL128.encode(7)) == Decimal(7)
    assert EntryType.DECIMAL128.decode(EntryType.DECIMAL128.encode(0.25)) == Decimal("0.25")


@pytest.mark.parametrize(
    "value",
    [
        Decimal("79228162514264337593543950336"),  # 2**96
        Decimal("1E-29"),
        Decimal("NaN"),
        Decimal("Infinity"),
    ],
)
def test_decimal_unrepresentable(value):
    with pytest.raises(InvalidArgumentError):
        EntryType.DECIMAL128.encode(value)


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("0E-30"), Decimal(0)),
        (Decimal("1.0000000000000000000000000000000"), Decimal(1)),
        (Decimal("-2.50000000000000000000000000000"), Decimal("-2.5")),
    ],
)
def test_decimal_trailing_zeros_beyond_max_scale(value, expected):
    encoded = EntryType.DECIMAL128.encode(value)
    decoded = EntryType.DECIMAL128.decode(encoded)
    assert decoded == expected
    assert -decoded.as_tuple().exponent <= 28


def test_decimal_decode_rejects_bad_flags():
    bad_scale = b"\x01" + b"\x00" * 11 + (29 << 16).to_bytes(4, "little")
    with pytest.raises(FormatError):
        EntryType.DECIMAL128.decode(bad_scale)

    reserved = b"\x01" + b"\x00" * 11 + b"\x01\x00\x00\x00"
    with pytest.raises(FormatError):
        EntryType.DECIMAL128.decode(reserved)


def test_decimal_requires_exactly_16_bytes():
    with pytest.raises(FormatError, match="exactly 16 bytes"):
        EntryType.DECIMAL128.decode(b"\x00" * 12)


# ==============================================================================
# Tests: HeaderEntry
# ==============================================================================

@pytest.mark.parametrize(
    "value, expected",
    [
        (True, EntryType.BOOL),
        (5, EntryType.INT32),
        (1.0, EntryType.FLOAT64),
        (Decimal("1.1"), EntryType.DECIMAL128),
        ("x", EntryType.CHAR),
    ],
)
def test_infer_entry_type(value, expected):
    assert infer_entry_type(value) is expected
    assert HeaderEntry("n", value).entry_type is expected


def test_infer_entry_type_rejects_unknown():
    with pytest.raises(InvalidArgumentError):
        HeaderEntry("n", b"bytes")


def test_placeholder_holds_zero_value():
    entry = HeaderEntry.placeholder("OriginalDataSize", EntryType.INT32)
    assert entry.value == 0
    assert entry.size == 4
    assert entry.entry_bytes == b"\x00" * 4


def test_entry_bytes_setter_decodes():
    entry = HeaderEntry.placeholder("count", EntryType.UINT16)
    entry.entry_bytes = b"\x34\x12"
    assert entry.value == 0x1234


def test_entry_bytes_setter_rejects_wrong_width():
    entry = HeaderEntry.placeholder("count", EntryType.UINT16)
    with pytest.raises(FormatError):
        entry.entry_bytes = b"\x01\x02\x03"
    assert entry.value == 0


def test_value_setter_validates():
    entry = HeaderEntry("count", 1, EntryType.BYTE)
    entry.value = 200
    assert entry.entry_bytes == b"\xc8"
    with pytest.raises(InvalidArgumentError):
        entry.value = 300
    assert entry.value == 200


def test_float32_value_is_stored_as_decoded():
    entry = HeaderEntry("ratio", 0.1, EntryType.FLOAT32)
    assert entry.value == EntryType.FLOAT32.decode(EntryType.FLOAT32.encode(0.1))


def test_empty_name_rejected():
    with pytest.raises(InvalidArgumentError):
        HeaderEntry("", 1)


def test_clone_is_detached():
    entry = HeaderEntry("a", 1, EntryType.INT64)
    copy = entry.clone()
    copy.value = 2
    assert entry.value == 1
    assert copy.entry_type is EntryType.INT64


# ==============================================================================
# Tests: BinaryHeader
# ==============================================================================

def test_empty_header():
    header = BinaryHeader()
    assert header.size == 0
    assert header.entry_count == 0
    assert header.to_bytes() == b""


def test_header_values_by_name(small_header):
    assert small_header["entry1"].value == 1
    assert small_header["entry2"].value == 2
    assert small_header.get("entry3").value == 3
    assert "entry2" in small_header
    assert "entry4" not in small_header


def test_header_size_and_layout(small_header):
    assert small_header.size == 7
    assert len(small_header) == 3
    assert small_header.to_bytes() == b"\x01" + b"\x02\x00" + b"\x03\x00\x00\x00"


def test_header_iterates_in_declaration_order(small_header):
    assert [e.name for e in small_header] == ["entry1", "entry2", "entry3"]


def test_missing_entry_raises(small_header):
    with pytest.raises(EntryNotFoundError):
        small_header["missing"]


def test_duplicate_names_rejected(small_header):
    with pytest.raises(InvalidArgumentError):
        small_header.add("entry1", 9, EntryType.BYTE)
    with pytest.raises(InvalidArgumentError):
        BinaryHeader([HeaderEntry("x", 1), HeaderEntry("x", 2)])


def test_add_entry_extends_layout(small_header):
    small_header.add_entry(HeaderEntry("flag", True))
    small_header.add("total", 10, EntryType.UINT64)
    assert small_header.size == 7 + 1 + 8
    assert small_header.to_bytes().endswith(b"\x01" + (10).to_bytes(8, "little"))


def test_from_bytes_functional(small_header):
    """Parsing with a placeholder schema gives back the same bytes and values."""
    schema = [
        HeaderEntry.placeholder("entry1", EntryType.BYTE),
        HeaderEntry.placeholder("entry2", EntryType.INT16),
        HeaderEntry.placeholder("entry3", EntryType.INT32),
    ]
    parsed = BinaryHeader.from_bytes(small_header.to_bytes(), schema)

    assert parsed.to_bytes() == small_header.to_bytes()
    assert parsed["entry1"].value == 1
    assert parsed["entry2"].value == 2
    assert parsed["entry3"].value == 3
    # the schema is not hydrated in place
    assert all(entry.value == 0 for entry in schema)


def test_from_bytes_ignores_trailing_bytes(small_header):
    data = small_header.to_bytes() + b"payload"
    parsed = BinaryHeader.from_bytes(data, small_header.schema())
    assert parsed == small_header


def test_from_bytes_too_short(small_header):
    with pytest.raises(FormatError):
        BinaryHeader.from_bytes(small_header.to_bytes()[:-1], small_header.schema())


def test_from_bytes_empty_schema():
    assert BinaryHeader.from_bytes(b"anything", []).size == 0


def test_schema_has_names_and_types_only(small_header):
    schema = small_header.schema()
    assert [(e.name, e.entry_type) for e in schema] == [
        ("entry1", EntryType.BYTE),
        ("entry2", EntryType.INT16),
        ("entry3", EntryType.INT32),
    ]
    assert all(e.value == 0 for e in schema)


def test_mixed_header_round_trip(mixed_entries):
    header = BinaryHeader(mixed_entries)
    raw = header.to_bytes()
    assert len(raw) == header.size == 1 + 1 + 2 + 2 + 4 + 4 + 8 + 8 + 2 + 4 + 8 + 16 + 1

    parsed = BinaryHeader.from_bytes(raw, header.schema())
    assert parsed.to_bytes() == raw
    assert parsed == header
    assert parsed["d"].value == Decimal("-12345.6789")
    assert parsed["c"].value == "é"
    assert parsed["flag"].value is True
