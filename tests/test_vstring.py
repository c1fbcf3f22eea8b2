import pytest

from ymsynth.vstring import (
    fix16_to_str,
    fix32_to_str,
    int_to_hex,
    int_to_str,
    sprintf,
    uint_to_str,
)


def test_plain_text_is_copied():
    assert sprintf("Mega Drive MIDI Interface") == "Mega Drive MIDI Interface"


def test_log_style_message():
    assert sprintf("Test Message %d", 1) == "Test Message 1"
    assert sprintf("Test Message %u", 1) == "Test Message 1"


@pytest.mark.parametrize(
    "fmt, arg",
    [
        ("%d", 42),
        ("%d", -7),
        ("%i", 0),
        ("%5d", 42),
        ("%-5d", 42),
        ("%05d", 42),
        ("%05d", -3),
        ("%+d", 42),
        ("% d", 42),
        ("%-2d", 5),
        ("%3d", 7),
        ("%hd", 12),
        ("%ld", 12),
        ("%x", 0xBEEF),
        ("%X", 0xBEEF),
        ("%04x", 0xA),
        ("%u", 65535),
        ("%s", "abc"),
        ("%5s", "abc"),
        ("%-5s", "abc"),
        ("%.2s", "abc"),
        ("%c", 65),
        ("%3c", 65),
        ("%-3c", 65),
    ],
)
def test_agrees_with_standard_printf_for_common_specs(fmt, arg):
    assert sprintf(fmt, arg) == fmt % arg


def test_sign_is_written_before_space_padding():
    result = sprintf("%5d", -3)
    assert len(result) == 5
    assert result.startswith("-")
    assert result[1:].strip() == "3"


def test_integers_are_sixteen_bit():
    assert sprintf("%u", 0x10007) == sprintf("%u", 7)
    assert sprintf("%d", 0xFFFF) == "%d" % -1
    assert sprintf("%d", -32768) == "%d" % -32768


def test_star_width_and_precision():
    assert sprintf("%*d", 6, 42) == "%6d" % 42
    assert sprintf("%*d", -6, 42) == "%-6d" % 42
    assert sprintf("%.*s", 2, "abcdef") == "%.2s" % "abcdef"


def test_precision_truncates_digits():
    assert sprintf("%.2d", 12345) == "12"


def test_null_string():
    assert sprintf("%s", None) == "<NULL>"


def test_percent_and_unknown_conversions_produce_nothing():
    assert sprintf("100%%") == "100"
    assert sprintf("a%qb") == "ab"


def test_n_records_characters_written():
    counts = []
    assert sprintf("abc%n", counts) == "abc"
    assert counts == [3]


def test_pointer_is_zero_padded_hex():
    result = sprintf("%p", 0xAB)
    assert len(result) == 8
    assert int(result, 16) == 0xAB
    assert result == result.upper()


def test_missing_argument_raises():
    with pytest.raises(TypeError):
        sprintf("%d %d", 1)


@pytest.mark.parametrize(
    "value", [0, 9, 10, 99, 100, 9999, 10000, 10001, 123456, 500000000]
)
@pytest.mark.parametrize("min_size", [0, 1, 3, 5, 8, 12])
def test_uint_to_str_matches_zero_padded_decimal(value, min_size):
    assert uint_to_str(value, min_size) == str(value).zfill(min_size)


def test_uint_to_str_overflow_text():
    assert uint_to_str(500000001, 0) == ">500000000"


def test_uint_to_str_rejects_negative():
    with pytest.raises(ValueError):
        uint_to_str(-1, 0)


def test_int_to_str():
    assert int_to_str(-123, 5) == "-" + uint_to_str(123, 5)
    assert int_to_str(42, 4) == uint_to_str(42, 4)
    assert int_to_str(-500000000, 1) == "-500000000"
    assert int_to_str(-500000001, 1) == "<-500000000"


@pytest.mark.parametrize("value", [1, 0xA, 0xFF, 0xABC, 0xDEADBEEF, 0xFFFFFFFF])
@pytest.mark.parametrize("min_size", [0, 1, 4, 8, 16])
def test_int_to_hex_matches_padded_upper_hex(value, min_size):
    assert int_to_hex(value, min_size) == format(value, "X").zfill(min_size)


def test_int_to_hex_zero():
    assert int_to_hex(0, 0) == ""
    assert int_to_hex(0, 4) == "0000"


def test_int_to_hex_is_capped_at_sixteen_characters():
    result = int_to_hex(0xABC, 20)
    assert len(result) == 16
    assert int(result, 16) == 0xABC


def test_int_to_hex_rejects_out_of_range():
    with pytest.raises(ValueError):
        int_to_hex(-1, 0)
    with pytest.raises(ValueError):
        int_to_hex(1 << 32, 0)


@pytest.mark.parametrize("quarters", range(-40, 41))
def test_fix32_quarters_round_trip(quarters):
    raw = quarters * 256
    assert float(fix32_to_str(raw, 3)) == raw / 1024


@pytest.mark.parametrize("quarters", range(-40, 41))
def test_fix16_quarters_round_trip(quarters):
    raw = quarters * 16
    assert float(fix16_to_str(raw, 3)) == raw / 64


def test_fix32_decimal_count():
    assert fix32_to_str(1536, 1) == "1.5"
    longer = fix32_to_str(1536, 5)
    assert len(longer.split(".")[1]) == 5
    assert float(longer) == 1.5
    bare = fix32_to_str(1024, 0)
    assert bare.endswith(".")
    assert bare.startswith("1")


def test_fix32_fraction_digits_are_not_left_padded():
    assert fix32_to_str(10, 3) == "0.900"


def test_negative_fixed_values_carry_sign():
    assert fix32_to_str(-1536, 1).startswith("-")
    assert fix16_to_str(-96, 1) == "-" + fix16_to_str(96, 1)


def test_fixed_values_out_of_range():
    with pytest.raises(ValueError):
        fix16_to_str(1 << 15, 1)
    with pytest.raises(ValueError):
        fix32_to_str(1 << 31, 1)