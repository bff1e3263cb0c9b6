import pytest

from apk_inspector.preprocessing.attribute_normalizer import normalize_value


def test_raw_type_value_becomes_decimal():
    assert normalize_value("(type 0x10) 0x1f") == "31"


def test_uses_last_hex_token():
    assert normalize_value("(type 0x10) 0x12927c70") == str(0x12927c70)


def test_surrounding_whitespace_is_trimmed():
    assert normalize_value("(type 0x10) 0x1f  ") == "31"


@pytest.mark.parametrize("value", ["31", "1.2.3", "com.example.app", "", "0x1f"])
def test_plain_values_pass_through(value):
    assert normalize_value(value) == value


def test_normalization_is_idempotent():
    once = normalize_value("(type 0x10) 0xff")
    assert normalize_value(once) == once == "255"


@pytest.mark.parametrize("value", [
    "(type 0x10) 0xzz",
    "(type 0x10) 0x",
    "(type 0x10) 0x-1",
    "(type 0x10) 0x1_0",
    "(type 0x10) 0x100000000",
])
def test_unparseable_values_pass_through(value):
    assert normalize_value(value) == value


def test_max_u32_is_accepted():
    assert normalize_value("(type 0x11) 0xffffffff") == "4294967295"
