import datetime

import pytest

from codesign_pki.asn1_encoder import (bi, der_bit_string, der_boolean,
                                       der_explicit, der_generalized_time,
                                       der_integer, der_len, der_null,
                                       der_octet_string, der_oid, der_sequence,
                                       der_set, der_tlv, der_utf8string, ib)


def test_length_short_and_long_form():
    assert der_len(0) == b'\x00'
    assert der_len(127) == b'\x7f'
    assert der_len(128) == b'\x81\x80'
    assert der_len(255) == b'\x81\xff'
    assert der_len(256) == b'\x82\x01\x00'
    assert der_len(65536) == b'\x83\x01\x00\x00'

def test_tlv_uses_long_length():
    body = b'\xaa' * 200
    assert der_tlv(0x04, body) == b'\x04\x81\xc8' + body

def test_integer():
    assert der_integer(b'') == b'\x02\x01\x00'
    assert der_integer(b'\x7f') == b'\x02\x01\x7f'
    assert der_integer(b'\x80') == b'\x02\x02\x00\x80'
    assert der_integer(b'\x01\x00') == b'\x02\x02\x01\x00'
    assert der_integer(0) == b'\x02\x01\x00'
    assert der_integer(2) == b'\x02\x01\x02'
    assert der_integer(0xff) == b'\x02\x02\x00\xff'
    with pytest.raises(ValueError):
        der_integer(-1)

def test_int_bytes_helpers():
    assert ib(0) == b'\x00'
    assert ib(0x0102) == b'\x01\x02'
    assert ib(1, 4) == b'\x00\x00\x00\x01'
    assert bi(b'\x01\x02') == 0x0102

def test_simple_types():
    assert der_null() == b'\x05\x00'
    assert der_boolean(True) == b'\x01\x01\xff'
    assert der_boolean(False) == b'\x01\x01\x00'
    assert der_octet_string(b'\x01\x02') == b'\x04\x02\x01\x02'
    assert der_bit_string(b'\x01') == b'\x03\x02\x00\x01'
    assert der_utf8string("é") == b'\x0c\x02\xc3\xa9'

def test_oid():
    assert der_oid("2.5.4.3") == bytes.fromhex("0603550403")
    assert der_oid("2.5.29.37") == bytes.fromhex("0603551d25")
    assert der_oid("1.2.840.10045.4.3.2") == bytes.fromhex("06082a8648ce3d040302")
    assert der_oid("1.2.840.10045.3.1.7") == bytes.fromhex("06082a8648ce3d030107")
    assert der_oid("1.3.6.1.5.5.7.3.3") == bytes.fromhex("06082b06010505070303")
    with pytest.raises(ValueError):
        der_oid("1")

def test_constructed():
    assert der_sequence() == b'\x30\x00'
    assert der_sequence(der_null(), der_null()) == b'\x30\x04\x05\x00\x05\x00'
    assert der_set(der_null()) == b'\x31\x02\x05\x00'
    assert der_explicit(0, der_integer(2)) == b'\xa0\x03\x02\x01\x02'
    assert der_explicit(3, b'\x30\x00') == b'\xa3\x02\x30\x00'
    with pytest.raises(ValueError):
        der_explicit(31, b'')

def test_generalized_time():
    t = datetime.datetime(2024, 2, 29, 12, 0, 5)
    assert der_generalized_time(t) == b'\x18\x0f' + b'20240229120005Z'

def test_generalized_time_converts_to_utc():
    cet = datetime.timezone(datetime.timedelta(hours=1))
    t = datetime.datetime(2024, 1, 1, 0, 30, 0, tzinfo=cet)
    assert der_generalized_time(t) == b'\x18\x0f' + b'20231231233000Z'
