import os

from codesign_pki.asn1_encoder import (der_bit_string, der_boolean,
                                       der_explicit, der_generalized_time,
                                       der_integer, der_null, der_octet_string,
                                       der_oid, der_sequence, der_set,
                                       der_utf8string)
from codesign_pki.ecdsa import OID_ecdsaWithSHA256, public_point

OID_idEcPublicKey     = "1.2.840.10045.2.1"
OID_prime256v1        = "1.2.840.10045.3.1.7"
OID_commonName        = "2.5.4.3"
OID_basicConstraints  = "2.5.29.19"
OID_extendedKeyUsage  = "2.5.29.37"
OID_codeSigning       = "1.3.6.1.5.5.7.3.3"

SERIAL_LENGTH = 20


def der_name(cn):
    atv = der_sequence(der_oid(OID_commonName), der_utf8string(cn))
    rdn = der_set(atv)
    return der_sequence(rdn)

def der_algorithm_identifier(oid, params_null=True):
    # ECDSA signature identifiers must omit the NULL parameters
    if params_null:
        return der_sequence(der_oid(oid), der_null())
    return der_sequence(der_oid(oid))

def der_subject_public_key_info(public_key):
    # public_key is an ECC key on P-256 (private or public)
    alg = der_sequence(der_oid(OID_idEcPublicKey), der_oid(OID_prime256v1))
    return der_sequence(alg, der_bit_string(public_point(public_key)))

def der_validity(not_before, not_after):
    return der_sequence(der_generalized_time(not_before), der_generalized_time(not_after))

def der_extension(oid, value, critical=False):
    # critical is DEFAULT FALSE, so it is only encoded when set
    parts = [der_oid(oid)]
    if critical:
        parts.append(der_boolean(True))
    parts.append(der_octet_string(value))
    return der_sequence(*parts)

def der_basic_constraints_ca():
    return der_extension(OID_basicConstraints, der_sequence(der_boolean(True)), critical=True)

def der_extended_key_usage_code_signing():
    return der_extension(OID_extendedKeyUsage, der_sequence(der_oid(OID_codeSigning)))

def random_serial():
    b = bytearray(os.urandom(SERIAL_LENGTH))
    if b[0] & 0x80:
        b[0] &= 0x7f
    if b[0] == 0:
        b[0] = 1  # a leading zero octet would not be minimal DER
    return bytes(b)

def add_years(dt, years):
    # calendar years; Feb 29 becomes Feb 28 when the target year is not a leap year
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, day=28)

def build_tbs_certificate(version, serial, issuer, not_before, not_after,
                          subject, spki, extensions=None):
    parts = []
    if version != 0:
        parts.append(der_explicit(0, der_integer(version)))   # 2 = v3
    parts.append(der_integer(serial))
    parts.append(der_algorithm_identifier(OID_ecdsaWithSHA256, params_null=False))
    parts.append(issuer)
    parts.append(der_validity(not_before, not_after))
    parts.append(subject)
    parts.append(spki)
    if extensions is not None:
        if isinstance(extensions, (bytes, bytearray)):
            extensions = [extensions]
        # [3] EXPLICIT SEQUENCE OF Extension
        parts.append(der_explicit(3, der_sequence(*extensions)))
    return der_sequence(*parts)
