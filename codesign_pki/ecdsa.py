from Cryptodome.Hash import SHA256
from Cryptodome.PublicKey import ECC
from Cryptodome.Signature import DSS

from codesign_pki.asn1_decoder import inspect_certificate
from codesign_pki.asn1_encoder import (bi, der_bit_string, der_integer,
                                       der_oid, der_sequence, ib)
from codesign_pki.errors import InvalidDER

OID_ecdsaWithSHA256 = "1.2.840.10045.4.3.2"
CURVE = "P-256"


def generate_keypair():
    return ECC.generate(curve=CURVE)

def public_point(key):
    # uncompressed point 04 || X || Y
    x = int(key.pointQ.x)
    y = int(key.pointQ.y)
    return b'\x04' + ib(x, 32) + ib(y, 32)

def private_key_der(key):
    # raw EC private key (RFC 5915), not PKCS#8
    return key.export_key(format='DER', use_pkcs8=False)

def load_private_key_der(der):
    try:
        key = ECC.import_key(bytes(der))
    except (ValueError, IndexError, TypeError) as e:
        raise InvalidDER("cannot load EC private key (%s)" % e)
    if not key.has_private():
        raise InvalidDER("not a private key")
    return key

def ecdsa_sign(key, data):
    # ECDSA P-256 over SHA-256(data), returned as SEQUENCE { r INTEGER, s INTEGER }
    h = SHA256.new(data)
    rs = DSS.new(key, 'fips-186-3', encoding='binary').sign(h)
    r = bi(rs[:32])
    s = bi(rs[32:])
    return der_sequence(der_integer(r), der_integer(s))

def sign_certificate(tbs_der, key):
    signature = ecdsa_sign(key, tbs_der)
    return der_sequence(
        tbs_der,
        der_sequence(der_oid(OID_ecdsaWithSHA256)),   # no NULL parameters
        der_bit_string(signature, 0)
    )

def verify_certificate(cert_der, public_key):
    # checks the certificate signature against public_key
    info = inspect_certificate(cert_der)
    verifier = DSS.new(public_key, 'fips-186-3', encoding='der')
    try:
        verifier.verify(SHA256.new(info.tbs), info.signature)
        return True
    except ValueError:
        return False
