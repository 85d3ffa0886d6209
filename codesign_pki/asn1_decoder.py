import collections
import datetime

from pyasn1.codec.der import decoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import univ

from codesign_pki.errors import InvalidDER

OID_commonName = "2.5.4.3"

CertificateInfo = collections.namedtuple("CertificateInfo", [
    "version", "serial", "issuer_cn", "subject_cn", "not_before",
    "not_after", "public_point", "extensions", "tbs", "signature",
])


def der_read_tlv(data, offset):
    # returns (value_start, value_end, next_offset) of the TLV at offset
    if offset >= len(data):
        raise InvalidDER("truncated")
    pos = offset + 1
    if pos >= len(data):
        raise InvalidDER("truncated length")
    length = data[pos]
    pos += 1
    if length & 0x80:
        num = length & 0x7f
        if num == 0 or num > 4 or pos + num > len(data):
            raise InvalidDER("long length")
        length = 0
        for _ in range(num):
            length = (length << 8) | data[pos]
            pos += 1
    end = pos + length
    if end > len(data):
        raise InvalidDER("value overflow")
    return pos, end, end

def extract_subject_from_cert_der(cert_der):
    # returns the DER-encoded subject Name of a certificate, unparsed
    cert_der = bytes(cert_der)
    if not cert_der or cert_der[0] != 0x30:
        raise InvalidDER("cert not SEQUENCE")
    pos, _, _ = der_read_tlv(cert_der, 0)
    if pos >= len(cert_der) or cert_der[pos] != 0x30:
        raise InvalidDER("tbs not SEQUENCE")
    pos, _, _ = der_read_tlv(cert_der, pos)
    # v1 certificates carry no [0] version
    if pos < len(cert_der) and cert_der[pos] == 0xA0:
        _, _, pos = der_read_tlv(cert_der, pos)
    # serialNumber, signature, issuer, validity
    for _ in range(4):
        _, _, pos = der_read_tlv(cert_der, pos)
    if pos >= len(cert_der) or cert_der[pos] != 0x30:
        raise InvalidDER("subject not SEQUENCE")
    _, end, _ = der_read_tlv(cert_der, pos)
    return cert_der[pos:end]

def _name_cn(name):
    for rdn in name:                   # RDNSequence
        for atv in rdn:                # AttributeTypeAndValue
            if str(atv[0]) == OID_commonName:
                return str(atv[1])
    return None

def _parse_time(t):
    s = str(t)
    fmt = "%Y%m%d%H%M%SZ" if len(s) == 15 else "%y%m%d%H%M%SZ"
    return datetime.datetime.strptime(s, fmt).replace(tzinfo=datetime.timezone.utc)

def inspect_certificate(cert_der):
    """Decode a DER certificate with pyasn1 and summarize its fields.

    Extensions are returned as a list of (oid, critical, value) tuples where
    value is the DER inside the extension's OCTET STRING.
    """
    cert_der = bytes(cert_der)
    try:
        cert, rest = decoder.decode(cert_der)
    except PyAsn1Error as e:
        raise InvalidDER(str(e))
    if rest:
        raise InvalidDER("trailing data after certificate")

    try:
        tbs = cert[0]
        if tbs[0].tagSet != univ.Integer.tagSet:
            version = int(tbs[0])
            off = 1
        else:
            version = 0
            off = 0
        validity = tbs[off+3]
        extensions = []
        if len(tbs) > off + 6:
            for ext in tbs[off+6]:
                if len(ext) == 3:
                    extensions.append((str(ext[0]), bool(ext[1]), ext[2].asOctets()))
                else:
                    extensions.append((str(ext[0]), False, ext[1].asOctets()))

        # raw TBS bytes, exactly as signed
        tbs_start, _, _ = der_read_tlv(cert_der, 0)
        _, tbs_end, _ = der_read_tlv(cert_der, tbs_start)
        return CertificateInfo(
            version=version,
            serial=int(tbs[off]),
            issuer_cn=_name_cn(tbs[off+2]),
            subject_cn=_name_cn(tbs[off+4]),
            not_before=_parse_time(validity[0]),
            not_after=_parse_time(validity[1]),
            public_point=tbs[off+5][1].asOctets(),
            extensions=extensions,
            tbs=cert_der[tbs_start:tbs_end],
            signature=cert[2].asOctets(),
        )
    except (PyAsn1Error, IndexError, TypeError, ValueError) as e:
        raise InvalidDER("unexpected certificate structure (%s)" % e)
