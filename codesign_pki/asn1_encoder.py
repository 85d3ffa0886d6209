import datetime


def ib(i, length=False):
    # converts integer to bytes
    if length is False:
        if i == 0:
            return b'\x00'
        length = (i.bit_length()+7)//8
    b = b''
    for _ in range(length):
        b = bytes([i & 0xff]) + b
        i >>= 8
    return b

def bi(b):
    # converts bytes to integer
    i = 0
    for byte in b:
        i <<= 8
        i |= byte
    return i

#==== ASN1 encoder start ====

def der_len(n):
    if n < 0x80:
        return bytes([n])
    s = ib(n)
    return bytes([0x80 | len(s)]) + s

def der_tlv(tag, content):
    return bytes([tag]) + der_len(len(content)) + bytes(content)

def der_integer(value):
    # bytes are taken as an unsigned big-endian magnitude
    if isinstance(value, int):
        if value < 0:
            raise ValueError("only non-negative INTEGERs are supported")
        value = ib(value)
    b = bytes(value)
    if not b:
        b = b'\x00'
    if b[0] & 0x80:
        b = b'\x00' + b  # keep it positive
    return der_tlv(0x02, b)

def der_bit_string(b, unused_bits=0):
    return der_tlv(0x03, bytes([unused_bits]) + bytes(b))

def der_octet_string(b):
    return der_tlv(0x04, b)

def der_null():
    return der_tlv(0x05, b'')

def der_boolean(value):
    return der_tlv(0x01, b'\xff' if value else b'\x00')

def _b128(n):
    if n == 0:
        return b'\x00'
    parts = []
    while n:
        parts.append(n & 0x7f)
        n >>= 7
    parts.reverse()
    for i in range(len(parts) - 1):
        parts[i] |= 0x80
    return bytes(parts)

def der_oid(dotted):
    arcs = [int(x) for x in dotted.split('.')]
    if len(arcs) < 2:
        raise ValueError("OID must have at least two components")
    body = _b128(40*arcs[0] + arcs[1])
    body += b''.join(_b128(a) for a in arcs[2:])
    return der_tlv(0x06, body)

def der_utf8string(s):
    return der_tlv(0x0C, s.encode('utf-8'))

def der_sequence(*items):
    return der_tlv(0x30, b''.join(items))

def der_set(*items):
    # DER SET OF should be sorted; every SET here holds a single element
    return der_tlv(0x31, b''.join(items))

def der_explicit(tagnum, inner):
    # context-specific EXPLICIT (constructed)
    if not (0 <= tagnum <= 30):
        raise ValueError("Only tags 0..30 supported")
    return der_tlv(0xA0 | tagnum, inner)

def der_generalized_time(dt):
    # naive datetimes are taken as UTC
    if dt.tzinfo is not None:
        dt = dt.astimezone(datetime.timezone.utc)
    return der_tlv(0x18, dt.strftime("%Y%m%d%H%M%SZ").encode('ascii'))

#==== ASN1 encoder end ====
