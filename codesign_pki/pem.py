import base64
import binascii

from codesign_pki.errors import InvalidPEM


def pem_wrap(der, label):
    b64 = base64.b64encode(bytes(der)).decode('ascii')
    lines = [b64[i:i+64] for i in range(0, len(b64), 64)]
    return ("-----BEGIN %s-----\n" % label +
            "".join(line + "\n" for line in lines) +
            "-----END %s-----\n" % label)

def pem_to_der(pem, label):
    # label is only used in messages: any BEGIN/END pair is accepted
    if isinstance(pem, (bytes, bytearray)):
        try:
            pem = bytes(pem).decode('ascii')
        except UnicodeDecodeError:
            raise InvalidPEM("not ASCII text")
    lines = pem.splitlines()
    begin = next((i for i, line in enumerate(lines) if line.startswith("-----BEGIN")), None)
    end = next((i for i, line in enumerate(lines) if line.startswith("-----END")), None)
    if begin is None or end is None or begin >= end:
        raise InvalidPEM("missing BEGIN/END %s" % label)
    body = "".join(line.strip() for line in lines[begin+1:end])
    try:
        return base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidPEM("base64 decode failed")
