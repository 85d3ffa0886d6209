"""CA and leaf certificate issuance for package signing.

generate_ca() creates a self-signed EC P-256 CA, generate_leaf_cert() issues a
codeSigning certificate under it and load_ca() picks an existing CA back up
from disk. create_signing() ties them together the way the command line does.

Files written to the output directory:

    ca.key, leaf.key     PEM "PRIVATE KEY" holding the raw EC private key DER
    ca.crt, leaf.crt     PEM "CERTIFICATE"
    ca.der, leaf.der     DER certificate
    leaf.key.der         raw EC private key DER
"""
import collections
import datetime
import os

from codesign_pki.asn1_decoder import extract_subject_from_cert_der
from codesign_pki.ecdsa import (generate_keypair, load_private_key_der,
                                private_key_der, sign_certificate)
from codesign_pki.errors import CommandFailed, MissingFiles
from codesign_pki.pem import pem_to_der, pem_wrap
from codesign_pki.x509 import (add_years, build_tbs_certificate,
                               der_basic_constraints_ca,
                               der_extended_key_usage_code_signing, der_name,
                               der_subject_public_key_info, random_serial)

DEFAULT_CA_CN = "Package Signing CA"
DEFAULT_LEAF_CN = "Package Signing"
DEFAULT_VALIDITY_YEARS = 10
MIN_VALIDITY_YEARS = 1
MAX_VALIDITY_YEARS = 30

NewCA = collections.namedtuple("NewCA", [])
LeafFromExistingCA = collections.namedtuple("LeafFromExistingCA", ["ca_dir"])

SigningResult = collections.namedtuple("SigningResult", [
    "ca_crt_path", "ca_der_path", "leaf_crt_path", "leaf_key_der_path",
])


def _now():
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)

def _write_text(path, text):
    with open(path, "w", encoding="ascii") as f:
        f.write(text)

def _write_bytes(path, data):
    with open(path, "wb") as f:
        f.write(data)

def ca_subject_der(ca_cn):
    return der_name(ca_cn)

def generate_ca(output_dir, common_name, validity_years=DEFAULT_VALIDITY_YEARS,
                verbose=False, not_before=None):
    # returns (private key, certificate DER)
    ca_key = generate_keypair()
    subject = der_name(common_name)
    not_before = not_before or _now()
    not_after = add_years(not_before, validity_years)
    tbs = build_tbs_certificate(
        version=2,
        serial=random_serial(),
        issuer=subject,                    # self-signed
        not_before=not_before,
        not_after=not_after,
        subject=subject,
        spki=der_subject_public_key_info(ca_key),
        extensions=der_basic_constraints_ca(),
    )
    cert_der = sign_certificate(tbs, ca_key)

    ca_key_path = os.path.join(output_dir, "ca.key")
    ca_crt_path = os.path.join(output_dir, "ca.crt")
    ca_der_path = os.path.join(output_dir, "ca.der")

    # TODO: write to temporary names and rename so a crash cannot leave a partial CA
    _write_text(ca_key_path, pem_wrap(private_key_der(ca_key), "PRIVATE KEY"))
    _write_text(ca_crt_path, pem_wrap(cert_der, "CERTIFICATE"))
    _write_bytes(ca_der_path, cert_der)

    if verbose:
        print("   Wrote %s, %s, %s" % (ca_key_path, ca_crt_path, ca_der_path))
    return ca_key, cert_der

def generate_leaf_cert(output_dir, ca_private_key, ca_subject, leaf_cn,
                       validity_years=DEFAULT_VALIDITY_YEARS, verbose=False,
                       not_before=None):
    # returns (leaf.crt path, leaf.key.der path)
    leaf_key = generate_keypair()
    not_before = not_before or _now()
    not_after = add_years(not_before, validity_years)
    tbs = build_tbs_certificate(
        version=2,
        serial=random_serial(),
        issuer=bytes(ca_subject),          # verbatim CA subject
        not_before=not_before,
        not_after=not_after,
        subject=der_name(leaf_cn),
        spki=der_subject_public_key_info(leaf_key),
        extensions=der_extended_key_usage_code_signing(),
    )
    cert_der = sign_certificate(tbs, ca_private_key)
    key_der = private_key_der(leaf_key)

    leaf_key_path = os.path.join(output_dir, "leaf.key")
    leaf_crt_path = os.path.join(output_dir, "leaf.crt")
    leaf_der_path = os.path.join(output_dir, "leaf.der")
    leaf_key_der_path = os.path.join(output_dir, "leaf.key.der")

    _write_text(leaf_key_path, pem_wrap(key_der, "PRIVATE KEY"))
    _write_text(leaf_crt_path, pem_wrap(cert_der, "CERTIFICATE"))
    _write_bytes(leaf_der_path, cert_der)
    _write_bytes(leaf_key_der_path, key_der)

    if verbose:
        print("   Wrote leaf cert and key")
    return leaf_crt_path, leaf_key_der_path

def load_ca(ca_dir):
    # returns (private key, DER-encoded CA subject)
    ca_key_path = os.path.join(ca_dir, "ca.key")
    ca_der_path = os.path.join(ca_dir, "ca.der")
    if not (os.path.isfile(ca_key_path) and os.path.isfile(ca_der_path)):
        raise MissingFiles("ca.key and ca.der must exist in %s" % ca_dir)
    with open(ca_key_path, "r", encoding="ascii", errors="replace") as f:
        key_der = pem_to_der(f.read(), "PRIVATE KEY")
    ca_key = load_private_key_der(key_der)
    with open(ca_der_path, "rb") as f:
        cert_der = f.read()
    return ca_key, extract_subject_from_cert_der(cert_der)

def create_signing(output_dir, request=None, ca_cn=DEFAULT_CA_CN,
                   leaf_cn=DEFAULT_LEAF_CN, create_leaf_cert=False,
                   validity_years=DEFAULT_VALIDITY_YEARS, overwrite=False,
                   verbose=False):
    """Create (or reuse) a signing CA and optionally a leaf certificate.

    request is NewCA() (the default) or LeafFromExistingCA(ca_dir). Reusing an
    existing CA only makes sense together with create_leaf_cert.
    """
    if request is None:
        request = NewCA()
    if not MIN_VALIDITY_YEARS <= validity_years <= MAX_VALIDITY_YEARS:
        raise CommandFailed("--validity-years must be between %d and %d (got: %d)"
                            % (MIN_VALIDITY_YEARS, MAX_VALIDITY_YEARS, validity_years))
    if isinstance(request, LeafFromExistingCA) and not create_leaf_cert:
        raise CommandFailed("--ca-dir requires --create-leaf-cert (leaf cert is "
                            "created using the existing CA in that directory)")

    if isinstance(request, LeafFromExistingCA):
        print("[+] Using existing CA from %s" % request.ca_dir)
        ca_key, subject = load_ca(request.ca_dir)
        ca_crt_path = os.path.join(request.ca_dir, "ca.crt")
        ca_der_path = os.path.join(request.ca_dir, "ca.der")
        if verbose:
            print("   Loaded ca.key and ca.der, extracted CA subject")
        if not os.path.isdir(output_dir):
            os.makedirs(output_dir)
            if verbose:
                print("   Created output directory: %s" % output_dir)
    else:
        if not os.path.isdir(output_dir):
            os.makedirs(output_dir)
            if verbose:
                print("   Created output directory: %s" % output_dir)
        elif os.path.exists(os.path.join(output_dir, "ca.key")) and not overwrite:
            raise CommandFailed("Signing files already exist in %s. Use --overwrite to replace."
                                % output_dir)
        print("[+] Generating CA (EC P-256, CN=\"%s\", valid %d year%s)"
              % (ca_cn, validity_years, "" if validity_years == 1 else "s"))
        ca_key, _ = generate_ca(output_dir, ca_cn, validity_years, verbose)
        subject = ca_subject_der(ca_cn)
        ca_crt_path = os.path.join(output_dir, "ca.crt")
        ca_der_path = os.path.join(output_dir, "ca.der")
        print("[+] CA key and certificate created (ca.key, ca.crt, ca.der)")

    leaf_crt_path = leaf_key_der_path = None
    if create_leaf_cert:
        print("[+] Generating leaf signing certificate (CN=\"%s\")" % leaf_cn)
        leaf_crt_path, leaf_key_der_path = generate_leaf_cert(
            output_dir, ca_key, subject, leaf_cn, validity_years, verbose)
        print("[+] Leaf certificate and key created (leaf.crt, leaf.der, leaf.key, leaf.key.der)")

    return SigningResult(ca_crt_path, ca_der_path, leaf_crt_path, leaf_key_der_path)
