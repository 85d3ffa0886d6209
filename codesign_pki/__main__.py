#!/usr/bin/env python3

import argparse
import sys

from codesign_pki.asn1_decoder import inspect_certificate
from codesign_pki.errors import CertificateLoadError, CommandFailed
from codesign_pki.issue_cert import (DEFAULT_CA_CN, DEFAULT_LEAF_CN,
                                     DEFAULT_VALIDITY_YEARS,
                                     LeafFromExistingCA, NewCA, create_signing)
from codesign_pki.pem import pem_to_der

DEFAULT_OUTPUT_DIR = ".signing"


def build_parser():
    parser = argparse.ArgumentParser(prog="codesign-pki",
                                     description="EC P-256 code signing CA and leaf certificates")
    sub = parser.add_subparsers(dest="command")

    create = sub.add_parser("create-signing", help="create a CA and optionally a leaf signing certificate")
    create.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR,
                        help="directory for the generated files (default: %(default)s)")
    create.add_argument("--ca-dir", help="reuse the CA (ca.key, ca.der) in this directory")
    create.add_argument("--ca-cn", default=DEFAULT_CA_CN, help="CA common name")
    create.add_argument("--leaf-cn", default=DEFAULT_LEAF_CN, help="leaf common name")
    create.add_argument("--create-leaf-cert", action="store_true",
                        help="also issue a codeSigning leaf certificate")
    create.add_argument("--overwrite", action="store_true",
                        help="replace existing signing files in the output directory")
    create.add_argument("--validity-years", type=int, default=DEFAULT_VALIDITY_YEARS,
                        help="certificate validity in years, 1-30 (default: %(default)s)")
    create.add_argument("--verbose", "--vv", action="store_true")

    inspect = sub.add_parser("inspect", help="print the fields of a certificate")
    inspect.add_argument("cert_file", help="certificate (in PEM or DER form)")
    return parser

def read_cert(filename):
    # converts PEM content (if it is PEM) to DER
    with open(filename, "rb") as f:
        content = f.read()
    if content[:2] == b'--':
        content = pem_to_der(content, "CERTIFICATE")
    return content

def cmd_create_signing(args):
    request = LeafFromExistingCA(args.ca_dir) if args.ca_dir else NewCA()
    result = create_signing(
        args.output_dir,
        request=request,
        ca_cn=args.ca_cn,
        leaf_cn=args.leaf_cn,
        create_leaf_cert=args.create_leaf_cert,
        validity_years=args.validity_years,
        overwrite=args.overwrite,
        verbose=args.verbose,
    )
    print("[+] CA certificate:", result.ca_crt_path)
    if result.leaf_crt_path:
        print("[+] Leaf certificate:", result.leaf_crt_path)
        print("[+] Leaf private key (DER):", result.leaf_key_der_path)

def cmd_inspect(args):
    info = inspect_certificate(read_cert(args.cert_file))
    print("Version:    v%d" % (info.version + 1))
    print("Serial:     %x" % info.serial)
    print("Issuer:     CN=%s" % info.issuer_cn)
    print("Subject:    CN=%s" % info.subject_cn)
    print("Not before: %s" % info.not_before.isoformat())
    print("Not after:  %s" % info.not_after.isoformat())
    print("Public key: %s" % info.public_point.hex())
    for oid, critical, value in info.extensions:
        print("Extension:  %s%s %s" % (oid, " (critical)" if critical else "", value.hex()))

def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1
    try:
        if args.command == "create-signing":
            cmd_create_signing(args)
        else:
            cmd_inspect(args)
    except (CertificateLoadError, CommandFailed, OSError) as e:
        print("[-] %s" % e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
