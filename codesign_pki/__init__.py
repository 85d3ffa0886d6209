"""Minimal EC P-256 code-signing PKI built on a hand-written DER encoder."""

from codesign_pki.errors import (CertificateLoadError, CommandFailed,
                                 InvalidDER, InvalidPEM, MissingFiles)
from codesign_pki.issue_cert import (LeafFromExistingCA, NewCA,
                                     create_signing, generate_ca,
                                     generate_leaf_cert, load_ca)

__version__ = "0.1.0"
