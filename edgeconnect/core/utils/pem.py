"""PEM certificate chain normalization."""

from __future__ import annotations

import base64

from cryptography import x509
from cryptography.hazmat.primitives import serialization

PEM_LINE_LENGTH = 64
BEGIN_CERTIFICATE = "-----BEGIN CERTIFICATE-----"
END_CERTIFICATE = "-----END CERTIFICATE-----"

_CERTIFICATE_MARKERS = (b"-----BEGIN CERTIFICATE-----", b"-----BEGIN X509 CERTIFICATE-----")


def encode_certificate(der: bytes) -> str:
    """Render DER bytes as one PEM CERTIFICATE block with 64-char lines."""
    encoded = base64.b64encode(der).decode("ascii")
    lines = [BEGIN_CERTIFICATE]
    lines.extend(
        encoded[i : i + PEM_LINE_LENGTH] for i in range(0, len(encoded), PEM_LINE_LENGTH)
    )
    lines.append(END_CERTIFICATE)
    return "\n".join(lines) + "\n"


def format_pem_certificates(pem_data: bytes) -> str:
    """Keep only the X.509 certificates of a PEM bundle, re-encoded canonically.

    Private keys and other PEM objects are dropped. Order is preserved.

    Raises:
        ValueError: If a certificate in the bundle cannot be parsed
    """
    # load_pem_x509_certificates rejects a bundle without certificates
    if not any(marker in pem_data for marker in _CERTIFICATE_MARKERS):
        return ""
    certificates = x509.load_pem_x509_certificates(pem_data)
    return "".join(
        encode_certificate(certificate.public_bytes(serialization.Encoding.DER))
        for certificate in certificates
    )
