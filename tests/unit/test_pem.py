"""Unit tests for PEM chain normalization."""

import pytest

from conftest import make_certificate, make_private_key_pem
from edgeconnect.core.utils.pem import (
    BEGIN_CERTIFICATE,
    END_CERTIFICATE,
    encode_certificate,
    format_pem_certificates,
)


def test_encode_certificate_wraps_at_64_columns() -> None:
    der = bytes(range(256)) * 2

    pem = encode_certificate(der)

    lines = pem.rstrip("\n").split("\n")
    assert lines[0] == BEGIN_CERTIFICATE
    assert lines[-1] == END_CERTIFICATE
    body = lines[1:-1]
    assert all(len(line) == 64 for line in body[:-1])
    assert 0 < len(body[-1]) <= 64
    assert pem.endswith("\n")


def test_private_keys_are_dropped_and_order_kept() -> None:
    first_pem, first_der = make_certificate("first")
    second_pem, second_der = make_certificate("second")
    bundle = make_private_key_pem() + first_pem + second_pem

    result = format_pem_certificates(bundle)

    assert "PRIVATE KEY" not in result
    assert result == encode_certificate(first_der) + encode_certificate(second_der)


def test_x509_certificate_label_is_accepted() -> None:
    pem, der = make_certificate()
    legacy = pem.replace(b"CERTIFICATE-----", b"X509 CERTIFICATE-----")

    assert format_pem_certificates(legacy) == encode_certificate(der)


def test_bundle_without_certificates_is_empty() -> None:
    assert format_pem_certificates(make_private_key_pem()) == ""


def test_corrupt_certificate_block_raises() -> None:
    bundle = b"-----BEGIN CERTIFICATE-----\nbm90IGEgY2VydA==\n-----END CERTIFICATE-----\n"

    with pytest.raises(ValueError):
        format_pem_certificates(bundle)


def test_chain_after_foreign_blocks_is_kept() -> None:
    pem, der = make_certificate()
    params = b"-----BEGIN EC PARAMETERS-----\nBggqhkjOPQMBBw==\n-----END EC PARAMETERS-----\n"

    assert format_pem_certificates(params + pem) == encode_certificate(der)
