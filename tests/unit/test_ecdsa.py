"""Tests for DER <-> JOSE ECDSA signature conversion."""

import os

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from jwskit.algorithms import Algorithm
from jwskit.ecdsa import component_size, der_to_jose, jose_to_der
from jwskit.exceptions import InvalidAlgorithm, MalformedSignature

SIZES = {"ES256": 32, "ES384": 48, "ES512": 66}
HASHES = {"ES256": hashes.SHA256, "ES384": hashes.SHA384, "ES512": hashes.SHA512}


def test_component_size():
    assert component_size("ES256") == 32
    assert component_size(Algorithm.ES384) == 48
    assert component_size("ES512") == 66
    with pytest.raises(InvalidAlgorithm):
        component_size("RS256")
    with pytest.raises(InvalidAlgorithm):
        component_size(None)


@pytest.mark.parametrize("alg", sorted(SIZES))
def test_der_to_jose_matches_decoded_integers(alg, ec_private_keys):
    der = ec_private_keys[alg].sign(b"message", ec.ECDSA(HASHES[alg]()))
    r, s = decode_dss_signature(der)
    size = SIZES[alg]

    jose = der_to_jose(der, alg)

    assert len(jose) == 2 * size
    assert jose == r.to_bytes(size, "big") + s.to_bytes(size, "big")


@pytest.mark.parametrize("alg", sorted(SIZES))
def test_jose_der_jose_is_identity(alg):
    size = SIZES[alg]
    for _ in range(20):
        jose = os.urandom(2 * size)
        assert der_to_jose(jose_to_der(jose, alg), alg) == jose


@pytest.mark.parametrize("alg", sorted(SIZES))
def test_jose_to_der_is_canonical(alg):
    size = SIZES[alg]
    for _ in range(20):
        jose = os.urandom(2 * size)
        r = int.from_bytes(jose[:size], "big")
        s = int.from_bytes(jose[size:], "big")
        assert jose_to_der(jose, alg) == encode_dss_signature(r, s)


def test_jose_to_der_handles_high_bit_and_leading_zeros():
    r = b"\x00" * 31 + b"\x01"
    s = b"\x80" + b"\x00" * 31
    der = jose_to_der(r + s, "ES256")

    assert der == bytes([0x30, 0x26, 0x02, 0x01, 0x01, 0x02, 0x21, 0x00, 0x80]) + b"\x00" * 31
    assert decode_dss_signature(der) == (1, 1 << 255)


def test_all_zero_components_keep_one_byte():
    der = jose_to_der(b"\x00" * 64, "ES256")
    assert der == bytes([0x30, 0x06, 0x02, 0x01, 0x00, 0x02, 0x01, 0x00])
    assert der_to_jose(der, "ES256") == b"\x00" * 64


def test_es512_uses_long_form_sequence_length():
    jose = b"\xff" * 132
    der = jose_to_der(jose, "ES512")

    assert der[:3] == bytes([0x30, 0x81, 0x8A])
    assert der_to_jose(der, "ES512") == jose


def test_der_to_jose_pads_short_components():
    der = encode_dss_signature(5, 128)
    jose = der_to_jose(der, "ES256")

    assert jose == b"\x00" * 31 + b"\x05" + b"\x00" * 31 + b"\x80"
    assert jose_to_der(jose, "ES256") == der


@pytest.mark.parametrize(
    "der",
    [
        b"",
        b"\x30",
        bytes([0x31, 0x06, 0x02, 0x01, 0x01, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x07, 0x02, 0x01, 0x01, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x03, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x06, 0x04, 0x01, 0x01, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x06, 0x02, 0x00, 0x02, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x06, 0x02, 0x01, 0x81, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x09, 0x02, 0x01, 0x01, 0x02, 0x01, 0x01, 0x02, 0x01, 0x01]),
        bytes([0x30, 0x80, 0x02, 0x01, 0x01, 0x02, 0x01, 0x01, 0x00, 0x00]),
        # redundant leading zero byte in r
        bytes([0x30, 0x08, 0x02, 0x02, 0x00, 0x05, 0x02, 0x02, 0x00, 0x80]),
    ],
)
def test_der_to_jose_rejects_malformed_der(der):
    with pytest.raises(MalformedSignature):
        der_to_jose(der, "ES256")


def test_der_to_jose_rejects_oversized_component():
    oversized = encode_dss_signature(1 << 256, 1)
    with pytest.raises(MalformedSignature):
        der_to_jose(oversized, "ES256")
    assert len(der_to_jose(oversized, "ES384")) == 96


@pytest.mark.parametrize("length", [0, 63, 65, 96, 132])
def test_jose_to_der_rejects_wrong_length(length):
    with pytest.raises(MalformedSignature):
        jose_to_der(b"\x01" * length, "ES256")
