"""Conversion between DER and JOSE encoded ECDSA signatures.

``cryptography`` produces and consumes ECDSA signatures as an ASN.1 DER
``SEQUENCE { INTEGER r, INTEGER s }``. JWS stores them as the fixed-width
big-endian concatenation ``r || s`` where each component is padded to the
byte length of the curve order.
"""

from __future__ import annotations

from typing import Any, Union

from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from .exceptions import InvalidAlgorithm, MalformedSignature

# ceil(curve bits / 8) for P-256, P-384 and P-521
_COMPONENT_SIZES = {"ES256": 32, "ES384": 48, "ES512": 66}

BytesLike = Union[bytes, bytearray, memoryview]


def component_size(alg: Any) -> int:
    """Return the byte width of ``r`` and ``s`` for an ES algorithm."""
    alg = getattr(alg, "value", alg)
    try:
        return _COMPONENT_SIZES[alg]
    except (KeyError, TypeError):
        raise InvalidAlgorithm(alg) from None


def der_to_jose(der: BytesLike, alg: Any) -> bytes:
    """Convert a DER ECDSA signature to the fixed-width JOSE form."""
    size = component_size(alg)
    try:
        r, s = decode_dss_signature(bytes(der))
    except ValueError as exc:
        raise MalformedSignature(f"invalid DER ECDSA signature: {exc}") from exc

    for component in (r, s):
        if component < 0:
            raise MalformedSignature("DER INTEGER is negative")
        if component.bit_length() > 8 * size:
            raise MalformedSignature(
                f"signature component is {(component.bit_length() + 7) // 8} bytes, "
                f"expected at most {size}"
            )
    return r.to_bytes(size, "big") + s.to_bytes(size, "big")


def jose_to_der(jose: BytesLike, alg: Any) -> bytes:
    """Convert a fixed-width JOSE ECDSA signature to minimal DER."""
    size = component_size(alg)
    jose = bytes(jose)
    if len(jose) != 2 * size:
        raise MalformedSignature(
            f"{getattr(alg, 'value', alg)} signature must be {2 * size} bytes, got {len(jose)}"
        )
    r = int.from_bytes(jose[:size], "big")
    s = int.from_bytes(jose[size:], "big")
    return encode_dss_signature(r, s)
