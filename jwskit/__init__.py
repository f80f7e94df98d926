"""jwskit: JSON Web Signature signing and verification core."""

from .algorithms import ALGORITHMS, Algorithm, AlgorithmPair, Family, create_algorithm
from .exceptions import (
    InvalidAlgorithm,
    InvalidKeyData,
    InvalidKeyType,
    JwsError,
    MalformedPayload,
    MalformedSignature,
    MissingAlgorithm,
    StreamClosedError,
    StreamPendingError,
)
from .jws import DecodedToken, decode, encode, get_unverified_header, is_valid_token, verify
from .keys import SecretKey
from .stream import DataCell, SignStream, StreamState, VerifyStream, create_sign, create_verify

sign = encode

__version__ = "0.1.0"
__all__ = [
    "ALGORITHMS",
    "Algorithm",
    "AlgorithmPair",
    "Family",
    "create_algorithm",
    "DecodedToken",
    "encode",
    "sign",
    "decode",
    "verify",
    "is_valid_token",
    "get_unverified_header",
    "SecretKey",
    "DataCell",
    "SignStream",
    "VerifyStream",
    "StreamState",
    "create_sign",
    "create_verify",
    "JwsError",
    "InvalidAlgorithm",
    "InvalidKeyType",
    "InvalidKeyData",
    "MalformedSignature",
    "MalformedPayload",
    "MissingAlgorithm",
    "StreamClosedError",
    "StreamPendingError",
]
