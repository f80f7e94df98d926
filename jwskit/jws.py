"""Compact JWS serialization: encode, decode and verify three-segment tokens."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field

from . import base64url
from .algorithms import Algorithm, create_algorithm
from .config import get_config
from .exceptions import MalformedPayload, MissingAlgorithm

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[A-Za-z0-9_-]*\.[A-Za-z0-9_-]*\.[A-Za-z0-9_-]*")

Token = Union[str, bytes, bytearray]


class DecodedToken(BaseModel):
    """Header, payload and signature of a token, as decoded without verification."""

    header: Dict[str, Any]
    payload: Any = None
    signature: str = Field(default="", description="base64url signature segment")


def _header_text(header: Any) -> Union[str, bytes]:
    if isinstance(header, (str, bytes, bytearray)):
        return header
    return json.dumps(header, separators=(",", ":"))


def _payload_bytes(payload: Any, encoding: str) -> bytes:
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if not isinstance(payload, str):
        payload = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return payload.encode(encoding)


def secured_input(header: Any, payload: Any, encoding: Optional[str] = None) -> str:
    """Return ``base64url(header) + "." + base64url(payload)``.

    Header objects are serialized as compact JSON with non-ASCII characters
    escaped; the payload is encoded with ``encoding`` unless it is already
    bytes.
    """
    encoding = encoding or get_config().encoding
    encoded_header = base64url.encode(_header_text(header))
    encoded_payload = base64url.encode(_payload_bytes(payload, encoding))
    return f"{encoded_header}.{encoded_payload}"


def encode(
    header: Mapping[str, Any],
    payload: Any,
    key: Any = None,
    encoding: Optional[str] = None,
) -> str:
    """Sign ``payload`` with the algorithm named by ``header["alg"]``.

    Args:
        header: JOSE header. Must contain ``alg``.
        payload: Text, bytes or any JSON-serializable value.
        key: Secret or private key material for the algorithm. Ignored for
            ``none``.
        encoding: Text encoding applied to a text payload.

    Returns:
        The compact token ``header.payload.signature``.

    Raises:
        InvalidAlgorithm: If ``alg`` is missing or unsupported.
        InvalidKeyType: If ``key`` does not fit the algorithm.
    """
    if not isinstance(header, Mapping):
        raise TypeError(f"header must be a mapping, got {type(header).__name__}")
    algorithm = create_algorithm(header.get("alg"))
    signing_input = secured_input(header, payload, encoding)
    signature = algorithm.sign(signing_input, key)
    logger.debug(f"Signed token with {algorithm.algorithm.value}")
    return f"{signing_input}.{signature}"


def _token_text(token: Any) -> Optional[str]:
    if isinstance(token, (bytes, bytearray)):
        try:
            return bytes(token).decode("ascii")
        except UnicodeDecodeError:
            return None
    if isinstance(token, str):
        return token
    return None


def _header_from_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        raw = base64url.decode(token.split(".", 1)[0])
        header = json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError):
        return None
    return header if isinstance(header, dict) else None


def is_valid_token(token: Token) -> bool:
    """Return True if ``token`` is a three-segment token with a JSON object header.

    The signature is not checked.
    """
    text = _token_text(token)
    if text is None or not _TOKEN_RE.fullmatch(text):
        return False
    return _header_from_token(text) is not None


def get_unverified_header(token: Token) -> Optional[Dict[str, Any]]:
    """Return the decoded header of a structurally valid token, or None."""
    if not is_valid_token(token):
        return None
    return _header_from_token(_token_text(token))


def decode(
    token: Token, require_json: bool = False, encoding: Optional[str] = None
) -> Optional[DecodedToken]:
    """Decode ``token`` without verifying its signature.

    The payload is parsed as JSON when the header has ``typ == "JWT"`` or
    ``require_json`` is set; otherwise it is returned as text.

    Returns:
        The decoded token, or None if the token is structurally invalid.

    Raises:
        MalformedPayload: If the payload must be JSON but is not, or cannot
            be decoded with ``encoding``.
    """
    text = _token_text(token)
    if text is None or not is_valid_token(text):
        logger.debug("Rejected structurally invalid token")
        return None

    header = _header_from_token(text)
    _, payload_segment, signature = text.split(".")
    try:
        raw_payload = base64url.decode(payload_segment)
    except ValueError:
        logger.debug("Rejected token with undecodable payload segment")
        return None

    encoding = encoding or get_config().encoding
    try:
        payload: Any = raw_payload.decode(encoding)
    except UnicodeDecodeError as exc:
        raise MalformedPayload(f"payload is not valid {encoding} text") from exc

    if header.get("typ") == "JWT" or require_json:
        try:
            payload = json.loads(payload)
        except (ValueError, RecursionError) as exc:
            raise MalformedPayload(f"payload is not valid JSON: {exc}") from exc

    return DecodedToken(header=header, payload=payload, signature=signature)


def verify(token: Token, algorithm: Union[str, Algorithm, None], key: Any) -> bool:
    """Check the signature of ``token`` using a caller-pinned ``algorithm``.

    The header is not consulted: the first two segments form the secured input
    and the third is the signature.

    Raises:
        MissingAlgorithm: If ``algorithm`` is empty.
        InvalidAlgorithm: If ``algorithm`` is unsupported.
        InvalidKeyType: If ``key`` does not fit the algorithm.
    """
    if not algorithm:
        raise MissingAlgorithm()
    pair = create_algorithm(algorithm)

    text = _token_text(token)
    if text is None:
        return False
    parts = text.split(".")
    if len(parts) < 3:
        return False
    return pair.verify(f"{parts[0]}.{parts[1]}", parts[2], key)
