"""Key material shapes and loaders for signing and verification.

Key material is one of:

* ``bytes``: a shared secret, or PEM/DER encoded key data,
* ``str``: a shared secret or PEM text,
* a key handle: a ``cryptography`` RSA/EC key object, a :class:`SecretKey`,
  or any object with a ``kind`` of ``"secret"``, ``"private"`` or ``"public"``
  and an ``export()`` method returning the raw secret or PEM/DER key data.

The ``check_*`` validators decide which shapes an operation accepts and raise
:class:`~jwskit.exceptions.InvalidKeyType` otherwise. The ``load_*`` helpers
turn accepted text into ``cryptography`` key objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from .base64url import to_bytes
from .exceptions import InvalidKeyData, InvalidKeyType

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey]
PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey]

_PRIVATE_KEY_TYPES = (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey)
_PUBLIC_KEY_TYPES = (rsa.RSAPublicKey, ec.EllipticCurvePublicKey)

MSG_SECRET_KEY = "a string, bytes or a secret key handle"
MSG_SIGNER_KEY = "a string, bytes or a private key object"
MSG_VERIFIER_KEY = "a string, bytes or an asymmetric key object"


@dataclass(frozen=True)
class SecretKey:
    """Opaque handle for a shared HMAC secret."""

    value: bytes = field(repr=False)
    kind: str = field(default="secret", init=False)

    @classmethod
    def from_text(cls, text: str, encoding: str = "utf-8") -> "SecretKey":
        return cls(text.encode(encoding))

    def export(self) -> bytes:
        return bytes(self.value)


def _is_text(key: Any) -> bool:
    return isinstance(key, (str, bytes, bytearray))


def _is_handle(key: Any, *kinds: str) -> bool:
    return getattr(key, "kind", None) in kinds and callable(getattr(key, "export", None))


def check_secret_key(key: Any) -> bytes:
    """Return the raw secret for an HMAC key or raise ``InvalidKeyType``."""
    if _is_text(key):
        return to_bytes(key)
    if _is_handle(key, "secret"):
        return to_bytes(key.export())
    raise InvalidKeyType(MSG_SECRET_KEY, key)


def check_private_key(key: Any) -> None:
    """Raise ``InvalidKeyType`` unless ``key`` can be used for signing."""
    if _is_text(key) or isinstance(key, _PRIVATE_KEY_TYPES):
        return
    if _is_handle(key, "private"):
        return
    raise InvalidKeyType(MSG_SIGNER_KEY, key)


def check_public_key(key: Any) -> None:
    """Raise ``InvalidKeyType`` unless ``key`` can be used for verification.

    Public and private key objects are both accepted, as are exportable
    handles of either kind.
    """
    if _is_text(key) or isinstance(key, _PUBLIC_KEY_TYPES + _PRIVATE_KEY_TYPES):
        return
    if _is_handle(key, "public", "private"):
        return
    raise InvalidKeyType(MSG_VERIFIER_KEY, key)


def _is_pem(data: bytes) -> bool:
    return b"-----BEGIN" in data


def load_signing_key(key: Any) -> PrivateKey:
    """Load a private key object from PEM/DER key material."""
    check_private_key(key)
    if isinstance(key, _PRIVATE_KEY_TYPES):
        return key

    data = to_bytes(key.export() if _is_handle(key, "private") else key)
    try:
        if _is_pem(data):
            loaded = serialization.load_pem_private_key(data, password=None)
        else:
            loaded = serialization.load_der_private_key(data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyData(str(exc), key) from exc

    if not isinstance(loaded, _PRIVATE_KEY_TYPES):
        raise InvalidKeyType("an RSA or EC private key", loaded)
    return loaded


def load_verifying_key(key: Any) -> PublicKey:
    """Load a public key object from PEM/DER, a certificate or a key object."""
    check_public_key(key)
    if isinstance(key, _PRIVATE_KEY_TYPES):
        return key.public_key()
    if isinstance(key, _PUBLIC_KEY_TYPES):
        return key

    data = to_bytes(key.export() if _is_handle(key, "public", "private") else key)
    try:
        if b"-----BEGIN CERTIFICATE" in data:
            loaded = x509.load_pem_x509_certificate(data).public_key()
        elif _is_pem(data) and b"PRIVATE KEY-----" in data:
            loaded = serialization.load_pem_private_key(data, password=None).public_key()
        elif _is_pem(data):
            loaded = serialization.load_pem_public_key(data)
        else:
            loaded = serialization.load_der_public_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyData(str(exc), key) from exc

    if not isinstance(loaded, _PUBLIC_KEY_TYPES):
        raise InvalidKeyType("an RSA or EC public key", loaded)
    return loaded
