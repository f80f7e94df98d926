"""JWS algorithm identifiers and their sign/verify implementations."""

from __future__ import annotations

import enum
import json
import logging
import re
from dataclasses import dataclass
from hmac import compare_digest
from typing import Any, Callable, Optional, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa

from . import base64url, ecdsa, keys
from .exceptions import InvalidAlgorithm, InvalidKeyType

logger = logging.getLogger(__name__)

_ALGORITHM_RE = re.compile(r"(RS|PS|ES|HS)(256|384|512)|none")

_HASHES = {256: hashes.SHA256, 384: hashes.SHA384, 512: hashes.SHA512}

_CURVES = {256: "secp256r1", 384: "secp384r1", 512: "secp521r1"}


class Family(str, enum.Enum):
    """Algorithm family independent of digest size."""

    HS = "hs"
    RS = "rs"
    PS = "ps"
    ES = "es"
    NONE = "none"


class Algorithm(str, enum.Enum):
    """Closed set of supported JWS ``alg`` values."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    NONE = "none"

    @property
    def family(self) -> Family:
        if self is Algorithm.NONE:
            return Family.NONE
        return Family(self.value[:2].lower())

    @property
    def bits(self) -> Optional[int]:
        if self is Algorithm.NONE:
            return None
        return int(self.value[2:])

    def hash_algorithm(self) -> hashes.HashAlgorithm:
        if self.bits is None:
            raise InvalidAlgorithm(self.value)
        return _HASHES[self.bits]()

    @classmethod
    def parse(cls, identifier: Any) -> "Algorithm":
        """Parse ``identifier`` or raise :class:`InvalidAlgorithm`.

        Identifiers are matched literally: ``"hs256"`` is rejected.
        """
        if isinstance(identifier, Algorithm):
            return identifier
        if not isinstance(identifier, str) or not _ALGORITHM_RE.fullmatch(identifier):
            raise InvalidAlgorithm(identifier)
        return cls(identifier)


ALGORITHMS = tuple(member.value for member in Algorithm)

Signer = Callable[[Any, Any], str]
Verifier = Callable[[Any, Any, Any], bool]


@dataclass(frozen=True)
class AlgorithmPair:
    """Sign and verify callables bound to one algorithm."""

    algorithm: Algorithm
    sign: Signer
    verify: Verifier


def _normalize_input(thing: Any) -> bytes:
    if isinstance(thing, (str, bytes, bytearray)):
        return base64url.to_bytes(thing)
    return json.dumps(thing, separators=(",", ":")).encode("utf-8")


def _signature_text(signature: Any) -> Optional[str]:
    if isinstance(signature, (bytes, bytearray)):
        return bytes(signature).decode("utf-8", errors="replace")
    if isinstance(signature, str):
        return signature
    return None


def _decode_signature(signature: Any) -> Optional[bytes]:
    text = _signature_text(signature)
    if text is None:
        return None
    try:
        return base64url.decode(text)
    except ValueError:
        return None


def _require_rsa(key: Any, alg: Algorithm) -> None:
    if not isinstance(key, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
        raise InvalidKeyType(f"an RSA key for {alg.value}", key)


def _require_ec(key: Any, alg: Algorithm) -> None:
    if not isinstance(key, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
        raise InvalidKeyType(f"an EC key for {alg.value}", key)
    expected = _CURVES[alg.bits]
    if key.curve.name != expected:
        raise InvalidKeyType(
            f"an EC key on {expected} for {alg.value}",
            key,
            message=f"{alg.value} requires a {expected} key, got {key.curve.name}",
        )


def _rsa_padding(alg: Algorithm) -> padding.AsymmetricPadding:
    if alg.family is Family.PS:
        digest = alg.hash_algorithm()
        return padding.PSS(mgf=padding.MGF1(digest), salt_length=digest.digest_size)
    return padding.PKCS1v15()


def create_hmac_signer(alg: Algorithm) -> Signer:
    def sign(secured_input: Any, secret: Any) -> str:
        mac = hmac.HMAC(keys.check_secret_key(secret), alg.hash_algorithm())
        mac.update(_normalize_input(secured_input))
        return base64url.encode(mac.finalize())

    return sign


def create_hmac_verifier(alg: Algorithm) -> Verifier:
    signer = create_hmac_signer(alg)

    def verify(secured_input: Any, signature: Any, secret: Any) -> bool:
        computed = signer(secured_input, secret)
        text = _signature_text(signature)
        if text is None:
            return False
        return compare_digest(text.encode("utf-8"), computed.encode("ascii"))

    return verify


def create_rsa_signer(alg: Algorithm) -> Signer:
    def sign(secured_input: Any, private_key: Any) -> str:
        key = keys.load_signing_key(private_key)
        _require_rsa(key, alg)
        signature = key.sign(
            _normalize_input(secured_input), _rsa_padding(alg), alg.hash_algorithm()
        )
        return base64url.encode(signature)

    return sign


def create_rsa_verifier(alg: Algorithm) -> Verifier:
    def verify(secured_input: Any, signature: Any, public_key: Any) -> bool:
        key = keys.load_verifying_key(public_key)
        _require_rsa(key, alg)
        raw = _decode_signature(signature)
        if raw is None:
            return False
        try:
            key.verify(
                raw, _normalize_input(secured_input), _rsa_padding(alg), alg.hash_algorithm()
            )
        except InvalidSignature:
            return False
        return True

    return verify


def create_ecdsa_signer(alg: Algorithm) -> Signer:
    def sign(secured_input: Any, private_key: Any) -> str:
        key = keys.load_signing_key(private_key)
        _require_ec(key, alg)
        der = key.sign(_normalize_input(secured_input), ec.ECDSA(alg.hash_algorithm()))
        return base64url.encode(ecdsa.der_to_jose(der, alg))

    return sign


def create_ecdsa_verifier(alg: Algorithm) -> Verifier:
    def verify(secured_input: Any, signature: Any, public_key: Any) -> bool:
        key = keys.load_verifying_key(public_key)
        _require_ec(key, alg)
        raw = _decode_signature(signature)
        if raw is None:
            return False
        der = ecdsa.jose_to_der(raw, alg)
        try:
            key.verify(der, _normalize_input(secured_input), ec.ECDSA(alg.hash_algorithm()))
        except InvalidSignature:
            return False
        return True

    return verify


def create_none_signer(alg: Algorithm) -> Signer:
    def sign(secured_input: Any, key: Any = None) -> str:
        return ""

    return sign


def create_none_verifier(alg: Algorithm) -> Verifier:
    def verify(secured_input: Any, signature: Any, key: Any = None) -> bool:
        return _signature_text(signature) == ""

    return verify


_SIGNER_FACTORIES = {
    Family.HS: create_hmac_signer,
    Family.RS: create_rsa_signer,
    Family.PS: create_rsa_signer,
    Family.ES: create_ecdsa_signer,
    Family.NONE: create_none_signer,
}

_VERIFIER_FACTORIES = {
    Family.HS: create_hmac_verifier,
    Family.RS: create_rsa_verifier,
    Family.PS: create_rsa_verifier,
    Family.ES: create_ecdsa_verifier,
    Family.NONE: create_none_verifier,
}


def create_algorithm(identifier: Union[str, Algorithm]) -> AlgorithmPair:
    """Return the sign/verify pair for ``identifier``.

    Raises:
        InvalidAlgorithm: If ``identifier`` is not a supported ``alg`` value.
    """
    alg = Algorithm.parse(identifier)
    logger.debug(f"Dispatching {alg.value} to the {alg.family.value} family")
    return AlgorithmPair(
        algorithm=alg,
        sign=_SIGNER_FACTORIES[alg.family](alg),
        verify=_VERIFIER_FACTORIES[alg.family](alg),
    )
