"""Shared key fixtures. Keys are generated once per test session."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from jwskit.config import clear_config_cache

EC_CURVES = {"ES256": ec.SECP256R1(), "ES384": ec.SECP384R1(), "ES512": ec.SECP521R1()}


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_keys():
    return {alg: ec.generate_private_key(curve) for alg, curve in EC_CURVES.items()}


def _private_pem(key) -> bytes:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _public_pem(key) -> bytes:
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


@pytest.fixture(scope="session")
def key_pairs(rsa_private_key, ec_private_keys):
    """Map every keyed algorithm to a ``(signing_key, verifying_key)`` PEM pair."""
    pairs = {f"HS{bits}": ("shared-secret", "shared-secret") for bits in (256, 384, 512)}
    for family in ("RS", "PS"):
        for bits in (256, 384, 512):
            pairs[f"{family}{bits}"] = (
                _private_pem(rsa_private_key).decode("ascii"),
                _public_pem(rsa_private_key).decode("ascii"),
            )
    for alg, key in ec_private_keys.items():
        pairs[alg] = (_private_pem(key), _public_pem(key))
    return pairs


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch, tmp_path):
    monkeypatch.delenv("JWSKIT_CONFIG", raising=False)
    monkeypatch.delenv("JWSKIT_ENCODING", raising=False)
    monkeypatch.delenv("JWSKIT_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    yield
    clear_config_cache()
