"""Tests for key material validation and loading."""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509.oid import NameOID

from jwskit import encode, verify
from jwskit.exceptions import InvalidKeyData, InvalidKeyType
from jwskit.keys import (
    SecretKey,
    check_private_key,
    check_public_key,
    check_secret_key,
    load_signing_key,
    load_verifying_key,
)


def test_secret_key_handle_hides_value():
    key = SecretKey(b"top-secret")

    assert key.kind == "secret"
    assert key.export() == b"top-secret"
    assert "top-secret" not in repr(key)


def test_check_secret_key_accepts_duck_typed_handles():
    class Handle:
        kind = "secret"

        def export(self):
            return b"raw"

    assert check_secret_key(Handle()) == b"raw"
    assert check_secret_key(bytearray(b"raw")) == b"raw"


def test_check_secret_key_rejects_private_handles(rsa_private_key):
    with pytest.raises(InvalidKeyType) as excinfo:
        check_secret_key(rsa_private_key)
    assert "secret key handle" in str(excinfo.value)


def test_check_public_key_accepts_text_and_key_objects(rsa_private_key):
    check_public_key("pem text")
    check_public_key(b"pem bytes")
    check_public_key(rsa_private_key)
    check_public_key(rsa_private_key.public_key())


class AsymmetricHandle:
    def __init__(self, kind, data):
        self.kind = kind
        self._data = data

    def export(self):
        return self._data


def test_asymmetric_handles_export_key_data(rsa_private_key):
    private_pem = rsa_private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_der = rsa_private_key.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    private_handle = AsymmetricHandle("private", private_pem)
    public_handle = AsymmetricHandle("public", public_der)

    check_private_key(private_handle)
    check_public_key(public_handle)
    check_public_key(private_handle)
    expected = rsa_private_key.public_key().public_numbers()
    assert load_signing_key(private_handle).public_key().public_numbers() == expected
    assert load_verifying_key(public_handle).public_numbers() == expected
    assert load_verifying_key(private_handle).public_numbers() == expected

    token = encode({"alg": "RS256"}, "payload", private_handle)
    assert verify(token, "RS256", public_handle) is True


def test_handles_of_the_wrong_kind_are_rejected():
    with pytest.raises(InvalidKeyType):
        check_private_key(AsymmetricHandle("public", b"data"))
    with pytest.raises(InvalidKeyType):
        check_public_key(AsymmetricHandle("secret", b"data"))
    with pytest.raises(InvalidKeyType):
        check_secret_key(AsymmetricHandle("private", b"data"))


def test_load_keys_from_pem_and_der(rsa_private_key):
    private_der = rsa_private_key.private_bytes(
        serialization.Encoding.DER,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_der = rsa_private_key.public_key().public_bytes(
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )
    private_pem = rsa_private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    )

    expected = rsa_private_key.public_key().public_numbers()
    assert load_signing_key(private_der).public_key().public_numbers() == expected
    assert load_signing_key(private_pem.decode()).public_key().public_numbers() == expected
    assert load_verifying_key(public_der).public_numbers() == expected
    assert load_verifying_key(private_pem).public_numbers() == expected


def test_load_verifying_key_from_certificate(ec_private_keys):
    key = ec_private_keys["ES256"]
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "jwskit")])
    now = datetime.datetime.now(datetime.timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    pem = certificate.public_bytes(serialization.Encoding.PEM)

    loaded = load_verifying_key(pem)
    assert loaded.public_numbers() == key.public_key().public_numbers()


def test_encrypted_private_key_without_password_is_invalid_data(rsa_private_key):
    pem = rsa_private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.BestAvailableEncryption(b"password"),
    )
    with pytest.raises(InvalidKeyData):
        load_signing_key(pem)
