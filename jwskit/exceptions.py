"""Exceptions raised by jwskit."""

from __future__ import annotations

from typing import Any, Optional


class JwsError(Exception):
    """Base exception for JWS-related errors."""


class InvalidAlgorithm(JwsError, ValueError):
    """Algorithm identifier is not one of the supported values."""

    def __init__(self, algorithm: Any) -> None:
        from .algorithms import ALGORITHMS

        self.algorithm = algorithm
        supported = ", ".join(f'"{name}"' for name in ALGORITHMS)
        super().__init__(
            f'"{algorithm}" is not a valid algorithm. Supported algorithms are: {supported}.'
        )


class InvalidKeyType(JwsError, TypeError):
    """Key material does not have the shape the operation requires."""

    def __init__(
        self, expected: str, key: Any = None, message: Optional[str] = None
    ) -> None:
        self.expected = expected
        self.key_type = type(key).__name__
        super().__init__(message or f"key must be {expected}, got {self.key_type}")


class InvalidKeyData(InvalidKeyType):
    """Key material has an accepted shape but could not be loaded."""

    def __init__(self, reason: str, key: Any = None) -> None:
        super().__init__(
            "a loadable PEM or DER key", key, message=f"key could not be loaded: {reason}"
        )


class MalformedSignature(JwsError, ValueError):
    """ECDSA signature could not be converted between DER and JOSE form."""


class MalformedPayload(JwsError, ValueError):
    """Payload segment was expected to hold JSON but does not."""


class MissingAlgorithm(JwsError, ValueError):
    """Verification was requested without pinning an algorithm."""

    code = "MISSING_ALGORITHM"

    def __init__(self) -> None:
        super().__init__("Missing algorithm parameter for jws verify")


class StreamClosedError(JwsError):
    """Data was written to an input cell that is already closed."""


class StreamPendingError(JwsError):
    """Result was requested before the stream finalized."""
