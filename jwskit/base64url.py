"""Unpadded base64url codec used for every token segment."""

from __future__ import annotations

import base64
import binascii
import re
from typing import Union

_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]*")


def to_bytes(data: Union[str, bytes, bytearray], encoding: str = "utf-8") -> bytes:
    """Return ``data`` as bytes, encoding text with ``encoding``."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    return data.encode(encoding)


def encode(data: Union[str, bytes, bytearray], encoding: str = "utf-8") -> str:
    """Encode ``data`` as base64url text without ``=`` padding."""
    raw = to_bytes(data, encoding)
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode(segment: Union[str, bytes]) -> bytes:
    """Decode unpadded base64url text.

    Raises:
        ValueError: If ``segment`` contains characters outside the base64url
            alphabet or has an impossible length.
    """
    if isinstance(segment, bytes):
        segment = segment.decode("ascii", errors="replace")
    if not _SEGMENT_RE.fullmatch(segment):
        raise ValueError("segment is not base64url text")
    padding = "=" * (-len(segment) % 4)
    try:
        return base64.urlsafe_b64decode(segment + padding)
    except binascii.Error as exc:
        raise ValueError(f"segment is not base64url text: {exc}") from exc


def is_segment(text: str) -> bool:
    """Return True if ``text`` uses only the base64url alphabet."""
    return bool(_SEGMENT_RE.fullmatch(text))
