"""
Exception taxonomy.

TransportError is the only kind the failover layer acts on; everything else
propagates to the caller untouched.
"""

from __future__ import annotations

from typing import Optional


class BatoError(Exception):
    """Base class for every error raised by the adapter."""


class ConfigError(BatoError):
    pass


class TransportError(BatoError):
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ContentRemoved(BatoError):
    """The site marked the entry as deleted."""


class ParseError(BatoError):
    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Could not find {field} in response")
        self.field = field


class DecodeError(BatoError):
    """Deobfuscation or decryption of the page-token blob failed."""
