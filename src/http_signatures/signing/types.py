"""
Type definitions for HTTP message signing

This module provides the message accessor contract consumed by the signing
and verification engines, a concrete immutable message type, and the parsed
signature parameter data class.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

REQUEST_TARGET = "(request-target)"

SIGNATURE_HEADER = "Signature"
AUTHORIZATION_HEADER = "Authorization"
DIGEST_HEADER = "Digest"
AUTHORIZATION_SCHEME = "Signature "

HeaderItems = Sequence[Tuple[str, str]]
RequestBody = Union[str, bytes, None]


@runtime_checkable
class SignableMessage(Protocol):
    """
    Read-only view of an HTTP message.

    Adapters over concrete HTTP libraries implement this contract; the engine
    never writes through it.
    """

    @property
    def method(self) -> str: ...

    @property
    def request_target(self) -> str: ...

    @property
    def body(self) -> bytes: ...

    def get_header_values(self, name: str) -> List[str]: ...


def body_bytes(body: RequestBody) -> bytes:
    """Normalize a message body to bytes (None is the empty body)."""
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode('utf-8')
    return bytes(body)


@dataclass(frozen=True)
class HttpMessage:
    """
    Immutable HTTP request message

    Attributes:
        method: HTTP method (GET, POST, etc.)
        request_target: Path plus query string, verbatim (e.g. ``/path?query=123``)
        headers: Header (name, value) pairs in original order; repeated names allowed
        body: Raw body bytes
    """
    method: str
    request_target: str
    headers: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    body: bytes = b""

    def __post_init__(self):
        if not self.method:
            raise ValueError("Request method cannot be empty")

        if not self.request_target:
            raise ValueError("Request target cannot be empty")

        headers = self.headers
        if hasattr(headers, 'items'):
            headers = headers.items()
        object.__setattr__(self, 'headers', tuple((str(k), str(v)) for k, v in headers))
        object.__setattr__(self, 'body', body_bytes(self.body))

    def get_header_values(self, name: str) -> List[str]:
        """
        Return all values of a header, case-insensitively, in original order.
        """
        target = name.lower()
        return [value for key, value in self.headers if key.lower() == target]

    def get_header(self, name: str) -> Optional[str]:
        """Return the first value of a header or None."""
        values = self.get_header_values(name)
        return values[0] if values else None

    def has_header(self, name: str) -> bool:
        return bool(self.get_header_values(name))

    def with_header(self, name: str, value: Union[str, Iterable[str]]) -> 'HttpMessage':
        """
        Return a copy with ``name`` replaced by the given value(s).
        """
        values = [value] if isinstance(value, str) else list(value)
        kept = self.without_header(name).headers
        return replace(self, headers=kept + tuple((name, v) for v in values))

    def with_added_header(self, name: str, value: str) -> 'HttpMessage':
        """Return a copy with an extra value appended for ``name``."""
        return replace(self, headers=self.headers + ((name, value),))

    def without_header(self, name: str) -> 'HttpMessage':
        """Return a copy with every value of ``name`` removed."""
        target = name.lower()
        return replace(self, headers=tuple((k, v) for k, v in self.headers if k.lower() != target))

    def with_method(self, method: str) -> 'HttpMessage':
        return replace(self, method=method)

    def with_request_target(self, request_target: str) -> 'HttpMessage':
        return replace(self, request_target=request_target)

    def with_body(self, body: RequestBody) -> 'HttpMessage':
        return replace(self, body=body_bytes(body))


@dataclass(frozen=True)
class SignatureParameters:
    """
    Parsed value of a Signature (or Authorization: Signature) header

    Attributes:
        key_id: Identifier of the key used to sign
        algorithm: Signature algorithm name (e.g. ``hmac-sha256``)
        header_names: Lower-cased signed header names, in signing order
        signature: Raw signature bytes (base64-decoded)
    """
    key_id: str
    algorithm: str
    header_names: Tuple[str, ...]
    signature: bytes

    def __post_init__(self):
        if not self.key_id:
            raise ValueError("Key ID cannot be empty")

        if not self.algorithm:
            raise ValueError("Algorithm cannot be empty")

        names = tuple(name.lower() for name in self.header_names)
        if not names:
            raise ValueError("At least one signed header is required")
        object.__setattr__(self, 'header_names', names)
