"""
Digest header computation and verification

The Digest header (``ALGO=base64``) is verified independently of the signature.
Its grammar is strict: a value that is not ``NAME=VALUE`` with a registered
algorithm name raises :class:`DigestError`, while a well-formed value that does
not match the body simply verifies as False.
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Optional

from ..crypto.algorithms import (
    DEFAULT_DIGEST_ALGORITHM,
    DEFAULT_REGISTRY,
    AlgorithmRegistry,
    DigestFunction,
    constant_time_equals,
)
from ..exceptions import DigestError, DigestErrorKind
from .types import DIGEST_HEADER, RequestBody, SignableMessage, body_bytes


@dataclass(frozen=True)
class DigestValue:
    """
    Parsed Digest header

    Attributes:
        algorithm_name: Digest algorithm as written on the wire (e.g. ``SHA-256``)
        digest: Decoded digest bytes
    """
    algorithm_name: str
    digest: bytes


class DigestCodec:
    """
    Computes, parses and verifies Digest header values.
    """

    def __init__(self, registry: Optional[AlgorithmRegistry] = None):
        self.registry = registry or DEFAULT_REGISTRY

    def compute(self, body: RequestBody, algorithm_name: str = DEFAULT_DIGEST_ALGORITHM) -> str:
        """
        Compute a Digest header value for ``body``.

        Args:
            body: Message body (str is UTF-8 encoded, None is empty)
            algorithm_name: Registered digest algorithm name

        Returns:
            str: Header value, e.g. ``SHA-256=...``

        Raises:
            DigestError: If the algorithm is not registered
        """
        fn = self._digest_fn(algorithm_name)
        encoded = base64.b64encode(fn(body_bytes(body))).decode('ascii')
        return f"{algorithm_name}={encoded}"

    def parse(self, header_value: Optional[str]) -> DigestValue:
        """
        Parse a Digest header value.

        Raises:
            DigestError: If the value is missing, has no ``NAME=`` prefix, or names
                an unregistered algorithm
        """
        if header_value is None:
            raise DigestError("Digest header not present", DigestErrorKind.MISSING_HEADER)

        algorithm_name, separator, encoded = header_value.strip().partition('=')
        if not separator or not algorithm_name or not encoded:
            raise DigestError("Digest header is not of the form ALGORITHM=VALUE", DigestErrorKind.MALFORMED)

        # A bare base64 value has its padding '=' as the first separator
        if encoded.strip('=') == '':
            raise DigestError("Digest header is not of the form ALGORITHM=VALUE", DigestErrorKind.MALFORMED)

        self._digest_fn(algorithm_name)

        try:
            digest = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError):
            # Well-formed name, undecodable value: cannot match any body
            digest = b""

        return DigestValue(algorithm_name=algorithm_name, digest=digest)

    def verify(self, message: SignableMessage) -> bool:
        """
        Verify the message's Digest header against its body.

        Returns:
            bool: True if the digest matches, False on mismatch

        Raises:
            DigestError: If the header is missing or structurally invalid
        """
        values = message.get_header_values(DIGEST_HEADER)
        parsed = self.parse(', '.join(values) if values else None)
        expected = self._digest_fn(parsed.algorithm_name)(body_bytes(message.body))
        return constant_time_equals(expected, parsed.digest)

    def _digest_fn(self, algorithm_name: str) -> DigestFunction:
        fn = self.registry.digest_fn(algorithm_name)
        if fn is None:
            raise DigestError(
                f"Unsupported digest algorithm: {algorithm_name}",
                DigestErrorKind.UNSUPPORTED_ALGORITHM,
                {"supported": self.registry.digest_algorithms()}
            )
        return fn


def calculate_digest(body: RequestBody, algorithm_name: str = DEFAULT_DIGEST_ALGORITHM) -> str:
    """Compute a Digest header value with the default registry."""
    return DigestCodec().compute(body, algorithm_name)
