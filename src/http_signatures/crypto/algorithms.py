"""
Keyed-hash and digest algorithm registry

This module maps algorithm names found on the wire to hash functions backed by
the cryptography package. Signature algorithm names follow the lower-case
convention (``hmac-sha256``); digest algorithm names are matched exactly as
they appear in the Digest header (``SHA-256``).
"""

from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from cryptography.hazmat.primitives import constant_time, hashes, hmac

from ..exceptions import AlgorithmError, ErrorCodes

# (key, data) -> mac
SigningFunction = Callable[[bytes, bytes], bytes]
# data -> digest
DigestFunction = Callable[[bytes], bytes]

DEFAULT_SIGNATURE_ALGORITHM = "hmac-sha256"
DEFAULT_DIGEST_ALGORITHM = "SHA-256"


def hmac_function(algorithm: hashes.HashAlgorithm) -> SigningFunction:
    """
    Build an HMAC signing function for a hash algorithm.

    Args:
        algorithm: cryptography hash algorithm instance (e.g. ``hashes.SHA256()``)

    Returns:
        Callable taking (key, data) and returning the MAC bytes
    """
    def sign(key: bytes, data: bytes) -> bytes:
        mac = hmac.HMAC(key, algorithm)
        mac.update(data)
        return mac.finalize()

    return sign


def digest_function(algorithm: hashes.HashAlgorithm) -> DigestFunction:
    """
    Build an unkeyed digest function for a hash algorithm.

    Args:
        algorithm: cryptography hash algorithm instance

    Returns:
        Callable taking data and returning the digest bytes
    """
    def digest(data: bytes) -> bytes:
        hasher = hashes.Hash(algorithm)
        hasher.update(data)
        return hasher.finalize()

    return digest


def constant_time_equals(a: bytes, b: bytes) -> bool:
    """Compare two byte strings without leaking where they differ."""
    return constant_time.bytes_eq(a, b)


class AlgorithmRegistry:
    """
    Immutable lookup table of signing and digest algorithms.

    Lookups never raise; an unknown name yields ``None`` and the caller decides
    how to fail. Use :meth:`extend` to derive a registry with more entries.
    """

    def __init__(
        self,
        signing: Optional[Mapping[str, SigningFunction]] = None,
        digest: Optional[Mapping[str, DigestFunction]] = None
    ):
        self._signing = MappingProxyType(dict(signing or {}))
        self._digest = MappingProxyType(dict(digest or {}))

    def signing_fn(self, name: str) -> Optional[SigningFunction]:
        """Return the keyed-hash function registered under ``name``, if any."""
        return self._signing.get(name)

    def digest_fn(self, name: str) -> Optional[DigestFunction]:
        """Return the digest function registered under ``name``, if any."""
        return self._digest.get(name)

    def require_signing_fn(self, name: str) -> SigningFunction:
        """
        Return the keyed-hash function for ``name``.

        Raises:
            AlgorithmError: If the algorithm is not registered
        """
        fn = self.signing_fn(name)
        if fn is None:
            raise AlgorithmError(
                f"Unsupported signature algorithm: {name}",
                ErrorCodes.UNSUPPORTED_ALGORITHM,
                {"algorithm": name, "supported": self.signing_algorithms()}
            )
        return fn

    def signing_algorithms(self) -> List[str]:
        return sorted(self._signing)

    def digest_algorithms(self) -> List[str]:
        return sorted(self._digest)

    def extend(
        self,
        signing: Optional[Mapping[str, SigningFunction]] = None,
        digest: Optional[Mapping[str, DigestFunction]] = None
    ) -> 'AlgorithmRegistry':
        """
        Create a new registry with additional or overriding entries.

        The current registry is left untouched.
        """
        merged_signing: Dict[str, SigningFunction] = dict(self._signing)
        merged_signing.update(signing or {})
        merged_digest: Dict[str, DigestFunction] = dict(self._digest)
        merged_digest.update(digest or {})
        return AlgorithmRegistry(merged_signing, merged_digest)

    def __repr__(self) -> str:
        return (
            f"AlgorithmRegistry(signing={self.signing_algorithms()}, "
            f"digest={self.digest_algorithms()})"
        )


DEFAULT_REGISTRY = AlgorithmRegistry(
    signing={
        "hmac-sha1": hmac_function(hashes.SHA1()),
        "hmac-sha256": hmac_function(hashes.SHA256()),
        "hmac-sha512": hmac_function(hashes.SHA512()),
    },
    digest={
        "SHA-256": digest_function(hashes.SHA256()),
        "SHA-512": digest_function(hashes.SHA512()),
    },
)
