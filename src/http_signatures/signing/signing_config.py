"""
Configuration management for HTTP message signing

This module provides the signing configuration, security profiles, a fluent
configuration builder, and the Context that hands out matching signers and
verifiers.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple, Union

from ..crypto.algorithms import (
    DEFAULT_DIGEST_ALGORITHM,
    DEFAULT_REGISTRY,
    DEFAULT_SIGNATURE_ALGORITHM,
    AlgorithmRegistry,
)
from ..crypto.keystore import KeyMaterial, KeyStore, create_key_store
from ..exceptions import ErrorCodes, KeyNotFoundError, SigningError
from .signer import Signer
from .types import REQUEST_TARGET, HttpMessage

if TYPE_CHECKING:
    from ..verification.verifier import Verifier

logger = logging.getLogger(__name__)

# Signed headers for each profile
MINIMAL_SIGNED_HEADERS: Tuple[str, ...] = (REQUEST_TARGET, 'date')
DEFAULT_SIGNED_HEADERS: Tuple[str, ...] = (REQUEST_TARGET, 'host', 'date')
STRICT_SIGNED_HEADERS: Tuple[str, ...] = (REQUEST_TARGET, 'host', 'date', 'digest')


@dataclass(frozen=True)
class SecurityProfile:
    """
    Security profile for different use cases

    Attributes:
        name: Profile name
        description: Profile description
        headers: Headers to sign, in order
        include_digest: Whether to add and sign a Digest header
        digest_algorithm: Digest algorithm name
    """
    name: str
    description: str
    headers: Tuple[str, ...]
    include_digest: bool
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM


SECURITY_PROFILES: Dict[str, SecurityProfile] = {
    'minimal': SecurityProfile(
        name='Minimal',
        description='Request line and date only',
        headers=MINIMAL_SIGNED_HEADERS,
        include_digest=False
    ),
    'standard': SecurityProfile(
        name='Standard',
        description='Request line, host and date',
        headers=DEFAULT_SIGNED_HEADERS,
        include_digest=False
    ),
    'strict': SecurityProfile(
        name='Strict',
        description='Request line, host, date and body digest',
        headers=STRICT_SIGNED_HEADERS,
        include_digest=True,
        digest_algorithm='SHA-512'
    ),
}


@dataclass
class SigningConfig:
    """
    Configuration for signing and verifying messages

    Attributes:
        key_store: Keys available for signing and verification
        key_id: Key used for signing (None for verify-only configurations)
        algorithm: Signature algorithm name
        headers: Headers to sign, in order
        include_digest: Whether signing adds and signs a Digest header
        digest_algorithm: Digest algorithm name
        use_authorization_header: Carry the signature in Authorization
        registry: Algorithm registry
    """
    key_store: KeyStore
    key_id: Optional[str] = None
    algorithm: str = DEFAULT_SIGNATURE_ALGORITHM
    headers: Tuple[str, ...] = DEFAULT_SIGNED_HEADERS
    include_digest: bool = False
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM
    use_authorization_header: bool = False
    registry: AlgorithmRegistry = field(default=DEFAULT_REGISTRY)

    def __post_init__(self):
        """Validate signing configuration"""
        self.key_store = create_key_store(self.key_store)
        self.headers = tuple(h.lower() for h in self.headers)

        if not self.headers:
            raise SigningError("At least one header must be signed", ErrorCodes.INVALID_CONFIG)

        if self.registry.signing_fn(self.algorithm) is None:
            raise SigningError(
                f"Unsupported signature algorithm: {self.algorithm}",
                ErrorCodes.UNSUPPORTED_ALGORITHM,
                {"supported": self.registry.signing_algorithms()}
            )

        if self.registry.digest_fn(self.digest_algorithm) is None:
            raise SigningError(
                f"Unsupported digest algorithm: {self.digest_algorithm}",
                ErrorCodes.DIGEST_UNSUPPORTED_ALGORITHM,
                {"supported": self.registry.digest_algorithms()}
            )

        if self.key_id is not None and self.key_id not in self.key_store:
            raise KeyNotFoundError(self.key_id)

    @property
    def signing_key_id(self) -> Optional[str]:
        """Configured key id, or the only key in the store."""
        if self.key_id is not None:
            return self.key_id
        if len(self.key_store) == 1:
            return self.key_store.key_ids()[0]
        return None


class SigningConfigBuilder:
    """
    Builder for creating signing configurations with fluent API
    """

    def __init__(self):
        self._keys: Dict[str, KeyMaterial] = {}
        self._key_id: Optional[str] = None
        self._algorithm: str = DEFAULT_SIGNATURE_ALGORITHM
        self._headers: List[str] = list(DEFAULT_SIGNED_HEADERS)
        self._include_digest = False
        self._digest_algorithm = DEFAULT_DIGEST_ALGORITHM
        self._use_authorization_header = False
        self._registry = DEFAULT_REGISTRY

    def key(self, key_id: str, secret: KeyMaterial) -> 'SigningConfigBuilder':
        """
        Add a key to the key store.

        Args:
            key_id: Key identifier
            secret: Shared secret (str is UTF-8 encoded)

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._keys[key_id] = secret
        return self

    def keys(self, keys: Mapping[str, KeyMaterial]) -> 'SigningConfigBuilder':
        self._keys.update(keys)
        return self

    def key_id(self, key_id: str) -> 'SigningConfigBuilder':
        """
        Set the key used for signing.

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._key_id = key_id
        return self

    def algorithm(self, algorithm: str) -> 'SigningConfigBuilder':
        self._algorithm = algorithm
        return self

    def headers(self, headers: List[str]) -> 'SigningConfigBuilder':
        """
        Replace the signed header list.

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._headers = [h.lower() for h in headers]
        return self

    def add_header(self, header: str) -> 'SigningConfigBuilder':
        normalized = header.lower()
        if normalized not in self._headers:
            self._headers.append(normalized)
        return self

    def digest(self, include: bool = True, algorithm: Optional[str] = None) -> 'SigningConfigBuilder':
        """
        Include/exclude a signed Digest header.

        Args:
            include: Whether to add a Digest header when signing
            algorithm: Optional digest algorithm name

        Returns:
            SigningConfigBuilder: Self for method chaining
        """
        self._include_digest = include
        if algorithm:
            self._digest_algorithm = algorithm
        return self

    def authorization_header(self, enabled: bool = True) -> 'SigningConfigBuilder':
        self._use_authorization_header = enabled
        return self

    def registry(self, registry: AlgorithmRegistry) -> 'SigningConfigBuilder':
        self._registry = registry
        return self

    def profile(self, profile_name: str) -> 'SigningConfigBuilder':
        """
        Apply a predefined security profile.

        Raises:
            SigningError: If the profile is unknown
        """
        profile = SECURITY_PROFILES.get(profile_name)
        if profile is None:
            raise SigningError(
                f"Unknown security profile: {profile_name}",
                ErrorCodes.INVALID_CONFIG,
                {"available_profiles": list(SECURITY_PROFILES)}
            )
        self._headers = list(profile.headers)
        self._include_digest = profile.include_digest
        self._digest_algorithm = profile.digest_algorithm
        return self

    def build(self) -> SigningConfig:
        """
        Build the configuration.

        Raises:
            SigningError: If the configuration is invalid
            KeyNotFoundError: If the signing key id is not among the keys
        """
        return SigningConfig(
            key_store=KeyStore(self._keys),
            key_id=self._key_id,
            algorithm=self._algorithm,
            headers=tuple(self._headers),
            include_digest=self._include_digest,
            digest_algorithm=self._digest_algorithm,
            use_authorization_header=self._use_authorization_header,
            registry=self._registry
        )


class Context:
    """
    Pairs a signing configuration with matching signer and verifier.

    Example:
        >>> context = Context(create_signing_config().key('secret1', 'secret').build())
        >>> signed = context.signer().sign_message(message)
        >>> context.verifier().is_valid(signed)
        True
    """

    def __init__(self, config: SigningConfig):
        self.config = config

    @classmethod
    def from_keys(
        cls,
        keys: Union[KeyStore, Mapping[str, KeyMaterial]],
        signing_key_id: Optional[str] = None,
        algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
        headers: Optional[List[str]] = None
    ) -> 'Context':
        config = SigningConfig(
            key_store=create_key_store(keys),
            key_id=signing_key_id,
            algorithm=algorithm,
            headers=tuple(headers) if headers else DEFAULT_SIGNED_HEADERS
        )
        return cls(config)

    def signer(self) -> Signer:
        """
        Create a signer for the configured signing key.

        Raises:
            SigningError: If no signing key can be determined
        """
        key_id = self.config.signing_key_id
        if key_id is None:
            raise SigningError(
                "No signing key configured; set key_id when the key store holds several keys",
                ErrorCodes.NO_SIGNING_KEY,
                {"key_ids": self.config.key_store.key_ids()}
            )

        signer = Signer(
            self.config.key_store.fetch(key_id),
            self.config.algorithm,
            self.config.headers,
            self.config.registry,
            self.config.digest_algorithm
        )
        if self.config.include_digest:
            signer = signer.with_digest_header_signed()
        logger.debug(f"Created signer for key ID: {key_id}")
        return signer

    def verifier(self) -> 'Verifier':
        from ..verification.verifier import Verifier

        return Verifier(self.config.key_store, self.config.registry)

    def sign(self, message: HttpMessage) -> HttpMessage:
        """
        Sign ``message`` the way the configuration asks for.

        Adds a Digest header when ``include_digest`` is set and carries the
        signature in Authorization when ``use_authorization_header`` is set.
        """
        signer = self.signer()
        if self.config.include_digest:
            message = signer.add_digest(message)
        if self.config.use_authorization_header:
            return signer.authorize(message)
        return signer.sign_message(message)


def create_signing_config() -> SigningConfigBuilder:
    """
    Create a new signing configuration builder.

    Returns:
        SigningConfigBuilder: New builder instance
    """
    return SigningConfigBuilder()


def create_from_profile(
    profile_name: str,
    keys: Mapping[str, KeyMaterial],
    key_id: Optional[str] = None
) -> SigningConfig:
    """
    Create a signing configuration from a security profile.

    Args:
        profile_name: Name of the profile ('minimal', 'standard', 'strict')
        keys: Mapping of key id to secret
        key_id: Signing key id

    Returns:
        SigningConfig: Configuration
    """
    builder = create_signing_config().keys(keys).profile(profile_name)
    if key_id:
        builder.key_id(key_id)
    return builder.build()
