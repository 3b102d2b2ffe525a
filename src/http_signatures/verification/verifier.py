"""
Core signature verification engine for HTTP Signatures

This module provides the verifier: it locates the signature header, parses
its parameters, looks up the key and algorithm, rebuilds the signing string
and compares MACs in constant time. Every failure on the signature path
results in False; only structurally invalid Digest headers raise.
"""

import logging
from typing import Mapping, Optional, Tuple, Union

from ..crypto.algorithms import DEFAULT_REGISTRY, AlgorithmRegistry, constant_time_equals
from ..crypto.keystore import KeyMaterial, KeyStore, create_key_store
from ..exceptions import DigestError, SignedHeaderNotFoundError
from ..signing.digest import DigestCodec
from ..signing.parameters import parse, parse_authorization
from ..signing.signing_string import build_signing_string
from ..signing.types import AUTHORIZATION_HEADER, SIGNATURE_HEADER, SignableMessage, SignatureParameters
from .types import DigestCheckResult, VerificationFailure

logger = logging.getLogger(__name__)


class Verifier:
    """
    HTTP Signatures verifier for shared-secret (HMAC) algorithms

    Example:
        >>> verifier = Verifier(KeyStore({'secret1': 'secret'}))
        >>> verifier.is_valid(message)
        True
    """

    def __init__(
        self,
        key_store: Union[KeyStore, Mapping[str, KeyMaterial]],
        registry: Optional[AlgorithmRegistry] = None
    ):
        """
        Initialize the verifier.

        Args:
            key_store: Key store, or a mapping of key id to secret
            registry: Algorithm registry (defaults to the built-in registry)
        """
        self.key_store = create_key_store(key_store)
        self.registry = registry or DEFAULT_REGISTRY
        self.digest_codec = DigestCodec(self.registry)

    def is_valid(self, message: SignableMessage) -> bool:
        """
        Verify the message signature.

        Args:
            message: Message to verify

        Returns:
            bool: True only if the signature is present, well-formed, made with
            a known key and algorithm, and matches the message
        """
        try:
            failure = self._verify(message)
        except Exception as e:
            logger.debug(f"Signature verification failed: {type(e).__name__}")
            return False

        if failure is not None:
            logger.debug(f"Signature verification failed: {failure.value}")
            return False
        return True

    def check_digest(self, message: SignableMessage) -> DigestCheckResult:
        """
        Check the Digest header without raising.

        Returns:
            DigestCheckResult: ok(valid) for well-formed headers, or a
            structural error naming the problem
        """
        try:
            return DigestCheckResult.ok(self.digest_codec.verify(message))
        except DigestError as e:
            return DigestCheckResult.structural_error(e)

    def is_valid_digest(self, message: SignableMessage) -> bool:
        """
        Verify the Digest header against the message body.

        Returns:
            bool: True if the digest matches, False if it does not

        Raises:
            DigestError: If the Digest header is missing or structurally invalid
        """
        result = self.check_digest(message)
        if result.is_structural_error:
            logger.debug(f"Digest header rejected: {result.error_kind.value}")
        elif not result.valid:
            logger.debug("Digest verification failed: body does not match")
        return result.unwrap()

    def is_valid_with_digest(self, message: SignableMessage) -> bool:
        """
        Verify both the signature and the Digest header.

        Raises:
            DigestError: If the signature is valid but the Digest header is
                structurally invalid
        """
        return self.is_valid(message) and self.is_valid_digest(message)

    def _verify(self, message: SignableMessage) -> Optional[VerificationFailure]:
        located = self._locate_parameters(message)
        if located is None:
            return VerificationFailure.MISSING_SIGNATURE
        params = located[1]
        if params is None:
            return VerificationFailure.INVALID_PARAMETERS

        key = self.key_store.get(params.key_id)
        if key is None:
            return VerificationFailure.UNKNOWN_KEY

        sign_fn = self.registry.signing_fn(params.algorithm)
        if sign_fn is None:
            return VerificationFailure.UNSUPPORTED_ALGORITHM

        try:
            signing_string = build_signing_string(message, params.header_names)
        except SignedHeaderNotFoundError:
            return VerificationFailure.MISSING_SIGNED_HEADER

        expected = sign_fn(key.material, signing_string.encode('utf-8'))
        if not constant_time_equals(expected, params.signature):
            return VerificationFailure.SIGNATURE_MISMATCH

        return None

    def _locate_parameters(
        self,
        message: SignableMessage
    ) -> Optional[Tuple[str, Optional[SignatureParameters]]]:
        """
        Find and parse the signature header.

        The Signature header takes precedence; Authorization is consulted only
        when no Signature header is present.

        Returns:
            None if neither header is present, otherwise the header name used
            and the parsed parameters (None when unparseable)
        """
        signature_values = message.get_header_values(SIGNATURE_HEADER)
        if signature_values:
            if len(signature_values) != 1:
                return SIGNATURE_HEADER, None
            return SIGNATURE_HEADER, parse(signature_values[0])

        authorization_values = message.get_header_values(AUTHORIZATION_HEADER)
        if authorization_values:
            if len(authorization_values) != 1:
                return AUTHORIZATION_HEADER, None
            return AUTHORIZATION_HEADER, parse_authorization(authorization_values[0])

        return None


def create_verifier(
    keys: Union[KeyStore, Mapping[str, KeyMaterial]],
    registry: Optional[AlgorithmRegistry] = None
) -> Verifier:
    """
    Create a new verifier.

    Args:
        keys: Key store or mapping of key id to secret
        registry: Optional algorithm registry

    Returns:
        Verifier: Configured verifier instance
    """
    return Verifier(keys, registry)


def verify_message(message: SignableMessage, keys: Union[KeyStore, Mapping[str, KeyMaterial]], with_digest: bool = False) -> bool:
    """
    Verify a message signature (and optionally its digest) in one call.
    """
    verifier = create_verifier(keys)
    if with_digest:
        return verifier.is_valid_with_digest(message)
    return verifier.is_valid(message)
