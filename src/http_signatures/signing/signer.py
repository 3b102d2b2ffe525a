"""
HTTP message signer

Produces Signature / Authorization header values with a keyed hash over the
canonical signing string. Signing and verification share the same
:class:`SigningStringBuilder`.
"""

import logging
from typing import Optional, Sequence

from ..crypto.algorithms import DEFAULT_DIGEST_ALGORITHM, DEFAULT_REGISTRY, AlgorithmRegistry
from ..crypto.keystore import Key
from ..exceptions import AlgorithmError, DigestError, ErrorCodes, SignedHeaderNotFoundError, SigningError
from .digest import DigestCodec
from .parameters import format_authorization, format_parameters
from .signing_string import build_signing_string
from .types import (
    AUTHORIZATION_HEADER,
    DIGEST_HEADER,
    SIGNATURE_HEADER,
    HttpMessage,
    SignableMessage,
    SignatureParameters,
)

logger = logging.getLogger(__name__)


def _check_algorithm_name(algorithm_name: str) -> None:
    # The name is written inside a quoted header parameter
    if '"' in algorithm_name:
        raise SigningError(
            f"Algorithm name cannot contain a double quote: {algorithm_name}",
            ErrorCodes.UNSUPPORTED_ALGORITHM,
            {"algorithm": algorithm_name}
        )


def create_signature_parameters(
    message: SignableMessage,
    key: Key,
    algorithm_name: str,
    header_names: Sequence[str],
    registry: Optional[AlgorithmRegistry] = None
) -> SignatureParameters:
    """
    Sign a message and return the resulting parameters.

    Args:
        message: Message to sign
        key: Signing key
        algorithm_name: Registered signature algorithm name
        header_names: Ordered header names to sign

    Returns:
        SignatureParameters: Parameters including the raw signature bytes

    Raises:
        SigningError: If the algorithm is unknown, the header list is empty,
            or a listed header is missing from the message
    """
    _check_algorithm_name(algorithm_name)
    registry = registry or DEFAULT_REGISTRY
    names = tuple(name.lower() for name in header_names)
    if not names:
        raise SigningError("At least one header must be signed", ErrorCodes.SIGNING_FAILED)

    try:
        sign_fn = registry.require_signing_fn(algorithm_name)
        signing_string = build_signing_string(message, names)
    except AlgorithmError as e:
        raise SigningError(e.message, e.error_code, e.details)
    except SignedHeaderNotFoundError as e:
        raise SigningError(
            f"Cannot sign message: {e.message}",
            e.error_code,
            e.details
        )

    signature = sign_fn(key.material, signing_string.encode('utf-8'))
    return SignatureParameters(
        key_id=key.id,
        algorithm=algorithm_name,
        header_names=names,
        signature=signature
    )


def sign(
    message: SignableMessage,
    key: Key,
    algorithm_name: str,
    header_names: Sequence[str],
    registry: Optional[AlgorithmRegistry] = None
) -> str:
    """
    Sign a message and return the Signature header value.

    Raises:
        SigningError: If signing fails
    """
    params = create_signature_parameters(message, key, algorithm_name, header_names, registry)
    return format_parameters(params)


class Signer:
    """
    Signer bound to a key, algorithm and signed header list.

    Example:
        >>> signer = Signer(Key('secret1', 'secret'), 'hmac-sha256', ['(request-target)', 'date'])
        >>> signed = signer.sign_message(message)
    """

    def __init__(
        self,
        key: Key,
        algorithm: str,
        header_names: Sequence[str],
        registry: Optional[AlgorithmRegistry] = None,
        digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM
    ):
        self.key = key
        self.algorithm = algorithm
        self.header_names = tuple(name.lower() for name in header_names)
        self.registry = registry or DEFAULT_REGISTRY
        self.digest_algorithm = digest_algorithm
        self.digest_codec = DigestCodec(self.registry)

        # Fail at construction rather than on first use
        _check_algorithm_name(algorithm)
        if self.registry.signing_fn(algorithm) is None:
            raise SigningError(
                f"Unsupported signature algorithm: {algorithm}",
                ErrorCodes.UNSUPPORTED_ALGORITHM,
                {"algorithm": algorithm, "supported": self.registry.signing_algorithms()}
            )
        if not self.header_names:
            raise SigningError("At least one header must be signed", ErrorCodes.SIGNING_FAILED)

    def signature_parameters(self, message: SignableMessage) -> SignatureParameters:
        return create_signature_parameters(
            message, self.key, self.algorithm, self.header_names, self.registry
        )

    def sign(self, message: SignableMessage) -> str:
        """Return the Signature header value for ``message``."""
        return format_parameters(self.signature_parameters(message))

    def sign_message(self, message: HttpMessage) -> HttpMessage:
        """Return a copy of ``message`` carrying a Signature header."""
        signed = message.with_header(SIGNATURE_HEADER, self.sign(message))
        logger.debug(f"Signed {message.method} {message.request_target} with key ID: {self.key.id}")
        return signed

    def sign_with_digest(self, message: HttpMessage) -> HttpMessage:
        """
        Add a Digest header, then sign with ``digest`` in the signed headers.
        """
        return self.with_digest_header_signed().sign_message(self.add_digest(message))

    def authorize(self, message: HttpMessage) -> HttpMessage:
        """Return a copy of ``message`` carrying ``Authorization: Signature ...``."""
        authorization = format_authorization(self.signature_parameters(message))
        logger.debug(f"Authorized {message.method} {message.request_target} with key ID: {self.key.id}")
        return message.with_header(AUTHORIZATION_HEADER, authorization)

    def authorize_with_digest(self, message: HttpMessage) -> HttpMessage:
        return self.with_digest_header_signed().authorize(self.add_digest(message))

    def add_digest(self, message: HttpMessage) -> HttpMessage:
        """Return a copy of ``message`` with a freshly computed Digest header."""
        try:
            value = self.digest_codec.compute(message.body, self.digest_algorithm)
        except DigestError as e:
            raise SigningError(e.message, e.error_code, e.details)
        return message.with_header(DIGEST_HEADER, value)

    def with_digest_header_signed(self) -> 'Signer':
        if 'digest' in self.header_names:
            return self
        return Signer(
            self.key,
            self.algorithm,
            self.header_names + ('digest',),
            self.registry,
            self.digest_algorithm
        )
