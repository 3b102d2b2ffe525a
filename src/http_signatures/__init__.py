"""
HTTP Signatures SDK
Shared-secret HTTP message signing and verification with Digest support
"""

from .version import __version__
from .exceptions import (
    HttpSignaturesError,
    ErrorCodes,
    KeyStoreError,
    KeyNotFoundError,
    AlgorithmError,
    SignatureParseError,
    SignedHeaderNotFoundError,
    SigningError,
    DigestError,
    DigestErrorKind,
    ConfigurationError,
)
from .crypto import (
    AlgorithmRegistry,
    DEFAULT_REGISTRY,
    Key,
    KeyStore,
)
from .signing import (
    HttpMessage,
    SignableMessage,
    SignatureParameters,
    SigningStringBuilder,
    DigestCodec,
    Signer,
    SigningConfig,
    Context,
    HttpSignatureAuth,
    create_signing_config,
    create_from_profile,
    create_signing_session,
    build_signing_string,
    calculate_digest,
    sign,
)
from .verification import (
    Verifier,
    DigestCheckResult,
    SignatureVerificationMiddleware,
    create_verifier,
    verify_message,
)
from .config import (
    HttpSignaturesConfig,
    load_config_from_file,
    load_config_from_json,
)

__all__ = [
    '__version__',
    # Errors
    'HttpSignaturesError',
    'ErrorCodes',
    'KeyStoreError',
    'KeyNotFoundError',
    'AlgorithmError',
    'SignatureParseError',
    'SignedHeaderNotFoundError',
    'SigningError',
    'DigestError',
    'DigestErrorKind',
    'ConfigurationError',
    # Keys and algorithms
    'AlgorithmRegistry',
    'DEFAULT_REGISTRY',
    'Key',
    'KeyStore',
    # Signing
    'HttpMessage',
    'SignableMessage',
    'SignatureParameters',
    'SigningStringBuilder',
    'DigestCodec',
    'Signer',
    'SigningConfig',
    'Context',
    'HttpSignatureAuth',
    'create_signing_config',
    'create_from_profile',
    'create_signing_session',
    'build_signing_string',
    'calculate_digest',
    'sign',
    # Verification
    'Verifier',
    'DigestCheckResult',
    'SignatureVerificationMiddleware',
    'create_verifier',
    'verify_message',
    # Configuration
    'HttpSignaturesConfig',
    'load_config_from_file',
    'load_config_from_json',
]
