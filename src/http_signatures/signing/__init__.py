"""
HTTP Signatures SDK - Request Signing Module

HMAC HTTP Signatures: signature parameter parsing, canonical signing strings,
Digest headers and request signing for outbound HTTP requests.
"""

from .types import (
    SignableMessage,
    HttpMessage,
    SignatureParameters,
    REQUEST_TARGET,
    SIGNATURE_HEADER,
    AUTHORIZATION_HEADER,
    DIGEST_HEADER,
)

from .parameters import (
    parse,
    parse_strict,
    parse_authorization,
    format_parameters,
    format_authorization,
)

from .signing_string import (
    SigningStringBuilder,
    build_signing_string,
)

from .digest import (
    DigestCodec,
    DigestValue,
    calculate_digest,
)

from .signer import (
    Signer,
    sign,
    create_signature_parameters,
)

from .signing_config import (
    SigningConfig,
    SigningConfigBuilder,
    SecurityProfile,
    Context,
    SECURITY_PROFILES,
    DEFAULT_SIGNED_HEADERS,
    MINIMAL_SIGNED_HEADERS,
    STRICT_SIGNED_HEADERS,
    create_signing_config,
    create_from_profile,
)

from .integration import (
    HttpSignatureAuth,
    create_signing_session,
    message_from_prepared_request,
    request_target_from_url,
)

# Public API exports
__all__ = [
    # Types
    'SignableMessage',
    'HttpMessage',
    'SignatureParameters',
    'REQUEST_TARGET',
    'SIGNATURE_HEADER',
    'AUTHORIZATION_HEADER',
    'DIGEST_HEADER',
    # Signature parameters
    'parse',
    'parse_strict',
    'parse_authorization',
    'format_parameters',
    'format_authorization',
    # Signing string
    'SigningStringBuilder',
    'build_signing_string',
    # Digest
    'DigestCodec',
    'DigestValue',
    'calculate_digest',
    # Core signing functionality
    'Signer',
    'sign',
    'create_signature_parameters',
    # Configuration
    'SigningConfig',
    'SigningConfigBuilder',
    'SecurityProfile',
    'Context',
    'SECURITY_PROFILES',
    'DEFAULT_SIGNED_HEADERS',
    'MINIMAL_SIGNED_HEADERS',
    'STRICT_SIGNED_HEADERS',
    'create_signing_config',
    'create_from_profile',
    # HTTP Integration
    'HttpSignatureAuth',
    'create_signing_session',
    'message_from_prepared_request',
    'request_target_from_url',
]
